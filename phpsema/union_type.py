"""
Union Types: "the type of this expression is one of {T1, T2, ...}".

A Type is either a native primitive (bool, int, float, string, array,
callable, object, null, void, mixed, resource) or a nominal class type
carrying an FQSEN.  Both carry an array-nesting depth so that ``Foo[]``
and ``int[][]`` can be expressed.

A UnionType is an immutable set of Types.  The empty union means "no
declared or inferred type" and is distinct from the union holding only
``null``.  Rendering is deterministic: members sorted by their text and
joined with ``|``.
"""

import logging
from typing import Any, FrozenSet, Iterable, Iterator, List, Optional
from dataclasses import dataclass

from .ast_node import (
    Kind, Node, TYPE_FLAG_NAMES, UNARY_BOOL_NOT, name_from_node,
)
from .fqsen import (
    CLASS_SCOPE_KEYWORDS, FullyQualifiedClassName, FullyQualifiedConstantName,
    ROOT_NAMESPACE, canonical_native_name,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════
#  Type
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Type:
    name: str
    fqsen: Optional[FullyQualifiedClassName] = None
    array_depth: int = 0

    @classmethod
    def native(cls, name: str, array_depth: int = 0) -> "Type":
        canonical = canonical_native_name(name)
        if canonical is None:
            raise ValueError(f"'{name}' is not a native type")
        return cls(canonical, None, array_depth)

    @classmethod
    def from_fqsen(cls, fqsen: FullyQualifiedClassName, array_depth: int = 0) -> "Type":
        return cls(str(fqsen), fqsen, array_depth)

    @classmethod
    def from_string_in_context(cls, text: str, context) -> "Type":
        """Parse one ``|``-free segment such as ``int``, ``Foo[]``, ``\\A\\B``."""
        base = text.strip()
        depth = 0
        while base.endswith("[]"):
            base = base[:-2].rstrip()
            depth += 1

        if canonical_native_name(base) is not None:
            return cls.native(base, depth)

        if base.lower() in CLASS_SCOPE_KEYWORDS and context.has_class_fqsen():
            return cls.from_fqsen(context.get_class_fqsen(), depth)

        fqsen = FullyQualifiedClassName.from_string_in_context(base, context)
        return cls.from_fqsen(fqsen, depth)

    @property
    def is_native(self) -> bool:
        return self.fqsen is None

    def as_array(self) -> "Type":
        return Type(self.name, self.fqsen, self.array_depth + 1)

    def element_type(self) -> "Type":
        """The type of one element of this array type."""
        if self.array_depth == 0:
            return Type("mixed")
        return Type(self.name, self.fqsen, self.array_depth - 1)

    def __str__(self):
        return self.name + "[]" * self.array_depth


# ═══════════════════════════════════════════════════════════════════════
#  UnionType
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class UnionType:
    types: FrozenSet[Type] = frozenset()

    # ────────────────────────────────────────────────────────────────
    #  Constructors
    # ────────────────────────────────────────────────────────────────

    @classmethod
    def empty(cls) -> "UnionType":
        return cls()

    @classmethod
    def of(cls, *types: Type) -> "UnionType":
        return cls(frozenset(types))

    @classmethod
    def null(cls) -> "UnionType":
        return cls.of(Type.native("null"))

    @classmethod
    def native(cls, name: str) -> "UnionType":
        return cls.of(Type.native(name))

    @classmethod
    def from_string_in_context(cls, text: str, context) -> "UnionType":
        """Parse a ``|``-delimited annotation such as ``int|Foo[]|null``."""
        types = []
        for segment in (text or "").split("|"):
            segment = segment.strip()
            if not segment:
                continue
            if segment.startswith("?"):
                types.append(Type.native("null"))
                segment = segment[1:]
            types.append(Type.from_string_in_context(segment, context))
        return cls(frozenset(types))

    @classmethod
    def from_simple_node(cls, context, node: Any) -> "UnionType":
        """The type named by a parameter or return type declaration."""
        if node is None:
            return cls.empty()

        if isinstance(node, str):
            return cls.from_string_in_context(node, context)

        if node.kind == Kind.NAME:
            return cls.from_string_in_context(name_from_node(node), context)

        if node.kind == Kind.TYPE:
            name = TYPE_FLAG_NAMES.get(node.flags)
            if name is None:
                logger.debug("Unrecognised type flag %d at line %d", node.flags, node.lineno)
                return cls.empty()
            return cls.from_string_in_context(name, context)

        if node.kind == Kind.NULLABLE_TYPE:
            inner = cls.from_simple_node(context, node.child("type"))
            return inner.with_type(Type.native("null"))

        if node.kind == Kind.TYPE_UNION:
            return union_of(cls.from_simple_node(context, child) for child in node.iter_children())

        logger.debug("No simple type for %r", node)
        return cls.empty()

    @classmethod
    def from_node(cls, context, code_base, node: Any) -> "UnionType":
        """Infer the type of an expression from its structure alone.

        Scalars, array literals, unary operations and constant
        references are understood.  Anything else yields the empty
        union, meaning "unknown until a later pass".
        """
        if node is None:
            return cls.empty()

        if isinstance(node, bool):
            return cls.native("bool")
        if isinstance(node, int):
            return cls.native("int")
        if isinstance(node, float):
            return cls.native("float")
        if isinstance(node, str):
            return cls.native("string")

        if not isinstance(node, Node):
            return cls.empty()

        if node.kind in (Kind.ARRAY, Kind.ENCAPS_LIST):
            return cls.native("array" if node.kind == Kind.ARRAY else "string")

        if node.kind == Kind.UNARY_OP:
            if node.flags == UNARY_BOOL_NOT:
                return cls.native("bool")
            return cls.from_node(context, code_base, node.child("expr"))

        if node.kind == Kind.CONST:
            return cls._from_constant(context, code_base, name_from_node(node.child("name", "")))

        return cls.empty()

    @classmethod
    def _from_constant(cls, context, code_base, name: str) -> "UnionType":
        lowered = name.lstrip("\\").lower()
        if lowered in ("true", "false"):
            return cls.native("bool")
        if lowered == "null":
            return cls.null()

        fqsen = FullyQualifiedConstantName.from_string_in_context(name, context)
        if code_base.has_constant_with_fqsen(fqsen):
            return code_base.get_constant_by_fqsen(fqsen).union_type

        # Unqualified constants fall back to the global namespace
        if "\\" not in name:
            global_fqsen = FullyQualifiedConstantName.make(ROOT_NAMESPACE, name)
            if code_base.has_constant_with_fqsen(global_fqsen):
                return code_base.get_constant_by_fqsen(global_fqsen).union_type

        return cls.empty()

    # ────────────────────────────────────────────────────────────────
    #  Algebra
    # ────────────────────────────────────────────────────────────────

    def union(self, other: "UnionType") -> "UnionType":
        return UnionType(self.types | other.types)

    __or__ = union

    def with_type(self, type_: Type) -> "UnionType":
        return UnionType(self.types | {type_})

    def as_array(self) -> "UnionType":
        """``T1|T2`` becomes ``T1[]|T2[]``."""
        return UnionType(frozenset(t.as_array() for t in self.types))

    def element_types(self) -> "UnionType":
        return UnionType(frozenset(t.element_type() for t in self.types))

    # ────────────────────────────────────────────────────────────────
    #  Queries
    # ────────────────────────────────────────────────────────────────

    def is_empty(self) -> bool:
        return not self.types

    def is_native_type(self) -> bool:
        """True iff no member is a class type.  The empty union counts."""
        return all(t.is_native for t in self.types)

    def has_type(self, type_: Type) -> bool:
        return type_ in self.types

    def non_native_types(self) -> "UnionType":
        return UnionType(frozenset(t for t in self.types if not t.is_native))

    def class_fqsens(self) -> List[FullyQualifiedClassName]:
        return sorted({t.fqsen for t in self.types if t.fqsen is not None}, key=str)

    def __contains__(self, type_: Type) -> bool:
        return self.has_type(type_)

    def __iter__(self) -> Iterator[Type]:
        return iter(sorted(self.types, key=str))

    def __len__(self) -> int:
        return len(self.types)

    def __str__(self):
        return "|".join(str(t) for t in self)


def union_of(types: Iterable[UnionType]) -> UnionType:
    result = UnionType.empty()
    for union_type in types:
        result = result | union_type
    return result
