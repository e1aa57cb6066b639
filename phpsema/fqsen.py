"""
FQSEN: Fully-Qualified Structural Element Names.

Canonical, namespace-qualified identifiers for classes, functions,
methods and constants.  An FQSEN is an immutable value; two FQSENs are
equal iff they name the same kind of element and every field matches.

Rendering:
  • classes / functions / constants:  \\Namespace\\Name[,alternate_id]
  • methods:                          \\Namespace\\Class::name[,alternate_id]
"""

from typing import Optional
from dataclasses import dataclass, replace

NAMESPACE_SEPARATOR = "\\"
ROOT_NAMESPACE = "\\"

# Canonical native type names
NATIVE_TYPE_NAMES = frozenset({
    "bool", "int", "float", "string", "array", "callable",
    "object", "null", "void", "mixed", "resource",
})

# Spellings accepted in annotations, folded onto a canonical native name
NATIVE_TYPE_ALIASES = {
    "boolean": "bool",
    "true": "bool",
    "false": "bool",
    "integer": "int",
    "double": "float",
    "callback": "callable",
    "iterable": "array",
    "never": "void",
}

# Names that refer to the enclosing class rather than a declared one
CLASS_SCOPE_KEYWORDS = frozenset({"self", "static", "$this"})


def canonical_native_name(name: str) -> Optional[str]:
    """Return the canonical native type for ``name`` or None if it is not one."""
    lowered = name.lower()
    lowered = NATIVE_TYPE_ALIASES.get(lowered, lowered)
    return lowered if lowered in NATIVE_TYPE_NAMES else None


def canonical_namespace(namespace: str) -> str:
    """Normalise a namespace to ``\\`` or ``\\A\\B`` form."""
    parts = [p for p in namespace.strip().split(NAMESPACE_SEPARATOR) if p]
    return ROOT_NAMESPACE + NAMESPACE_SEPARATOR.join(parts)


def _join(namespace: str, name: str) -> str:
    namespace = canonical_namespace(namespace)
    if namespace == ROOT_NAMESPACE:
        return ROOT_NAMESPACE + name
    return namespace + NAMESPACE_SEPARATOR + name


# ═══════════════════════════════════════════════════════════════════════
#  Namespaced elements
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FQSEN:
    """A namespaced element name."""
    namespace: str = ROOT_NAMESPACE
    name: str = ""
    alternate_id: int = 0

    @classmethod
    def make(cls, namespace: str, name: str, alternate_id: int = 0) -> "FQSEN":
        return cls(canonical_namespace(namespace), name, alternate_id)

    @classmethod
    def from_fully_qualified_string(cls, text: str) -> "FQSEN":
        """Parse ``\\A\\B\\Name`` or ``\\A\\B\\Name,2``.

        Only a numeric suffix after the last comma is an alternate id;
        any other comma stays part of the name.
        """
        text = text.strip()
        alternate_id = 0
        head, sep, alt_text = text.rpartition(",")
        if sep and alt_text.strip().isdigit():
            text = head
            alternate_id = int(alt_text)
        namespace, _, name = text.strip(NAMESPACE_SEPARATOR).rpartition(NAMESPACE_SEPARATOR)
        return cls.make(namespace, name, alternate_id)

    @classmethod
    def from_string_in_context(cls, text: str, context) -> "FQSEN":
        """Resolve a name as written at ``context``.

        Fully-qualified names are used verbatim, ``namespace\\X`` and
        qualified or unqualified names are resolved against the
        context's import aliases and namespace.  There is no failure
        path: an unknown name still yields an FQSEN, which simply fails
        existence checks later.
        """
        text = text.strip()

        if text.startswith(NAMESPACE_SEPARATOR):
            return cls.from_fully_qualified_string(text)

        if text.lower().startswith("namespace" + NAMESPACE_SEPARATOR):
            relative = text[len("namespace" + NAMESPACE_SEPARATOR):]
            return cls.from_fully_qualified_string(_join(context.namespace, relative))

        reserved = cls._resolve_reserved(text, context)
        if reserved is not None:
            return reserved

        head, sep, rest = text.partition(NAMESPACE_SEPARATOR)
        target = context.resolve_alias(head)
        if target is not None:
            return cls.from_fully_qualified_string(target + sep + rest)

        return cls.from_fully_qualified_string(_join(context.namespace, text))

    @classmethod
    def _resolve_reserved(cls, text: str, context) -> Optional["FQSEN"]:
        return None

    def with_alternate_id(self, alternate_id: int) -> "FQSEN":
        return replace(self, alternate_id=alternate_id)

    def canonical(self) -> "FQSEN":
        """The FQSEN with alternate id 0."""
        return self.with_alternate_id(0)

    def __str__(self):
        text = _join(self.namespace, self.name)
        if self.alternate_id:
            text += f",{self.alternate_id}"
        return text


@dataclass(frozen=True)
class FullyQualifiedClassName(FQSEN):
    """A class, interface or trait name."""

    def lookup_key(self) -> "FullyQualifiedClassName":
        """Class names are case-insensitive; the alternate id is kept."""
        return replace(self, namespace=self.namespace.lower(), name=self.name.lower())

    @classmethod
    def _resolve_reserved(cls, text: str, context) -> Optional["FQSEN"]:
        lowered = text.lower()
        if lowered in CLASS_SCOPE_KEYWORDS and context.has_class_fqsen():
            return context.get_class_fqsen()
        if canonical_native_name(text) is not None:
            return cls.make(ROOT_NAMESPACE, text)
        return None


@dataclass(frozen=True)
class FullyQualifiedFunctionName(FQSEN):
    """A global or namespaced function (or a closure)."""


@dataclass(frozen=True)
class FullyQualifiedConstantName(FQSEN):
    """A global or namespaced constant."""

    @classmethod
    def _resolve_reserved(cls, text: str, context) -> Optional["FQSEN"]:
        if text.lower() in ("true", "false", "null"):
            return cls.make(ROOT_NAMESPACE, text.lower())
        return None


# ═══════════════════════════════════════════════════════════════════════
#  Class members
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FullyQualifiedMethodName:
    """A method on a class."""
    class_fqsen: FullyQualifiedClassName
    name: str
    alternate_id: int = 0

    def with_alternate_id(self, alternate_id: int) -> "FullyQualifiedMethodName":
        return replace(self, alternate_id=alternate_id)

    def __str__(self):
        text = f"{self.class_fqsen.canonical()}::{self.name}"
        if self.alternate_id:
            text += f",{self.alternate_id}"
        return text
