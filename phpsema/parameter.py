"""
Parameters: one formal parameter of a function or method.

A parameter carries its declared type, its flags (variadic, by
reference) and, when it is optional, a default-value record:

  • DefaultValue     - the literal default and its inferred type
  • DeferredDefault  - the default expression can only be evaluated in a
                       later pass (e.g. a class constant); no literal is
                       recorded and the type is a placeholder null union

Both count as "has a default", so both make the parameter optional.
"""

import copy
from typing import Any, List, Optional
from dataclasses import dataclass, field

from .ast_node import Kind, Node, PARAM_REF, PARAM_VARIADIC
from .context import Context
from .log import Category, Log
from .union_type import UnionType


# Default expressions whose value and type can be taken as written
_IMMEDIATE_DEFAULT_KINDS = (Kind.CONST, Kind.UNARY_OP, Kind.ARRAY)


@dataclass(frozen=True)
class DefaultValue:
    value: Any
    union_type: UnionType

    @property
    def is_deferred(self) -> bool:
        return False


@dataclass(frozen=True)
class DeferredDefault(DefaultValue):
    """Optional parameter whose default type is not known yet."""
    value: Any = None
    union_type: UnionType = field(default_factory=UnionType.null)

    @property
    def is_deferred(self) -> bool:
        return True


class Parameter:

    def __init__(self, context: Context, name: str, union_type: UnionType, flags: int = 0):
        self.context = context
        self.name = name
        self.flags = flags
        self._union_type = union_type
        self.default: Optional[DefaultValue] = None

    # ────────────────────────────────────────────────────────────────
    #  Construction from the syntax tree
    # ────────────────────────────────────────────────────────────────

    @classmethod
    def from_node(cls, context: Context, code_base, node: Node) -> "Parameter":
        """Build a parameter from an AST_PARAM node."""
        union_type = UnionType.from_simple_node(context, node.child("type"))

        parameter = cls(context, str(node.child("name", "")), union_type, node.flags)

        default_node = node.child("default")
        if default_node is not None:
            if (not isinstance(default_node, Node)
                    or default_node.kind in _IMMEDIATE_DEFAULT_KINDS):
                parameter.set_default_value(
                    default_node,
                    UnionType.from_node(context, code_base, default_node),
                )
            else:
                # e.g. AST_CLASS_CONST, resolved by a later pass
                parameter.defer_default_value()

        return parameter

    @classmethod
    def list_from_node(cls, context: Context, code_base, node: Optional[Node], log: Log) -> List["Parameter"]:
        """Build every parameter of an AST_PARAM_LIST, in order.

        A required parameter after an optional one is reported, but the
        full list is still returned.
        """
        if node is None:
            return []

        parameters = []
        is_optional_seen = False
        for child_node in node.iter_children():
            parameter = cls.from_node(context, code_base, child_node)

            if not parameter.is_optional() and is_optional_seen:
                log.emit(
                    Category.EPARAM,
                    "required arg follows optional",
                    context.file,
                    node.lineno,
                )
            elif parameter.is_optional():
                is_optional_seen = True

            parameters.append(parameter)

        return parameters

    # ────────────────────────────────────────────────────────────────
    #  Types
    # ────────────────────────────────────────────────────────────────

    def get_union_type(self) -> UnionType:
        return self._union_type

    def set_union_type(self, union_type: UnionType):
        self._union_type = union_type

    # ────────────────────────────────────────────────────────────────
    #  Default values
    # ────────────────────────────────────────────────────────────────

    def set_default_value(self, value: Any, union_type: UnionType) -> DefaultValue:
        self.default = DefaultValue(value, union_type)
        return self.default

    def defer_default_value(self) -> DeferredDefault:
        self.default = DeferredDefault()
        return self.default

    def has_default_value(self) -> bool:
        return self.default is not None

    def get_default_value(self) -> Any:
        """The literal default, or None when absent or deferred."""
        return self.default.value if self.default is not None else None

    def get_default_value_type(self) -> Optional[UnionType]:
        return self.default.union_type if self.default is not None else None

    def is_default_deferred(self) -> bool:
        return self.default is not None and self.default.is_deferred

    # ────────────────────────────────────────────────────────────────
    #  Flags
    # ────────────────────────────────────────────────────────────────

    def is_optional(self) -> bool:
        return self.has_default_value()

    def is_required(self) -> bool:
        return not self.is_optional()

    def is_variadic(self) -> bool:
        return bool(self.flags & PARAM_VARIADIC)

    def is_pass_by_reference(self) -> bool:
        return bool(self.flags & PARAM_REF)

    def copy(self) -> "Parameter":
        return copy.copy(self)

    def __str__(self):
        text = ""
        if not self._union_type.is_empty():
            text += f"{self._union_type} "
        if self.is_pass_by_reference():
            text += "&"
        text += f"${self.name}"
        if self.is_variadic():
            text += " ..."
        if self.is_optional():
            text += " = null"
        return text

    def __repr__(self):
        return f"<Parameter {self}>"
