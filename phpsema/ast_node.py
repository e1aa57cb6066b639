"""
AST Node: the syntax-tree shape consumed by the analyzer.

Trees are produced outside the analyzer (see frontend.py for the
tree-sitter adapter).  Every node exposes:

  • kind      - a Kind tag
  • flags     - a bitset whose meaning depends on the kind
  • children  - an ordered mapping keyed by slot name ('class', 'default',
                ...) or by position for list kinds
  • lineno / end_lineno - 1-indexed source lines

Literal leaves (integers, floats, strings) are stored as plain Python
scalars, not as nodes.
"""

from enum import IntEnum
from typing import Any, Dict, Iterator, List, Optional, Union
from dataclasses import dataclass, field


class Kind(IntEnum):
    """Every node kind the parser can hand to the analyzer."""
    UNKNOWN = 0

    # Declarations
    FUNC_DECL = 1
    CLOSURE = 2
    METHOD = 3
    ARROW_FUNC = 4
    CLASS = 5

    # Leaf-like
    MAGIC_CONST = 10
    TYPE = 11
    CALLABLE_CONVERT = 12

    # One child
    VAR = 20
    CONST = 21
    UNPACK = 22
    UNARY_PLUS = 23
    UNARY_MINUS = 24
    CAST = 25
    EMPTY = 26
    ISSET = 27
    SILENCE = 28
    SHELL_EXEC = 29
    CLONE = 30
    EXIT = 31
    PRINT = 32
    INCLUDE_OR_EVAL = 33
    UNARY_OP = 34
    PRE_INC = 35
    PRE_DEC = 36
    POST_INC = 37
    POST_DEC = 38
    YIELD_FROM = 39
    GLOBAL = 40
    UNSET = 41
    RETURN = 42
    LABEL = 43
    REF = 44
    HALT_COMPILER = 45
    ECHO = 46
    THROW = 47
    GOTO = 48
    BREAK = 49
    CONTINUE = 50
    NULLABLE_TYPE = 51
    NAME = 52
    CLASS_NAME = 53

    # Two children
    DIM = 60
    PROP = 61
    NULLSAFE_PROP = 62
    STATIC_PROP = 63
    CALL = 64
    CLASS_CONST = 65
    ASSIGN = 66
    ASSIGN_REF = 67
    ASSIGN_OP = 68
    BINARY_OP = 69
    ARRAY_ELEM = 70
    NEW = 71
    INSTANCEOF = 72
    YIELD = 73
    STATIC = 74
    WHILE = 75
    DO_WHILE = 76
    IF_ELEM = 77
    SWITCH = 78
    SWITCH_CASE = 79
    DECLARE = 80
    PROP_ELEM = 81
    PROP_GROUP = 82
    CONST_ELEM = 83
    USE_TRAIT = 84
    TRAIT_PRECEDENCE = 85
    METHOD_REFERENCE = 86
    NAMESPACE = 87
    USE_ELEM = 88
    TRAIT_ALIAS = 89
    GROUP_USE = 90
    ATTRIBUTE = 91
    MATCH = 92
    MATCH_ARM = 93
    NAMED_ARG = 94
    CLOSURE_VAR = 95
    ENUM_CASE = 96

    # Three or more children
    METHOD_CALL = 110
    NULLSAFE_METHOD_CALL = 111
    STATIC_CALL = 112
    CONDITIONAL = 113
    TRY = 114
    CATCH = 115
    PARAM = 116
    FOR = 117
    FOREACH = 118

    # Lists
    ARG_LIST = 130
    ARRAY = 131
    ENCAPS_LIST = 132
    EXPR_LIST = 133
    STMT_LIST = 134
    IF = 135
    SWITCH_LIST = 136
    CATCH_LIST = 137
    PARAM_LIST = 138
    CLOSURE_USES = 139
    PROP_DECL = 140
    CONST_DECL = 141
    CLASS_CONST_DECL = 142
    CLASS_CONST_GROUP = 143
    NAME_LIST = 144
    TRAIT_ADAPTATIONS = 145
    USE = 146
    TYPE_UNION = 147
    TYPE_INTERSECTION = 148
    ATTRIBUTE_LIST = 149
    ATTRIBUTE_GROUP = 150
    MATCH_ARM_LIST = 151


def kind_name(kind: Kind) -> str:
    """Render a kind the way the parser names it, e.g. ``AST_CLASS_CONST``."""
    return f"AST_{Kind(kind).name}"


# ═══════════════════════════════════════════════════════════════════════
#  Flags (meaning depends on the node kind)
# ═══════════════════════════════════════════════════════════════════════

# AST_NAME
NAME_FQ = 0
NAME_NOT_FQ = 1
NAME_RELATIVE = 2

# AST_PARAM
PARAM_REF = 1 << 3
PARAM_VARIADIC = 1 << 4

# AST_CLASS
CLASS_INTERFACE = 1 << 0
CLASS_TRAIT = 1 << 1
CLASS_ANONYMOUS = 1 << 2
CLASS_FINAL = 1 << 5
CLASS_ABSTRACT = 1 << 6

# AST_USE / AST_USE_ELEM (0 on an element means "as the enclosing use")
USE_NORMAL = 1
USE_FUNCTION = 2
USE_CONST = 4

# AST_METHOD / AST_FUNC_DECL / AST_CLOSURE / property declarations
MODIFIER_PUBLIC = 1 << 0
MODIFIER_PROTECTED = 1 << 1
MODIFIER_PRIVATE = 1 << 2
MODIFIER_STATIC = 1 << 4
MODIFIER_FINAL = 1 << 5
MODIFIER_ABSTRACT = 1 << 6
FUNC_RETURNS_REF = 1 << 12

# AST_TYPE
TYPE_NULL = 1
TYPE_FALSE = 2
TYPE_TRUE = 3
TYPE_BOOL = 4
TYPE_LONG = 5
TYPE_DOUBLE = 6
TYPE_STRING = 7
TYPE_ARRAY = 8
TYPE_OBJECT = 9
TYPE_CALLABLE = 10
TYPE_ITERABLE = 11
TYPE_VOID = 12
TYPE_STATIC = 13
TYPE_MIXED = 14
TYPE_NEVER = 15

# Textual spelling of each primitive type flag
TYPE_FLAG_NAMES: Dict[int, str] = {
    TYPE_NULL: "null",
    TYPE_FALSE: "false",
    TYPE_TRUE: "true",
    TYPE_BOOL: "bool",
    TYPE_LONG: "int",
    TYPE_DOUBLE: "float",
    TYPE_STRING: "string",
    TYPE_ARRAY: "array",
    TYPE_OBJECT: "object",
    TYPE_CALLABLE: "callable",
    TYPE_ITERABLE: "iterable",
    TYPE_VOID: "void",
    TYPE_STATIC: "static",
    TYPE_MIXED: "mixed",
    TYPE_NEVER: "never",
}

# AST_UNARY_OP
UNARY_BOOL_NOT = 1
UNARY_BITWISE_NOT = 2
UNARY_MINUS = 3
UNARY_PLUS = 4
UNARY_SILENCE = 5


# ═══════════════════════════════════════════════════════════════════════
#  Node
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class Node:
    """One syntax-tree node."""
    kind: Kind
    flags: int = 0
    children: Dict[Union[str, int], Any] = field(default_factory=dict)
    lineno: int = 0
    end_lineno: Optional[int] = None

    def child(self, name: Union[str, int], default: Any = None) -> Any:
        return self.children.get(name, default)

    def has_child(self, name: Union[str, int]) -> bool:
        """True if the slot exists and is not empty."""
        return self.children.get(name) is not None

    def iter_children(self) -> Iterator[Any]:
        """Non-empty children in slot order."""
        for value in self.children.values():
            if value is not None:
                yield value

    def __repr__(self):
        return f"<{kind_name(self.kind)} flags={self.flags} #{self.lineno}>"


def walk(node: Any) -> Iterator[Node]:
    """Yield ``node`` and every descendant node, pre-order, left to right."""
    stack: List[Any] = [node]
    while stack:
        current = stack.pop()
        if not isinstance(current, Node):
            continue
        yield current
        stack.extend(reversed(list(current.iter_children())))


# ────────────────────────────────────────────────────────────────
#  Builders
# ────────────────────────────────────────────────────────────────

def make_name(text: str, lineno: int = 0) -> Node:
    """Build an AST_NAME from its written form (``Foo``, ``\\A\\Foo``,
    ``namespace\\Foo``)."""
    if text.startswith("\\"):
        return Node(Kind.NAME, NAME_FQ, {"name": text[1:]}, lineno)
    if text.lower().startswith("namespace\\"):
        return Node(Kind.NAME, NAME_RELATIVE, {"name": text[len("namespace\\"):]}, lineno)
    return Node(Kind.NAME, NAME_NOT_FQ, {"name": text}, lineno)


def make_list(kind: Kind, items: List[Any], lineno: int = 0) -> Node:
    """Build a list-kind node whose children are keyed by position."""
    return Node(kind, 0, {i: item for i, item in enumerate(items)}, lineno)


def name_from_node(node: Any) -> str:
    """Render an AST_NAME back to the raw text the FQSEN layer expects."""
    if isinstance(node, str):
        return node
    name = node.child("name", "")
    if node.flags == NAME_FQ:
        return "\\" + name
    if node.flags == NAME_RELATIVE:
        return "namespace\\" + name
    return name
