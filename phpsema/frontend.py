"""
Frontend: adapts tree-sitter-php parse trees to analyzer Nodes.

The parser itself is tree-sitter; this module only reshapes its output
into the kind/flags/children form the analyzer consumes:

  • object_creation_expression          → AST_NEW {class, args}
  • binary_expression (instanceof)      → AST_INSTANCEOF {expr, class}
  • class_constant_access_expression    → AST_CLASS_CONST {class, const}
  • scoped_call_expression              → AST_STATIC_CALL {class, method, args}
  • member_call / member_access         → AST_METHOD_CALL / AST_PROP
  • class / interface / trait           → AST_CLASS (flags carry the kind)
  • namespace_use_declaration           → AST_USE of AST_USE_ELEM (groups flattened)
  • function / method / closure         → AST_FUNC_DECL / AST_METHOD / AST_CLOSURE
  • formal_parameters                   → AST_PARAM_LIST of AST_PARAM

Literal integers, floats and strings become Python scalars.  Node types
with no specific mapping become AST_UNKNOWN containers so traversal still
reaches everything below them.
"""

import os
import logging
from typing import Any, Callable, Dict, List, Optional, Union

import tree_sitter_php as tsphp
from tree_sitter import Language, Parser, Node as TSNode

from .ast_node import (
    CLASS_ABSTRACT, CLASS_FINAL, CLASS_INTERFACE, CLASS_TRAIT,
    MODIFIER_ABSTRACT, MODIFIER_FINAL, MODIFIER_PRIVATE, MODIFIER_PROTECTED,
    MODIFIER_PUBLIC, MODIFIER_STATIC, PARAM_REF, PARAM_VARIADIC,
    TYPE_FLAG_NAMES, UNARY_BITWISE_NOT, UNARY_BOOL_NOT, UNARY_MINUS,
    UNARY_PLUS, UNARY_SILENCE, USE_CONST, USE_FUNCTION, USE_NORMAL,
    Kind, Node, make_list, make_name,
)

logger = logging.getLogger(__name__)

PHP_LANGUAGE = Language(tsphp.language_php())
_parser = Parser(PHP_LANGUAGE)

_TYPE_FLAGS = {name: flag for flag, name in TYPE_FLAG_NAMES.items()}

_UNARY_FLAGS = {
    "!": UNARY_BOOL_NOT,
    "~": UNARY_BITWISE_NOT,
    "-": UNARY_MINUS,
    "+": UNARY_PLUS,
    "@": UNARY_SILENCE,
}

_MODIFIER_FLAGS = {
    "public": MODIFIER_PUBLIC,
    "protected": MODIFIER_PROTECTED,
    "private": MODIFIER_PRIVATE,
    "static": MODIFIER_STATIC,
    "final": MODIFIER_FINAL,
    "abstract": MODIFIER_ABSTRACT,
}

# Tree-sitter nodes that carry no semantic content
_SKIPPED_TYPES = {"comment", "php_tag", "text", "text_interpolation", "?>"}

_NAME_TYPES = {"name", "qualified_name", "relative_scope", "named_type"}

_USE_CLAUSE_TYPES = {"namespace_use_clause", "namespace_use_group_clause"}


def _node_text(node: TSNode, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def _find_child(node: TSNode, type_name: str) -> Optional[TSNode]:
    """Find the first direct child of a given type."""
    for child in node.children:
        if child.type == type_name:
            return child
    return None


def _php_int(text: str) -> Union[int, str]:
    digits = text.replace("_", "").lower()
    try:
        if len(digits) > 1 and digits[0] == "0" and digits[1].isdigit():
            return int(digits, 8)
        return int(digits, 0)
    except ValueError:
        return text


# ═══════════════════════════════════════════════════════════════════════
#  Converter
# ═══════════════════════════════════════════════════════════════════════

class _Converter:
    """Converts one parsed file; holds the source bytes for text slicing."""

    def __init__(self, source: bytes):
        self.source = source
        self._handlers: Dict[str, Callable[[TSNode], Any]] = {
            "program": self._statement_list,
            "compound_statement": self._statement_list,
            "declaration_list": self._statement_list,
            "expression_statement": self._first_named,
            "parenthesized_expression": self._first_named,
            "namespace_definition": self._namespace,
            "namespace_use_declaration": self._use,
            "class_declaration": self._class,
            "interface_declaration": self._class,
            "trait_declaration": self._class,
            "function_definition": self._function,
            "method_declaration": self._function,
            "anonymous_function": self._function,
            "anonymous_function_creation_expression": self._function,
            "arrow_function": self._function,
            "formal_parameters": self._parameters,
            "object_creation_expression": self._new,
            "binary_expression": self._binary,
            "class_constant_access_expression": self._class_const,
            "scoped_call_expression": self._static_call,
            "scoped_property_access_expression": self._static_prop,
            "member_call_expression": self._method_call,
            "nullsafe_member_call_expression": self._method_call,
            "member_access_expression": self._prop,
            "nullsafe_member_access_expression": self._prop,
            "function_call_expression": self._call,
            "assignment_expression": self._assign,
            "return_statement": self._return,
            "arguments": self._arguments,
            "variable_name": self._variable,
            "name": self._const,
            "qualified_name": self._const,
            "boolean": self._const,
            "null": self._const,
            "integer": self._integer,
            "float": self._float,
            "string": self._string,
            "encapsed_string": self._string,
            "array_creation_expression": self._array,
            "unary_op_expression": self._unary,
        }

    def text(self, node: TSNode) -> str:
        return _node_text(node, self.source)

    @staticmethod
    def line(node: TSNode) -> int:
        return node.start_point[0] + 1

    def node(self, kind: Kind, ts_node: TSNode, children: Dict, flags: int = 0) -> Node:
        return Node(kind, flags, children, self.line(ts_node), ts_node.end_point[0] + 1)

    def convert(self, ts_node: Optional[TSNode]) -> Any:
        if ts_node is None or ts_node.type in _SKIPPED_TYPES:
            return None
        handler = self._handlers.get(ts_node.type)
        if handler is not None:
            return handler(ts_node)
        return self._unknown(ts_node)

    def convert_children(self, ts_node: TSNode) -> List[Any]:
        converted = (self.convert(c) for c in ts_node.named_children)
        return [c for c in converted if c is not None]

    # ────────────────────────────────────────────────────────────────
    #  Names and types
    # ────────────────────────────────────────────────────────────────

    def name(self, ts_node: TSNode) -> Node:
        return make_name(self.text(ts_node).strip(), self.line(ts_node))

    def class_ref(self, ts_node: Optional[TSNode]) -> Any:
        """The operand in a class position (``new X``, ``X::y``, ``instanceof X``)."""
        if ts_node is None:
            return None
        if ts_node.type in _NAME_TYPES:
            return self.name(ts_node)
        return self.convert(ts_node)

    def type_node(self, ts_node: Optional[TSNode]) -> Any:
        if ts_node is None:
            return None
        kind = ts_node.type
        if kind in ("named_type", "name", "qualified_name"):
            return self.name(ts_node)
        if kind in ("primitive_type", "bottom_type"):
            flag = _TYPE_FLAGS.get(self.text(ts_node).strip().lower())
            if flag is None:
                return self.name(ts_node)
            return self.node(Kind.TYPE, ts_node, {}, flag)
        if kind == "optional_type":
            inner = ts_node.named_children[0] if ts_node.named_children else None
            return self.node(Kind.NULLABLE_TYPE, ts_node, {"type": self.type_node(inner)})
        if kind == "union_type":
            members = [self.type_node(c) for c in ts_node.named_children]
            return make_list(Kind.TYPE_UNION, members, self.line(ts_node))
        if kind == "intersection_type":
            members = [self.type_node(c) for c in ts_node.named_children]
            return make_list(Kind.TYPE_INTERSECTION, members, self.line(ts_node))
        logger.debug("Unmapped type node %s at line %d", kind, self.line(ts_node))
        return self.name(ts_node)

    # ────────────────────────────────────────────────────────────────
    #  Statements and declarations
    # ────────────────────────────────────────────────────────────────

    def _statement_list(self, ts_node: TSNode) -> Node:
        return make_list(Kind.STMT_LIST, self.convert_children(ts_node), self.line(ts_node))

    def _first_named(self, ts_node: TSNode) -> Any:
        for child in ts_node.named_children:
            if child.type not in _SKIPPED_TYPES:
                return self.convert(child)
        return None

    def _namespace(self, ts_node: TSNode) -> Node:
        name_node = ts_node.child_by_field_name("name")
        body = ts_node.child_by_field_name("body")
        return self.node(Kind.NAMESPACE, ts_node, {
            "name": self.text(name_node) if name_node is not None else None,
            "stmts": self.convert(body) if body is not None else None,
        })

    def _use(self, ts_node: TSNode) -> Node:
        """``use A\\B as C;``, ``use function ...;`` and ``use A\\{B, C};``.

        Group imports are flattened: every clause gets the group prefix.
        """
        prefix = ""
        clauses = []
        for child in ts_node.named_children:
            if child.type == "namespace_name":
                prefix = self.text(child).strip().strip("\\")
            elif child.type == "namespace_use_group":
                clauses.extend(c for c in child.named_children if c.type in _USE_CLAUSE_TYPES)
            elif child.type in _USE_CLAUSE_TYPES:
                clauses.append(child)

        elements = []
        for clause in clauses:
            element = self._use_clause(clause, prefix)
            if element is not None:
                elements.append(element)
        if not elements:
            logger.debug("Unsupported use declaration at line %d", self.line(ts_node))

        use = make_list(Kind.USE, elements, self.line(ts_node))
        use.flags = self._use_kind(ts_node) or USE_NORMAL
        return use

    def _use_clause(self, clause: TSNode, prefix: str) -> Optional[Node]:
        alias_node = clause.child_by_field_name("alias")
        if alias_node is None:
            aliasing = _find_child(clause, "namespace_aliasing_clause")
            if aliasing is not None and aliasing.named_children:
                alias_node = aliasing.named_children[-1]
        target = next(
            (c for c in clause.named_children
             if c.type in ("name", "qualified_name", "namespace_name") and c != alias_node),
            None,
        )
        if target is None:
            return None
        name = self.text(target).strip().lstrip("\\")
        if prefix:
            name = prefix + "\\" + name
        return self.node(Kind.USE_ELEM, clause, {
            "name": name,
            "alias": self.text(alias_node) if alias_node is not None else None,
        }, self._use_kind(clause))

    def _use_kind(self, ts_node: TSNode) -> int:
        """The ``function`` / ``const`` keyword ahead of the imported names, if any."""
        keyword = ts_node.child_by_field_name("type")
        candidates = [keyword] if keyword is not None else []
        for child in ts_node.children:
            if child.is_named:
                break
            candidates.append(child)
        for child in candidates:
            word = self.text(child).strip().lower()
            if word == "function":
                return USE_FUNCTION
            if word == "const":
                return USE_CONST
        return 0

    def _class(self, ts_node: TSNode) -> Node:
        flags = 0
        if ts_node.type == "interface_declaration":
            flags |= CLASS_INTERFACE
        elif ts_node.type == "trait_declaration":
            flags |= CLASS_TRAIT
        for child in ts_node.children:
            if child.type == "abstract_modifier":
                flags |= CLASS_ABSTRACT
            elif child.type == "final_modifier":
                flags |= CLASS_FINAL

        extends = None
        base_clause = _find_child(ts_node, "base_clause")
        if base_clause is not None:
            names = [self.name(c) for c in base_clause.named_children if c.type in _NAME_TYPES]
            if ts_node.type == "interface_declaration":
                extends = make_list(Kind.NAME_LIST, names, self.line(base_clause))
            elif names:
                extends = names[0]

        implements = None
        interface_clause = _find_child(ts_node, "class_interface_clause")
        if interface_clause is not None:
            names = [self.name(c) for c in interface_clause.named_children if c.type in _NAME_TYPES]
            implements = make_list(Kind.NAME_LIST, names, self.line(interface_clause))

        name_node = ts_node.child_by_field_name("name")
        return self.node(Kind.CLASS, ts_node, {
            "name": self.text(name_node) if name_node is not None else None,
            "extends": extends,
            "implements": implements,
            "stmts": self.convert(ts_node.child_by_field_name("body")),
        }, flags)

    def _function(self, ts_node: TSNode) -> Node:
        kind = {
            "function_definition": Kind.FUNC_DECL,
            "method_declaration": Kind.METHOD,
            "arrow_function": Kind.ARROW_FUNC,
        }.get(ts_node.type, Kind.CLOSURE)

        flags = 0
        for child in ts_node.children:
            if child.type.endswith("_modifier"):
                flags |= _MODIFIER_FLAGS.get(self.text(child).strip().lower(), 0)

        name_node = ts_node.child_by_field_name("name")
        return self.node(kind, ts_node, {
            "name": self.text(name_node) if name_node is not None else "{closure}",
            "params": self.convert(ts_node.child_by_field_name("parameters")),
            "stmts": self.convert(ts_node.child_by_field_name("body")),
            "returnType": self.type_node(ts_node.child_by_field_name("return_type")),
        }, flags)

    def _parameters(self, ts_node: TSNode) -> Node:
        params = [self._parameter(c) for c in ts_node.named_children
                  if c.type in ("simple_parameter", "variadic_parameter", "property_promotion_parameter")]
        return make_list(Kind.PARAM_LIST, params, self.line(ts_node))

    def _parameter(self, ts_node: TSNode) -> Node:
        flags = 0
        if ts_node.type == "variadic_parameter":
            flags |= PARAM_VARIADIC
        if (ts_node.child_by_field_name("reference_modifier") is not None
                or _find_child(ts_node, "reference_modifier") is not None):
            flags |= PARAM_REF

        name_node = ts_node.child_by_field_name("name")
        name = self.text(name_node).lstrip("$") if name_node is not None else ""
        return self.node(Kind.PARAM, ts_node, {
            "type": self.type_node(ts_node.child_by_field_name("type")),
            "name": name,
            "default": self.convert(ts_node.child_by_field_name("default_value")),
        }, flags)

    def _return(self, ts_node: TSNode) -> Node:
        return self.node(Kind.RETURN, ts_node, {"expr": self._first_named(ts_node)})

    # ────────────────────────────────────────────────────────────────
    #  Expressions naming a class
    # ────────────────────────────────────────────────────────────────

    def _new(self, ts_node: TSNode) -> Node:
        class_node = None
        args = None
        for child in ts_node.named_children:
            if child.type == "arguments":
                args = self.convert(child)
            elif child.type == "anonymous_class" or child.type == "declaration_list":
                class_node = self.node(Kind.CLASS, child, {
                    "name": None,
                    "stmts": self.convert(child.child_by_field_name("body") or child),
                })
            elif class_node is None and child.type not in ("attribute_list", "comment"):
                class_node = self.class_ref(child)
        return self.node(Kind.NEW, ts_node, {"class": class_node, "args": args})

    def _binary(self, ts_node: TSNode) -> Node:
        operator = ts_node.child_by_field_name("operator")
        left = ts_node.child_by_field_name("left")
        right = ts_node.child_by_field_name("right")
        if operator is not None and self.text(operator).strip().lower() == "instanceof":
            return self.node(Kind.INSTANCEOF, ts_node, {
                "expr": self.convert(left),
                "class": self.class_ref(right),
            })
        return self.node(Kind.BINARY_OP, ts_node, {
            "left": self.convert(left),
            "right": self.convert(right),
        })

    def _class_const(self, ts_node: TSNode) -> Node:
        named = ts_node.named_children
        scope = named[0] if named else None
        const = named[-1] if len(named) > 1 else None
        return self.node(Kind.CLASS_CONST, ts_node, {
            "class": self.class_ref(scope),
            "const": self.text(const) if const is not None else None,
        })

    def _static_call(self, ts_node: TSNode) -> Node:
        method = ts_node.child_by_field_name("name")
        return self.node(Kind.STATIC_CALL, ts_node, {
            "class": self.class_ref(ts_node.child_by_field_name("scope")),
            "method": self.text(method) if method is not None else None,
            "args": self.convert(ts_node.child_by_field_name("arguments")),
        })

    def _static_prop(self, ts_node: TSNode) -> Node:
        prop = ts_node.child_by_field_name("name")
        return self.node(Kind.STATIC_PROP, ts_node, {
            "class": self.class_ref(ts_node.child_by_field_name("scope")),
            "prop": self.text(prop).lstrip("$") if prop is not None else None,
        })

    def _method_call(self, ts_node: TSNode) -> Node:
        kind = Kind.NULLSAFE_METHOD_CALL if ts_node.type.startswith("nullsafe") else Kind.METHOD_CALL
        method = ts_node.child_by_field_name("name")
        return self.node(kind, ts_node, {
            "expr": self.convert(ts_node.child_by_field_name("object")),
            "method": self.text(method) if method is not None else None,
            "args": self.convert(ts_node.child_by_field_name("arguments")),
        })

    def _prop(self, ts_node: TSNode) -> Node:
        kind = Kind.NULLSAFE_PROP if ts_node.type.startswith("nullsafe") else Kind.PROP
        prop = ts_node.child_by_field_name("name")
        return self.node(kind, ts_node, {
            "expr": self.convert(ts_node.child_by_field_name("object")),
            "prop": self.text(prop) if prop is not None else None,
        })

    # ────────────────────────────────────────────────────────────────
    #  Other expressions
    # ────────────────────────────────────────────────────────────────

    def _call(self, ts_node: TSNode) -> Node:
        function = ts_node.child_by_field_name("function")
        expr = self.name(function) if function is not None and function.type in _NAME_TYPES \
            else self.convert(function)
        return self.node(Kind.CALL, ts_node, {
            "expr": expr,
            "args": self.convert(ts_node.child_by_field_name("arguments")),
        })

    def _assign(self, ts_node: TSNode) -> Node:
        return self.node(Kind.ASSIGN, ts_node, {
            "var": self.convert(ts_node.child_by_field_name("left")),
            "expr": self.convert(ts_node.child_by_field_name("right")),
        })

    def _arguments(self, ts_node: TSNode) -> Node:
        args = []
        for argument in ts_node.named_children:
            if argument.type == "argument" and argument.named_children:
                args.append(self.convert(argument.named_children[-1]))
            else:
                args.append(self.convert(argument))
        return make_list(Kind.ARG_LIST, [a for a in args if a is not None], self.line(ts_node))

    def _variable(self, ts_node: TSNode) -> Node:
        return self.node(Kind.VAR, ts_node, {"name": self.text(ts_node).lstrip("$")})

    def _const(self, ts_node: TSNode) -> Node:
        return self.node(Kind.CONST, ts_node, {"name": self.name(ts_node)})

    def _integer(self, ts_node: TSNode) -> Union[int, str]:
        return _php_int(self.text(ts_node))

    def _float(self, ts_node: TSNode) -> Union[float, str]:
        text = self.text(ts_node)
        try:
            return float(text.replace("_", ""))
        except ValueError:
            return text

    def _string(self, ts_node: TSNode) -> Any:
        interpolated = [c for c in ts_node.named_children
                        if c.type not in ("string_content", "string_value", "escape_sequence")]
        if interpolated:
            return make_list(Kind.ENCAPS_LIST, self.convert_children(ts_node), self.line(ts_node))
        text = self.text(ts_node)
        if text[:1] in ("b", "B"):
            text = text[1:]
        if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
            return text[1:-1]
        return text

    def _array(self, ts_node: TSNode) -> Node:
        elements = []
        for element in ts_node.named_children:
            if element.type != "array_element_initializer":
                continue
            parts = [self.convert(c) for c in element.named_children]
            key, value = (parts[0], parts[-1]) if len(parts) > 1 else (None, parts[0] if parts else None)
            elements.append(self.node(Kind.ARRAY_ELEM, element, {"value": value, "key": key}))
        return make_list(Kind.ARRAY, elements, self.line(ts_node))

    def _unary(self, ts_node: TSNode) -> Node:
        operator = ts_node.child_by_field_name("operator")
        if operator is None:
            operator = next((c for c in ts_node.children if not c.is_named), None)
        flag = _UNARY_FLAGS.get(self.text(operator).strip(), 0) if operator is not None else 0
        operand = ts_node.named_children[-1] if ts_node.named_children else None
        return self.node(Kind.UNARY_OP, ts_node, {"expr": self.convert(operand)}, flag)

    def _unknown(self, ts_node: TSNode) -> Node:
        return make_list(Kind.UNKNOWN, self.convert_children(ts_node), self.line(ts_node))


# ═══════════════════════════════════════════════════════════════════════
#  Entry points
# ═══════════════════════════════════════════════════════════════════════

def parse_source(source: Union[str, bytes]) -> Node:
    """Parse PHP source text into an AST_STMT_LIST."""
    if isinstance(source, str):
        source = source.encode("utf-8")
    tree = _parser.parse(source)
    if tree.root_node.has_error:
        logger.warning("Source contains syntax errors; analysing the recovered tree")
    return _Converter(source).convert(tree.root_node)


def parse_file(path: str) -> Optional[Node]:
    """Parse a PHP file; unreadable or binary files yield None."""
    if not os.path.isfile(path):
        logger.warning("File not found: %s", path)
        return None
    try:
        with open(path, "rb") as f:
            source = f.read()
    except OSError as e:
        logger.error("Cannot read %s: %s", path, e)
        return None
    if b"\x00" in source[:8192]:
        logger.warning("Skipping binary file: %s", path)
        return None
    return parse_source(source)
