"""
Union Type Tests.

Validates:
  1. Parsing of '|'-delimited annotations (arrays, aliases, nullable)
  2. Rendering is sorted and parses back to an equal value
  3. isNativeType, including the empty-union edge case
  4. Types of declaration nodes (fromSimpleNode)
  5. Structural inference of default-value expressions (fromNode)
"""

import os
import sys
import unittest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from phpsema.ast_node import (
    TYPE_LONG, TYPE_STRING, TYPE_STATIC, UNARY_BOOL_NOT, UNARY_MINUS,
    Kind, Node, make_list, make_name,
)
from phpsema.code_base import CodeBase, ConstantDeclaration
from phpsema.context import Context
from phpsema.fqsen import FullyQualifiedClassName, FullyQualifiedConstantName
from phpsema.union_type import Type, UnionType, union_of


class TestParsing(unittest.TestCase):

    def setUp(self):
        self.context = Context(namespace="\\App")

    def parse(self, text):
        return UnionType.from_string_in_context(text, self.context)

    def test_natives(self):
        union_type = self.parse("int|string")
        self.assertEqual(len(union_type), 2)
        self.assertIn(Type.native("int"), union_type)
        self.assertEqual(str(union_type), "int|string")

    def test_class_array_and_null(self):
        union_type = self.parse("Foo[] | null")
        foo = FullyQualifiedClassName.make("\\App", "Foo")
        self.assertIn(Type.from_fqsen(foo, 1), union_type)
        self.assertIn(Type.native("null"), union_type)
        self.assertEqual(str(union_type), "\\App\\Foo[]|null")

    def test_nested_arrays(self):
        union_type = self.parse("int[][]")
        self.assertEqual(list(union_type)[0].array_depth, 2)
        self.assertEqual(str(union_type), "int[][]")

    def test_aliases_fold_to_canonical_names(self):
        self.assertEqual(self.parse("boolean|Integer|double"), self.parse("bool|int|float"))

    def test_nullable_shorthand(self):
        self.assertEqual(self.parse("?int"), self.parse("int|null"))

    def test_duplicates_collapse(self):
        self.assertEqual(len(self.parse("int|int|INT")), 1)

    def test_empty_text(self):
        self.assertTrue(self.parse("").is_empty())
        self.assertTrue(self.parse(" | ").is_empty())

    def test_self_in_class_context(self):
        shape = FullyQualifiedClassName.make("\\App", "Shape")
        union_type = UnionType.from_string_in_context("self", self.context.with_class(shape))
        self.assertEqual(union_type.class_fqsens(), [shape])

    def test_comma_in_annotation_still_resolves(self):
        union_type = self.parse("array<int,string>|null")
        self.assertEqual(str(union_type), "\\App\\array<int,string>|null")
        self.assertFalse(union_type.is_native_type())
        self.assertEqual(str(self.parse("Foo,")), "\\App\\Foo,")

    def test_round_trip(self):
        for text in ("int", "\\App\\Foo[]|null", "string|Bar|float[]", "mixed|\\Other\\Baz[][]"):
            union_type = self.parse(text)
            self.assertEqual(self.parse(str(union_type)), union_type, text)


class TestQueries(unittest.TestCase):

    def setUp(self):
        self.context = Context()

    def test_empty_union_is_native(self):
        self.assertTrue(UnionType.empty().is_native_type())

    def test_empty_is_not_null(self):
        self.assertNotEqual(UnionType.empty(), UnionType.null())
        self.assertFalse(UnionType.null().is_empty())

    def test_any_class_member_makes_it_non_native(self):
        union_type = UnionType.from_string_in_context("int|Foo", self.context)
        self.assertFalse(union_type.is_native_type())
        self.assertEqual(str(union_type.non_native_types()), "\\Foo")

    def test_union_deduplicates(self):
        left = UnionType.from_string_in_context("int|string", self.context)
        right = UnionType.from_string_in_context("string|null", self.context)
        self.assertEqual(str(left | right), "int|null|string")
        self.assertEqual(left.union(right), right | left)

    def test_union_of(self):
        combined = union_of([UnionType.native("int"), UnionType.null(), UnionType.native("int")])
        self.assertEqual(str(combined), "int|null")

    def test_array_helpers(self):
        union_type = UnionType.native("int").as_array()
        self.assertEqual(str(union_type), "int[]")
        self.assertEqual(union_type.element_types(), UnionType.native("int"))
        self.assertEqual(str(UnionType.native("int").element_types()), "mixed")

    def test_native_constructor_rejects_classes(self):
        with self.assertRaises(ValueError):
            Type.native("Widget")


class TestFromSimpleNode(unittest.TestCase):

    def setUp(self):
        self.context = Context(namespace="\\App")

    def test_absent(self):
        self.assertTrue(UnionType.from_simple_node(self.context, None).is_empty())

    def test_primitive_flag(self):
        node = Node(Kind.TYPE, TYPE_LONG)
        self.assertEqual(UnionType.from_simple_node(self.context, node), UnionType.native("int"))

    def test_name(self):
        union_type = UnionType.from_simple_node(self.context, make_name("\\Lib\\Foo"))
        self.assertEqual(str(union_type), "\\Lib\\Foo")

    def test_nullable(self):
        node = Node(Kind.NULLABLE_TYPE, 0, {"type": make_name("Foo")})
        self.assertEqual(str(UnionType.from_simple_node(self.context, node)), "\\App\\Foo|null")

    def test_union(self):
        node = make_list(Kind.TYPE_UNION, [Node(Kind.TYPE, TYPE_STRING), make_name("Foo")])
        self.assertEqual(str(UnionType.from_simple_node(self.context, node)), "\\App\\Foo|string")

    def test_static_in_class(self):
        shape = FullyQualifiedClassName.make("\\App", "Shape")
        node = Node(Kind.TYPE, TYPE_STATIC)
        union_type = UnionType.from_simple_node(self.context.with_class(shape), node)
        self.assertEqual(union_type.class_fqsens(), [shape])


class TestFromNode(unittest.TestCase):

    def setUp(self):
        self.context = Context(namespace="\\App")
        self.code_base = CodeBase()
        self.code_base.add_constant(ConstantDeclaration(
            FullyQualifiedConstantName.make("\\", "MAX"), 10, UnionType.native("int"),
        ))
        self.code_base.freeze()

    def infer(self, node):
        return UnionType.from_node(self.context, self.code_base, node)

    def test_scalars(self):
        self.assertEqual(self.infer(1), UnionType.native("int"))
        self.assertEqual(self.infer(1.5), UnionType.native("float"))
        self.assertEqual(self.infer("x"), UnionType.native("string"))
        self.assertEqual(self.infer(True), UnionType.native("bool"))

    def test_array_literal(self):
        self.assertEqual(self.infer(make_list(Kind.ARRAY, [])), UnionType.native("array"))

    def test_unary_follows_operand(self):
        node = Node(Kind.UNARY_OP, UNARY_MINUS, {"expr": 1})
        self.assertEqual(self.infer(node), UnionType.native("int"))

    def test_boolean_not(self):
        node = Node(Kind.UNARY_OP, UNARY_BOOL_NOT, {"expr": 1})
        self.assertEqual(self.infer(node), UnionType.native("bool"))

    def test_keyword_constants(self):
        self.assertEqual(self.infer(Node(Kind.CONST, 0, {"name": make_name("true")})), UnionType.native("bool"))
        self.assertEqual(self.infer(Node(Kind.CONST, 0, {"name": make_name("NULL")})), UnionType.null())

    def test_declared_constant_falls_back_to_global(self):
        node = Node(Kind.CONST, 0, {"name": make_name("MAX")})
        self.assertEqual(self.infer(node), UnionType.native("int"))

    def test_unknown_constant(self):
        node = Node(Kind.CONST, 0, {"name": make_name("NOPE")})
        self.assertTrue(self.infer(node).is_empty())

    def test_class_constant_is_unknown(self):
        node = Node(Kind.CLASS_CONST, 0, {"class": make_name("Foo"), "const": "BAR"})
        self.assertTrue(self.infer(node).is_empty())


if __name__ == "__main__":
    unittest.main()
