"""
Kind Visitor Tests: dispatch by node kind with a default fallback.
"""

import os
import sys
import unittest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from phpsema.ast_node import Kind, Node
from phpsema.visitor import KindVisitor


class RecordingVisitor(KindVisitor):

    def visit(self, node, *args):
        return ("default", node, args)

    def visit_new(self, node, *args):
        return ("new", node, args)

    def visit_class_const(self, node, *args):
        return ("class_const", node, args)


class OtherVisitor(KindVisitor):

    def visit(self, node):
        return "other-default"

    def visit_prop(self, node):
        return "prop"


class TestDispatch(unittest.TestCase):

    def setUp(self):
        self.visitor = RecordingVisitor()

    def test_specific_handler(self):
        node = Node(Kind.NEW)
        self.assertEqual(self.visitor.visit_node(node)[0], "new")
        self.assertEqual(self.visitor.visit_node(Node(Kind.CLASS_CONST))[0], "class_const")

    def test_fallback_to_default(self):
        node = Node(Kind.STATIC_PROP)
        tag, seen, _ = self.visitor.visit_node(node)
        self.assertEqual(tag, "default")
        self.assertIs(seen, node)

    def test_scalars_go_to_default(self):
        self.assertEqual(self.visitor.visit_node(42), ("default", 42, ()))
        self.assertEqual(self.visitor.visit_node(None), ("default", None, ()))

    def test_extra_arguments_pass_through(self):
        self.assertEqual(self.visitor.visit_node(Node(Kind.NEW), "ctx", 3)[2], ("ctx", 3))

    def test_tables_are_per_subclass(self):
        other = OtherVisitor()
        self.assertEqual(other.visit_node(Node(Kind.PROP)), "prop")
        self.assertEqual(other.visit_node(Node(Kind.NEW)), "other-default")
        self.assertEqual(self.visitor.visit_node(Node(Kind.PROP))[0], "default")

    def test_base_default_raises(self):
        class Bare(KindVisitor):
            pass

        with self.assertRaises(NotImplementedError):
            Bare().visit_node(Node(Kind.NEW))


if __name__ == "__main__":
    unittest.main()
