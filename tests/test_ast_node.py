"""
Syntax Tree Node Tests.
"""

import os
import sys
import unittest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from phpsema.ast_node import (
    NAME_FQ, NAME_NOT_FQ, NAME_RELATIVE, Kind, Node, kind_name,
    make_list, make_name, name_from_node, walk,
)


class TestNames(unittest.TestCase):

    def test_make_name_flags(self):
        self.assertEqual(make_name("Foo").flags, NAME_NOT_FQ)
        fq = make_name("\\A\\Foo")
        self.assertEqual(fq.flags, NAME_FQ)
        self.assertEqual(fq.child("name"), "A\\Foo")
        relative = make_name("namespace\\Foo")
        self.assertEqual(relative.flags, NAME_RELATIVE)
        self.assertEqual(relative.child("name"), "Foo")

    def test_name_round_trip(self):
        for text in ("Foo", "A\\Foo", "\\A\\Foo", "namespace\\Foo"):
            self.assertEqual(name_from_node(make_name(text)), text)
        self.assertEqual(name_from_node("Bare"), "Bare")


class TestNode(unittest.TestCase):

    def test_children(self):
        node = Node(Kind.NEW, 0, {"class": make_name("Foo"), "args": None}, 3)
        self.assertTrue(node.has_child("class"))
        self.assertFalse(node.has_child("args"))
        self.assertEqual(len(list(node.iter_children())), 1)
        self.assertEqual(repr(node), "<AST_NEW flags=0 #3>")
        self.assertEqual(kind_name(Kind.CLASS_CONST), "AST_CLASS_CONST")

    def test_walk_is_preorder_left_to_right(self):
        first = Node(Kind.NEW, 0, {"class": make_name("A")}, 1)
        second = Node(Kind.NEW, 0, {"class": make_name("B")}, 2)
        tree = make_list(Kind.STMT_LIST, [first, 7, second])
        kinds = [(n.kind, n.lineno) for n in walk(tree)]
        self.assertEqual(kinds, [
            (Kind.STMT_LIST, 0), (Kind.NEW, 1), (Kind.NAME, 0), (Kind.NEW, 2), (Kind.NAME, 0),
        ])


if __name__ == "__main__":
    unittest.main()
