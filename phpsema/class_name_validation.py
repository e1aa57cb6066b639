"""
Class Name Validation: checks every construct that names a class.

For ``new``, ``instanceof``, class constants, static calls, method calls
and property access, the named class must exist in the code base (or the
name must denote only native types).  Instantiation additionally rejects
interfaces and abstract classes, except that an abstract class may be
instantiated from inside its own methods.

Handlers return True when the node passes and False after a diagnostic
has been emitted.
"""

from typing import Any

from .ast_node import Node
from .code_base import CodeBase
from .context import Context
from .fqsen import FullyQualifiedClassName
from .log import Category, Log
from .union_type import UnionType
from .visitor import KindVisitor


class ClassNameValidationVisitor(KindVisitor):

    def __init__(self, context: Context, code_base: CodeBase, class_name: str, log: Log):
        self.context = context
        self.code_base = code_base
        self.class_name = class_name
        self.log = log

        # Resolved once, against the context the name was written in
        self.class_fqsen = FullyQualifiedClassName.from_string_in_context(class_name, context)

    def visit(self, node: Any) -> bool:
        """Nodes with a class slot are treated like instantiation."""
        if isinstance(node, Node) and node.has_child("class"):
            return self.visit_new(node)

        self.log.emit(
            Category.EUNDEF,
            "Unknown node type",
            self.context.file,
            getattr(node, "lineno", self.context.line),
        )
        return False

    def visit_new(self, node: Node) -> bool:
        if not self._class_exists():
            return self._class_exists_or_is_native(node)

        clazz = self.code_base.get_class_by_fqsen(self.class_fqsen)

        if clazz.is_abstract:
            if (not self.context.has_class_fqsen()
                    or clazz.fqsen.lookup_key() != self.context.get_class_fqsen().lookup_key()):
                self.log.emit(
                    Category.ETYPE,
                    f"Cannot instantiate abstract class {self.class_name}",
                    self.context.file,
                    node.lineno,
                )
                return False
            return True

        if clazz.is_interface:
            if not UnionType.from_string_in_context(self.class_name, self.context).is_native_type():
                self.log.emit(
                    Category.ETYPE,
                    f"Cannot instantiate interface {self.class_name}",
                    self.context.file,
                    node.lineno,
                )
                return False

        return True

    def visit_instanceof(self, node: Node) -> bool:
        return self._class_exists_or_is_native(node)

    def visit_class_const(self, node: Node) -> bool:
        return self._class_exists_or_is_native(node)

    def visit_static_call(self, node: Node) -> bool:
        return self._class_exists_or_is_native(node)

    def visit_method_call(self, node: Node) -> bool:
        return self._class_exists_or_is_native(node)

    def visit_prop(self, node: Node) -> bool:
        return self._class_exists_or_is_native(node)

    # ────────────────────────────────────────────────────────────────

    def _class_exists(self) -> bool:
        return self.code_base.has_class_with_fqsen(self.class_fqsen)

    def _class_exists_or_is_native(self, node: Node) -> bool:
        if self._class_exists():
            return True

        if UnionType.from_string_in_context(self.class_name, self.context).is_native_type():
            return True

        self.log.emit(
            Category.EUNDEF,
            f"call to undeclared class {self.class_fqsen}",
            self.context.file,
            node.lineno,
        )
        return False
