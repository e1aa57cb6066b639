"""
Class Name Analyzer: walks a syntax tree and validates class usage.

The walk is pre-order, left to right.  As it descends it derives a new
Context for every namespace, ``use`` import, class body, function,
method and closure, so sibling subtrees never see each other's scope.

At each node that names a class (``new``, ``instanceof``, ``X::CONST``,
``X::call()`` and ``$this->...`` inside a class) a
ClassNameValidationVisitor checks the name against the code base.  For
every function-like declaration the parameter list is built and its
ordering checked.

Usage:
    analyzer = ClassNameAnalyzer(code_base, log)
    failures = analyzer.analyze(tree, Context(file="src/a.php"))
"""

import os
import logging
from typing import Any, Dict, List, Optional

from .ast_node import USE_NORMAL, Kind, Node, name_from_node
from .class_name_validation import ClassNameValidationVisitor
from .code_base import CodeBase
from .config import Config
from .context import Context, ScopeKind
from .fqsen import FullyQualifiedClassName, FullyQualifiedFunctionName, FullyQualifiedMethodName
from .frontend import parse_file
from .log import Log
from .parameter import Parameter
from .visitor import KindVisitor

logger = logging.getLogger(__name__)


class ClassNameAnalyzer(KindVisitor):

    def __init__(self, code_base: CodeBase, log: Log, config: Optional[Config] = None):
        self.code_base = code_base
        self.log = log
        self.config = config or log.config
        self.failures = 0
        # file -> function / method FQSEN text -> its parameters
        self.parameters: Dict[str, Dict[str, List[Parameter]]] = {}
        self._closure_count = 0

    # ────────────────────────────────────────────────────────────────
    #  Entry points
    # ────────────────────────────────────────────────────────────────

    def analyze(self, node: Any, context: Optional[Context] = None) -> int:
        """Analyze one tree; returns the number of failed validations in it."""
        if not self.code_base.is_frozen:
            logger.warning("Analyzing against a CodeBase that has not been frozen")
        context = context or Context()
        # Re-analyzing a file replaces what was collected for it
        self.parameters[context.file] = {}
        before = self.failures
        self.visit_node(node, context)
        return self.failures - before

    def analyze_file(self, path: str, display_path: Optional[str] = None) -> int:
        tree = parse_file(path)
        if tree is None:
            return 0
        return self.analyze(tree, Context(file=display_path or path))

    def analyze_directory(self, root: str) -> int:
        """Analyze every source file below ``root`` in a stable order."""
        failures = 0
        files = self._discover_files(root)
        logger.info("ClassNameAnalyzer: found %d files to analyze", len(files))
        for rel_path in files:
            failures += self.analyze_file(os.path.join(root, rel_path), rel_path)
        return failures

    def _discover_files(self, root: str) -> List[str]:
        extensions = tuple(e.lower() for e in self.config.file_extensions)
        excluded = set(self.config.exclude_dirs)
        found = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in excluded)
            for filename in filenames:
                if filename.lower().endswith(extensions):
                    rel = os.path.relpath(os.path.join(dirpath, filename), root)
                    found.append(rel.replace("\\", "/"))
        return sorted(found)

    # ────────────────────────────────────────────────────────────────
    #  Structure
    # ────────────────────────────────────────────────────────────────

    def visit(self, node: Any, context: Context) -> None:
        """Descend into every child node."""
        if not isinstance(node, Node):
            return
        for child in node.iter_children():
            if isinstance(child, Node):
                self.visit_node(child, context.with_line(child.lineno))

    def visit_stmt_list(self, node: Node, context: Context) -> None:
        # Unbraced namespaces and use imports apply to the statements after them
        for child in node.iter_children():
            if not isinstance(child, Node):
                continue
            if child.kind == Kind.NAMESPACE and child.child("stmts") is None:
                context = context.with_namespace(child.child("name") or "")
                continue
            if child.kind == Kind.USE:
                context = self._apply_use(child, context)
                continue
            self.visit_node(child, context.with_line(child.lineno))

    def visit_namespace(self, node: Node, context: Context) -> None:
        namespace_context = context.with_namespace(node.child("name") or "")
        self.visit_node(node.child("stmts"), namespace_context)

    def visit_use(self, node: Node, context: Context) -> None:
        # Imports outside a statement list have no following statements
        return None

    def visit_class(self, node: Node, context: Context) -> None:
        name = node.child("name")
        if not name:
            # Anonymous class: the body keeps the surrounding scope
            self.visit(node, context)
            return
        class_fqsen = FullyQualifiedClassName.make(context.namespace, name)
        self.visit_node(node.child("stmts"), context.with_class(class_fqsen))

    def visit_func_decl(self, node: Node, context: Context) -> None:
        fqsen = FullyQualifiedFunctionName.make(context.namespace, node.child("name") or "")
        self._visit_function_like(node, context.with_function_scope(ScopeKind.FUNCTION, fqsen))

    def visit_method(self, node: Node, context: Context) -> None:
        name = node.child("name") or ""
        if context.has_class_fqsen():
            fqsen = FullyQualifiedMethodName(context.get_class_fqsen(), name)
        else:
            fqsen = FullyQualifiedFunctionName.make(context.namespace, name)
        self._visit_function_like(node, context.with_function_scope(ScopeKind.METHOD, fqsen))

    def visit_closure(self, node: Node, context: Context) -> None:
        self._closure_count += 1
        fqsen = FullyQualifiedFunctionName.make(context.namespace, "{closure}", self._closure_count)
        self._visit_function_like(node, context.with_function_scope(ScopeKind.CLOSURE, fqsen))

    visit_arrow_func = visit_closure

    def _visit_function_like(self, node: Node, context: Context) -> None:
        file_parameters = self.parameters.setdefault(context.file, {})
        file_parameters[str(context.enclosing_function)] = Parameter.list_from_node(
            context, self.code_base, node.child("params"), self.log,
        )
        self.visit(node, context)

    def _apply_use(self, node: Node, context: Context) -> Context:
        # Only class imports take part in class-name resolution
        for element in node.iter_children():
            if not isinstance(element, Node):
                continue
            if (element.flags or node.flags or USE_NORMAL) != USE_NORMAL:
                continue
            target = element.child("name") or ""
            alias = element.child("alias") or target.rsplit("\\", 1)[-1]
            context = context.with_alias(alias, target)
        return context

    # ────────────────────────────────────────────────────────────────
    #  Class-naming expressions
    # ────────────────────────────────────────────────────────────────

    def visit_new(self, node: Node, context: Context) -> None:
        self._validate_class_slot(node, context)

    visit_instanceof = visit_new
    visit_class_const = visit_new
    visit_static_call = visit_new

    def visit_method_call(self, node: Node, context: Context) -> None:
        self._validate_this_access(node, context)

    visit_prop = visit_method_call

    def _validate_class_slot(self, node: Node, context: Context) -> None:
        class_node = node.child("class")
        if isinstance(class_node, Node) and class_node.kind == Kind.NAME:
            class_name = self._class_name_in_context(name_from_node(class_node), context)
            if class_name is not None:
                self._validate(node, class_name, context)
        self.visit(node, context)

    def _validate_this_access(self, node: Node, context: Context) -> None:
        expr = node.child("expr")
        if (isinstance(expr, Node) and expr.kind == Kind.VAR
                and expr.child("name") == "this" and context.has_class_fqsen()):
            self._validate(node, str(context.get_class_fqsen()), context)
        self.visit(node, context)

    def _validate(self, node: Node, class_name: str, context: Context) -> None:
        visitor = ClassNameValidationVisitor(context, self.code_base, class_name, self.log)
        if not visitor.visit_node(node):
            self.failures += 1

    def _class_name_in_context(self, name: str, context: Context) -> Optional[str]:
        """Map ``parent`` to the superclass; other names pass through."""
        if name.lower() != "parent":
            return name
        if not context.has_class_fqsen() or not self.code_base.has_class_with_fqsen(context.get_class_fqsen()):
            logger.debug("%s: cannot resolve 'parent' here", context)
            return None
        superclass = self.code_base.get_class_by_fqsen(context.get_class_fqsen()).superclass
        if superclass is None:
            logger.debug("%s: class has no parent", context)
            return None
        return str(superclass)
