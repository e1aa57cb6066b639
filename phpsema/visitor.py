"""
Kind Visitor: double dispatch on node kind.

Subclasses define ``visit_<kind>`` methods (``visit_new``,
``visit_class_const``, ...).  ``visit_node(node)`` calls the method
registered for ``node.kind`` and falls back to ``visit(node)`` when the
subclass has none.  Extra positional arguments are passed through to the
handler unchanged.
"""

from typing import Any, Dict

from .ast_node import Kind, Node


class KindVisitor:
    # Kind -> handler method name, built once per subclass
    _handlers: Dict[Kind, str] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        handlers = {}
        for kind in Kind:
            method_name = f"visit_{kind.name.lower()}"
            if callable(getattr(cls, method_name, None)):
                handlers[kind] = method_name
        cls._handlers = handlers

    def visit_node(self, node: Any, *args) -> Any:
        if not isinstance(node, Node):
            return self.visit(node, *args)
        method_name = self._handlers.get(node.kind)
        if method_name is None:
            return self.visit(node, *args)
        return getattr(self, method_name)(node, *args)

    def visit(self, node: Any, *args) -> Any:
        """Default handler for kinds without a specific method."""
        raise NotImplementedError(f"{type(self).__name__} does not handle {node!r}")
