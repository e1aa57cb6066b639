"""
Context: where in the program the analyzer currently is.

A Context is an immutable value.  Entering a nested scope (namespace,
class body, function body) produces a new Context; sibling subtrees each
keep their own, so nothing leaks between them.
"""

from enum import Enum
from typing import Mapping, Optional, Union
from dataclasses import dataclass, field, replace

from .fqsen import (
    ROOT_NAMESPACE, FullyQualifiedClassName, FullyQualifiedFunctionName,
    FullyQualifiedMethodName, canonical_namespace,
)


class ScopeKind(Enum):
    GLOBAL = "global"
    CLASS = "class"
    FUNCTION = "function"
    METHOD = "method"
    CLOSURE = "closure"


@dataclass(frozen=True)
class Context:
    file: str = ""
    line: int = 0
    namespace: str = ROOT_NAMESPACE
    enclosing_class: Optional[FullyQualifiedClassName] = None
    enclosing_scope: ScopeKind = ScopeKind.GLOBAL
    enclosing_function: Optional[Union[FullyQualifiedFunctionName, FullyQualifiedMethodName]] = None
    # lower-cased alias -> fully-qualified target ("\A\B")
    use_aliases: Mapping[str, str] = field(default_factory=dict, compare=False, hash=False)

    # ────────────────────────────────────────────────────────────────
    #  Derivation
    # ────────────────────────────────────────────────────────────────

    def with_line(self, line: int) -> "Context":
        if line == self.line:
            return self
        return replace(self, line=line)

    def with_namespace(self, namespace: str) -> "Context":
        """Enter a namespace; imports do not carry over between namespaces."""
        return replace(self, namespace=canonical_namespace(namespace), use_aliases={})

    def with_alias(self, alias: str, target: str) -> "Context":
        """Record ``use target as alias``."""
        aliases = dict(self.use_aliases)
        aliases[alias.lower()] = "\\" + target.strip("\\")
        return replace(self, use_aliases=aliases)

    def with_class(self, class_fqsen: FullyQualifiedClassName) -> "Context":
        return replace(
            self,
            enclosing_class=class_fqsen,
            enclosing_scope=ScopeKind.CLASS,
            enclosing_function=None,
        )

    def with_function_scope(self, scope: ScopeKind, function_fqsen) -> "Context":
        return replace(self, enclosing_scope=scope, enclosing_function=function_fqsen)

    # ────────────────────────────────────────────────────────────────
    #  Queries
    # ────────────────────────────────────────────────────────────────

    def resolve_alias(self, name: str) -> Optional[str]:
        return self.use_aliases.get(name.lower())

    def has_class_fqsen(self) -> bool:
        return self.enclosing_class is not None

    def get_class_fqsen(self) -> FullyQualifiedClassName:
        if self.enclosing_class is None:
            raise ValueError(f"{self.file}:{self.line} is not inside a class")
        return self.enclosing_class

    def is_in_function_scope(self) -> bool:
        return self.enclosing_scope in (ScopeKind.FUNCTION, ScopeKind.METHOD, ScopeKind.CLOSURE)

    def __str__(self):
        return f"{self.file}:{self.line}"
