"""
Code Base: the global symbol table for one analysis run.

Maps FQSENs to the declarations harvested from every source file:

  • classes   - ClassDeclaration (abstract/interface/trait/final flags,
                superclass and interface edges)
  • functions - FunctionDeclaration (parameters and return type)
  • constants - ConstantDeclaration (value and union type)

The table is populated once, then frozen; the validation passes only
read from it.  A class FQSEN maps to exactly one declaration or is
absent.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple
from dataclasses import dataclass, field

from .ast_node import CLASS_ABSTRACT, CLASS_FINAL, CLASS_INTERFACE, CLASS_TRAIT
from .fqsen import FullyQualifiedClassName, FullyQualifiedConstantName, FullyQualifiedFunctionName
from .union_type import UnionType

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════
#  Declarations
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FunctionDeclaration:
    """A function or method signature."""
    fqsen: Any                  # FullyQualifiedFunctionName or FullyQualifiedMethodName
    parameters: Tuple = ()      # Parameter objects, in declaration order
    return_type: UnionType = field(default_factory=UnionType.empty)
    file: str = ""
    line: int = 0

    @property
    def required_parameter_count(self) -> int:
        return sum(1 for p in self.parameters if p.is_required())


@dataclass(frozen=True)
class ConstantDeclaration:
    fqsen: FullyQualifiedConstantName
    value: Any = None
    union_type: UnionType = field(default_factory=UnionType.empty)
    file: str = ""
    line: int = 0


@dataclass(frozen=True)
class ClassDeclaration:
    """A class, interface or trait."""
    fqsen: FullyQualifiedClassName
    is_abstract: bool = False
    is_interface: bool = False
    is_trait: bool = False
    is_final: bool = False
    superclass: Optional[FullyQualifiedClassName] = None
    interfaces: frozenset = frozenset()
    file: str = ""
    line: int = 0
    # lower-cased method name -> declaration
    methods: Dict[str, FunctionDeclaration] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_flags(cls, fqsen: FullyQualifiedClassName, flags: int, **kwargs) -> "ClassDeclaration":
        """Build a declaration from AST_CLASS flag bits."""
        return cls(
            fqsen,
            is_abstract=bool(flags & CLASS_ABSTRACT),
            is_interface=bool(flags & CLASS_INTERFACE),
            is_trait=bool(flags & CLASS_TRAIT),
            is_final=bool(flags & CLASS_FINAL),
            **kwargs,
        )

    @property
    def is_concrete(self) -> bool:
        return not (self.is_abstract or self.is_interface or self.is_trait)

    def has_method(self, name: str) -> bool:
        return name.lower() in self.methods

    def get_method(self, name: str) -> FunctionDeclaration:
        return self.methods[name.lower()]


# ═══════════════════════════════════════════════════════════════════════
#  CodeBase
# ═══════════════════════════════════════════════════════════════════════

class CodeBase:
    """
    Usage:
        code_base = CodeBase()
        code_base.add_class(ClassDeclaration(fqsen, is_abstract=True))
        code_base.freeze()
        if code_base.has_class_with_fqsen(fqsen):
            clazz = code_base.get_class_by_fqsen(fqsen)
    """

    def __init__(self):
        self._classes: Dict[FullyQualifiedClassName, ClassDeclaration] = {}
        self._functions: Dict[FullyQualifiedFunctionName, FunctionDeclaration] = {}
        self._constants: Dict[FullyQualifiedConstantName, ConstantDeclaration] = {}
        self._frozen = False

    # ────────────────────────────────────────────────────────────────
    #  Population
    # ────────────────────────────────────────────────────────────────

    def _check_writable(self):
        if self._frozen:
            raise RuntimeError("CodeBase is frozen; declarations can no longer be added")

    def add_class(self, clazz: ClassDeclaration):
        self._check_writable()
        key = clazz.fqsen.lookup_key()
        if key in self._classes:
            raise ValueError(f"Class {clazz.fqsen} is already declared")
        self._classes[key] = clazz

    def add_function(self, function: FunctionDeclaration):
        self._check_writable()
        if function.fqsen in self._functions:
            raise ValueError(f"Function {function.fqsen} is already declared")
        self._functions[function.fqsen] = function

    def add_constant(self, constant: ConstantDeclaration):
        self._check_writable()
        if constant.fqsen in self._constants:
            raise ValueError(f"Constant {constant.fqsen} is already declared")
        self._constants[constant.fqsen] = constant

    def freeze(self):
        """End the population phase."""
        self._frozen = True
        logger.info(
            "CodeBase frozen: %d classes, %d functions, %d constants",
            len(self._classes), len(self._functions), len(self._constants),
        )

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # ────────────────────────────────────────────────────────────────
    #  Lookups
    # ────────────────────────────────────────────────────────────────

    def has_class_with_fqsen(self, fqsen: FullyQualifiedClassName) -> bool:
        return fqsen.lookup_key() in self._classes

    def get_class_by_fqsen(self, fqsen: FullyQualifiedClassName) -> ClassDeclaration:
        """Callers must check has_class_with_fqsen() first."""
        return self._classes[fqsen.lookup_key()]

    def has_function_with_fqsen(self, fqsen: FullyQualifiedFunctionName) -> bool:
        return fqsen in self._functions

    def get_function_by_fqsen(self, fqsen: FullyQualifiedFunctionName) -> FunctionDeclaration:
        return self._functions[fqsen]

    def has_constant_with_fqsen(self, fqsen: FullyQualifiedConstantName) -> bool:
        return fqsen in self._constants

    def get_constant_by_fqsen(self, fqsen: FullyQualifiedConstantName) -> ConstantDeclaration:
        return self._constants[fqsen]

    def classes(self) -> Iterator[ClassDeclaration]:
        return iter(self._classes.values())

    # ────────────────────────────────────────────────────────────────
    #  Inheritance
    # ────────────────────────────────────────────────────────────────

    def get_ancestor_fqsens(self, fqsen: FullyQualifiedClassName) -> List[FullyQualifiedClassName]:
        """Superclasses and interfaces, nearest first (BFS).

        Undeclared ancestors are included but not expanded; cycles are
        cut at the first repeat.
        """
        visited: Set[FullyQualifiedClassName] = {fqsen.lookup_key()}
        ancestors: List[FullyQualifiedClassName] = []
        queue = [fqsen]
        while queue:
            current = queue.pop(0)
            if not self.has_class_with_fqsen(current):
                continue
            clazz = self.get_class_by_fqsen(current)
            parents = []
            if clazz.superclass is not None:
                parents.append(clazz.superclass)
            parents.extend(sorted(clazz.interfaces, key=str))
            for parent in parents:
                if parent.lookup_key() in visited:
                    continue
                visited.add(parent.lookup_key())
                ancestors.append(parent)
                queue.append(parent)
        return ancestors

    def is_subclass_of(self, fqsen: FullyQualifiedClassName, ancestor: FullyQualifiedClassName) -> bool:
        key = ancestor.lookup_key()
        return any(a.lookup_key() == key for a in self.get_ancestor_fqsens(fqsen))

    # ────────────────────────────────────────────────────────────────
    #  Reporting
    # ────────────────────────────────────────────────────────────────

    @property
    def total_classes(self) -> int:
        return len(self._classes)

    def get_summary(self) -> Dict:
        return {
            "classes": len(self._classes),
            "interfaces": sum(1 for c in self._classes.values() if c.is_interface),
            "traits": sum(1 for c in self._classes.values() if c.is_trait),
            "abstract_classes": sum(1 for c in self._classes.values() if c.is_abstract),
            "functions": len(self._functions),
            "constants": len(self._constants),
            "frozen": self._frozen,
        }
