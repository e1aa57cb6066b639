"""
Issue Log: the diagnostic sink.

Analysis components report user-code problems through
``Log.emit(category, message, file, line)``.  Each report becomes an
Issue record, kept in emission order, and is mirrored to the Python
logger of this module.  Reporting never raises: the run keeps going and
collects as many findings as it can.
"""

import logging
from enum import Enum, IntEnum
from typing import Dict, List, Optional
from pydantic import BaseModel

from .config import Config

logger = logging.getLogger(__name__)


class Severity(IntEnum):
    LOW = 0
    NORMAL = 5
    CRITICAL = 10


class Category(str, Enum):
    EUNDEF = "EUNDEF"         # undeclared element / unknown node shape
    ETYPE = "ETYPE"           # type-validity violation
    EPARAM = "EPARAM"         # parameter list problem
    ESTATIC = "ESTATIC"       # static/instance misuse
    EVARUNDEF = "EVARUNDEF"   # undefined variable
    EAVAIL = "EAVAIL"         # element unavailable in this context
    ETAINT = "ETAINT"         # tainted data
    ECOMPAT = "ECOMPAT"       # language-version compatibility
    EDEP = "EDEP"             # deprecated element
    EREDEF = "EREDEF"         # redefinition


_DEFAULT_SEVERITY: Dict[Category, Severity] = {
    Category.EUNDEF: Severity.CRITICAL,
    Category.ETYPE: Severity.NORMAL,
    Category.EPARAM: Severity.NORMAL,
    Category.ESTATIC: Severity.NORMAL,
    Category.EVARUNDEF: Severity.NORMAL,
    Category.EAVAIL: Severity.NORMAL,
    Category.ETAINT: Severity.CRITICAL,
    Category.ECOMPAT: Severity.LOW,
    Category.EDEP: Severity.LOW,
    Category.EREDEF: Severity.NORMAL,
}


class Issue(BaseModel):
    category: Category
    severity: Severity
    message: str
    file: str
    line: int

    def __str__(self):
        return f"{self.file}:{self.line} {self.category.value} {self.message}"


class Log:
    """Collects issues reported during analysis."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self._issues: List[Issue] = []
        self._minimum = Severity[self.config.minimum_severity.upper()]
        self._suppressed = {c.upper() for c in self.config.suppress_categories}

    def emit(self, category: Category, message: str, file: str, line: int) -> None:
        category = Category(category)
        severity = _DEFAULT_SEVERITY[category]
        if category.value in self._suppressed or severity < self._minimum:
            logger.debug("Suppressed %s at %s:%d: %s", category.value, file, line, message)
            return

        issue = Issue(category=category, severity=severity, message=message, file=file, line=line)
        self._issues.append(issue)
        logger.info("%s", issue)

    # ────────────────────────────────────────────────────────────────
    #  Queries
    # ────────────────────────────────────────────────────────────────

    @property
    def issues(self) -> List[Issue]:
        return list(self._issues)

    def count(self, category: Optional[Category] = None) -> int:
        if category is None:
            return len(self._issues)
        return len(self.by_category(category))

    def by_category(self, category: Category) -> List[Issue]:
        category = Category(category)
        return [i for i in self._issues if i.category == category]

    def has_issues(self) -> bool:
        return len(self._issues) > 0

    def clear(self) -> None:
        self._issues.clear()

    def to_dicts(self) -> List[Dict]:
        return [i.model_dump(mode="json") for i in self._issues]
