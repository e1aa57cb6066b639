"""
Analyzer configuration.

Settings are passed explicitly to the components that need them; there
is no global configuration state.
"""

import logging
from typing import Dict, List, Optional, Set, Tuple
from dataclasses import dataclass, field, fields

logger = logging.getLogger(__name__)


@dataclass
class Config:
    # Issue categories (e.g. "EPARAM") that are dropped instead of recorded
    suppress_categories: Set[str] = field(default_factory=set)
    # "low", "normal" or "critical"; issues below it are dropped
    minimum_severity: str = "low"
    # Source files picked up when analysing a directory
    file_extensions: Tuple[str, ...] = (".php", ".inc")
    exclude_dirs: List[str] = field(default_factory=lambda: ["vendor", ".git"])

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "Config":
        """Build a Config from a plain mapping; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in (data or {}).items():
            if key not in known:
                logger.warning("Ignoring unknown config key: %s", key)
                continue
            kwargs[key] = value

        if "suppress_categories" in kwargs:
            kwargs["suppress_categories"] = {c.upper() for c in kwargs["suppress_categories"]}
        if "file_extensions" in kwargs:
            kwargs["file_extensions"] = tuple(kwargs["file_extensions"])
        if "minimum_severity" in kwargs:
            kwargs["minimum_severity"] = str(kwargs["minimum_severity"]).lower()
        return cls(**kwargs)
