from __future__ import annotations

import json
from dataclasses import dataclass

from .element import Element
from .row_issue import RowIssue

"""ImportReport: the outcome of one parse pass over a materials sheet.

The report is what the uploader sees as a preview before anything is
persisted: retained elements, every error and warning with its row number,
and the derived counters.
"""

__all__ = [
    "ImportStats",
    "ImportReport",
]


@dataclass(frozen=True)
class ImportStats:
    total_elements: int
    total_materials: int
    total_errors: int
    total_warnings: int

    def to_dict(self) -> dict[str, int]:
        return {
            "total_elements": self.total_elements,
            "total_materials": self.total_materials,
            "total_errors": self.total_errors,
            "total_warnings": self.total_warnings,
        }


@dataclass(frozen=True)
class ImportReport:
    """Parsed elements plus errors/warnings in parse order."""
    elements: tuple[Element, ...]
    errors: tuple[RowIssue, ...]
    warnings: tuple[RowIssue, ...]

    @property
    def stats(self) -> ImportStats:
        return ImportStats(
            total_elements=len(self.elements),
            total_materials=sum(len(e.particulars) for e in self.elements),
            total_errors=len(self.errors),
            total_warnings=len(self.warnings),
        )

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> dict[str, object]:
        return {
            "elements": [e.to_dict() for e in self.elements],
            "stats": self.stats.to_dict(),
            "errors": [i.to_dict() for i in self.errors],
            "warnings": [i.to_dict() for i in self.warnings],
        }

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)
