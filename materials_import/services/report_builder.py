from __future__ import annotations

from dataclasses import dataclass, replace

from ..models.element import Element
from ..models.import_report import ImportReport
from ..models.row_issue import RowIssue
from .validators import ValidationResult

"""Import report accumulation and final aggregation.

ReportDraft is the immutable "report so far" threaded through the parser;
build_report turns the final draft into an ImportReport. Issues stay in the
order they were produced (parse order, not sorted by row).
"""

__all__ = [
    "ReportDraft",
    "build_report",
]


@dataclass(frozen=True)
class ReportDraft:
    elements: tuple[Element, ...] = ()
    errors: tuple[RowIssue, ...] = ()
    warnings: tuple[RowIssue, ...] = ()

    def with_element(self, element: Element) -> ReportDraft:
        return replace(self, elements=self.elements + (element,))

    def with_error(self, row: int, message: str) -> ReportDraft:
        return replace(self, errors=self.errors + (RowIssue(row=row, message=message),))

    def with_result(self, result: ValidationResult) -> ReportDraft:
        if not result.errors and not result.warnings:
            return self
        return replace(
            self,
            errors=self.errors + result.errors,
            warnings=self.warnings + result.warnings,
        )


def build_report(draft: ReportDraft) -> ImportReport:
    return ImportReport(
        elements=draft.elements,
        errors=draft.errors,
        warnings=draft.warnings,
    )
