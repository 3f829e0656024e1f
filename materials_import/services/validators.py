from __future__ import annotations

from dataclasses import dataclass, field

from ..models.row_data import NormalizedRow
from ..models.row_issue import RowIssue
from ..models.vocabulary import (
    Category,
    ElementType,
    Included,
    Severity,
    Unit,
    is_numeric,
    to_float,
)

"""Header and particular row validators.

Both validators run every check (no short-circuit) and return the issues they
found instead of raising. Only errors invalidate a row; warnings describe the
default that will be substituted.
"""

__all__ = [
    "ValidationResult",
    "validate_header",
    "validate_particular",
]

HEADER_REQUIRED_FIELDS = {
    "element_id": "Element ID",
    "element_type": "Element Type",
    "element_name": "Element Name",
    "category": "Category",
}

DIMENSION_FIELDS = ("width", "length", "height")


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple[RowIssue, ...] = ()
    warnings: tuple[RowIssue, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors


@dataclass
class _Collector:
    row: int
    errors: list[RowIssue] = field(default_factory=list)
    warnings: list[RowIssue] = field(default_factory=list)

    def add(self, severity: Severity, message: str) -> None:
        target = self.errors if severity is Severity.ERROR else self.warnings
        target.append(RowIssue(row=self.row, message=message))

    def error(self, message: str) -> None:
        self.add(Severity.ERROR, message)

    def warning(self, message: str) -> None:
        self.add(Severity.WARNING, message)

    def result(self) -> ValidationResult:
        return ValidationResult(errors=tuple(self.errors), warnings=tuple(self.warnings))


def validate_header(row_number: int, row: NormalizedRow) -> ValidationResult:
    """Validate a row that declares a new element."""
    issues = _Collector(row_number)

    for attr, label in HEADER_REQUIRED_FIELDS.items():
        if getattr(row, attr) == "":
            issues.error(f"Missing required field: {label}")

    if row.category and Category.lookup(row.category) is None:
        issues.add(
            Category.unknown_severity(),
            f"Invalid category: '{row.category}'. Must be one of: {', '.join(Category.values())}",
        )

    if row.element_type and ElementType.lookup(row.element_type) is None:
        issues.add(
            ElementType.unknown_severity(),
            f"Unknown element type: '{row.element_type}'. Will be treated as custom type.",
        )

    for dim in DIMENSION_FIELDS:
        value = getattr(row, dim)
        if value != "" and not is_numeric(value):
            issues.warning(f"{dim.capitalize()} is not numeric. Will be set to 0.")

    return issues.result()


def validate_particular(row_number: int, row: NormalizedRow) -> ValidationResult:
    """Validate the material columns of a row attached to an active element."""
    issues = _Collector(row_number)

    if row.particular_description == "":
        issues.error("Particular description is required")

    if row.unit == "":
        issues.error("Unit is required for particular")

    if row.quantity == "" or not is_numeric(row.quantity) or to_float(row.quantity) <= 0:
        issues.error("Quantity must be a number greater than 0")

    if not Included.is_acceptable(row.included):
        issues.warning("Invalid 'Included' value. Must be YES or NO. Defaulting to YES.")

    if row.unit and Unit.lookup(row.unit) is None:
        issues.add(
            Unit.unknown_severity(),
            f"Unknown unit: '{row.unit}'. Will be accepted as custom unit.",
        )

    return issues.result()
