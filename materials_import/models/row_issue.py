from __future__ import annotations

from dataclasses import dataclass

"""RowIssue model: one error or warning tied to a worksheet row."""

__all__ = [
    "RowIssue",
]


@dataclass(frozen=True)
class RowIssue:
    """Error or warning raised while parsing a worksheet row.

    Attributes:
        row: Worksheet row number (first data row = 2)
        message: Human readable description shown in the import preview
    """
    row: int
    message: str

    def to_dict(self) -> dict[str, object]:
        return {"row": self.row, "message": self.message}
