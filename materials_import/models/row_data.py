from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""NormalizedRow model for the materials template import.

A NormalizedRow is the canonical, field-keyed shape of one worksheet row after
header slugging and trimming. It exists only for the duration of a parse.
"""

__all__ = [
    "RowData",
    "NormalizedRow",
]


@dataclass(frozen=True)
class RowData:
    """One decoded worksheet row keyed by slugged header.

    row_number is the worksheet row (header row = 1, first data row = 2).
    """
    row_number: int
    values: dict[str, Any]


@dataclass(frozen=True)
class NormalizedRow:
    """Canonical record handed to the validators.

    String fields are trimmed ("" when missing). width/length/height/quantity
    keep their raw cell value so validators can decide whether it is numeric.
    """
    element_id: str = ""
    element_type: str = ""
    element_name: str = ""
    category: str = ""
    width: Any = ""
    length: Any = ""
    height: Any = ""
    particular_description: str = ""
    unit: str = ""
    quantity: Any = ""
    included: str = ""  # upper-cased
    notes: str = ""

    @property
    def has_element_id(self) -> bool:
        return self.element_id != ""

    @property
    def has_particular(self) -> bool:
        return self.particular_description != ""
