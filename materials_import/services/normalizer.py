from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from ..models.row_data import NormalizedRow

"""Row normalization: slugged worksheet row -> NormalizedRow.

This stage never fails. It only shapes cell values for the validators:
text is trimmed, blanks become "", the included flag is upper-cased and
numeric cells are passed through untouched (strings are trimmed).
"""

__all__ = [
    "normalize_row",
]

# NormalizedRow field -> worksheet column slug
DIMENSION_COLUMNS = {
    "width": "width_m",
    "length": "length_m",
    "height": "height_m",
}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def _text(value: Any) -> str:
    if _is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        # numeric id cells come back from the decoder as 1.0
        return str(int(value))
    return str(value).strip()


def _raw_number(value: Any) -> Any:
    if _is_blank(value):
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


def normalize_row(raw: Mapping[str, Any]) -> NormalizedRow:
    """Build the canonical record for one data row.

    Args:
        raw: Column slug -> cell value (see excel.reader.REQUIRED_COLUMNS)

    Returns:
        NormalizedRow with every field present
    """
    dims = {
        name: _raw_number(raw.get(column, raw.get(name)))
        for name, column in DIMENSION_COLUMNS.items()
    }
    return NormalizedRow(
        element_id=_text(raw.get("element_id")),
        element_type=_text(raw.get("element_type")),
        element_name=_text(raw.get("element_name")),
        category=_text(raw.get("category")),
        width=dims["width"],
        length=dims["length"],
        height=dims["height"],
        particular_description=_text(raw.get("particular_description")),
        unit=_text(raw.get("unit")),
        quantity=_raw_number(raw.get("quantity")),
        included=_text(raw.get("included")).upper(),
        notes=_text(raw.get("notes")),
    )
