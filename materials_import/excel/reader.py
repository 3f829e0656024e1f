from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.config_models import DEFAULT_SHEET_NAME
from ..models.row_data import RowData

"""Worksheet decoding for uploaded materials templates.

Row 1 of the materials sheet is the heading row; data starts on row 2. Heading
cells are slugged ("Width (m)" -> "width_m") so that the parser only ever sees
the canonical column keys. Blank rows between data rows are kept so row
numbers reported to the uploader match the worksheet.
"""

__all__ = [
    "REQUIRED_COLUMNS",
    "SheetData",
    "SheetHeaderError",
    "MissingColumnsError",
    "SheetNotFoundError",
    "slugify_header",
    "read_materials_sheet",
    "normalize_sheet",
]

REQUIRED_COLUMNS = (
    "element_id",
    "element_type",
    "element_name",
    "category",
    "width_m",
    "length_m",
    "height_m",
    "particular_description",
    "unit",
    "quantity",
    "included",
    "notes",
)


class SheetHeaderError(Exception):
    """Raised when the heading row (row 1) is missing."""


class MissingColumnsError(Exception):
    """Raised when required columns are missing from the heading row."""


class SheetNotFoundError(Exception):
    """Raised when the workbook has no usable materials sheet."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[RowData]  # data rows in worksheet order


def slugify_header(value: Any) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    text = unicodedata.normalize("NFKD", str(value)).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_")


def read_materials_sheet(path: Path, sheet_name: str = DEFAULT_SHEET_NAME) -> pd.DataFrame:
    """Read the materials sheet of a workbook as a raw DataFrame (no header applied).

    A single-sheet workbook is accepted whatever its sheet is called.
    Only empty cells are treated as missing; text such as "NA" is kept.
    """
    with pd.ExcelFile(path, engine="openpyxl") as xls:
        names = [str(n) for n in xls.sheet_names]
        if sheet_name in names:
            target = sheet_name
        elif len(names) == 1:
            target = names[0]
        else:
            raise SheetNotFoundError(f"workbook '{path.name}' has no sheet named '{sheet_name}'")
        return xls.parse(target, header=None, keep_default_na=False, na_values=[""])


def normalize_sheet(df: pd.DataFrame, sheet_name: str) -> SheetData:
    """Apply row 1 as heading row and number the remaining rows from 2.

    Raises:
        SheetHeaderError: the sheet is empty
        MissingColumnsError: a required column slug is absent
    """
    if df.shape[0] < 1:
        raise SheetHeaderError(f"sheet '{sheet_name}' has no heading row")
    columns = [slugify_header(c) for c in df.iloc[0].tolist()]
    missing = set(REQUIRED_COLUMNS) - set(columns)
    if missing:
        raise MissingColumnsError(f"sheet '{sheet_name}' missing columns: {sorted(missing)}")

    rows: list[RowData] = []
    for offset, (_, raw) in enumerate(df.iloc[1:].iterrows()):
        values: dict[str, Any] = {}
        for col, val in zip(columns, raw.tolist(), strict=False):
            if not col:
                continue  # unlabeled column
            values[col] = None if pd.isna(val) else val
        rows.append(RowData(row_number=offset + 2, values=values))
    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)
