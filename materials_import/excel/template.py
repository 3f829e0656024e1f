from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.worksheet.datavalidation import DataValidation
from openpyxl.worksheet.worksheet import Worksheet

from ..models.config_models import DEFAULT_SHEET_NAME
from ..models.vocabulary import Category, ElementType, Included, Unit

"""Upload template export.

Writes the workbook users fill in and upload back: an Instructions sheet, a
read-only Project Info sheet and the Materials Data sheet with sample rows and
dropdown validations. Sheets are written with pandas and styled with openpyxl.
"""

__all__ = [
    "ProjectInfo",
    "MATERIALS_HEADINGS",
    "write_template",
]

MATERIALS_HEADINGS = [
    "Element ID",
    "Element Type",
    "Element Name",
    "Category",
    "Width (m)",
    "Length (m)",
    "Height (m)",
    "Particular Description",
    "Unit",
    "Quantity",
    "Included",
    "Notes",
]

COLUMN_WIDTHS = {
    "A": 12, "B": 15, "C": 25, "D": 12, "E": 10, "F": 10,
    "G": 10, "H": 30, "I": 10, "J": 10, "K": 10, "L": 20,
}

# Rows 2..VALIDATION_LAST_ROW receive dropdown validations
VALIDATION_LAST_ROW = 200

_ = None  # blank cell in the sample rows below
SAMPLE_ROWS = [
    ["E001", "stage", "Main Stage (SAMPLE)", "production", 6, 8, 0.6, "Stage Boards", "Pcs", 8, "YES", "Delete this sample data"],
    [_, _, _, _, _, _, _, "Stage Legs", "Pcs", 16, "YES", _],
    [_, _, _, _, _, _, _, "Stage Screws", "Pcs", 32, "YES", _],
    [_, _, _, _, _, _, _, "Carpet", "sqm", 48, "YES", _],
    ["E002", "backdrop", "Backdrop 1 (SAMPLE)", "hire", 3, 4, 0, "Fabric", "Mtrs", 12, "YES", "Delete this sample data"],
    [_, _, _, _, _, _, _, "Frame", "Pcs", 4, "YES", _],
    [_, _, _, _, _, _, _, "Clips", "Pcs", 20, "YES", _],
    [_, _, _, _, _, _, _, _, _, _, _, "Add your data here →"],
]

INSTRUCTIONS = [
    "HOW TO USE THIS TEMPLATE",
    "",
    f'STEP 1: Go to "{DEFAULT_SHEET_NAME}" sheet',
    "",
    "STEP 2: Fill in your materials using the Empty Cell Continuation method:",
    "  • First row of each element: Fill ALL element columns + first particular",
    "  • Additional particulars: LEAVE element columns EMPTY, fill only particular columns",
    "  • Start new element: Fill ALL element columns again with new Element ID",
    "",
    "EXAMPLE:",
    "Row 1: E001 | stage | Main Stage | production | 6 | 8 | 0.6 | Stage Boards | Pcs | 8 | YES",
    "Row 2: [empty cells for element] | Stage Legs | Pcs | 16 | YES",
    "Row 3: [empty cells for element] | Stage Screws | Pcs | 32 | YES",
    "Row 4: E002 | backdrop | Backdrop 1 | hire | 3 | 4 | 0 | Fabric | Mtrs | 12 | YES",
    "",
    "IMPORTANT RULES:",
    "✓ Element ID must be unique (E001, E002, E003...)",
    "✓ Each element needs at least 1 particular",
    "✓ Use dropdown values where provided",
    "✓ Quantities must be greater than 0",
    "✓ First data row MUST be an element header",
    "",
    "TIPS:",
    "• Copy and paste rows to duplicate similar elements",
    "• Use Excel row grouping to collapse/expand elements",
    "• Delete sample data before adding your own",
    "• Save file before uploading",
    "",
    "FIELD DESCRIPTIONS:",
    "",
    "Element ID: Unique identifier (E001, E002, etc.)",
    "Element Type: Type from dropdown (stage, backdrop, skirting, etc.)",
    "Element Name: Your custom name for the element",
    "Category: production, hire, or outsourced",
    "Width/Length/Height: Dimensions in meters (can be 0)",
    "",
    "Particular Description: Name of the material/component",
    "Unit: Unit of measurement from dropdown",
    "Quantity: Amount needed (must be > 0)",
    "Included: YES or NO",
    "Notes: Optional additional information",
]
INSTRUCTION_SECTION_ROWS = (3, 10, 16, 23, 29)

TITLE_FILL = PatternFill(fill_type="solid", start_color="1F4788", end_color="1F4788")
SAMPLE_FILL = PatternFill(fill_type="solid", start_color="FFF2CC", end_color="FFF2CC")
ELEMENT_ROW_FILL = PatternFill(fill_type="solid", start_color="D9E1F2", end_color="D9E1F2")
VALUE_FILL = PatternFill(fill_type="solid", start_color="E7E6E6", end_color="E7E6E6")
TITLE_FONT = Font(bold=True, size=14, color="FFFFFF")
THIN = Side(style="thin", color="CCCCCC")


@dataclass(frozen=True)
class ProjectInfo:
    """Project details printed on the read-only Project Info sheet."""
    enquiry_number: str | None = None
    title: str | None = None
    client_name: str | None = None
    venue: str | None = None
    expected_delivery_date: str | None = None

    def rows(self, generated_at: datetime) -> list[list[str]]:
        def _v(value: str | None) -> str:
            return value if value else "N/A"

        return [
            ["PROJECT INFORMATION", ""],
            ["", ""],
            ["Enquiry Number:", _v(self.enquiry_number)],
            ["Project Title:", _v(self.title)],
            ["Client Name:", _v(self.client_name)],
            ["Venue:", _v(self.venue)],
            ["Expected Delivery Date:", _v(self.expected_delivery_date)],
            ["", ""],
            ["Template Generated:", generated_at.strftime("%Y-%m-%d %H:%M:%S")],
            ["", ""],
            [f'NOTE: This information is read-only. Fill your materials in the "{DEFAULT_SHEET_NAME}" sheet.', ""],
        ]


def _list_validation(values: list[str], prompt: str, allow_blank: bool) -> DataValidation:
    dv = DataValidation(
        type="list",
        formula1=f'"{",".join(values)}"',
        allow_blank=allow_blank,
        errorStyle="stop",
        showDropDown=False,  # openpyxl: False means the in-cell arrow is shown
    )
    dv.prompt = prompt
    dv.showInputMessage = True
    return dv


def _style_instructions(ws: Worksheet) -> None:
    ws["A1"].font = TITLE_FONT
    ws["A1"].fill = TITLE_FILL
    ws["A1"].alignment = Alignment(horizontal="left", vertical="center")
    for row in INSTRUCTION_SECTION_ROWS:
        ws[f"A{row}"].font = Font(bold=True, size=11)
    ws.column_dimensions["A"].width = 90
    ws.protection.sheet = True


def _style_project_info(ws: Worksheet) -> None:
    ws["A1"].font = TITLE_FONT
    ws["A1"].fill = TITLE_FILL
    for row in range(3, 10):
        ws[f"A{row}"].font = Font(bold=True)
        ws[f"B{row}"].fill = VALUE_FILL
    ws.column_dimensions["A"].width = 28
    ws.column_dimensions["B"].width = 40
    ws.protection.sheet = True


def _style_materials(ws: Worksheet) -> None:
    for letter, width in COLUMN_WIDTHS.items():
        ws.column_dimensions[letter].width = width

    for row in ws.iter_rows(min_row=1, max_row=VALIDATION_LAST_ROW, max_col=len(MATERIALS_HEADINGS)):
        for cell in row:
            cell.border = Border(left=THIN, right=THIN, top=THIN, bottom=THIN)

    for cell in ws[1]:
        cell.font = Font(bold=True, color="FFFFFF", size=11)
        cell.fill = TITLE_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center")

    # sample rows: yellow, element header rows bold on blue
    for row_idx, sample in enumerate(SAMPLE_ROWS[:-1], start=2):
        is_header = sample[0] is not None
        for cell in ws[row_idx]:
            cell.fill = ELEMENT_ROW_FILL if is_header else SAMPLE_FILL
            if is_header:
                cell.font = Font(bold=True)

    last = VALIDATION_LAST_ROW
    for column, values, prompt, allow_blank in (
        ("B", ElementType.values(), "Select element type from list", True),
        ("D", Category.values(), "Select category", True),
        ("I", Unit.values(), "Select unit of measurement", False),
        ("K", Included.values(), "Is this included?", False),
    ):
        dv = _list_validation(values, prompt, allow_blank)
        ws.add_data_validation(dv)
        dv.add(f"{column}2:{column}{last}")

    ws.freeze_panes = "A2"


def write_template(
    path: Path,
    project_info: ProjectInfo | None = None,
    generated_at: datetime | None = None,
) -> Path:
    """Write the upload template workbook to path and return it."""
    info = project_info or ProjectInfo()
    stamp = generated_at or datetime.now()
    path.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame([[line] for line in INSTRUCTIONS]).to_excel(
            writer, sheet_name="Instructions", header=False, index=False
        )
        pd.DataFrame(info.rows(stamp)).to_excel(
            writer, sheet_name="Project Info", header=False, index=False
        )
        pd.DataFrame(SAMPLE_ROWS, columns=MATERIALS_HEADINGS).to_excel(
            writer, sheet_name=DEFAULT_SHEET_NAME, index=False
        )
        _style_instructions(writer.sheets["Instructions"])
        _style_project_info(writer.sheets["Project Info"])
        _style_materials(writer.sheets[DEFAULT_SHEET_NAME])
    return path
