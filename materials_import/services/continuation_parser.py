from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from functools import reduce
from typing import Any, Union

from ..models.element import Dimensions, Element, Particular
from ..models.import_report import ImportReport
from ..models.row_data import NormalizedRow
from ..models.vocabulary import Included, to_float
from .normalizer import normalize_row
from .report_builder import ReportDraft, build_report
from .validators import validate_header, validate_particular

"""Continuation-row parser for the "Materials Data" sheet.

Sheet authors list an element's first material on the same row as the element
columns, then leave the element columns empty on following rows to add more
materials. A row supplying a non-empty element id always closes the element
that is currently open and starts a new one.

The walk is a fold over (row_number, row) pairs carrying an immutable
(state, draft) pair, so every call is independent of any other call.

States:
    NoActiveElement -> header row (valid)   -> ActiveElement
    ActiveElement   -> header row            -> finalize, then as above
    ActiveElement   -> particular row        -> ActiveElement (+1 particular)
    any             -> end of rows           -> finalize -> NoActiveElement
"""

__all__ = [
    "NoActiveElement",
    "ActiveElement",
    "FIRST_DATA_ROW",
    "finalize",
    "step",
    "parse_rows",
    "parse_numbered_rows",
]

logger = logging.getLogger(__name__)

# Row 1 of the worksheet holds the column headings.
FIRST_DATA_ROW = 2

ORPHAN_PARTICULAR_MESSAGE = "Particular found without element header. Fill element columns first."


@dataclass(frozen=True)
class NoActiveElement:
    pass


@dataclass(frozen=True)
class ActiveElement:
    element: Element


ParserState = Union[NoActiveElement, ActiveElement]
Accumulator = tuple[ParserState, ReportDraft]

NO_ACTIVE_ELEMENT = NoActiveElement()


def _start_element(row_number: int, row: NormalizedRow) -> Element:
    return Element(
        id=row.element_id,
        type=row.element_type,
        name=row.element_name,
        category=row.category,
        dimensions=Dimensions(
            width=to_float(row.width),
            length=to_float(row.length),
            height=to_float(row.height),
        ),
        particulars=(),
        source_row=row_number,
    )


def _make_particular(row_number: int, row: NormalizedRow) -> Particular:
    return Particular(
        description=row.particular_description,
        unit=row.unit,
        quantity=to_float(row.quantity),
        included=Included.flag(row.included),
        notes=row.notes,
        source_row=row_number,
    )


def finalize(state: ParserState, draft: ReportDraft) -> Accumulator:
    """Close the active element, if any.

    An element that collected no particulars is dropped and reported against
    the row that declared it.
    """
    if isinstance(state, ActiveElement):
        element = state.element
        if element.particulars:
            draft = draft.with_element(element)
        else:
            draft = draft.with_error(
                element.source_row, f"Element '{element.id}' has no particulars/materials"
            )
    return NO_ACTIVE_ELEMENT, draft


def step(acc: Accumulator, numbered_row: tuple[int, Mapping[str, Any]]) -> Accumulator:
    """Apply one worksheet row to the (state, draft) pair."""
    state, draft = acc
    row_number, raw = numbered_row
    row = normalize_row(raw)

    if row.has_element_id:
        # flush first: a bad header must not affect the element before it
        state, draft = finalize(state, draft)
        header = validate_header(row_number, row)
        draft = draft.with_result(header)
        if header.valid:
            state = ActiveElement(_start_element(row_number, row))

    if row.has_particular:
        if isinstance(state, NoActiveElement):
            return state, draft.with_error(row_number, ORPHAN_PARTICULAR_MESSAGE)
        particular = validate_particular(row_number, row)
        draft = draft.with_result(particular)
        if particular.valid:
            state = ActiveElement(state.element.with_particular(_make_particular(row_number, row)))

    return state, draft


def parse_numbered_rows(rows: Iterable[tuple[int, Mapping[str, Any]]]) -> ImportReport:
    """Parse rows that already carry their worksheet row numbers.

    Rows must arrive in worksheet order.
    """
    state, draft = reduce(step, rows, (NO_ACTIVE_ELEMENT, ReportDraft()))
    _, draft = finalize(state, draft)
    report = build_report(draft)
    stats = report.stats
    logger.debug(
        "parsed elements=%d materials=%d errors=%d warnings=%d",
        stats.total_elements,
        stats.total_materials,
        stats.total_errors,
        stats.total_warnings,
    )
    return report


def parse_rows(rows: Iterable[Mapping[str, Any]], first_row: int = FIRST_DATA_ROW) -> ImportReport:
    """Parse data rows numbered consecutively from first_row (default 2)."""
    return parse_numbered_rows(enumerate(rows, start=first_row))
