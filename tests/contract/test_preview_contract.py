from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest

from materials_import.models.element import Dimensions, Element, Particular
from materials_import.models.import_report import ImportReport
from materials_import.models.row_issue import RowIssue
from materials_import.services.orchestrator import write_preview

"""Preview JSON contract (what the upload preview screen consumes)."""

ISSUE = {
    "type": "object",
    "additionalProperties": False,
    "required": ["row", "message"],
    "properties": {"row": {"type": "integer"}, "message": {"type": "string"}},
}

PARTICULAR = {
    "type": "object",
    "additionalProperties": False,
    "required": ["description", "unit", "quantity", "included", "notes", "row_number"],
    "properties": {
        "description": {"type": "string", "minLength": 1},
        "unit": {"type": "string", "minLength": 1},
        "quantity": {"type": "number", "exclusiveMinimum": 0},
        "included": {"type": "boolean"},
        "notes": {"type": "string"},
        "row_number": {"type": "integer", "minimum": 2},
    },
}

ELEMENT = {
    "type": "object",
    "additionalProperties": False,
    "required": ["id", "type", "name", "category", "dimensions", "particulars", "row_number"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "type": {"type": "string"},
        "name": {"type": "string"},
        "category": {"type": "string"},
        "dimensions": {
            "type": "object",
            "additionalProperties": False,
            "required": ["width", "length", "height"],
            "properties": {
                "width": {"type": "number"},
                "length": {"type": "number"},
                "height": {"type": "number"},
            },
        },
        "particulars": {"type": "array", "minItems": 1, "items": PARTICULAR},
        "row_number": {"type": "integer", "minimum": 2},
    },
}

COUNTER = {"type": "integer", "minimum": 0}

PREVIEW_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "required": ["file", "sheet", "elements", "stats", "errors", "warnings"],
    "properties": {
        "file": {"type": "string"},
        "sheet": {"type": "string"},
        "elements": {"type": "array", "items": ELEMENT},
        "stats": {
            "type": "object",
            "additionalProperties": False,
            "required": ["total_elements", "total_materials", "total_errors", "total_warnings"],
            "properties": {
                "total_elements": COUNTER,
                "total_materials": COUNTER,
                "total_errors": COUNTER,
                "total_warnings": COUNTER,
            },
        },
        "errors": {"type": "array", "items": ISSUE},
        "warnings": {"type": "array", "items": ISSUE},
    },
}


def test_preview_file_matches_contract(tmp_path: Path):
    report = ImportReport(
        elements=(
            Element(
                id="E001", type="stage", name="Main Stage", category="production",
                dimensions=Dimensions(6.0, 8.0, 0.6),
                particulars=(Particular("Stage Boards", "Pcs", 8.0, source_row=2),),
                source_row=2,
            ),
        ),
        errors=(),
        warnings=(RowIssue(2, "Unknown unit: 'boxes'. Will be accepted as custom unit."),),
    )
    out = write_preview(tmp_path / "reports", Path("data/stage.xlsx"), "Materials Data", report)

    assert out.name == "stage.preview.json"
    jsonschema.validate(json.loads(out.read_text(encoding="utf-8")), PREVIEW_SCHEMA)


def test_contract_rejects_unknown_stats_key(tmp_path: Path):
    report = ImportReport(elements=(), errors=(RowIssue(2, "bad"),), warnings=())
    out = write_preview(tmp_path, Path("bad.xlsx"), "Materials Data", report)
    payload = json.loads(out.read_text(encoding="utf-8"))
    jsonschema.validate(payload, PREVIEW_SCHEMA)

    payload["stats"]["throughput"] = 1
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(payload, PREVIEW_SCHEMA)
