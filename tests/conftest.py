# Shared pytest fixtures
from __future__ import annotations
import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from materials_import.excel.template import MATERIALS_HEADINGS


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
sheet_name: Materials Data
report_directory: ./reports
log_directory: ./logs
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def write_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write a workbook whose sheets are given as raw rows (first row = headings)."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def make_materials_workbook(temp_workdir: Path) -> Callable[..., Path]:
    """Create data/<name> with a "Materials Data" sheet holding the given data rows."""
    def _make(name: str, data_rows: list[list[object]], sheet_name: str = "Materials Data") -> Path:
        return write_workbook(
            temp_workdir / "data" / name,
            {sheet_name: [list(MATERIALS_HEADINGS), *data_rows]},
        )
    return _make


# Data rows in template column order:
# id, type, name, category, width, length, height, description, unit, quantity, included, notes
@pytest.fixture()
def valid_rows() -> list[list[object]]:
    return [
        ["E001", "stage", "Main Stage", "production", 6, 8, 0.6, "Stage Boards", "Pcs", 8, "YES", None],
        [None, None, None, None, None, None, None, "Stage Legs", "Pcs", 16, "YES", None],
        ["E002", "backdrop", "Backdrop 1", "hire", 3, 4, 0, "Fabric", "Mtrs", 12, "YES", None],
    ]


@pytest.fixture()
def invalid_rows() -> list[list[object]]:
    return [
        [None, None, None, None, None, None, None, "Loose Cable", "Pcs", 3, "YES", None],
        ["E001", "lighting", "Wash Lights", "rental", 0, 0, 0, "Par Cans", "Pcs", 12, "YES", None],
    ]


@pytest.fixture()
def workbook_writer() -> Callable[[Path, dict[str, list[list[object]]]], Path]:
    return write_workbook
