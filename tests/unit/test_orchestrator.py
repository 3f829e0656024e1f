from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from materials_import.config.loader import load_config
from materials_import.db.persist import PersistError, PersistResult
from materials_import.services import orchestrator
from materials_import.services.orchestrator import ProcessingError, process_all, scan_excel_files


def _issue_lines(workdir: Path) -> list[dict]:
    logs = list((workdir / "logs").glob("issues-*.log"))
    assert len(logs) == 1
    return [json.loads(x) for x in logs[0].read_text(encoding="utf-8").splitlines()]


def test_scan_excel_files_sorted_and_filtered(tmp_path: Path):
    for name in ("b.xlsx", "a.xlsx", "~$a.xlsx", "notes.txt", "old.xls"):
        (tmp_path / name).write_bytes(b"x")
    (tmp_path / "nested.xlsx").mkdir()

    assert [p.name for p in scan_excel_files(tmp_path)] == ["a.xlsx", "b.xlsx"]


def test_scan_excel_files_missing_directory(tmp_path: Path):
    with pytest.raises(ProcessingError, match="Directory not found"):
        scan_excel_files(tmp_path / "nope")


def test_preview_mode_success(temp_workdir: Path, write_config: Path, make_materials_workbook, valid_rows):
    make_materials_workbook("stage.xlsx", valid_rows)

    result = process_all(load_config(write_config))

    assert result.success_files == 1
    assert result.total_elements == 2
    assert result.total_materials == 3
    assert result.total_errors == 0
    preview = json.loads((temp_workdir / "reports" / "stage.preview.json").read_text(encoding="utf-8"))
    assert preview["file"] == "stage.xlsx"
    assert preview["sheet"] == "Materials Data"
    assert [e["id"] for e in preview["elements"]] == ["E001", "E002"]
    # nothing to report -> no issue log file
    assert list((temp_workdir / "logs").iterdir()) == []


def test_invalid_workbook_is_reported_not_failed(temp_workdir: Path, write_config: Path, make_materials_workbook,
                                                 valid_rows, invalid_rows):
    make_materials_workbook("a_good.xlsx", valid_rows)
    make_materials_workbook("b_bad.xlsx", invalid_rows)

    result = process_all(load_config(write_config))

    assert result.success_files == 1
    assert result.invalid_files == 1
    assert result.failed_files == 0
    assert result.total_errors == 3
    records = _issue_lines(temp_workdir)
    assert {r["file"] for r in records} == {"b_bad.xlsx"}
    assert [r["row"] for r in records] == [2, 3, 3]
    assert (temp_workdir / "reports" / "b_bad.preview.json").exists()


def test_unreadable_workbook_fails_and_run_continues(temp_workdir: Path, write_config: Path,
                                                     make_materials_workbook, valid_rows):
    (temp_workdir / "data" / "a_broken.xlsx").write_bytes(b"not a zip file")
    make_materials_workbook("b_good.xlsx", valid_rows)

    result = process_all(load_config(write_config))

    assert result.failed_files == 1
    assert result.success_files == 1
    (record,) = _issue_lines(temp_workdir)
    assert record["file"] == "a_broken.xlsx"
    assert record["row"] == -1
    assert record["severity"] == "error"
    assert record["message"].startswith("unreadable workbook")


def test_missing_columns_fail_the_file(temp_workdir: Path, write_config: Path, workbook_writer):
    workbook_writer(temp_workdir / "data" / "x.xlsx", {"Materials Data": [["Element ID"], ["E001"]]})

    result = process_all(load_config(write_config))

    assert result.failed_files == 1
    (record,) = _issue_lines(temp_workdir)
    assert record["sheet"] == "Materials Data"
    assert "missing columns" in record["message"]


def test_commit_path_wraps_each_file_in_transaction(temp_workdir: Path, write_config: Path,
                                                    make_materials_workbook, valid_rows):
    make_materials_workbook("stage.xlsx", valid_rows)
    cursor = MagicMock()

    with patch("materials_import.services.orchestrator.persist_report",
               return_value=PersistResult(task_materials_data_id=1, elements=2, materials=3)) as persist:
        result = process_all(load_config(write_config), cursor=cursor, task_id=42)

    assert result.success_files == 1
    assert result.file_stats[0].persisted_elements == 2
    assert persist.call_args.args[:2] == (cursor, 42)
    assert [c.args[0] for c in cursor.execute.call_args_list] == ["BEGIN", "COMMIT"]


def test_commit_failure_rolls_back(temp_workdir: Path, write_config: Path, make_materials_workbook, valid_rows):
    make_materials_workbook("stage.xlsx", valid_rows)
    cursor = MagicMock()

    with patch("materials_import.services.orchestrator.persist_report", side_effect=PersistError("insert failed")):
        result = process_all(load_config(write_config), cursor=cursor, task_id=42)

    assert result.failed_files == 1
    assert [c.args[0] for c in cursor.execute.call_args_list] == ["BEGIN", "ROLLBACK"]
    (record,) = _issue_lines(temp_workdir)
    assert record["message"] == "insert failed"


def test_invalid_workbook_is_never_persisted(temp_workdir: Path, write_config: Path,
                                             make_materials_workbook, invalid_rows):
    make_materials_workbook("bad.xlsx", invalid_rows)
    cursor = MagicMock()

    with patch("materials_import.services.orchestrator.persist_report") as persist:
        result = process_all(load_config(write_config), cursor=cursor, task_id=42)

    assert result.invalid_files == 1
    persist.assert_not_called()
    cursor.execute.assert_not_called()


def test_cursor_without_task_id_is_preview_only(temp_workdir: Path, write_config: Path,
                                                make_materials_workbook, valid_rows):
    make_materials_workbook("stage.xlsx", valid_rows)
    cursor = MagicMock()

    with patch("materials_import.services.orchestrator.persist_report") as persist:
        result = process_all(load_config(write_config), cursor=cursor)

    assert result.success_files == 1
    persist.assert_not_called()


def test_preview_write_failure_fails_only_that_file(temp_workdir: Path, write_config: Path,
                                                    make_materials_workbook, valid_rows):
    make_materials_workbook("a.xlsx", valid_rows)
    make_materials_workbook("b.xlsx", valid_rows)

    real_write_preview = orchestrator.write_preview

    def flaky_write_preview(report_directory, source, sheet_name, report):
        if source.name == "a.xlsx":
            raise PermissionError("read-only report directory")
        return real_write_preview(report_directory, source, sheet_name, report)

    with patch("materials_import.services.orchestrator.write_preview", side_effect=flaky_write_preview):
        result = process_all(load_config(write_config))

    assert result.failed_files == 1
    assert result.success_files == 1
    assert (temp_workdir / "reports" / "b.preview.json").exists()
    (record,) = _issue_lines(temp_workdir)
    assert record["file"] == "a.xlsx"
    assert record["row"] == -1
    assert record["message"] == "failed to write preview: read-only report directory"
