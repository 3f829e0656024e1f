from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..db.persist import PersistError, persist_report
from ..excel.reader import (
    MissingColumnsError,
    SheetHeaderError,
    SheetNotFoundError,
    normalize_sheet,
    read_materials_sheet,
)
from ..logging.issue_log import IssueLogBuffer, IssueLogRecord
from ..models.config_models import ImportConfig
from ..models.excel_file import ExcelFile, FileStatus
from ..models.import_report import ImportReport
from ..models.processing_result import FileStat, ProcessingResult
from .continuation_parser import parse_numbered_rows
from .progress import ProgressTracker
from .summary import render_report_lines

"""Run orchestration for the materials template importer.

For every workbook in the source directory: decode the materials sheet, parse
it into an ImportReport, log its issues, write the preview JSON and, when a
database cursor and a target task are given, persist a clean report inside
its own transaction. One bad workbook never stops the run.
"""

__all__ = [
    "ProcessingError",
    "scan_excel_files",
    "import_workbook",
    "write_preview",
    "process_all",
]

logger = logging.getLogger(__name__)

FILE_LEVEL_ROW = -1


class ProcessingError(Exception):
    """Fatal problem that prevents the run from starting."""


def scan_excel_files(directory: Path) -> list[Path]:
    """Return .xlsx files in directory (non-recursive, sorted by name).

    Office lock files (~$name.xlsx) are ignored.

    Raises:
        ProcessingError: directory missing, not a directory, or unreadable
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix == ".xlsx" and not p.name.startswith("~$")
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def import_workbook(path: Path, sheet_name: str) -> ImportReport:
    """Decode and parse one workbook.

    Raises:
        SheetNotFoundError, SheetHeaderError, MissingColumnsError
    """
    df = read_materials_sheet(path, sheet_name)
    sheet = normalize_sheet(df, sheet_name)
    return parse_numbered_rows((r.row_number, r.values) for r in sheet.rows)


def write_preview(report_directory: Path, source: Path, sheet_name: str, report: ImportReport) -> Path:
    report_directory.mkdir(parents=True, exist_ok=True)
    out = report_directory / f"{source.stem}.preview.json"
    payload = {"file": source.name, "sheet": sheet_name, **report.to_dict()}
    out.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return out


def process_all(config: ImportConfig, cursor: Any = None, task_id: int | None = None) -> ProcessingResult:
    """Import every workbook in config.source_directory.

    Args:
        config: Import configuration
        cursor: Database cursor; None = preview only
        task_id: Enquiry task receiving the elements (required to persist)

    Raises:
        ProcessingError: source directory cannot be scanned
    """
    start_time = datetime.now(UTC)
    issue_log = IssueLogBuffer(config.log_directory)
    file_paths = scan_excel_files(Path(config.source_directory))

    if cursor is not None and task_id is None:
        logger.warning("database cursor given without task id -> preview only")

    file_stats: list[FileStat] = []
    with ProgressTracker(len(file_paths)) as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            result = _process_single_file(file_path, config, cursor, task_id, issue_log)
            stat = _file_stat(result)
            file_stats.append(stat)
            progress.finish_file(elements=stat.elements, errors=stat.errors)

    try:
        log_path = issue_log.flush()
        if log_path is not None:
            logger.info(f"issue log written: {log_path}")
    except OSError as e:
        # the previews are already on disk; a missing issue log is not fatal
        logger.warning(f"failed to write issue log: {e}")

    return ProcessingResult.from_file_stats(file_stats, start_time, datetime.now(UTC))


def _file_stat(result: ExcelFile) -> FileStat:
    stats = result.report.stats if result.report is not None else None
    return FileStat(
        file_name=result.name,
        status=result.status.value,
        elements=stats.total_elements if stats else 0,
        materials=stats.total_materials if stats else 0,
        errors=stats.total_errors if stats else 0,
        warnings=stats.total_warnings if stats else 0,
        elapsed_seconds=result.elapsed_seconds,
        persisted_elements=result.persisted_elements,
    )


def _failed(file_path: Path, start_time: datetime, error: str, report: ImportReport | None = None,
            preview_path: Path | None = None) -> ExcelFile:
    return ExcelFile(
        path=file_path,
        name=file_path.name,
        start_time=start_time,
        end_time=datetime.now(UTC),
        status=FileStatus.FAILED,
        report=report,
        preview_path=preview_path,
        error=error,
    )


def _process_single_file(
    file_path: Path,
    config: ImportConfig,
    cursor: Any,
    task_id: int | None,
    issue_log: IssueLogBuffer,
) -> ExcelFile:
    start_time = datetime.now(UTC)
    sheet_name = config.sheet_name

    try:
        report = import_workbook(file_path, sheet_name)
    except (SheetNotFoundError, SheetHeaderError, MissingColumnsError) as e:
        logger.error(f"{file_path.name}: {e}")
        issue_log.append(IssueLogRecord.create(file_path.name, sheet_name, FILE_LEVEL_ROW, "error", str(e)))
        return _failed(file_path, start_time, str(e))
    except Exception as e:
        # corrupt or non-xlsx content
        logger.error(f"{file_path.name}: unreadable workbook: {e}")
        issue_log.append(
            IssueLogRecord.create(file_path.name, "<FILE_LEVEL>", FILE_LEVEL_ROW, "error", f"unreadable workbook: {e}")
        )
        return _failed(file_path, start_time, f"unreadable workbook: {e}")

    issue_log.extend_from_report(file_path.name, sheet_name, report)
    try:
        preview_path = write_preview(Path(config.report_directory), file_path, sheet_name, report)
    except OSError as e:
        message = f"failed to write preview: {e}"
        logger.error(f"{file_path.name}: {message}")
        issue_log.append(IssueLogRecord.create(file_path.name, sheet_name, FILE_LEVEL_ROW, "error", message))
        return _failed(file_path, start_time, message, report)
    stats = report.stats
    counters, *issue_lines = render_report_lines(file_path.name, report)
    logger.info(counters)
    for line in issue_lines:
        logger.debug(line)

    if report.has_errors:
        if cursor is not None:
            logger.warning(f"{file_path.name}: not persisted, fix the reported rows and re-upload")
        return ExcelFile(
            path=file_path,
            name=file_path.name,
            start_time=start_time,
            end_time=datetime.now(UTC),
            status=FileStatus.INVALID,
            report=report,
            preview_path=preview_path,
            error=f"{stats.total_errors} row error(s)",
        )

    persisted = 0
    if cursor is not None and task_id is not None:
        try:
            cursor.execute("BEGIN")
            result = persist_report(cursor, task_id, report)
            cursor.execute("COMMIT")
            persisted = result.elements
            logger.info(f"{file_path.name}: persisted {result.elements} element(s) to task {task_id}")
        except Exception as e:
            try:
                cursor.execute("ROLLBACK")
            except Exception as rollback_e:
                issue_log.append(
                    IssueLogRecord.create(
                        file_path.name, "<FILE_LEVEL>", FILE_LEVEL_ROW, "error", f"rollback failed: {rollback_e}"
                    )
                )
            message = str(e) if isinstance(e, PersistError) else f"persistence failed: {e}"
            logger.error(f"{file_path.name}: {message} (transaction rolled back)")
            issue_log.append(IssueLogRecord.create(file_path.name, sheet_name, FILE_LEVEL_ROW, "error", message))
            return _failed(file_path, start_time, message, report, preview_path)

    return ExcelFile(
        path=file_path,
        name=file_path.name,
        start_time=start_time,
        end_time=datetime.now(UTC),
        status=FileStatus.SUCCESS,
        report=report,
        persisted_elements=persisted,
        preview_path=preview_path,
    )
