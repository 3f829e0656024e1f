from __future__ import annotations

from ..models.import_report import ImportReport
from ..models.processing_result import ProcessingResult

"""SUMMARY line and per-file report rendering."""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # avoid scientific notation for very small values
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ProcessingResult) -> str:
    """Render the run SUMMARY line.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2025, 1, 1, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=1, invalid_files=0, failed_files=0, total_elements=2,
        ...     total_materials=3, total_errors=0, total_warnings=0,
        ...     start_time=t, end_time=t, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=1/1 success=1 invalid=0 failed=0 elements=2 materials=3 errors=0 warnings=0 elapsed_sec=2'
    """
    total = result.total_files
    return (
        f"SUMMARY files={total}/{total} "
        f"success={result.success_files} "
        f"invalid={result.invalid_files} "
        f"failed={result.failed_files} "
        f"elements={result.total_elements} "
        f"materials={result.total_materials} "
        f"errors={result.total_errors} "
        f"warnings={result.total_warnings} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )


def render_report_lines(file_name: str, report: ImportReport) -> list[str]:
    """Human readable preview lines for one workbook: counters, then one line per issue."""
    stats = report.stats
    lines = [
        f"{file_name}: elements={stats.total_elements} materials={stats.total_materials} "
        f"errors={stats.total_errors} warnings={stats.total_warnings}"
    ]
    lines.extend(f"  row {i.row}: error: {i.message}" for i in report.errors)
    lines.extend(f"  row {i.row}: warning: {i.message}" for i in report.warnings)
    return lines
