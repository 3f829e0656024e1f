from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

from ..models.import_report import ImportReport
from ..models.row_issue import RowIssue

"""Row issue log (JSON Lines).

Every error and warning produced during a run is buffered and written once,
at the end of the run, to `<log_directory>/issues-YYYYMMDD-HHMMSS.log` (UTC).
Each line has exactly the keys timestamp, file, sheet, row, severity, message.
Row -1 marks a file-level problem (unreadable sheet, failed persistence).
"""

__all__ = [
    "IssueLogRecord",
    "IssueLogBuffer",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


@dataclass(frozen=True)
class IssueLogRecord:
    timestamp: str  # ISO8601 UTC with Z suffix
    file: str
    sheet: str
    row: int
    severity: str  # error / warning
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, severity: str, message: str) -> IssueLogRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return IssueLogRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            severity=severity,
            message=message,
        )

    @staticmethod
    def from_issue(file: str, sheet: str, issue: RowIssue, severity: str) -> IssueLogRecord:
        return IssueLogRecord.create(file, sheet, issue.row, severity, issue.message)

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)


class IssueLogBuffer:
    """In-memory buffer of issue records; flush() appends them as JSON Lines.

    The file path is chosen on first access. Not thread safe (runs are serial).
    """

    def __init__(self, log_directory: Path | str = "./logs") -> None:
        self._log_directory = Path(log_directory)
        self._records: list[IssueLogRecord] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._log_directory.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._log_directory / f"issues-{stamp}.log"
        return self._file_path

    def append(self, record: IssueLogRecord) -> None:
        self._records.append(record)

    def extend_from_report(self, file: str, sheet: str, report: ImportReport) -> None:
        for issue in report.errors:
            self.append(IssueLogRecord.from_issue(file, sheet, issue, "error"))
        for issue in report.warnings:
            self.append(IssueLogRecord.from_issue(file, sheet, issue, "warning"))

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the log path, or None when nothing was written."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
