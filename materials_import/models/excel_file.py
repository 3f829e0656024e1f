from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from .import_report import ImportReport

"""ExcelFile domain model and FileStatus enum.

ExcelFile is the processing context for one uploaded workbook, tracking its
status from discovery to a final outcome.
"""


class FileStatus(Enum):
    """Lifecycle of one uploaded workbook.

    State transitions: pending → processing → (success | invalid | failed)

    - SUCCESS: sheet parsed without errors (and persisted when requested)
    - INVALID: sheet parsed but the report holds row errors; nothing persisted
    - FAILED: sheet could not be read, or persistence was rolled back
    """
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    INVALID = "invalid"
    FAILED = "failed"


@dataclass(frozen=True)
class ExcelFile:
    path: Path
    name: str
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: FileStatus = FileStatus.PENDING
    report: ImportReport | None = None
    persisted_elements: int = 0
    preview_path: Path | None = None
    error: str | None = None  # Failure reason summary

    @property
    def elapsed_seconds(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()
