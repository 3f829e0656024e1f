from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models for an import run.

ProcessingResult aggregates the per-file outcomes into the counters printed on
the SUMMARY line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file statistics (one entry per workbook)."""
    file_name: str
    status: str  # success / invalid / failed
    elements: int
    materials: int
    errors: int
    warnings: int
    elapsed_seconds: float
    persisted_elements: int = 0


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results for the whole run."""
    success_files: int
    invalid_files: int
    failed_files: int
    total_elements: int
    total_materials: int
    total_errors: int
    total_warnings: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.invalid_files + self.failed_files

    @classmethod
    def from_file_stats(
        cls, file_stats: list[FileStat], start_time: datetime, end_time: datetime
    ) -> ProcessingResult:
        def _count(status: str) -> int:
            return sum(1 for s in file_stats if s.status == status)

        return cls(
            success_files=_count("success"),
            invalid_files=_count("invalid"),
            failed_files=_count("failed"),
            total_elements=sum(s.elements for s in file_stats),
            total_materials=sum(s.materials for s in file_stats),
            total_errors=sum(s.errors for s in file_stats),
            total_warnings=sum(s.warnings for s in file_stats),
            start_time=start_time,
            end_time=end_time,
            elapsed_seconds=(end_time - start_time).total_seconds(),
            file_stats=file_stats,
        )
