"""Domain models for the materials template importer.

This package contains the domain model classes used throughout the
application: configuration, parsed elements, row issues and run results.
"""

from .config_models import DatabaseConfig, ImportConfig
from .element import Dimensions, Element, Particular
from .import_report import ImportReport, ImportStats
from .row_data import NormalizedRow, RowData
from .row_issue import RowIssue

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "ImportConfig",
    # Parse models
    "RowData",
    "NormalizedRow",
    "RowIssue",
    "Dimensions",
    "Particular",
    "Element",
    # Report models
    "ImportStats",
    "ImportReport",
]
