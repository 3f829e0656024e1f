from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the materials template importer.

Built by materials_import.config.loader after schema validation; defaults here
match the defaults documented in config_schema.json.
"""

DEFAULT_SHEET_NAME = "Materials Data"


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for an import run."""
    source_directory: str  # Directory scanned for .xlsx uploads
    sheet_name: str = DEFAULT_SHEET_NAME  # Worksheet holding the element rows
    report_directory: str = "./reports"  # Preview JSON output
    log_directory: str = "./logs"  # JSON Lines issue log
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
