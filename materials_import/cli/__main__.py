from __future__ import annotations

import argparse
import os
import sys
from contextlib import contextmanager
from pathlib import Path

import psycopg2
from dotenv import load_dotenv

from materials_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from materials_import.excel.reader import normalize_sheet, read_materials_sheet
from materials_import.excel.template import ProjectInfo, write_template
from materials_import.logging.init import log_summary, set_debug, setup_logging
from materials_import.models.config_models import ImportConfig
from materials_import.services.orchestrator import ProcessingError, process_all, scan_excel_files
from materials_import.services.summary import render_summary_line

"""CLI entrypoint.

Default flow: load config, import every .xlsx in source_directory, write
preview JSON per workbook and print a SUMMARY line. --commit with --task-id
persists clean workbooks to PostgreSQL.
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _resolve_dsn(cfg: ImportConfig) -> str:
    """Connection string resolution order.

    1. DATABASE_URL / PGDSN (after .env has been loaded)
    2. individual PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. the database section of the config file
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _db_connection(cfg: ImportConfig):  # pragma: no cover (thin wrapper)
    """Yield a cursor; the orchestrator issues BEGIN/COMMIT/ROLLBACK per workbook."""
    conn = psycopg2.connect(_resolve_dsn(cfg))
    conn.autocommit = True  # explicit transaction statements only
    try:
        with conn.cursor() as cur:
            yield cur
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="materials-import",
        description="Import element/material workbooks built from the materials upload template",
    )
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config file (YAML)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet headers & first rows then exit")
    p.add_argument("--task-id", type=int, help="Enquiry task receiving the imported elements")
    p.add_argument("--commit", action="store_true", help="Persist clean workbooks (requires --task-id)")

    tpl = p.add_argument_group("template export")
    tpl.add_argument("--template", type=Path, metavar="OUT.xlsx", help="Write the upload template then exit")
    tpl.add_argument("--enquiry-number")
    tpl.add_argument("--project-title")
    tpl.add_argument("--client")
    tpl.add_argument("--venue")
    tpl.add_argument("--delivery-date")
    return p.parse_args(argv)


def _write_template(args: argparse.Namespace) -> int:
    info = ProjectInfo(
        enquiry_number=args.enquiry_number,
        title=args.project_title,
        client_name=args.client,
        venue=args.venue,
        expected_delivery_date=args.delivery_date,
    )
    path = write_template(args.template, info)
    print(f"template written: {path}")
    return EXIT_SUCCESS_ALL


def _inspect_data(cfg: ImportConfig) -> int:
    try:
        excel_files = scan_excel_files(Path(cfg.source_directory))
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not excel_files:
        print("inspect: no .xlsx files")
        return EXIT_SUCCESS_ALL
    for f in excel_files:
        print(f"FILE: {f.name}")
        try:
            sd = normalize_sheet(read_materials_sheet(f, cfg.sheet_name), cfg.sheet_name)
        except Exception as e:
            print(f"  error={e}")
            continue
        print(f"  SHEET: {sd.sheet_name} cols={sd.columns}")
        for row in sd.rows[:3]:
            print(f"    row {row.row_number}: {row.values}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] from tests must not pick up pytest's own argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.template is not None:
        return _write_template(args)

    if args.commit and args.task_id is None:
        logger.error("--commit requires --task-id")
        return EXIT_FATAL

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    directory = Path(cfg.source_directory)
    if not directory.exists():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg)

    logger.info(f"Processing files from: {directory}")
    try:
        if args.commit:
            try:
                with _db_connection(cfg) as cur:
                    result = process_all(cfg, cursor=cur, task_id=args.task_id)
            except psycopg2.Error as e:
                logger.error(f"database: {e}")
                return EXIT_FATAL
        else:
            result = process_all(cfg)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    # log_summary adds the SUMMARY label itself
    log_summary(render_summary_line(result).removeprefix("SUMMARY "))

    if result.invalid_files or result.failed_files:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
