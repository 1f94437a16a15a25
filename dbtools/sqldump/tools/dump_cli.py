"""
Dump CLI tool for SQL Dump.

This tool connects to MySQL, dumps one database and reports the result.

Usage:
    sqldump --database <db> [--output <path> | --dir <dir>] [options]

Destination naming:
    Without --output the file is <dir>/<prefix>-<timestamp>.sql, with .gz
    appended for --gzip and .zip for --archive.

Invariants:
    - An existing destination is never overwritten
    - Output of a failed dump is removed
    - The connection is closed when the tool exits

How to change safely:
    - Flags override environment configuration; keep both paths working
    - Keep exit codes stable (0 success, 1 failure, 2 bad configuration)
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

import json_log_formatter
import mysql.connector

from ..config import DumpConfig, DumpMode, ObservabilityConfig
from ..dumper import Dumper, DumpResult
from ..errors import DestinationExistsError, DumpError
from ..sink import destination_path

logger = logging.getLogger(__name__)


def setup_logging(config: ObservabilityConfig, verbose: bool = False) -> None:
    """Configure logging based on configuration.

    Args:
        config: Observability configuration
        verbose: Force DEBUG level
    """
    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper(), logging.INFO)

    if config.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    # Reduce noise from libraries
    logging.getLogger("mysql.connector").setLevel(logging.WARNING)


def default_destination(config: DumpConfig, now: datetime | None = None) -> Path:
    """Generated dump path: <dir>/<prefix>-<timestamp>.sql."""
    stamp = (now or datetime.now()).strftime(config.output.time_format)
    return Path(config.output.directory) / f"{config.output.prefix}-{stamp}.sql"


def connect(config: DumpConfig) -> Any:
    """Open a MySQL connection for the dump."""
    conn = config.connection
    return mysql.connector.connect(
        host=conn.host,
        port=conn.port,
        user=conn.user,
        password=conn.password or "",
        database=conn.database,
        connection_timeout=conn.connect_timeout,
        autocommit=False,
        consume_results=True,
        use_unicode=True,
        charset="utf8mb4",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Dump a MySQL database from one consistent snapshot"
    )
    parser.add_argument("--host", help="MySQL host (env MYSQL_HOST)")
    parser.add_argument("--port", type=int, help="MySQL port (env MYSQL_PORT)")
    parser.add_argument("-u", "--user", help="MySQL user (env MYSQL_USER)")
    parser.add_argument("-p", "--password", help="MySQL password (env MYSQL_PASSWORD)")
    parser.add_argument("-d", "--database", help="Database to dump (env MYSQL_DATABASE)")
    parser.add_argument("-o", "--output", help="Output file (default: generated in --dir)")
    parser.add_argument("--dir", help="Directory for generated dump names (env DUMP_DIR)")
    modes = parser.add_mutually_exclusive_group()
    modes.add_argument("--gzip", action="store_true", help="Write a gzip-compressed dump")
    modes.add_argument(
        "--archive", action="store_true", help="Write a zip with one member per table"
    )
    parser.add_argument(
        "--drop-database",
        action="store_true",
        help="Emit DROP/CREATE DATABASE before the tables",
    )
    parser.add_argument(
        "-t",
        "--table",
        action="append",
        dest="tables",
        help="Only dump this table (repeatable)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    return parser


def resolve_config(args: argparse.Namespace, base: DumpConfig) -> DumpConfig:
    """Apply command-line overrides on top of environment configuration."""
    connection = replace(
        base.connection,
        host=args.host or base.connection.host,
        port=args.port or base.connection.port,
        user=args.user or base.connection.user,
        password=args.password if args.password is not None else base.connection.password,
        database=args.database or base.connection.database,
    )

    mode = base.output.mode
    if args.gzip:
        mode = DumpMode.GZIP
    elif args.archive:
        mode = DumpMode.ARCHIVE

    output = replace(
        base.output,
        directory=args.dir or base.output.directory,
        mode=mode,
        drop_database=args.drop_database or base.output.drop_database,
    )
    if not connection.database:
        raise ValueError("--database or MYSQL_DATABASE is required")

    config = replace(base, connection=connection, output=output)
    config.validate()
    return config


def print_summary(result: DumpResult) -> None:
    print("Dump completed successfully")
    print(f"  File: {result.path}")
    print(f"  Database: {result.database}")
    print(f"  Server version: {result.server_version}")
    print(f"  Tables: {len(result.tables)}")
    print(f"  Rows: {sum(result.row_counts.values())}")
    print(f"  Duration: {result.duration_ms}ms")
    if result.release_error:
        print(f"  Warning: snapshot release failed: {result.release_error}")


def run(config: DumpConfig, output: str | None, tables: Sequence[str] | None) -> int:
    """Run one dump; returns the process exit code."""
    mode = config.output.mode
    path = destination_path(output or default_destination(config), mode)

    try:
        connection = connect(config)
    except mysql.connector.Error as e:
        print(f"Dump failed: cannot connect to MySQL: {e}")
        return 1

    try:
        result = Dumper.from_config(connection, config).dump(path, mode=mode, tables=tables)
    except DestinationExistsError as e:
        print(f"Dump failed: {e.message}")
        return 1
    except DumpError as e:
        logger.error(f"Dump failed: {e.message}", extra={"code": e.code, **e.details})
        # A plain dump may be left half written; it cannot be trusted.
        if path.exists():
            path.unlink()
            logger.info(f"Removed incomplete dump {path}")
        print(f"Dump failed: {e.message}")
        return 1
    finally:
        connection.close()

    print_summary(result)
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for the dump tool."""
    args = build_parser().parse_args(argv)

    try:
        config = resolve_config(args, DumpConfig.from_env())
    except ValueError as e:
        print(f"Invalid configuration: {e}")
        sys.exit(2)

    setup_logging(config.observability, verbose=args.verbose)
    config.log_config()

    sys.exit(run(config, args.output, args.tables))


if __name__ == "__main__":
    main()
