"""
SQL Dump - snapshot-consistent MySQL dump engine.

This package produces a restorable textual dump (schema + data) of a live
MySQL database through a caller-supplied DB-API connection:
- One read-only transaction covers every table in a dump
- Each table contributes its CREATE statement and a bulk INSERT
- Output goes to a plain file, a gzip stream, or a zip archive

Architecture:
    ┌─────────────┐     ┌──────────────────┐
    │   Caller    │────▶│      Dumper      │
    │ (CLI / app) │     │  (DumpSession)   │
    └─────────────┘     └────────┬─────────┘
                                 │
              ┌──────────────────┼──────────────────┐
              │                  │                  │
              ▼                  ▼                  ▼
        ┌──────────┐      ┌────────────┐      ┌──────────┐
        │ Snapshot │      │  Extract   │      │  Render  │
        │(START TX)│      │schema/rows │      │ template │
        └──────────┘      └────────────┘      └────┬─────┘
                                                   │
                                                   ▼
                                   ┌──────────────────────────────┐
                                   │ Sink (plain / gzip / zip)    │
                                   └──────────────────────────────┘

Invariants:
    - All tables of one dump are read inside the same consistent snapshot
    - The snapshot is always rolled back, never committed
    - A dump never overwrites an existing destination
    - Column order in INSERT tuples follows the server's column order

How to change safely:
    - Template changes must keep dumps loadable by the mysql client
    - Serializer changes must keep escaping compatible with default sql_mode
    - New sinks must implement the Sink interface in sink/base.py
"""

from ._version import __version__
from .config import DumpConfig, DumpMode
from .dumper import Dumper, DumpResult, dump_to_stream
from .errors import (
    DestinationExistsError,
    DumpError,
    EmptySchemaError,
    QueryError,
    SinkError,
    UnexpectedTableNameError,
)

__all__ = [
    "__version__",
    # Entry points
    "Dumper",
    "DumpResult",
    "dump_to_stream",
    # Configuration
    "DumpConfig",
    "DumpMode",
    # Errors
    "DumpError",
    "DestinationExistsError",
    "QueryError",
    "UnexpectedTableNameError",
    "EmptySchemaError",
    "SinkError",
]
