"""
Error types for SQL Dump.

This module defines all exception types raised by a dump:
- DumpError: Base exception
- DestinationExistsError: Output path already exists (pre-flight)
- QueryError: Database query or connectivity failure
- UnexpectedTableNameError: Server described a different table
- EmptySchemaError: Table has no columns
- SinkError: I/O failure on the destination

Invariants:
    - All errors inherit from DumpError
    - Errors carry table/operation/path context in details
    - Driver exceptions are chained, never discarded
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class DumpError(Exception):
    """Base exception for all dump errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "DUMP_ERROR"
        self.details = details or {}


class DestinationExistsError(DumpError):
    """Dump destination already exists.

    Raised before any stream is opened; nothing is written.
    """

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Dump '{path}' already exists.",
            code="DESTINATION_EXISTS",
            details={"path": path},
        )
        self.path = path


class QueryError(DumpError):
    """A query against the database failed.

    Raised when:
    - The connection is lost or times out
    - The user lacks privileges for a statement
    - A row cannot be fetched
    """

    def __init__(
        self,
        message: str,
        operation: str,
        table: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="QUERY_ERROR",
            details={"operation": operation, "table": table},
        )
        self.operation = operation
        self.table = table


class UnexpectedTableNameError(DumpError):
    """SHOW CREATE TABLE echoed a different table than requested.

    Usually means the schema changed concurrently, or the name was not a
    plain identifier.
    """

    def __init__(self, requested: str, returned: Optional[str]) -> None:
        super().__init__(
            f"Returned table '{returned}' is not the same as requested table '{requested}'",
            code="UNEXPECTED_TABLE_NAME",
            details={"requested": requested, "returned": returned},
        )
        self.requested = requested
        self.returned = returned


class EmptySchemaError(DumpError):
    """Table reports zero columns and cannot be described."""

    def __init__(self, table: Optional[str] = None) -> None:
        if table is None:
            message = "No columns to serialize"
        else:
            message = f"No columns in table {table}."
        super().__init__(
            message,
            code="EMPTY_SCHEMA",
            details={"table": table},
        )
        self.table = table


class SinkError(DumpError):
    """Writing to the dump destination failed.

    Raised when:
    - The destination file cannot be created
    - A write, flush or close fails
    - The archive cannot be finalized
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="SINK_ERROR",
            details={"path": path},
        )
        self.path = path
