"""Scoped DB-API cursors and driver error translation."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from ..errors import DumpError, QueryError

logger = logging.getLogger(__name__)


@contextmanager
def query_errors(operation: str, table: str | None = None) -> Iterator[None]:
    """Translate driver exceptions raised in the block into QueryError.

    DumpError subclasses pass through untouched.
    """
    try:
        yield
    except DumpError:
        raise
    except Exception as e:
        where = f" for table {table}" if table else ""
        raise QueryError(f"{operation} failed{where}: {e}", operation=operation, table=table) from e


@contextmanager
def open_cursor(connection: Any, operation: str, table: str | None = None) -> Iterator[Any]:
    """Open a cursor that is closed on every exit path.

    A failing close() is logged, never raised, so it cannot mask the
    error that ended the block.
    """
    with query_errors(operation, table):
        cursor = connection.cursor()
    try:
        yield cursor
    finally:
        try:
            cursor.close()
        except Exception as e:
            logger.warning(
                f"Failed to close cursor after {operation}: {e}",
                extra={"operation": operation, "table": table},
            )
