"""
Consistent-snapshot coordinator for MySQL dumps.

The coordinator wraps a dump in a read-only transaction:

    SET TRANSACTION ISOLATION LEVEL REPEATABLE READ
    START TRANSACTION WITH CONSISTENT SNAPSHOT, READ ONLY
    ... every SHOW / SELECT of the dump ...
    ROLLBACK

With InnoDB this pins one read view for the whole dump, so every table
reflects the same point in time.

Invariants:
    - The transaction is always rolled back, never committed
    - Rollback runs on every exit path when used as a context manager
    - A failed rollback is logged and recorded, never raised

How to change safely:
    - The connection must not hold an open transaction when begin() runs;
      START TRANSACTION implicitly commits it
    - Keep READ ONLY so a dump can never write
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

from ..errors import QueryError
from ..extract.cursor import open_cursor, query_errors

logger = logging.getLogger(__name__)


class SnapshotCoordinator:
    """Opens and releases the dump's consistency boundary.

    Attributes:
        connection: DB-API connection owned by the dump for its duration
        isolation_level: Isolation level applied to the snapshot transaction
        release_error: Error from the last rollback, if it failed

    Example:
        >>> with SnapshotCoordinator(connection) as snapshot:
        ...     tables = SchemaExtractor(connection).list_tables()
        >>> snapshot.release_error is None
        True
    """

    def __init__(self, connection: Any, isolation_level: str = "REPEATABLE READ") -> None:
        self.connection = connection
        self.isolation_level = isolation_level.upper()
        self.release_error: Exception | None = None
        self._active = False

    @property
    def active(self) -> bool:
        """Whether the snapshot transaction is open."""
        return self._active

    def begin(self) -> None:
        """Start the read-only snapshot transaction.

        Raises:
            QueryError: If the transaction cannot be started.
        """
        if self._active:
            raise QueryError("Snapshot transaction already open", operation="begin")

        with open_cursor(self.connection, "begin") as cursor:
            with query_errors("begin"):
                cursor.execute(f"SET TRANSACTION ISOLATION LEVEL {self.isolation_level}")
                cursor.execute("START TRANSACTION WITH CONSISTENT SNAPSHOT, READ ONLY")

        self._active = True
        self.release_error = None
        logger.debug(
            "Opened snapshot transaction",
            extra={"isolation_level": self.isolation_level},
        )

    def rollback(self) -> Exception | None:
        """End the snapshot transaction without persisting anything.

        Returns:
            The rollback error, or None on success.
        """
        if not self._active:
            return None
        self._active = False

        try:
            self.connection.rollback()
        except Exception as e:
            self.release_error = e
            logger.warning(f"Failed to release snapshot transaction: {e}", exc_info=True)
            return e

        logger.debug("Released snapshot transaction")
        return None

    def __enter__(self) -> SnapshotCoordinator:
        self.begin()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.rollback()
