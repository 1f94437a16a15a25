"""
Schema extraction for MySQL.

The SchemaExtractor issues the server's own introspection statements:
- SHOW TABLES for enumeration (server order, not re-sorted)
- SHOW CREATE TABLE for each table's creation statement
- SELECT version() / SELECT database() for the dump header

Invariants:
    - A creation statement is only accepted for the table that was asked for
    - Table names are used as returned by SHOW TABLES; they are not escaped
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import EmptySchemaError, UnexpectedTableNameError
from .cursor import open_cursor, query_errors

logger = logging.getLogger(__name__)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


class SchemaExtractor:
    """Reads table metadata through a DB-API connection.

    Example:
        >>> schema = SchemaExtractor(connection)
        >>> for name in schema.list_tables():
        ...     print(schema.describe_table(name))
    """

    def __init__(self, connection: Any) -> None:
        self.connection = connection

    def _scalar(self, sql: str, operation: str) -> str | None:
        with open_cursor(self.connection, operation) as cursor:
            with query_errors(operation):
                cursor.execute(sql)
                row = cursor.fetchone()
                return _text(row[0]) if row else None

    def server_version(self) -> str:
        """Return the server version string."""
        return self._scalar("SELECT version()", "server_version") or ""

    def database_name(self) -> str:
        """Return the currently selected database."""
        return self._scalar("SELECT database()", "database_name") or ""

    def list_tables(self) -> list[str]:
        """List tables in the order the server returns them."""
        tables: list[str] = []
        with open_cursor(self.connection, "list_tables") as cursor:
            with query_errors("list_tables"):
                cursor.execute("SHOW TABLES")
                for row in cursor.fetchall():
                    name = _text(row[0])
                    if name:
                        tables.append(name)
        logger.debug(f"Found {len(tables)} tables", extra={"table_count": len(tables)})
        return tables

    def describe_table(self, name: str) -> str:
        """Return the CREATE TABLE statement for a table.

        Raises:
            UnexpectedTableNameError: If the server echoes another table name.
            EmptySchemaError: If the server returns no creation statement.
            QueryError: On any driver failure.
        """
        with open_cursor(self.connection, "describe_table", name) as cursor:
            with query_errors("describe_table", name):
                cursor.execute(f"SHOW CREATE TABLE {name}")
                row = cursor.fetchone()
                if row is not None:
                    returned = _text(row[0])
                    statement = _text(row[1]) if len(row) > 1 else None

        if row is None:
            raise EmptySchemaError(name)

        if returned != name:
            raise UnexpectedTableNameError(name, returned)

        if not statement or not statement.strip():
            raise EmptySchemaError(name)
        return statement
