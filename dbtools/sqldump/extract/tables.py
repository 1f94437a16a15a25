"""
Table data extraction.

Rows are streamed with SELECT * and converted to tuple literals in the
column order reported by the cursor description.

Invariants:
    - The row cursor is closed on success, error and empty result
    - A table with zero columns is an error; a table with zero rows is not
    - TableRecord is immutable once built
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from ..errors import EmptySchemaError
from .cursor import open_cursor, query_errors
from .schema import SchemaExtractor
from .serializer import serialize_values

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableRecord:
    """Captured state of one table.

    Attributes:
        name: Table name
        sql: CREATE TABLE statement
        values: Comma-joined tuple literals ("" for an empty table)
        row_count: Number of rows in values
    """

    name: str
    sql: str
    values: str
    row_count: int = 0

    @property
    def has_data(self) -> bool:
        return bool(self.values)


class TableExtractor:
    """Streams table rows as MySQL tuple literals.

    Attributes:
        connection: DB-API connection (inside the dump snapshot)
        fetch_batch_size: Rows per fetchmany() call
    """

    def __init__(self, connection: Any, fetch_batch_size: int = 1000) -> None:
        if fetch_batch_size <= 0:
            raise ValueError("fetch_batch_size must be positive")
        self.connection = connection
        self.fetch_batch_size = fetch_batch_size
        self.schema = SchemaExtractor(connection)

    def iter_rows(self, name: str) -> Iterator[str]:
        """Yield one tuple literal per row of the table.

        Raises:
            EmptySchemaError: If the table reports zero columns.
            QueryError: On any driver failure.
        """
        with open_cursor(self.connection, "extract_rows", name) as cursor:
            with query_errors("extract_rows", name):
                cursor.execute(f"SELECT * FROM {name}")
                description = cursor.description

            if not description:
                raise EmptySchemaError(name)

            while True:
                with query_errors("extract_rows", name):
                    batch = cursor.fetchmany(self.fetch_batch_size)
                if not batch:
                    break
                for row in batch:
                    yield serialize_values(row)

    def extract_rows(self, name: str) -> str:
        """Return all rows of the table joined by commas ("" when empty)."""
        return ",".join(self.iter_rows(name))

    def build_record(self, name: str) -> TableRecord:
        """Capture schema and data for one table."""
        sql = self.schema.describe_table(name)

        rows = list(self.iter_rows(name))
        record = TableRecord(name=name, sql=sql, values=",".join(rows), row_count=len(rows))
        logger.debug(
            f"Extracted table {name}",
            extra={"table": name, "row_count": record.row_count},
        )
        return record
