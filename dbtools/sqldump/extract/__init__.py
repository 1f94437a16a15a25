"""
Extraction module for SQL Dump.

This module reads schema and data from a live MySQL connection:
- Value serialization into escaped SQL literals
- CREATE TABLE statements via SHOW CREATE TABLE
- Row streaming via SELECT * into bulk-insert tuples

Invariants:
    - Every cursor is closed on every exit path
    - Driver exceptions surface as QueryError with table context
"""

from .schema import SchemaExtractor
from .serializer import ColumnValue, escape_string, serialize_row, serialize_values
from .tables import TableExtractor, TableRecord

__all__ = [
    "ColumnValue",
    "SchemaExtractor",
    "TableExtractor",
    "TableRecord",
    "escape_string",
    "serialize_row",
    "serialize_values",
]
