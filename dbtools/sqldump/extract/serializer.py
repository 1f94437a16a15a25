"""
Row serialization into MySQL literal tuples.

Escaping rules (default sql_mode, i.e. backslash escapes enabled):
    NULL / invalid value      -> NULL
    bool                      -> 1 / 0
    int, float, Decimal       -> bare literal (NaN/inf -> NULL)
    bytes-like                -> 0x<hex> ('' when empty)
    date/time values          -> quoted MySQL text form
    set / frozenset (SET)     -> quoted, members sorted and comma-joined
    anything else             -> str(value), quoted, with
                                 \\ -> \\\\, ' -> '', NUL -> \\0,
                                 LF -> \\n, CR -> \\r, Ctrl-Z -> \\Z
"""

from __future__ import annotations

import datetime
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Sequence

from ..errors import EmptySchemaError

NULL = "NULL"

_ESCAPES = {
    "\\": "\\\\",
    "'": "''",
    "\x00": "\\0",
    "\n": "\\n",
    "\r": "\\r",
    "\x1a": "\\Z",
}
_ESCAPE_TABLE = str.maketrans(_ESCAPES)


@dataclass(frozen=True)
class ColumnValue:
    """A single cell.

    Attributes:
        value: Value as returned by the driver
        valid: False when the cell is SQL NULL
    """

    value: Any
    valid: bool = True

    @classmethod
    def of(cls, value: Any) -> ColumnValue:
        """Wrap a driver value, treating None as NULL."""
        return cls(value=value, valid=value is not None)


def escape_string(text: str) -> str:
    """Escape text for use inside a single-quoted MySQL literal."""
    return text.translate(_ESCAPE_TABLE)


def _format_timedelta(delta: datetime.timedelta) -> str:
    # MySQL TIME columns come back from the driver as timedelta
    total = int(delta.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    text = f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
    if delta.microseconds:
        text += f".{abs(delta.microseconds):06d}"
    return text


def to_literal(column: ColumnValue) -> str:
    """Render one cell as a MySQL literal."""
    if not column.valid or column.value is None:
        return NULL

    value = column.value
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return NULL
        return repr(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            return NULL
        return str(value)
    if isinstance(value, memoryview):
        value = value.tobytes()
    if isinstance(value, (bytes, bytearray)):
        if not value:
            return "''"
        return "0x" + bytes(value).hex().upper()
    if isinstance(value, datetime.datetime):
        return f"'{value.isoformat(sep=' ')}'"
    if isinstance(value, (datetime.date, datetime.time)):
        return f"'{value.isoformat()}'"
    if isinstance(value, datetime.timedelta):
        return f"'{_format_timedelta(value)}'"
    if isinstance(value, (set, frozenset)):
        # SET columns; MySQL reorders members on insert
        members = ",".join(sorted(str(member) for member in value))
        return f"'{escape_string(members)}'"
    return f"'{escape_string(str(value))}'"


def serialize_row(columns: Sequence[ColumnValue]) -> str:
    """Serialize an ordered row into a tuple literal ``(v1,v2,...)``.

    Raises:
        EmptySchemaError: If the row has no columns.
    """
    if not columns:
        raise EmptySchemaError()
    return "(" + ",".join(to_literal(column) for column in columns) + ")"


def serialize_values(row: Iterable[Any]) -> str:
    """Serialize a raw driver row, treating None as NULL."""
    return serialize_row([ColumnValue.of(value) for value in row])
