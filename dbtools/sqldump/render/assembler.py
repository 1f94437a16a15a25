"""
Document assembly for SQL dumps.

The DocumentAssembler renders a dump through a Sink in order:
header, then each table in enumeration order, then footer.

Invariants:
    - Tables are rendered in the order given, never re-sorted
    - An empty table gets its structure block but no INSERT block
    - Header and footer are global text; table blocks carry the table name
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..extract.tables import TableRecord
from ..sink.base import Sink
from .formats import DEFAULT_FORMAT, DumpFormat

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DumpHeader:
    """Values rendered into the dump header.

    Attributes:
        server_version: Result of SELECT version()
        database: Result of SELECT database()
        drop_database: Emit the DROP/CREATE DATABASE preamble
    """

    server_version: str
    database: str
    drop_database: bool = False


class DocumentAssembler:
    """Renders dump documents from a DumpFormat.

    Example:
        >>> assembler = DocumentAssembler()
        >>> assembler.write_document(sink, header, records, completed_at=now)
    """

    def __init__(self, dump_format: DumpFormat | None = None) -> None:
        self.format = dump_format or DEFAULT_FORMAT

    def render_header(self, header: DumpHeader) -> str:
        preamble = ""
        if header.drop_database:
            preamble = self.format.drop_database.format(database=header.database)
        return self.format.header.format(
            tool_name=self.format.tool_name,
            dump_version=self.format.dump_version,
            server_version=header.server_version,
            preamble=preamble,
            database=header.database,
        )

    def render_table(self, record: TableRecord) -> str:
        text = self.format.table.format(name=record.name, sql=record.sql)
        if record.has_data:
            text += self.format.data.format(name=record.name, values=record.values)
        return text

    def render_footer(self, completed_at: str) -> str:
        return self.format.footer.format(completed_at=completed_at)

    def write_document(
        self,
        sink: Sink,
        header: DumpHeader,
        records: Iterable[TableRecord],
        completed_at: Callable[[], str],
    ) -> dict[str, int]:
        """Write a complete dump into the sink.

        Records are consumed lazily, so each table is extracted right before
        it is written. completed_at is called after the last table.

        Returns:
            Row count per table written, in order
        """
        written: dict[str, int] = {}
        sink.write(self.render_header(header))
        for record in records:
            sink.write(self.render_table(record), table=record.name)
            written[record.name] = record.row_count
            logger.info(
                f"Dumped table {record.name}",
                extra={"table": record.name, "row_count": record.row_count},
            )
        sink.write(self.render_footer(completed_at()))
        return written
