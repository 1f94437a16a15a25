"""
Dump orchestration for SQL Dump.

A dump runs as one DumpSession:

    pre-flight destination check
    begin snapshot ─▶ server version / database ─▶ SHOW TABLES
        for each table: SHOW CREATE TABLE + SELECT * ─▶ render ─▶ sink
    footer ─▶ close sink ─▶ rollback snapshot

Invariants:
    - Nothing is created when the destination already exists
    - Nothing is created when the snapshot cannot be opened
    - The snapshot is released on every exit path
    - A failed dump aborts the sink instead of finalizing it
    - A failed rollback after a successful dump is reported, not raised

How to change safely:
    - Keep every read between SnapshotCoordinator.begin() and rollback()
    - Keep extraction lazy so only one table is held in memory at a time
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TextIO

from .config import DumpConfig, DumpMode
from .extract import SchemaExtractor, TableExtractor, TableRecord
from .render import DocumentAssembler, DumpFormat, DumpHeader
from .sink import Sink, check_destination, destination_path, open_sink
from .sink.plain import StreamSink
from .snapshot import SnapshotCoordinator

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now().astimezone()


@dataclass
class DumpSession:
    """State of one dump invocation.

    Attributes:
        database: Target database name
        server_version: Server version string
        snapshot: Consistency boundary for the dump
        sink: Destination being written
        completed_at: Completion timestamp, set after the last table
    """

    database: str
    server_version: str
    snapshot: SnapshotCoordinator
    sink: Sink
    completed_at: str | None = None
    clock: Callable[[], datetime] = field(default=_now, repr=False)

    def mark_completed(self) -> str:
        """Stamp the session as complete and return the timestamp."""
        self.completed_at = self.clock().strftime("%Y-%m-%d %H:%M:%S %z")
        return self.completed_at


@dataclass
class DumpResult:
    """Result of a dump.

    Attributes:
        path: Destination file (None for stream dumps)
        mode: Destination mode
        database: Dumped database
        server_version: Server version string
        tables: Tables dumped, in order
        row_counts: Rows dumped per table
        completed_at: Completion timestamp from the footer
        duration_ms: Wall-clock duration
        release_error: Snapshot rollback error, if the release failed
    """

    path: str | None
    mode: DumpMode
    database: str
    server_version: str
    tables: list[str]
    row_counts: dict[str, int]
    completed_at: str
    duration_ms: int
    release_error: str | None = None


class Dumper:
    """Dumps a MySQL database through a caller-owned DB-API connection.

    The connection is used exclusively by the dumper while a dump runs and
    is never closed by it.

    Attributes:
        connection: DB-API connection to the database to dump
        dump_format: Templates for the document
        drop_database: Emit DROP/CREATE DATABASE in full dumps
        fetch_batch_size: Rows per fetchmany() call
        isolation_level: Isolation level of the snapshot transaction

    Example:
        >>> dumper = Dumper(connection, drop_database=True)
        >>> result = dumper.dump("/var/tmp/app.sql", mode=DumpMode.GZIP)
        >>> result.path
        '/var/tmp/app.sql.gz'
    """

    def __init__(
        self,
        connection: Any,
        dump_format: DumpFormat | None = None,
        drop_database: bool = False,
        fetch_batch_size: int = 1000,
        isolation_level: str = "REPEATABLE READ",
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self.connection = connection
        self.assembler = DocumentAssembler(dump_format)
        self.drop_database = drop_database
        self.fetch_batch_size = fetch_batch_size
        self.isolation_level = isolation_level
        self.clock = clock

    @classmethod
    def from_config(
        cls,
        connection: Any,
        config: DumpConfig,
        dump_format: DumpFormat | None = None,
    ) -> Dumper:
        """Create a dumper from loaded configuration."""
        return cls(
            connection,
            dump_format=dump_format,
            drop_database=config.output.drop_database,
            fetch_batch_size=config.extract.fetch_batch_size,
            isolation_level=config.extract.isolation_level,
        )

    @property
    def dump_format(self) -> DumpFormat:
        return self.assembler.format

    def dump(
        self,
        destination: str | os.PathLike[str],
        mode: DumpMode = DumpMode.PLAIN,
        tables: Sequence[str] | None = None,
    ) -> DumpResult:
        """Dump the database to a file.

        Args:
            destination: Output path; gzip adds .gz and archive adds .zip
            mode: Plain, gzip or archive output
            tables: Only dump these tables, in this order (no DROP DATABASE)

        Returns:
            DumpResult describing the finished dump

        Raises:
            DestinationExistsError: If the destination exists (nothing written)
            QueryError: On any database failure
            UnexpectedTableNameError: If the schema changed under the dump
            EmptySchemaError: If a table has no columns
            SinkError: On destination I/O failure
        """
        path = destination_path(destination, mode)
        check_destination(path)

        logger.info(
            "Starting dump",
            extra={"path": str(path), "mode": mode.value, "tables": list(tables or [])},
        )
        return self._run(lambda: open_sink(path, mode), tables)

    def dump_to_stream(self, out: TextIO, tables: Sequence[str] | None = None) -> DumpResult:
        """Dump the database as plain text into a caller-owned stream."""
        return self._run(lambda: StreamSink(out), tables)

    def _run(self, sink_factory: Callable[[], Sink], tables: Sequence[str] | None) -> DumpResult:
        start_time = time.time()
        snapshot = SnapshotCoordinator(self.connection, self.isolation_level)

        with snapshot:
            schema = SchemaExtractor(self.connection)
            server_version = schema.server_version()
            database = schema.database_name()
            names = list(tables) if tables is not None else schema.list_tables()

            sink = sink_factory()
            session = DumpSession(
                database=database,
                server_version=server_version,
                snapshot=snapshot,
                sink=sink,
                clock=self.clock,
            )
            finished = False
            try:
                row_counts = self._write(session, names, selected=tables is not None)
                sink.close()
                finished = True
            finally:
                if not finished:
                    logger.error(
                        "Dump failed, discarding output",
                        extra={"path": str(sink.path) if sink.path else None},
                    )
                    sink.abort()

        release_error = str(snapshot.release_error) if snapshot.release_error else None
        result = DumpResult(
            path=str(sink.path) if sink.path else None,
            mode=sink.mode,
            database=database,
            server_version=server_version,
            tables=list(row_counts),
            row_counts=row_counts,
            completed_at=session.completed_at or "",
            duration_ms=int((time.time() - start_time) * 1000),
            release_error=release_error,
        )
        logger.info(
            "Dump completed",
            extra={
                "path": result.path,
                "database": result.database,
                "table_count": len(result.tables),
                "duration_ms": result.duration_ms,
            },
        )
        return result

    def _write(self, session: DumpSession, names: list[str], selected: bool) -> dict[str, int]:
        header = DumpHeader(
            server_version=session.server_version,
            database=session.database,
            drop_database=self.drop_database and not selected,
        )
        extractor = TableExtractor(self.connection, self.fetch_batch_size)
        return self.assembler.write_document(
            session.sink,
            header,
            self._records(extractor, names),
            completed_at=session.mark_completed,
        )

    def _records(self, extractor: TableExtractor, names: Iterable[str]) -> Iterator[TableRecord]:
        for name in names:
            yield extractor.build_record(name)


def dump_to_stream(
    connection: Any,
    out: TextIO,
    tables: Sequence[str] | None = None,
    **kwargs: Any,
) -> DumpResult:
    """Dump a database as plain text into a writable text stream.

    Extra keyword arguments are passed to Dumper.
    """
    return Dumper(connection, **kwargs).dump_to_stream(out, tables=tables)
