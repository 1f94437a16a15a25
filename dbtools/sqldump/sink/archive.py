"""
Zip archive dump sink: one ``<table>.sql`` member per table.

Archive layout:
    <dump>.zip
        users.sql       per-table block (DROP / CREATE / INSERT)
        orders.sql
        ...
    archive comment     global header and footer, written once

Invariants:
    - At most one member is open at a time
    - Switching tables closes the previous member before opening the next
    - An aborted archive is removed, never left as a readable zip
"""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path
from typing import BinaryIO, Optional, TextIO

from ..config import DumpMode
from ..errors import SinkError
from .base import discard, sink_errors

logger = logging.getLogger(__name__)

# Zip comments are limited to 64 KiB
MAX_COMMENT_BYTES = 0xFFFF


def member_name(table: str) -> str:
    """Archive member name for a table."""
    return f"{table}.sql"


class ArchiveSink:
    """Writes each table into its own zip member.

    Attributes:
        path: Destination path (ends with .zip)
        compression: zipfile compression method
        members: Member names written so far, in order
    """

    mode = DumpMode.ARCHIVE

    def __init__(self, path: Path, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self.path = path
        self.compression = compression
        self.members: list[str] = []
        self._global: list[str] = []
        self._table: Optional[str] = None
        self._member: Optional[TextIO] = None

        with sink_errors(path, "create"):
            self._file: Optional[BinaryIO] = open(path, "xb")
        try:
            self._zip: Optional[zipfile.ZipFile] = zipfile.ZipFile(
                self._file, mode="w", compression=compression
            )
        except Exception:
            self._file.close()
            discard(path)
            raise

    @property
    def current_writer(self) -> Optional[TextIO]:
        return self._member

    def _open_member(self, table: str) -> None:
        self._close_member()
        name = member_name(table)
        if name in self.members:
            raise SinkError(f"Archive '{self.path}' already has member {name}", path=str(self.path))
        with sink_errors(self.path, f"open member {name} in"):
            raw = self._zip.open(name, mode="w", force_zip64=True)
            self._member = io.TextIOWrapper(raw, encoding="utf-8", newline="\n")
        self._table = table
        self.members.append(name)
        logger.debug(f"Opened archive member {name}", extra={"path": str(self.path), "table": table})

    def _close_member(self) -> None:
        if self._member is None:
            return
        member, self._member = self._member, None
        self._table = None
        with sink_errors(self.path, "finalize member in"):
            member.close()

    def write(self, text: str, table: Optional[str] = None) -> None:
        if self._zip is None:
            raise ValueError(f"Sink for '{self.path}' is closed")
        if table is None:
            self._global.append(text)
            return
        if table != self._table:
            self._open_member(table)
        with sink_errors(self.path, "write"):
            self._member.write(text)

    def close(self) -> None:
        if self._zip is None:
            return
        self._close_member()
        archive, self._zip = self._zip, None
        raw, self._file = self._file, None

        comment = "".join(self._global).encode("utf-8")
        if len(comment) > MAX_COMMENT_BYTES:
            logger.warning(
                "Archive comment truncated",
                extra={"path": str(self.path), "size_bytes": len(comment)},
            )
            # Cut on a character boundary so the comment stays valid UTF-8
            comment = comment[:MAX_COMMENT_BYTES].decode("utf-8", "ignore").encode("utf-8")

        try:
            with sink_errors(self.path, "finalize"):
                try:
                    archive.comment = comment
                    archive.close()
                finally:
                    raw.close()
        except SinkError:
            discard(self.path)
            raise

    def abort(self) -> None:
        if self._zip is None:
            return
        member, self._member = self._member, None
        archive, self._zip = self._zip, None
        raw, self._file = self._file, None
        # The file is removed below; closing the zip only releases its handles.
        try:
            if member is not None:
                member.close()
            archive.close()
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to close partial archive {self.path}: {e}")
        finally:
            raw.close()
        discard(self.path)
