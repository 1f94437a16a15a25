"""Gzip dump sink: the plain document through one gzip stream."""

from __future__ import annotations

import gzip
import logging
from pathlib import Path
from typing import Optional, TextIO

from ..config import DumpMode
from ..errors import SinkError
from .base import discard, sink_errors

logger = logging.getLogger(__name__)


class GzipSink:
    """Writes the whole dump through a single gzip stream.

    close() writes the gzip trailer before the file is closed. abort()
    removes the file, since a gzip stream without its trailer is not a
    usable dump.

    Attributes:
        path: Destination path (ends with .gz)
        compresslevel: zlib compression level
    """

    mode = DumpMode.GZIP

    def __init__(self, path: Path, compresslevel: int = 6) -> None:
        self.path = path
        self.compresslevel = compresslevel
        with sink_errors(path, "create"):
            self._stream: Optional[TextIO] = gzip.open(
                path,
                "xt",
                compresslevel=compresslevel,
                encoding="utf-8",
                newline="\n",
            )

    @property
    def current_writer(self) -> Optional[TextIO]:
        return self._stream

    def write(self, text: str, table: Optional[str] = None) -> None:
        if self._stream is None:
            raise ValueError(f"Sink for '{self.path}' is closed")
        with sink_errors(self.path, "write"):
            self._stream.write(text)

    def close(self) -> None:
        if self._stream is None:
            return
        stream, self._stream = self._stream, None
        try:
            with sink_errors(self.path, "finalize"):
                stream.close()
        except SinkError:
            discard(self.path)
            raise

    def abort(self) -> None:
        if self._stream is None:
            return
        stream, self._stream = self._stream, None
        try:
            stream.close()
        except OSError as e:
            logger.warning(f"Failed to close partial dump {self.path}: {e}")
        discard(self.path)
