"""Plain-text dump sink: one UTF-8 file for the whole dump."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, TextIO

from ..config import DumpMode
from .base import sink_errors

logger = logging.getLogger(__name__)


class PlainSink:
    """Writes the whole dump into a single text file.

    The file is created exclusively; a failed dump leaves whatever was
    written so far, without the footer.
    """

    mode = DumpMode.PLAIN

    def __init__(self, path: Path) -> None:
        self.path = path
        with sink_errors(path, "create"):
            self._file: Optional[TextIO] = open(path, "x", encoding="utf-8", newline="\n")

    @property
    def current_writer(self) -> Optional[TextIO]:
        return self._file

    def write(self, text: str, table: Optional[str] = None) -> None:
        if self._file is None:
            raise ValueError(f"Sink for '{self.path}' is closed")
        with sink_errors(self.path, "write"):
            self._file.write(text)

    def close(self) -> None:
        if self._file is None:
            return
        stream, self._file = self._file, None
        with sink_errors(self.path, "close"):
            stream.close()

    def abort(self) -> None:
        if self._file is None:
            return
        stream, self._file = self._file, None
        try:
            stream.close()
        except OSError as e:
            logger.warning(f"Failed to close partial dump {self.path}: {e}")


class StreamSink:
    """Writes the dump into a caller-owned text stream.

    The stream is flushed on close() but left open; its owner closes it.
    """

    mode = DumpMode.PLAIN
    path = None

    def __init__(self, stream: TextIO) -> None:
        self._stream: Optional[TextIO] = stream

    @property
    def current_writer(self) -> Optional[TextIO]:
        return self._stream

    def write(self, text: str, table: Optional[str] = None) -> None:
        if self._stream is None:
            raise ValueError("Stream sink is closed")
        with sink_errors(None, "write"):
            self._stream.write(text)

    def close(self) -> None:
        if self._stream is None:
            return
        stream, self._stream = self._stream, None
        with sink_errors(None, "flush"):
            stream.flush()

    def abort(self) -> None:
        self._stream = None
