"""
Base protocol and helpers for dump sinks.

This module defines the Sink protocol that every destination implements,
plus the destination pre-flight check and the sink factory.

Invariants:
    - A destination that already exists is never opened
    - Exactly one text stream is writable at a time
    - close() finalizes the container (gzip trailer, zip directory)
    - abort() leaves no usable gzip or zip behind; those files are removed

How to change safely:
    - Protocol changes require updating all implementations
    - Keep the collision check ahead of any file creation
"""

from __future__ import annotations

import logging
import os
from abc import abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Protocol, TextIO, runtime_checkable

from ..config import DumpMode
from ..errors import DestinationExistsError, SinkError

logger = logging.getLogger(__name__)

_SUFFIXES = {
    DumpMode.PLAIN: "",
    DumpMode.GZIP: ".gz",
    DumpMode.ARCHIVE: ".zip",
}


@runtime_checkable
class Sink(Protocol):
    """Protocol for dump destinations.

    Text passed with a table name belongs to that table's block; text
    passed without one is global (header/footer). Plain and gzip sinks
    write both into one stream. The archive sink opens one member per
    table and keeps global text for the archive comment.

    Example:
        >>> sink = open_sink("/var/tmp/app.sql", DumpMode.PLAIN)
        >>> sink.write("-- header\\n")
        >>> sink.write("DROP TABLE IF EXISTS users;\\n", table="users")
        >>> sink.close()
    """

    path: Optional[Path]
    mode: DumpMode

    @property
    @abstractmethod
    def current_writer(self) -> Optional[TextIO]:
        """The text stream currently receiving writes, if any."""
        ...

    @abstractmethod
    def write(self, text: str, table: Optional[str] = None) -> None:
        """Write text, switching to the table's target first if needed.

        Raises:
            SinkError: On I/O failure
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Finalize and close the destination.

        Raises:
            SinkError: If finalization fails
        """
        ...

    @abstractmethod
    def abort(self) -> None:
        """Close without finalizing after a failed dump."""
        ...


def destination_path(path: str | os.PathLike[str], mode: DumpMode) -> Path:
    """Return the final destination path for a mode.

    Gzip output gets a ``.gz`` suffix and archive output a ``.zip`` suffix
    when the path does not already carry it.
    """
    resolved = Path(path)
    suffix = _SUFFIXES[mode]
    if suffix and not resolved.name.endswith(suffix):
        resolved = resolved.with_name(resolved.name + suffix)
    return resolved


def check_destination(path: Path) -> None:
    """Refuse a destination that already exists.

    Raises:
        DestinationExistsError: If anything exists at the path.
    """
    if path.exists() or path.is_symlink():
        raise DestinationExistsError(str(path))


@contextmanager
def sink_errors(path: Optional[Path], action: str) -> Iterator[None]:
    """Translate I/O failures in the block into SinkError.

    A path of None stands for a caller-owned stream.
    """
    target = f"'{path}'" if path is not None else "output stream"
    try:
        yield
    except FileExistsError:
        raise DestinationExistsError(str(path))
    except (OSError, ValueError) as e:
        raise SinkError(
            f"Failed to {action} {target}: {e}",
            path=str(path) if path is not None else None,
        ) from e


def discard(path: Path) -> None:
    """Remove an unfinished destination, logging instead of raising."""
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Failed to remove unfinished dump {path}: {e}", extra={"path": str(path)})
    else:
        logger.info(f"Removed unfinished dump {path}", extra={"path": str(path)})


def open_sink(path: str | os.PathLike[str], mode: DumpMode) -> Sink:
    """Factory function to create a sink for a destination.

    Args:
        path: Destination path (suffix added per mode)
        mode: Plain, gzip or archive

    Returns:
        An open Sink

    Raises:
        DestinationExistsError: If the destination already exists
        SinkError: If the destination cannot be created
        ValueError: If the mode is not supported
    """
    from .archive import ArchiveSink
    from .compressed import GzipSink
    from .plain import PlainSink

    resolved = destination_path(path, mode)
    check_destination(resolved)

    if mode == DumpMode.PLAIN:
        sink: Sink = PlainSink(resolved)
    elif mode == DumpMode.GZIP:
        sink = GzipSink(resolved)
    elif mode == DumpMode.ARCHIVE:
        sink = ArchiveSink(resolved)
    else:
        raise ValueError(f"Unsupported dump mode: {mode}")

    logger.debug(f"Opened {mode.value} sink", extra={"path": str(resolved), "mode": mode.value})
    return sink
