"""
Sink module for SQL Dump.

This module abstracts where a dump document goes:
- Plain: one UTF-8 .sql file
- Gzip: the same document through one gzip stream (.sql.gz)
- Archive: a zip with one <table>.sql member per table (.zip)

Invariants:
    - Existing destinations are never overwritten
    - Gzip and archive output are mutually exclusive
    - Unfinished gzip/archive output is removed on abort
"""

from .archive import ArchiveSink, member_name
from .base import Sink, check_destination, destination_path, open_sink
from .compressed import GzipSink
from .plain import PlainSink, StreamSink

__all__ = [
    # Protocol and helpers
    "Sink",
    "check_destination",
    "destination_path",
    "member_name",
    # Factory
    "open_sink",
    # Implementations
    "PlainSink",
    "StreamSink",
    "GzipSink",
    "ArchiveSink",
]
