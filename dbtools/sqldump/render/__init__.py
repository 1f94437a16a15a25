"""
Render module for SQL Dump.

Turns captured tables into the textual dump document using injected
DumpFormat templates; no template state is shared between dumps.
"""

from .assembler import DocumentAssembler, DumpHeader
from .formats import DEFAULT_FORMAT, DumpFormat

__all__ = ["DEFAULT_FORMAT", "DocumentAssembler", "DumpFormat", "DumpHeader"]
