"""
CLI tools for SQL Dump.

This module provides command-line tools for:
- dump: Write a snapshot-consistent dump of one MySQL database

Invariants:
    - Tools own the connection lifecycle; the engine never closes it
    - Configuration comes from the environment, overridden by flags
"""

from .dump_cli import main

__all__ = ["main"]
