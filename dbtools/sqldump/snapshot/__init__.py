"""
Snapshot module for SQL Dump.

This module owns the consistency boundary of a dump:
- One read-only REPEATABLE READ transaction per dump
- Guaranteed rollback when the dump ends, successfully or not

Invariants:
    - All table reads of a dump happen between begin() and rollback()
    - Nothing is ever committed
"""

from .coordinator import SnapshotCoordinator

__all__ = ["SnapshotCoordinator"]
