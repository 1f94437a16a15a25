"""
SQL Dump Test Suite.

This package contains:
- unit/: Unit tests (no external dependencies)
- integration/: Integration tests (in-memory MySQL fake)
- e2e/: End-to-end tests (live MySQL server)
"""
