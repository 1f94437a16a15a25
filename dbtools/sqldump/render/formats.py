"""
Dump document templates.

Templates are ``str.format`` strings. Substituted values are inserted as
is: table names and CREATE statements are not escaped here.

Document layout:
    header            banner, server version, optional DROP/CREATE DATABASE, USE
    table (per table) DROP TABLE IF EXISTS + CREATE TABLE
    data (non-empty)  LOCK TABLES / INSERT ... VALUES / UNLOCK TABLES
    footer            completion timestamp
"""

from __future__ import annotations

from dataclasses import dataclass

from .._version import __version__

HEADER_TEMPLATE = """\
-- {tool_name} {dump_version}
--
-- ------------------------------------------------------
-- Server version\t{server_version}
{preamble}

USE {database};
"""

DROP_DATABASE_TEMPLATE = """\
DROP DATABASE IF EXISTS {database};
CREATE DATABASE {database};
SET FOREIGN_KEY_CHECKS=0;"""

TABLE_TEMPLATE = """
--
-- Table structure for table {name}
--

DROP TABLE IF EXISTS {name};
{sql};
"""

DATA_TEMPLATE = """
--
-- Dumping data for table {name}
--

LOCK TABLES {name} WRITE;
INSERT INTO {name} VALUES {values};
UNLOCK TABLES;
"""

FOOTER_TEMPLATE = """
-- Dump completed on {completed_at}
"""


@dataclass(frozen=True)
class DumpFormat:
    """Templates and banner for one dump format.

    Attributes:
        tool_name: Banner name on the first header line
        dump_version: Version printed next to the banner
        header: Header template
        drop_database: Preamble template used when dropping the database
        table: Per-table structure template
        data: Per-table data template (skipped for empty tables)
        footer: Footer template
    """

    tool_name: str = "SQL Dump"
    dump_version: str = __version__
    header: str = HEADER_TEMPLATE
    drop_database: str = DROP_DATABASE_TEMPLATE
    table: str = TABLE_TEMPLATE
    data: str = DATA_TEMPLATE
    footer: str = FOOTER_TEMPLATE


DEFAULT_FORMAT = DumpFormat()
