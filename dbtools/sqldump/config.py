"""
Configuration management for SQL Dump.

Configuration is read from environment variables; CLI flags override it.
This module provides typed configuration classes with validation.

Invariants:
    - All settings have sensible defaults for local development
    - Compressed and archive output are mutually exclusive (one DumpMode)
    - Secrets are never logged or exposed in error messages

How to change safely:
    - Add new settings with defaults that maintain backward compatibility
    - Keep environment variable names stable; scripts depend on them
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class DumpMode(Enum):
    """Supported dump destinations."""

    PLAIN = "plain"
    GZIP = "gzip"
    ARCHIVE = "archive"

    @classmethod
    def parse(cls, value: str) -> DumpMode:
        """Parse a mode name, case-insensitively."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            allowed = ", ".join(mode.value for mode in cls)
            raise ValueError(f"Invalid dump mode '{value}'. Must be one of: {allowed}")


@dataclass(frozen=True)
class ConnectionConfig:
    """MySQL connection settings, used by the CLI only.

    Attributes:
        host: Server host name
        port: Server port
        user: Login user
        password: Login password (never logged)
        database: Database to dump
        connect_timeout: Connection timeout in seconds
    """

    host: str = "127.0.0.1"
    port: int = 3306
    user: str = "root"
    password: str | None = None
    database: str | None = None
    connect_timeout: int = 10

    @classmethod
    def from_env(cls) -> ConnectionConfig:
        """Load configuration from environment variables."""
        return cls(
            host=os.getenv("MYSQL_HOST", "127.0.0.1"),
            port=int(os.getenv("MYSQL_PORT", "3306")),
            user=os.getenv("MYSQL_USER", "root"),
            password=os.getenv("MYSQL_PASSWORD"),
            database=os.getenv("MYSQL_DATABASE"),
            connect_timeout=int(os.getenv("MYSQL_CONNECT_TIMEOUT", "10")),
        )


@dataclass(frozen=True)
class OutputConfig:
    """Destination settings.

    Attributes:
        directory: Directory for generated dump names
        prefix: File name prefix for generated dump names
        time_format: strftime format appended to the prefix
        mode: Plain, gzip or archive output
        drop_database: Emit DROP/CREATE DATABASE in the header
    """

    directory: str = "/var/tmp"
    prefix: str = "sqldump"
    time_format: str = "%Y%m%d-%H%M"
    mode: DumpMode = DumpMode.PLAIN
    drop_database: bool = False

    @classmethod
    def from_env(cls) -> OutputConfig:
        """Load configuration from environment variables."""
        return cls(
            directory=os.getenv("DUMP_DIR", "/var/tmp"),
            prefix=os.getenv("DUMP_PREFIX", "sqldump"),
            time_format=os.getenv("DUMP_TIME_FORMAT", "%Y%m%d-%H%M"),
            mode=DumpMode.parse(os.getenv("DUMP_MODE", "plain")),
            drop_database=os.getenv("DUMP_DROP_DATABASE", "false").lower() == "true",
        )


@dataclass(frozen=True)
class ExtractConfig:
    """Extraction settings.

    Attributes:
        fetch_batch_size: Rows pulled from the cursor per fetchmany() call
        isolation_level: Isolation level of the snapshot transaction
    """

    fetch_batch_size: int = 1000
    isolation_level: str = "REPEATABLE READ"

    @classmethod
    def from_env(cls) -> ExtractConfig:
        """Load configuration from environment variables."""
        return cls(
            fetch_batch_size=int(os.getenv("DUMP_FETCH_BATCH_SIZE", "1000")),
            isolation_level=os.getenv("DUMP_ISOLATION_LEVEL", "REPEATABLE READ"),
        )


@dataclass(frozen=True)
class ObservabilityConfig:
    """Logging configuration.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log format (json, text)
    """

    log_level: str = "INFO"
    log_format: str = "text"

    @classmethod
    def from_env(cls) -> ObservabilityConfig:
        """Load configuration from environment variables."""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "text"),
        )


_ISOLATION_LEVELS = ("READ UNCOMMITTED", "READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE")


@dataclass
class DumpConfig:
    """Complete dump configuration.

    Attributes:
        connection: Connection settings (CLI only)
        output: Destination settings
        extract: Extraction settings
        observability: Logging settings
    """

    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @classmethod
    def from_env(cls) -> DumpConfig:
        """Load complete configuration from environment variables.

        Raises:
            ValueError: If configuration is invalid.
        """
        config = cls(
            connection=ConnectionConfig.from_env(),
            output=OutputConfig.from_env(),
            extract=ExtractConfig.from_env(),
            observability=ObservabilityConfig.from_env(),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration consistency.

        Raises:
            ValueError: If configuration is invalid.
        """
        if self.extract.fetch_batch_size <= 0:
            raise ValueError("DUMP_FETCH_BATCH_SIZE must be positive")

        if self.extract.isolation_level.upper() not in _ISOLATION_LEVELS:
            raise ValueError(
                f"Invalid DUMP_ISOLATION_LEVEL '{self.extract.isolation_level}'. "
                f"Must be one of: {', '.join(_ISOLATION_LEVELS)}"
            )

        if self.observability.log_format not in ("json", "text"):
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")

        if not os.path.isdir(self.output.directory):
            logger.warning(f"Dump directory does not exist: {self.output.directory}")

    def log_config(self) -> None:
        """Log configuration (redacting secrets)."""
        logger.info(
            "Dump configuration loaded",
            extra={
                "mysql_host": self.connection.host,
                "mysql_port": self.connection.port,
                "mysql_user": self.connection.user,
                "mysql_database": self.connection.database,
                "dump_dir": self.output.directory,
                "dump_mode": self.output.mode.value,
                "drop_database": self.output.drop_database,
                "fetch_batch_size": self.extract.fetch_batch_size,
                "isolation_level": self.extract.isolation_level,
                "log_level": self.observability.log_level,
            },
        )
