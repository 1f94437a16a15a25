"""
Unit tests for the dump CLI.

Tests cover:
- Argument parsing and config overrides
- Generated destination names
- Exit codes and cleanup in run()
"""

import logging
from datetime import datetime

import json_log_formatter
import mysql.connector
import pytest

from dbtools.sqldump.config import DumpConfig, DumpMode, ObservabilityConfig, OutputConfig
from dbtools.sqldump.tools import dump_cli
from tests.fake_mysql import make_shop


@pytest.fixture
def base_config(tmp_path):
    """Configuration writing into a temporary directory."""
    return DumpConfig(output=OutputConfig(directory=str(tmp_path)))


@pytest.fixture
def server(monkeypatch):
    """Fake server returned by the CLI's connect()."""
    server = make_shop()
    connections = []

    def fake_connect(config):
        connection = server.connect()
        connections.append(connection)
        return connection

    monkeypatch.setattr(dump_cli, "connect", fake_connect)
    server.connections = connections
    return server


class TestParser:
    """Tests for argument parsing and overrides."""

    def test_overrides(self, base_config):
        """Flags override environment configuration."""
        args = dump_cli.build_parser().parse_args(
            ["--host", "db", "--port", "3307", "-d", "shop", "--gzip", "--drop-database"]
        )

        config = dump_cli.resolve_config(args, base_config)

        assert config.connection.host == "db"
        assert config.connection.port == 3307
        assert config.connection.database == "shop"
        assert config.output.mode == DumpMode.GZIP
        assert config.output.drop_database is True

    def test_archive_flag(self, base_config):
        """--archive selects archive mode."""
        args = dump_cli.build_parser().parse_args(["-d", "shop", "--archive"])

        assert dump_cli.resolve_config(args, base_config).output.mode == DumpMode.ARCHIVE

    def test_gzip_and_archive_exclusive(self):
        """--gzip and --archive cannot be combined."""
        with pytest.raises(SystemExit):
            dump_cli.build_parser().parse_args(["--gzip", "--archive"])

    def test_database_required(self, base_config):
        """A database must come from a flag or the environment."""
        args = dump_cli.build_parser().parse_args([])

        with pytest.raises(ValueError, match="database"):
            dump_cli.resolve_config(args, base_config)

    def test_repeatable_table(self):
        """-t may be given several times."""
        args = dump_cli.build_parser().parse_args(["-t", "users", "-t", "orders"])

        assert args.tables == ["users", "orders"]

    def test_main_bad_config_exits_2(self, monkeypatch, capsys):
        """Invalid configuration exits with status 2."""
        monkeypatch.delenv("MYSQL_DATABASE", raising=False)

        with pytest.raises(SystemExit) as exc_info:
            dump_cli.main([])

        assert exc_info.value.code == 2
        assert "Invalid configuration" in capsys.readouterr().out


class TestDefaultDestination:
    """Tests for generated dump names."""

    def test_generated_name(self, base_config, tmp_path):
        """Name is <dir>/<prefix>-<timestamp>.sql."""
        path = dump_cli.default_destination(base_config, now=datetime(2024, 5, 6, 7, 8))

        assert path == tmp_path / "sqldump-20240506-0708.sql"


class TestRun:
    """Tests for run()."""

    def test_success(self, server, base_config, tmp_path, capsys):
        """A dump exits 0 and closes the connection."""
        output = tmp_path / "shop.sql"

        assert dump_cli.run(base_config, str(output), None) == 0

        assert output.exists()
        assert "INSERT INTO users VALUES" in output.read_text(encoding="utf-8")
        assert server.connections[0].closed
        assert "Dump completed successfully" in capsys.readouterr().out

    def test_gzip_suffix(self, server, tmp_path):
        """Gzip dumps get a .gz suffix."""
        config = DumpConfig(output=OutputConfig(directory=str(tmp_path), mode=DumpMode.GZIP))

        assert dump_cli.run(config, str(tmp_path / "shop.sql"), None) == 0

        assert (tmp_path / "shop.sql.gz").exists()
        assert not (tmp_path / "shop.sql").exists()

    def test_existing_destination_untouched(self, server, base_config, tmp_path, capsys):
        """An existing file is left alone and the run fails."""
        output = tmp_path / "shop.sql"
        output.write_text("previous dump")

        assert dump_cli.run(base_config, str(output), None) == 1

        assert output.read_text() == "previous dump"
        assert "already exists" in capsys.readouterr().out
        assert server.connections[0].closed

    def test_failed_plain_dump_removed(self, server, base_config, tmp_path):
        """A partial plain dump is removed after a failure."""
        server.fail_on("SELECT * FROM orders")
        output = tmp_path / "shop.sql"

        assert dump_cli.run(base_config, str(output), None) == 1

        assert not output.exists()
        assert server.connections[0].closed

    def test_connect_failure(self, monkeypatch, base_config, tmp_path, capsys):
        """A connection failure exits 1 without creating a file."""

        def refuse(config):
            raise mysql.connector.Error("Can't connect to MySQL server")

        monkeypatch.setattr(dump_cli, "connect", refuse)
        output = tmp_path / "shop.sql"

        assert dump_cli.run(base_config, str(output), None) == 1

        assert not output.exists()
        assert "cannot connect" in capsys.readouterr().out

    def test_generated_destination(self, server, base_config, tmp_path):
        """Without an output path the dump lands in the dump directory."""
        assert dump_cli.run(base_config, None, ["users"]) == 0

        dumps = list(tmp_path.glob("sqldump-*.sql"))
        assert len(dumps) == 1


class TestSetupLogging:
    """Tests for setup_logging()."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        """Put the root logger back after each test."""
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers = handlers
        root.setLevel(level)

    def test_json_format(self):
        """JSON log format uses the JSON formatter."""
        dump_cli.setup_logging(ObservabilityConfig(log_level="WARNING", log_format="json"))

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, json_log_formatter.JSONFormatter)

    def test_verbose_forces_debug(self):
        """--verbose overrides the configured level."""
        dump_cli.setup_logging(ObservabilityConfig(log_level="ERROR"), verbose=True)

        assert logging.getLogger().level == logging.DEBUG
