"""
E2E test fixtures for SQL Dump.

These tests require a running MySQL server reachable through the
MYSQL_HOST / MYSQL_PORT / MYSQL_USER / MYSQL_PASSWORD environment variables.
"""

import os
import time
import uuid
from typing import Generator

import mysql.connector
import pytest

from dbtools.sqldump.config import ConnectionConfig

# Skip E2E tests if not in E2E mode
E2E_ENABLED = os.environ.get("SQLDUMP_E2E_TESTS", "0") == "1"

pytestmark = pytest.mark.skipif(
    not E2E_ENABLED,
    reason="E2E tests disabled. Set SQLDUMP_E2E_TESTS=1 to enable."
)


def wait_for_mysql(config: ConnectionConfig, timeout: int = 60) -> bool:
    """Wait for the server to accept connections."""
    start = time.time()
    while time.time() - start < timeout:
        try:
            mysql.connector.connect(
                host=config.host,
                port=config.port,
                user=config.user,
                password=config.password or "",
                connection_timeout=2,
            ).close()
            return True
        except mysql.connector.Error:
            time.sleep(1)
    return False


@pytest.fixture(scope="session")
def mysql_config() -> ConnectionConfig:
    """Connection settings from the environment."""
    config = ConnectionConfig.from_env()
    if E2E_ENABLED:
        assert wait_for_mysql(config), "MySQL not ready"
    return config


@pytest.fixture
def database(mysql_config) -> Generator[str, None, None]:
    """Create a throwaway database with sample tables."""
    name = f"sqldump_e2e_{uuid.uuid4().hex[:8]}"
    admin = mysql.connector.connect(
        host=mysql_config.host,
        port=mysql_config.port,
        user=mysql_config.user,
        password=mysql_config.password or "",
        autocommit=True,
    )
    cursor = admin.cursor()
    try:
        cursor.execute(f"CREATE DATABASE {name}")
        cursor.execute(f"USE {name}")
        cursor.execute(
            "CREATE TABLE users ("
            " id INT NOT NULL PRIMARY KEY,"
            " name VARCHAR(64) NULL,"
            " note TEXT,"
            " balance DECIMAL(10,2),"
            " avatar BLOB,"
            " created_at DATETIME"
            ") ENGINE=InnoDB"
        )
        cursor.execute("CREATE TABLE orders (id INT PRIMARY KEY, user_id INT) ENGINE=InnoDB")
        cursor.execute(
            "INSERT INTO users VALUES"
            " (1, NULL, 'O''Brien', 10.50, 0x00FF, '2024-01-02 03:04:05'),"
            " (2, 'Ann', 'back\\\\slash', NULL, NULL, NULL)"
        )
        yield name
    finally:
        cursor.execute(f"DROP DATABASE IF EXISTS {name}")
        cursor.close()
        admin.close()


@pytest.fixture
def connection(mysql_config, database):
    """Dump connection to the throwaway database."""
    conn = mysql.connector.connect(
        host=mysql_config.host,
        port=mysql_config.port,
        user=mysql_config.user,
        password=mysql_config.password or "",
        database=database,
        autocommit=False,
    )
    yield conn
    conn.close()


@pytest.fixture
def writer(mysql_config, database):
    """Second session used for concurrent writes."""
    conn = mysql.connector.connect(
        host=mysql_config.host,
        port=mysql_config.port,
        user=mysql_config.user,
        password=mysql_config.password or "",
        database=database,
        autocommit=True,
    )
    yield conn
    conn.close()
