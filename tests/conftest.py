"""Pytest configuration and shared fixtures."""

import os
import textwrap
from collections.abc import Callable
from pathlib import Path

import psycopg
import pytest
from psycopg import Connection

from seedkeeper import MemoryStorage

TEST_DATABASE_URL = os.getenv(
    "SEEDKEEPER_TEST_DATABASE_URL", "postgresql://localhost/seedkeeper_test"
)


@pytest.fixture
def storage() -> MemoryStorage:
    """In-memory storage with transaction support."""
    return MemoryStorage()


@pytest.fixture
def seed_dir(tmp_path: Path) -> Path:
    """Empty seed directory."""
    directory = tmp_path / "seeds"
    directory.mkdir()
    return directory


@pytest.fixture
def write_seed(seed_dir: Path) -> Callable[[str, str], Path]:
    """
    Write a seed file into seed_dir.

    Usage:
        write_seed("20240101_users.py", '''
            @seed
            def run(db):
                db.insert_rows("tb_user", [{"name": "alice"}])
        ''')
    """

    def _write(name: str, content: str = "") -> Path:
        path = seed_dir / name
        path.write_text(textwrap.dedent(content).lstrip())
        return path

    return _write


@pytest.fixture
def db_conn() -> Connection:
    """
    Provide a test database connection.

    Uses SEEDKEEPER_TEST_DATABASE_URL; tests are skipped when the
    database is unreachable.
    """
    try:
        conn = psycopg.connect(TEST_DATABASE_URL, autocommit=False, connect_timeout=3)
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL not available: {e}")

    yield conn

    conn.rollback()
    conn.close()


@pytest.fixture
def test_schema(db_conn: Connection) -> str:
    """
    Create a test schema with a sample table.

    Returns the schema name.
    """
    schema_name = "test_seedkeeper"

    with db_conn.cursor() as cur:
        cur.execute(f"DROP SCHEMA IF EXISTS {schema_name} CASCADE")
        cur.execute(f"CREATE SCHEMA {schema_name}")
        cur.execute(f"""
            CREATE TABLE {schema_name}.tb_user (
                name TEXT PRIMARY KEY,
                email TEXT
            )
        """)
    db_conn.commit()

    yield schema_name

    db_conn.rollback()
    with db_conn.cursor() as cur:
        cur.execute(f"DROP SCHEMA IF EXISTS {schema_name} CASCADE")
    db_conn.commit()
