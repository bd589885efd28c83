"""Integration test fixtures.

Starts an ephemeral PostgreSQL server through pytest-postgresql. Tests in
this directory are skipped when no PostgreSQL server binaries are found.
"""

from __future__ import annotations

import shutil

import psycopg
import pytest
from pytest_postgresql import factories

postgresql_proc = factories.postgresql_proc()
postgresql = factories.postgresql("postgresql_proc")


def pytest_collection_modifyitems(config, items):
    if shutil.which("pg_ctl") or shutil.which("pg_config"):
        return
    skip = pytest.mark.skip(reason="PostgreSQL server binaries are not installed")
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(skip)


@pytest.fixture
def dsn(postgresql) -> str:
    info = postgresql.info
    dsn = f"host={info.host} port={info.port} dbname={info.dbname} user={info.user}"
    if info.password:
        dsn += f" password={info.password}"
    return dsn


@pytest.fixture
def db_conn(postgresql, dsn):
    """A second, non-autocommit connection to the test database."""
    conn = psycopg.connect(dsn, autocommit=False)
    try:
        yield conn
    finally:
        conn.close()


def _stored_emails(conn: psycopg.Connection, table: str = "users") -> list[str]:
    with conn.cursor() as cur:
        cur.execute(f"SELECT email FROM {table} ORDER BY id")
        rows = [row[0] for row in cur.fetchall()]
    conn.commit()
    return rows


@pytest.fixture
def stored_emails():
    """Return a helper listing stored emails in insertion order."""
    return _stored_emails
