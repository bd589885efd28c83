"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import psycopg
import pytest

HEADER = "name,surname,email\n"


@pytest.fixture
def write_csv(tmp_path: Path):
    """Write CSV text (header prepended) and return its path as a string."""

    def _write(body: str, name: str = "users.csv", header: str = HEADER) -> str:
        path = tmp_path / name
        path.write_text(header + body, encoding="utf-8")
        return str(path)

    return _write


# ---------------------------------------------------------------------------
# In-memory stand-in for a psycopg connection to a users table
# ---------------------------------------------------------------------------

class FakeCursor:
    def __init__(self, conn: "FakeUsersConnection") -> None:
        self.conn = conn

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, query, params=None):
        self.conn.statements.append(query)

    def executemany(self, query, params_seq):
        self.conn.statements.append(query)
        for params in params_seq:
            self.conn.insert(tuple(params))


class FakeUsersConnection:
    """Buffers inserts until commit; enforces email uniqueness like the real table."""

    def __init__(self, existing: list[tuple] | None = None, table_exists: bool = True) -> None:
        self.autocommit = False
        self.stored: list[tuple] = list(existing or [])
        self.pending: list[tuple] = []
        self.statements: list = []
        self.table_exists = table_exists
        self.commits = 0
        self.rollbacks = 0

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def insert(self, row: tuple) -> None:
        if not self.table_exists:
            raise psycopg.errors.UndefinedTable('relation "public.users" does not exist')
        emails = {r[2].lower() for r in self.stored + self.pending}
        if row[2].lower() in emails:
            raise psycopg.errors.UniqueViolation(
                'duplicate key value violates unique constraint "users_email_key"'
            )
        self.pending.append(row)

    def commit(self) -> None:
        self.stored.extend(self.pending)
        self.pending = []
        self.commits += 1

    def rollback(self) -> None:
        self.pending = []
        self.rollbacks += 1


@pytest.fixture
def fake_conn():
    """Factory for FakeUsersConnection instances."""
    return FakeUsersConnection
