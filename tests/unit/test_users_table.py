"""Unit tests for userupload.core.users_table."""

from __future__ import annotations

from unittest.mock import MagicMock

import psycopg
import pytest

from userupload.core.users_table import TableSchema, drop, provision, users_schema
from userupload.exceptions import STORAGE_FAILURE, StorageError


class TestUsersSchema:
    def test_columns(self):
        assert users_schema().column_names() == ["id", "name", "surname", "email", "created_at"]

    def test_to_sql(self):
        text = users_schema().to_sql()
        assert text.startswith("CREATE TABLE public.users (")
        assert "id SERIAL PRIMARY KEY" in text
        assert "name VARCHAR(50) NOT NULL" in text
        assert "surname VARCHAR(50) NOT NULL" in text
        assert "email VARCHAR(100) NOT NULL UNIQUE CHECK (email = LOWER(email))" in text
        assert "created_at TIMESTAMPTZ DEFAULT NOW()" in text

    def test_custom_name(self):
        schema = users_schema("people", "staging")
        assert schema.to_sql().startswith("CREATE TABLE staging.people (")
        assert repr(schema) == "TableSchema(table='staging.people', columns=5)"

    def test_add_column(self):
        schema = TableSchema("t")
        schema.add_column("x", "TEXT")
        assert schema.columns == [{"name": "x", "type": "TEXT", "constraints": []}]


def _mock_conn() -> tuple[MagicMock, MagicMock]:
    conn = MagicMock()
    cur = conn.cursor.return_value.__enter__.return_value
    return conn, cur


class TestProvision:
    def test_drops_then_creates_and_commits(self):
        conn, cur = _mock_conn()
        schema = provision(conn)
        assert cur.execute.call_count == 2
        drop_stmt, create_stmt = (c.args[0] for c in cur.execute.call_args_list)
        assert drop_stmt == schema.drop_statement()
        assert create_stmt == schema.create_statement()
        conn.commit.assert_called_once()

    def test_twice_in_a_row(self):
        conn, cur = _mock_conn()
        provision(conn)
        provision(conn)
        assert cur.execute.call_count == 4
        assert conn.commit.call_count == 2

    def test_failure_rolls_back(self):
        conn, cur = _mock_conn()
        cur.execute.side_effect = psycopg.errors.InsufficientPrivilege("permission denied for schema public")
        with pytest.raises(StorageError) as exc_info:
            provision(conn)
        assert exc_info.value.cause == STORAGE_FAILURE
        assert "permission denied" in exc_info.value.diagnostic
        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()


class TestDrop:
    def test_single_statement(self):
        conn, cur = _mock_conn()
        drop(conn, "people")
        cur.execute.assert_called_once_with(users_schema("people").drop_statement())
        conn.commit.assert_called_once()
