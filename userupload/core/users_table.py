"""
Users table definition and provisioning for UserUpload.

This module provides the TableSchema class describing the users table and
the destructive provisioning directives that (re)build or drop it. Both
directives run standalone: they are never combined with a data load.
"""

import logging
from typing import Dict, Any, List, Optional

import psycopg
from psycopg import sql

from ..exceptions import StorageError

logger = logging.getLogger(__name__)


class TableSchema:
    """Represents a PostgreSQL table definition."""

    def __init__(self, table_name: str, schema_name: str = "public",
                 columns: Optional[List[Dict[str, Any]]] = None):
        self.table_name = table_name
        self.schema_name = schema_name
        self.columns = columns or []

    def add_column(self, name: str, data_type: str, constraints: Optional[List[str]] = None):
        """Add a column to the table definition.

        Args:
            name: Column name
            data_type: PostgreSQL data type
            constraints: Column constraints (NOT NULL, UNIQUE, DEFAULT ...)
        """
        self.columns.append({
            "name": name,
            "type": data_type,
            "constraints": constraints or []
        })

    def column_names(self) -> List[str]:
        return [col["name"] for col in self.columns]

    def qualified_name(self) -> sql.Identifier:
        return sql.Identifier(self.schema_name, self.table_name)

    def create_statement(self) -> sql.Composed:
        """Build the CREATE TABLE statement with quoted identifiers."""
        column_defs = []
        for col in self.columns:
            parts = [col["type"]] + list(col["constraints"])
            column_defs.append(sql.SQL("{} {}").format(
                sql.Identifier(col["name"]), sql.SQL(" ".join(parts))))

        return sql.SQL("CREATE TABLE {table} (\n    {columns}\n)").format(
            table=self.qualified_name(),
            columns=sql.SQL(",\n    ").join(column_defs))

    def drop_statement(self) -> sql.Composed:
        return sql.SQL("DROP TABLE IF EXISTS {}").format(self.qualified_name())

    def to_sql(self) -> str:
        """Generate CREATE TABLE SQL text without a database connection."""
        lines = [f"CREATE TABLE {self.schema_name}.{self.table_name} ("]
        column_lines = []

        for col in self.columns:
            parts = [f'    {col["name"]}', col["type"]]
            parts.extend(col["constraints"])
            column_lines.append(" ".join(parts))

        lines.append(",\n".join(column_lines))
        lines.append(");")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"TableSchema(table='{self.schema_name}.{self.table_name}', columns={len(self.columns)})"


def users_schema(table_name: str = "users", schema_name: str = "public") -> TableSchema:
    """Build the authoritative users table definition."""
    schema = TableSchema(table_name, schema_name)
    schema.add_column("id", "SERIAL PRIMARY KEY")
    schema.add_column("name", "VARCHAR(50)", ["NOT NULL"])
    schema.add_column("surname", "VARCHAR(50)", ["NOT NULL"])
    schema.add_column("email", "VARCHAR(100)", ["NOT NULL", "UNIQUE", "CHECK (email = LOWER(email))"])
    schema.add_column("created_at", "TIMESTAMPTZ", ["DEFAULT NOW()"])
    return schema


def _run_ddl(conn: psycopg.Connection, statements: List[sql.Composable], table: str):
    """Run DDL statements in one transaction, rolling back on failure."""
    try:
        with conn.cursor() as cur:
            for statement in statements:
                cur.execute(statement)
        conn.commit()
    except psycopg.Error as exc:
        conn.rollback()
        error = StorageError.from_psycopg(exc, table)
        logger.error("Provisioning %s failed: %s", table, error)
        raise error from exc


def provision(conn: psycopg.Connection, table: str = "users",
              schema_name: str = "public") -> TableSchema:
    """Drop the users table if present and create it fresh.

    Any rows in the existing table are lost. Calling this twice in a row
    is safe: the second call drops what the first created.

    Args:
        conn: Open psycopg connection
        table: Table name (default: users)
        schema_name: Schema name (default: public)

    Returns:
        The TableSchema that was created

    Raises:
        StorageError: If the server rejects either statement
    """
    schema = users_schema(table, schema_name)
    logger.warning("Rebuilding table %s.%s; existing rows will be lost", schema_name, table)
    _run_ddl(conn, [schema.drop_statement(), schema.create_statement()], f"{schema_name}.{table}")
    logger.info("Table %s.%s created", schema_name, table)
    return schema


def drop(conn: psycopg.Connection, table: str = "users", schema_name: str = "public"):
    """Drop the users table if present.

    Raises:
        StorageError: If the server rejects the statement
    """
    schema = users_schema(table, schema_name)
    logger.warning("Dropping table %s.%s", schema_name, table)
    _run_ddl(conn, [schema.drop_statement()], f"{schema_name}.{table}")
