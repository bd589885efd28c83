"""
Database connection management for UserUpload.

This module owns the psycopg connection used by the provisioning and
loading directives, plus the small inspection queries they report with.
"""

import logging
from typing import Optional

import psycopg
from psycopg import sql

from ..utils.db_config import DatabaseConfig

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Connection lifecycle and table inspection."""

    def __init__(self, env_path: Optional[str] = None, **connection_params):
        """Initialize database manager.

        Args:
            env_path: Path to .env file for configuration
            **connection_params: Connection overrides (dsn, host, port,
                dbname, user, password). A dsn is used as-is; individual
                settings are merged over the .env/environment configuration.
        """
        params = {k: v for k, v in connection_params.items() if v not in (None, "")}
        if "dsn" in params:
            self.db_config = None
            self._connection_params = {"dsn": params["dsn"]}
        else:
            self.db_config = DatabaseConfig(env_path, **params)
            self._connection_params = None

        self._connection: Optional[psycopg.Connection] = None

    def get_connection(self) -> psycopg.Connection:
        """Get database connection, creating it if necessary.

        The connection is opened outside autocommit mode so every directive
        controls its own transaction boundaries.

        Returns:
            Active psycopg connection
        """
        if self._connection is None or self._connection.closed:
            if self._connection_params:
                conn_params = self._connection_params
            else:
                conn_params = self.db_config.get_connection_params()

            logger.debug("Opening database connection: %r", self)
            if "dsn" in conn_params:
                self._connection = psycopg.connect(conn_params["dsn"], autocommit=False)
            else:
                self._connection = psycopg.connect(autocommit=False, **conn_params)

        return self._connection

    def close_connection(self):
        """Close database connection if open."""
        if self._connection and not self._connection.closed:
            self._connection.close()
            self._connection = None

    def table_exists(self, table_name: str, schema_name: str = "public") -> bool:
        """Check if table exists in the database."""
        conn = self.get_connection()
        with conn.cursor() as cur:
            cur.execute("""
                SELECT EXISTS (
                    SELECT FROM information_schema.tables
                    WHERE table_schema = %s AND table_name = %s
                )
            """, (schema_name, table_name))
            exists = cur.fetchone()[0]
        conn.commit()
        return bool(exists)

    def count_rows(self, table_name: str, schema_name: str = "public") -> int:
        """Count rows currently stored in a table."""
        conn = self.get_connection()
        with conn.cursor() as cur:
            cur.execute(sql.SQL("SELECT COUNT(*) FROM {}").format(
                sql.Identifier(schema_name, table_name)))
            count = cur.fetchone()[0]
        conn.commit()
        return count

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close_connection()

    def __repr__(self) -> str:
        """String representation."""
        if self.db_config:
            return f"DatabaseManager({self.db_config})"
        else:
            return "DatabaseManager(dsn=<explicit>)"
