"""
Bulk loading of normalized user records.

All records of a batch are inserted in one transaction. Any failing row
rolls the whole batch back, so either every record persists or none do.
"""

import logging
from datetime import datetime
from typing import Sequence

import psycopg
from psycopg import sql

from ..exceptions import StorageError
from ..utils.record_normalizer import NormalizedRecord

logger = logging.getLogger(__name__)

INSERT_COLUMNS = ("name", "surname", "email")


class LoadReport:
    """Results from a committed bulk load."""

    def __init__(self, table: str):
        self.table = table
        self.inserted_count = 0
        self.processing_time = 0.0

    def __repr__(self) -> str:
        return f"LoadReport(table={self.table}, inserted={self.inserted_count})"


class BulkLoader:
    """Inserts a batch of records atomically."""

    def __init__(self, table: str = "users", schema_name: str = "public"):
        self.table = table
        self.schema_name = schema_name

    @property
    def qualified_table(self) -> str:
        return f"{self.schema_name}.{self.table}"

    def insert_statement(self) -> sql.Composed:
        """Build the parameterized INSERT statement."""
        return sql.SQL("INSERT INTO {table} ({columns}) VALUES ({placeholders})").format(
            table=sql.Identifier(self.schema_name, self.table),
            columns=sql.SQL(", ").join(sql.Identifier(col) for col in INSERT_COLUMNS),
            placeholders=sql.SQL(", ").join(sql.Placeholder() for _ in INSERT_COLUMNS))

    def load(self, records: Sequence[NormalizedRecord], conn: psycopg.Connection) -> LoadReport:
        """Insert all records in a single transaction.

        Args:
            records: Validated records to insert
            conn: Open psycopg connection, not in autocommit mode

        Returns:
            LoadReport with the number of inserted rows

        Raises:
            ValueError: If the connection is in autocommit mode
            StorageError: If any insert fails; nothing from the batch persists
        """
        if conn.autocommit:
            raise ValueError("Bulk load needs a connection with autocommit disabled")

        start_time = datetime.now()
        report = LoadReport(self.qualified_table)
        if not records:
            logger.info("No records to load into %s", self.qualified_table)
            return report

        params = [record.as_row() for record in records]
        try:
            with conn.cursor() as cur:
                cur.executemany(self.insert_statement(), params)
            conn.commit()
        except psycopg.Error as exc:
            conn.rollback()
            error = StorageError.from_psycopg(exc, self.qualified_table)
            logger.error("Load into %s rolled back: %s", self.qualified_table, error)
            raise error from exc

        report.inserted_count = len(params)
        report.processing_time = (datetime.now() - start_time).total_seconds()
        logger.info("Inserted %d records into %s", report.inserted_count, self.qualified_table)
        return report


def load(records: Sequence[NormalizedRecord], conn: psycopg.Connection,
         table: str = "users", schema_name: str = "public") -> LoadReport:
    """Insert records into the users table in one transaction."""
    return BulkLoader(table, schema_name).load(records, conn)
