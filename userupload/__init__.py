"""
UserUpload - CSV user import for PostgreSQL

Reads a CSV of users (name, surname, email), validates and normalizes each
row, and loads the valid rows into a users table in one all-or-nothing
transaction. Invalid rows are reported with their line number and reason.

Main Classes:
    CSVIngestor: Read a CSV file into valid records and invalid entries
    RecordNormalizer: Validate and normalize a single row
    BulkLoader: Insert a batch of records atomically
    DatabaseManager: Connection handling and table inspection

Quick Start:
    from userupload import ingest_csv, provision_table, render, DatabaseManager, BulkLoader

    result = ingest_csv("users.csv")
    print(render(result.valid_count, result.invalid))

    with DatabaseManager() as db:
        provision_table(db.get_connection())
        BulkLoader().load(result.valid, db.get_connection())

Version: 1.0.0
License: MIT
"""

from .core.csv_ingestor import CSVIngestor, IngestionResult, InvalidEntry
from .core.bulk_loader import BulkLoader, LoadReport
from .core.database_manager import DatabaseManager
from .core.report import render
from .core.users_table import TableSchema, users_schema
from .core import users_table
from .utils.record_normalizer import NormalizedRecord, RecordNormalizer
from .utils.db_config import DatabaseConfig
from .exceptions import FileError, StorageError, InvalidRecord

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    "CSVIngestor",
    "IngestionResult",
    "InvalidEntry",
    "BulkLoader",
    "LoadReport",
    "DatabaseManager",
    "DatabaseConfig",
    "RecordNormalizer",
    "NormalizedRecord",
    "TableSchema",
    "users_schema",
    "render",
    "FileError",
    "StorageError",
    "InvalidRecord",
    "ingest_csv",
    "provision_table",
]

# Convenience functions for quick usage
def ingest_csv(csv_path: str, **kwargs) -> IngestionResult:
    """Quick CSV ingestion function.

    Args:
        csv_path: Path to CSV file
        **kwargs: CSVIngestor options (delimiter, encoding)

    Returns:
        IngestionResult with valid records and invalid entries
    """
    return CSVIngestor(**kwargs).ingest(csv_path)

def provision_table(conn, table: str = "users", schema_name: str = "public") -> TableSchema:
    """Quick drop-and-recreate of the users table.

    Args:
        conn: Open psycopg connection
        table: Table name (default: users)
        schema_name: Schema name (default: public)

    Returns:
        The TableSchema that was created
    """
    return users_table.provision(conn, table, schema_name)
