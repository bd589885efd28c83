"""
Exception types for UserUpload.

Row-level problems never raise out of ingestion; they are collected as
invalid entries. File and storage problems abort the current operation and
are raised with the raw diagnostic attached.
"""

from typing import Optional

import psycopg

INVALID_FORMAT = "invalid_format"
DUPLICATE_EMAIL = "duplicate_email"

DUPLICATE_KEY = "duplicate_key"
MISSING_TABLE = "missing_table"
STORAGE_FAILURE = "storage_failure"


class UserUploadError(Exception):
    """Base class for all UserUpload errors."""


class FileError(UserUploadError):
    """The CSV file is missing or cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")


class InvalidRecord(UserUploadError):
    """A single row failed normalization."""

    def __init__(self, reason: str = INVALID_FORMAT, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)


class StorageError(UserUploadError):
    """A database operation failed and was rolled back."""

    def __init__(self, cause: str, diagnostic: str):
        self.cause = cause
        self.diagnostic = diagnostic
        super().__init__(f"{cause}: {diagnostic}")

    @classmethod
    def from_psycopg(cls, exc: psycopg.Error, table: Optional[str] = None) -> "StorageError":
        """Classify a psycopg error by its SQLSTATE class."""
        diagnostic = str(exc).strip() or type(exc).__name__
        if isinstance(exc, psycopg.errors.UniqueViolation):
            return cls(DUPLICATE_KEY, diagnostic)
        if isinstance(exc, psycopg.errors.UndefinedTable):
            if table and table not in diagnostic:
                diagnostic = f"{diagnostic} (table {table})"
            return cls(MISSING_TABLE, diagnostic)
        return cls(STORAGE_FAILURE, diagnostic)
