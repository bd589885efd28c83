"""Core modules for UserUpload."""

from .csv_ingestor import CSVIngestor, IngestionResult, InvalidEntry
from .bulk_loader import BulkLoader, LoadReport
from .database_manager import DatabaseManager

__all__ = ["CSVIngestor", "IngestionResult", "InvalidEntry", "BulkLoader", "LoadReport", "DatabaseManager"]
