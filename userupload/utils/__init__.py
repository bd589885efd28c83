"""Utility modules for UserUpload."""

from .record_normalizer import RecordNormalizer, NormalizedRecord
from .db_config import DatabaseConfig

__all__ = ["RecordNormalizer", "NormalizedRecord", "DatabaseConfig"]
