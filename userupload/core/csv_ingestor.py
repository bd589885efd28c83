"""
CSV ingestion core module for UserUpload.

This module provides the CSVIngestor class, which streams a user CSV file,
normalizes every data row and partitions the rows into valid records and
invalid entries. No database access happens here.
"""

import csv
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Set, Tuple

from ..exceptions import DUPLICATE_EMAIL, INVALID_FORMAT, FileError
from ..utils.record_normalizer import FIELD_COUNT, NormalizedRecord, RecordNormalizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvalidEntry:
    """A rejected row with its source line number and reason tag."""

    line_number: int
    reason: str
    fields: Tuple[str, ...] = ()


class IngestionResult:
    """Outcome of reading one CSV file."""

    def __init__(self, source: Optional[str] = None):
        self.source = source
        self.valid: List[NormalizedRecord] = []
        self.invalid: List[InvalidEntry] = []

    @property
    def valid_count(self) -> int:
        return len(self.valid)

    @property
    def invalid_count(self) -> int:
        return len(self.invalid)

    @property
    def total_rows(self) -> int:
        return self.valid_count + self.invalid_count

    def __eq__(self, other) -> bool:
        if not isinstance(other, IngestionResult):
            return NotImplemented
        return self.valid == other.valid and self.invalid == other.invalid

    def __repr__(self) -> str:
        return f"IngestionResult(valid={self.valid_count}, invalid={self.invalid_count})"


class CSVIngestor:
    """Reads user CSV files into an IngestionResult."""

    def __init__(self, delimiter: str = ",", encoding: str = "utf-8-sig"):
        """Initialize CSV ingestor.

        Args:
            delimiter: CSV delimiter (default: ,)
            encoding: CSV encoding (default: utf-8-sig)
        """
        self.delimiter = delimiter
        self.encoding = encoding

    def ingest(self, csv_path: str) -> IngestionResult:
        """Read and classify every data row of a CSV file.

        The first row is always treated as a header and skipped. Each data
        row is either accepted, rejected as ``invalid_format`` or rejected
        as ``duplicate_email`` when an earlier row already claimed the email.

        Args:
            csv_path: Path to CSV file

        Returns:
            IngestionResult covering the whole file

        Raises:
            FileError: If the file is missing, unreadable or not decodable
        """
        result = IngestionResult(str(csv_path))
        seen_emails: Set[str] = set()

        try:
            with open(csv_path, "r", newline="", encoding=self.encoding) as f:
                records = self._read_records(csv.reader(f, delimiter=self.delimiter))
                next(records, None)  # Header

                for line_number, row in records:
                    if row is None:
                        self._reject(result, line_number, INVALID_FORMAT, [])
                    else:
                        self._classify_row(row, line_number, seen_emails, result)
        except FileNotFoundError as exc:
            raise FileError(str(csv_path), "file does not exist") from exc
        except UnicodeDecodeError as exc:
            raise FileError(str(csv_path), f"not valid {self.encoding} text ({exc.reason})") from exc
        except OSError as exc:
            raise FileError(str(csv_path), exc.strerror or str(exc)) from exc

        logger.info("Ingested %s: %d valid, %d invalid",
                    csv_path, result.valid_count, result.invalid_count)
        return result

    def _classify_row(self, row: List[str], line_number: int,
                      seen_emails: Set[str], result: IngestionResult):
        """Append one row to the valid or invalid side of the result."""
        if len(row) != FIELD_COUNT:
            self._reject(result, line_number, INVALID_FORMAT, row)
            return

        outcome = RecordNormalizer.try_normalize(row)
        if not isinstance(outcome, NormalizedRecord):
            self._reject(result, line_number, outcome, row)
            return

        email_key = outcome.email.casefold()
        if email_key in seen_emails:
            self._reject(result, line_number, DUPLICATE_EMAIL, row)
            return

        seen_emails.add(email_key)
        result.valid.append(outcome)

    @staticmethod
    def _read_records(reader) -> Iterator[Tuple[int, Optional[List[str]]]]:
        """Yield (line_number, row) for every record, header included.

        line_number is the physical line the record starts on. A record the
        csv module cannot parse is yielded with row None and reading goes on
        with the next line.
        """
        while True:
            line_number = reader.line_num + 1
            try:
                row = next(reader)
            except StopIteration:
                return
            except csv.Error as exc:
                logger.debug("Line %d is not parseable CSV: %s", line_number, exc)
                row = None
            yield line_number, row

    def _reject(self, result: IngestionResult, line_number: int, reason: str, row: List[str]):
        logger.debug("Line %d rejected (%s): %r", line_number, reason, row)
        result.invalid.append(InvalidEntry(line_number, reason, tuple(row)))


def ingest(csv_path: str, **kwargs) -> IngestionResult:
    """Read a CSV file with default settings."""
    return CSVIngestor(**kwargs).ingest(csv_path)
