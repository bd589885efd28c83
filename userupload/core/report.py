"""Plain-text reports for ingestion and load outcomes."""

from typing import Sequence

from ..exceptions import DUPLICATE_KEY, MISSING_TABLE, StorageError
from .bulk_loader import LoadReport
from .csv_ingestor import InvalidEntry

_STORAGE_HINTS = {
    DUPLICATE_KEY: "An email in this file already exists in the table.",
    MISSING_TABLE: "The users table does not exist. Run with --create_table first.",
}


def render(valid_count: int, invalid_entries: Sequence[InvalidEntry]) -> str:
    """Format the ingestion outcome.

    The same text is produced after a dry run and after a real load.
    """
    lines = [
        "Processing finished.",
        "",
        f"Valid records: {valid_count}",
        f"Invalid records: {len(invalid_entries)}",
    ]
    if invalid_entries:
        lines.append("")
        lines.append("Invalid entries:")
        for entry in invalid_entries:
            lines.append(f"  line {entry.line_number}: {entry.reason}")
    return "\n".join(lines)


def render_load_summary(report: LoadReport) -> str:
    if report.inserted_count == 0:
        return f"No records inserted into {report.table}."
    return (f"Inserted {report.inserted_count} records into {report.table}.\n"
            f"Processing time: {report.processing_time:.2f} seconds")


def render_storage_error(error: StorageError, loading: bool = True) -> str:
    """Format a storage failure; the transaction has already been rolled back."""
    lines = [
        f"Database error ({error.cause}): {error.diagnostic}",
        "No records were inserted." if loading else "No changes were made to the table.",
    ]
    hint = _STORAGE_HINTS.get(error.cause)
    if hint:
        lines.append(hint)
    return "\n".join(lines)
