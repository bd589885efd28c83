"""Unit tests for userupload.core.report."""

from __future__ import annotations

from userupload.core.bulk_loader import LoadReport
from userupload.core.csv_ingestor import InvalidEntry
from userupload.core.report import render, render_load_summary, render_storage_error
from userupload.exceptions import DUPLICATE_EMAIL, INVALID_FORMAT, StorageError


class TestRender:
    def test_with_invalid_entries(self):
        text = render(2, [InvalidEntry(4, INVALID_FORMAT), InvalidEntry(5, DUPLICATE_EMAIL)])
        assert text == (
            "Processing finished.\n"
            "\n"
            "Valid records: 2\n"
            "Invalid records: 2\n"
            "\n"
            "Invalid entries:\n"
            "  line 4: invalid_format\n"
            "  line 5: duplicate_email"
        )

    def test_without_invalid_entries(self):
        text = render(3, [])
        assert "Valid records: 3" in text
        assert "Invalid records: 0" in text
        assert "Invalid entries" not in text

    def test_preserves_order(self):
        text = render(0, [InvalidEntry(9, INVALID_FORMAT), InvalidEntry(3, INVALID_FORMAT)])
        assert text.index("line 9") < text.index("line 3")


class TestLoadSummary:
    def test_inserted(self):
        report = LoadReport("public.users")
        report.inserted_count = 4
        report.processing_time = 1.5
        assert render_load_summary(report) == (
            "Inserted 4 records into public.users.\nProcessing time: 1.50 seconds")

    def test_nothing_inserted(self):
        assert render_load_summary(LoadReport("public.users")) == "No records inserted into public.users."


class TestStorageError:
    def test_duplicate_key_hint(self):
        text = render_storage_error(StorageError("duplicate_key", "duplicate key value"))
        assert "Database error (duplicate_key): duplicate key value" in text
        assert "No records were inserted." in text
        assert "already exists" in text

    def test_missing_table_hint(self):
        text = render_storage_error(StorageError("missing_table", "relation does not exist"))
        assert "--create_table" in text

    def test_provisioning_failure(self):
        text = render_storage_error(StorageError("storage_failure", "permission denied"), loading=False)
        assert "No changes were made to the table." in text
