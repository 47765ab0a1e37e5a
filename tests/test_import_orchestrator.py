"""
Import Orchestrator Tests

End-to-end tests of mapping detection, previews and parsing over decoded
grids, including duplicate flagging against a repository.
"""

import pytest
from pathlib import Path
from unittest.mock import Mock

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "python"))

from statement_import.config import ImportSettings
from statement_import.errors import (
    EmptyFileError,
    MappingDetectionError,
    NoColumnsDetectedError,
)
from statement_import.models import ImportMapping
from statement_import.orchestrator import ImportOrchestrator
from statement_import.repository import TransactionRepository

from conftest import TODAY


class TestDetectMapping:
    """Tests for ImportOrchestrator.detect_mapping."""

    def test_ukrainian_statement(self, orchestrator, ua_statement_grid):
        mapping = orchestrator.detect_mapping(ua_statement_grid)

        assert mapping.date_column == "Дата"
        assert mapping.amount_column == "Сума"
        assert mapping.description_column == "Опис"
        assert mapping.card_column == "Картка"
        assert mapping.category_column is None
        assert mapping.header_row_index == 2
        assert "Row 1: Document info/metadata" in mapping.skipped_info

    def test_english_statement(self, orchestrator, en_statement_grid):
        mapping = orchestrator.detect_mapping(en_statement_grid)

        assert mapping.date_column == "Date"
        assert mapping.description_column == "Description"
        assert mapping.amount_column == "Amount"
        assert mapping.category_column == "Category"
        assert mapping.comment_column == "Notes"
        assert mapping.header_row_index == 1

    def test_repeated_labels_use_indices(self, orchestrator):
        grid = [["Date", "Amount", "Description", "Description"], ["01.03.2024", "1", "a", "b"]]
        mapping = orchestrator.detect_mapping(grid)

        assert mapping.description_column == 2

    def test_missing_amount_raises(self, orchestrator):
        grid = [["Foo", "Bar", "Baz"], ["1", "2", "3"]]

        with pytest.raises(MappingDetectionError):
            orchestrator.detect_mapping(grid)

    def test_no_header_raises(self, orchestrator):
        with pytest.raises(NoColumnsDetectedError):
            orchestrator.detect_mapping([["Title"], ["x"]])

    def test_empty_grid(self, orchestrator):
        with pytest.raises(EmptyFileError):
            orchestrator.detect_mapping([])


class TestExtractPreview:
    """Tests for ImportOrchestrator.extract_preview."""

    def test_preview(self, orchestrator, en_statement_grid):
        preview = orchestrator.extract_preview(en_statement_grid)

        assert preview.header_row_index == 1
        assert preview.columns == ["Date", "Description", "Amount", "Category", "Notes"]
        assert len(preview.sample_rows) == 2
        assert preview.sample_rows[1] == ["2024-03-02", "Salary ACME", "2500.00", "", ""]
        assert preview.suggested_mapping.date_column == "Date"

    def test_sample_row_limit(self, registry):
        settings = ImportSettings(preview_sample_rows=1)
        orchestrator = ImportOrchestrator(settings=settings, registry=registry, today=TODAY)
        grid = [["Date", "Amount", "Description"]] + [["01.03.2024", "1", "x"]] * 4

        assert len(orchestrator.extract_preview(grid).sample_rows) == 1

    def test_fallback_header_names_blank_cells(self, orchestrator):
        preview = orchestrator.extract_preview([["foo", None], ["bar", "baz"]])

        assert preview.header_row_index == 0
        assert preview.columns == ["foo", "Column 2"]
        assert preview.sample_rows == [["bar", "baz"]]

    def test_preview_to_dict(self, orchestrator, simple_grid):
        data = orchestrator.extract_preview(simple_grid).to_dict()

        assert data["columns"] == ["Дата", "Сума", "Опис"]
        assert data["suggested_mapping"]["amount_column"] == "Сума"


class TestParse:
    """Tests for ImportOrchestrator.parse."""

    def test_simple_grid(self, orchestrator, simple_grid):
        result = orchestrator.parse(simple_grid)

        assert len(result.transactions) == 1
        t = result.transactions[0]
        assert t.date == "2024-03-01"
        assert t.amount == -12345
        assert t.magnitude == 12345
        assert t.is_income is False
        assert t.currency == "UAH"
        assert t.card == "Imported"
        assert t.description == "Purchase shop"
        assert t.original_description == "POS Purchase Shop"
        assert t.category == "Shopping"

    def test_ukrainian_statement(self, orchestrator, ua_statement_grid):
        result = orchestrator.parse(ua_statement_grid)

        assert [t.date for t in result.transactions] == [
            "2024-03-01", "2024-03-02T14:30:00", "2024-03-05",
        ]
        assert [t.amount for t in result.transactions] == [-12345, 1500000, -25000]
        assert [t.category for t in result.transactions] == ["Shopping", "Income", "Healthcare"]
        assert result.transactions[1].is_income is True
        assert result.transactions[2].description == "Аптека доброго дня"
        assert all(t.card == "**** 1234" for t in result.transactions)
        assert all(t.currency == "UAH" for t in result.transactions)

    def test_row_errors_are_collected(self, orchestrator, ua_statement_grid):
        result = orchestrator.parse(ua_statement_grid)

        assert [(e.row, e.column) for e in result.errors] == [(6, "Сума"), (9, "Дата")]
        assert result.errors[0].error == "Invalid amount format: abc"
        assert result.errors[1].error == "Invalid date format: 32.13.2024"
        assert result.errors[0].raw_data[2] == "Broken amount"

    def test_summary(self, orchestrator, ua_statement_grid):
        summary = orchestrator.parse(ua_statement_grid).summary

        assert summary.total_rows == 7
        assert summary.successful_imports == 3
        assert summary.duplicates_found == 0
        assert summary.errors_count == 2
        assert summary.earliest == "2024-03-01"
        assert summary.latest == "2024-03-05"

    def test_one_batch_per_parse(self, orchestrator, ua_statement_grid):
        first = orchestrator.parse(ua_statement_grid)
        second = orchestrator.parse(ua_statement_grid)

        batch_ids = {t.metadata.import_batch_id for t in first.transactions}
        assert len(batch_ids) == 1
        assert batch_ids != {t.metadata.import_batch_id for t in second.transactions}
        assert len({t.id for t in first.transactions}) == 3

    def test_category_and_comment_columns(self, orchestrator, en_statement_grid):
        result = orchestrator.parse(en_statement_grid, file_name="chase_usd.csv")

        first, second = result.transactions
        assert first.currency == "USD"
        assert first.card == "chase"
        assert first.amount == -450
        assert first.category == "Coffee shops"
        assert first.comment == "Morning"
        assert second.amount == 250000
        assert second.category == "Other"
        assert second.comment is None

    def test_blank_category_cell_is_not_inferred(self, orchestrator):
        grid = [
            ["Date", "Amount", "Description", "Category"],
            ["01.03.2024", "-12,00", "Coffee to go", ""],
            ["02.03.2024", "-30,00", "Pharmacy", "Health"],
        ]
        result = orchestrator.parse(grid)

        assert [t.category for t in result.transactions] == ["Other", "Health"]

    def test_zero_amount_is_income(self, orchestrator):
        grid = [["Date", "Amount", "Description"], ["01.03.2024", "-0,00", "Adjustment"]]
        t = orchestrator.parse(grid).transactions[0]

        assert t.amount == 0
        assert t.is_income is True

    def test_data_row_mentioning_bank_statement_is_kept(self, orchestrator):
        grid = [
            ["Date", "Amount", "Description"],
            ["01.03.2024", "-2,00", "Paper bank statement fee"],
        ]
        result = orchestrator.parse(grid)

        assert [t.amount for t in result.transactions] == [-200]
        assert result.errors == []

    def test_reparsing_gives_the_same_transactions(self, orchestrator, ua_statement_grid):
        def fields(result):
            return [
                (t.date, t.amount, t.currency, t.description, t.category)
                for t in result.transactions
            ]

        assert fields(orchestrator.parse(ua_statement_grid)) == fields(
            orchestrator.parse(ua_statement_grid)
        )

    def test_spreadsheet_serial_dates(self, orchestrator):
        grid = [["Date", "Amount", "Description"], [45000, -12.5, "Coffee"]]
        t = orchestrator.parse(grid).transactions[0]

        assert t.date == "2023-03-15"
        assert t.amount == -1250
        assert t.category == "Food & Dining"

    def test_supplied_mapping_with_indices(self, orchestrator, simple_grid):
        mapping = ImportMapping(date_column=0, amount_column=1, description_column=2)
        result = orchestrator.parse(simple_grid, mapping)

        assert result.transactions[0].amount == -12345

    def test_mapping_without_header(self, orchestrator):
        grid = [["01.03.2024", "-5,00", "Coffee"], ["02.03.2024", "-7,00", "Taxi"]]
        mapping = ImportMapping(
            date_column=0, amount_column=1, description_column=2, has_header=False
        )
        result = orchestrator.parse(grid, mapping)

        assert [t.amount for t in result.transactions] == [-500, -700]
        assert result.summary.total_rows == 2

    def test_mapping_row_numbers_in_errors(self, orchestrator):
        grid = [["01.03.2024", "oops", "Coffee"]]
        mapping = ImportMapping(
            date_column=0, amount_column=1, description_column=2, has_header=False
        )
        result = orchestrator.parse(grid, mapping)

        assert result.errors[0].row == 1
        assert result.errors[0].column == "1"

    def test_mapping_needs_date_or_amount(self, orchestrator, simple_grid):
        with pytest.raises(MappingDetectionError):
            orchestrator.parse(simple_grid, ImportMapping(date_column=None, amount_column=None))

    def test_blank_grid(self, orchestrator):
        with pytest.raises(EmptyFileError):
            orchestrator.parse([])
        with pytest.raises(EmptyFileError):
            orchestrator.parse([[None, ""], []])

    def test_category_inference_can_be_disabled(self, registry, simple_grid):
        settings = ImportSettings(infer_categories=False)
        orchestrator = ImportOrchestrator(settings=settings, registry=registry, today=TODAY)

        assert orchestrator.parse(simple_grid).transactions[0].category == "Other"

    def test_extra_currencies_are_registered(self, registry):
        settings = ImportSettings(extra_currencies=[{"code": "PLN", "symbol": "zł"}])
        orchestrator = ImportOrchestrator(settings=settings, registry=registry, today=TODAY)
        grid = [["Data", "Kwota", "Opis"], ["01.03.2024", "-10,00 zł", "Zakupy"]]

        t = orchestrator.parse(grid).transactions[0]
        assert t.currency == "PLN"
        assert t.amount == -1000

    def test_result_to_dict(self, orchestrator, ua_statement_grid):
        data = orchestrator.parse(ua_statement_grid).to_dict()

        assert data["summary"]["time_range"] == {"earliest": "2024-03-01", "latest": "2024-03-05"}
        assert data["errors"][0]["column"] == "Сума"
        assert data["transactions"][0]["amount"] == -12345


class TestDuplicateFlagging:
    """Tests for duplicate detection during parse."""

    def test_reimport_flags_duplicates(self, orchestrator, repository, ua_statement_grid):
        first = orchestrator.parse(ua_statement_grid)
        for t in first.transactions:
            repository.create(t)

        second = orchestrator.parse(ua_statement_grid)

        assert all(t.is_duplicate for t in second.transactions)
        assert len(second.duplicates) == 3
        assert len(second.transactions) == 3
        assert second.new_transactions == []
        assert second.summary.duplicates_found == 3

    def test_rows_in_same_batch_are_not_compared(self, orchestrator):
        grid = [
            ["Date", "Amount", "Description"],
            ["01.03.2024", "-5,00", "Coffee"],
            ["01.03.2024", "-5,00", "Coffee"],
        ]
        result = orchestrator.parse(grid)

        assert len(result.transactions) == 2
        assert result.duplicates == []

    def test_no_repository_means_no_duplicates(self, simple_grid):
        orchestrator = ImportOrchestrator(today=TODAY)
        assert orchestrator.parse(simple_grid).duplicates == []

    def test_repository_failure_becomes_row_error(self, simple_grid):
        repository = Mock(spec=TransactionRepository)
        repository.find_potential_duplicates.side_effect = RuntimeError("db down")
        orchestrator = ImportOrchestrator(repository=repository, today=TODAY)

        result = orchestrator.parse(simple_grid)

        assert result.transactions == []
        assert len(result.errors) == 1
        assert result.errors[0].row == 2
        assert result.errors[0].column == "duplicate_check"
        assert result.errors[0].error == "Duplicate check failed: db down"
