"""
Column Detection Tests

Tests for header row location and header label classification.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "python"))

from statement_import.column_classifier import (
    FIELD_KEYWORDS,
    ColumnClassifier,
    score,
)
from statement_import.errors import NoColumnsDetectedError
from statement_import.header_locator import (
    HeaderLocator,
    clean_header_labels,
    has_valid_column_structure,
    is_data_row,
    is_document_info_row,
    is_header_row,
)
from statement_import.models import FIELD_NAMES


class TestRowClassification:
    """Tests for metadata, header and data row checks."""

    def test_statement_title_is_metadata(self):
        row = ["Виписка з ваших карток за період 01.03.2024 - 31.03.2024", None]
        assert is_document_info_row(row) is True

    def test_english_banner_is_metadata(self):
        assert is_document_info_row(["Bank statement", None]) is True
        assert is_document_info_row(["Card number ****1234"]) is True

    def test_blank_rows_are_metadata(self):
        assert is_document_info_row([]) is True
        assert is_document_info_row([None, ""]) is True

    def test_header_is_not_metadata(self):
        assert is_document_info_row(["Дата", "Сума", "Опис"]) is False

    def test_repeated_header_row(self):
        assert is_header_row(["Date", "Amount", "Description"]) is True

    def test_data_row(self):
        row = ["01.03.2024", "-123,45", "POS Purchase Shop"]
        assert is_data_row(row) is True
        assert is_header_row(row) is False

    def test_valid_column_structure(self):
        assert has_valid_column_structure(["Date", "Amount"]) is True
        assert has_valid_column_structure(["Дата", "Опис"]) is True
        assert has_valid_column_structure(["Name", "Value"]) is False
        assert has_valid_column_structure(["Date"]) is False


class TestCleanHeaderLabels:
    """Tests for header label cleanup."""

    def test_blanks_titles_and_long_cells(self):
        labels = clean_header_labels(["Дата", "x" * 61, "Виписка з ваших карток"])
        assert labels == ["Дата", "", ""]

    def test_reduces_descriptive_label_to_keyword(self):
        assert clean_header_labels(["Сума операції", "Опис"]) == ["Сума", "Опис"]

    def test_keeps_label_when_keyword_already_used(self):
        labels = clean_header_labels(["Сума", "Сума операції"])
        assert labels == ["Сума", "Сума операції"]

    def test_none_cells(self):
        assert clean_header_labels([None, " Date "]) == ["", "Date"]


class TestHeaderLocator:
    """Tests for HeaderLocator."""

    @pytest.fixture
    def locator(self):
        return HeaderLocator()

    def test_skips_metadata_rows(self, locator, ua_statement_grid):
        location = locator.locate(ua_statement_grid)

        assert location.index == 2
        assert location.labels == ["Дата", "Сума", "Опис", "Картка"]
        assert location.used_fallback is False
        assert "Row 1: Document info/metadata" in location.skipped_rows

    def test_header_on_first_row(self, locator, simple_grid):
        assert locator.locate(simple_grid).index == 0

    def test_fallback_to_first_wide_row(self, locator):
        grid = [["foo", "bar", "baz"], ["1", "2", "3"]]
        location = locator.locate(grid)

        assert location.index == 0
        assert location.used_fallback is True
        assert location.labels == ["foo", "bar", "baz"]

    def test_no_header_raises(self, locator):
        with pytest.raises(NoColumnsDetectedError) as exc_info:
            locator.locate([["Title"], [None]])

        assert "Unable to detect valid columns" in str(exc_info.value)

    def test_scan_limit(self):
        grid = [["Title"]] * 3 + [["Date", "Amount", "Description"]]
        location = HeaderLocator(scan_rows=2, fallback_scan_rows=10).locate(grid)

        assert location.index == 3
        assert location.used_fallback is True


class TestScore:
    """Tests for the per-field score function."""

    def test_exact_field_names(self):
        assert score("Дата", "date") == 1.0
        assert score("Amount", "amount") == 1.0
        assert score("Опис", "description") == 1.0

    def test_substring_scores_lower(self):
        assert 0.4 < score("Transaction Date", "date") < 1.0

    def test_exclusion_zeroes_other_field(self):
        assert score("Amount", "description") == 0.0
        assert score("Дата", "comment") == 0.0

    def test_masked_card_boost(self):
        assert score("****1234", "card") > 0.4

    def test_currency_boost(self):
        assert score("Amount (UAH)", "amount") == 1.0

    def test_fee_column_is_not_amount(self):
        assert score("Сума комісії", "amount") <= 0.4

    def test_empty_label(self):
        assert score("", "date") == 0.0
        assert score(None, "amount") == 0.0

    def test_scores_are_bounded(self):
        labels = ["Дата", "Amount (UAH) $", "****1234 card", "Сума", "x", "Notes", "MCC"]
        for label in labels:
            for field_name in FIELD_NAMES:
                assert 0.0 <= score(label, field_name) <= 1.0

    def test_every_field_has_keywords(self):
        assert set(FIELD_KEYWORDS) == set(FIELD_NAMES)


class TestColumnClassifier:
    """Tests for ColumnClassifier."""

    @pytest.fixture
    def classifier(self):
        return ColumnClassifier()

    def test_ukrainian_header(self, classifier):
        assigned = classifier.classify(["Дата", "Сума", "Опис"])

        assert assigned == {
            "date": 0,
            "amount": 1,
            "description": 2,
            "card": None,
            "category": None,
            "comment": None,
        }

    def test_english_header(self, classifier):
        labels = ["Transaction Date", "Description", "Amount", "Category", "Notes"]
        assigned = classifier.classify(labels)

        assert assigned["date"] == 0
        assert assigned["description"] == 1
        assert assigned["amount"] == 2
        assert assigned["category"] == 3
        assert assigned["comment"] == 4

    def test_column_used_once(self, classifier):
        assigned = classifier.classify(["Date", "Amount", "Memo"])

        assert assigned["description"] == 2
        assert assigned["comment"] is None

    def test_tie_goes_to_first_column(self, classifier):
        assert classifier.classify(["Date", "Date", "Amount"])["date"] == 0

    def test_analyze(self, classifier):
        analyses = classifier.analyze(["Дата", "Сума"])

        assert analyses[0].raw_label == "Дата"
        assert analyses[0].date_score == 1.0
        assert analyses[1].score_for("amount") == 1.0

    def test_keyword_fallback(self, classifier):
        labels = ["Balance date", "Сума"]
        assigned = classifier.classify(labels)
        assert assigned["date"] is None
        assert assigned["amount"] == 1

        completed = classifier.apply_fallbacks(labels, assigned)
        assert completed["date"] == 0

    def test_description_falls_back_to_unused_column(self, classifier):
        labels = ["Date", "Amount", "Info"]
        assigned = classifier.classify(labels)
        assert assigned["description"] is None

        completed = classifier.apply_fallbacks(labels, assigned)
        assert completed["description"] == 2
