"""
Header Locator Module

Finds the header row of a statement grid, skipping the bank banners,
statement titles and period lines that usually sit above it.
"""

import logging
import re
from typing import Any

from .errors import NoColumnsDetectedError, no_columns_detected
from .models import HeaderLocation

logger = logging.getLogger(__name__)

# Statement titles, periods and masked-card banners (Ukrainian, Russian, English)
DOCUMENT_INFO_PATTERNS = [
    re.compile(r"виписка.*карт.*період"),
    re.compile(r"выписка.*карт.*период"),
    re.compile(r"statement.*cards?.*period"),
    re.compile(r"період.*\d{2}\.\d{2}\.\d{4}.*\d{2}\.\d{2}\.\d{4}"),
    re.compile(r"период.*\d{2}\.\d{2}\.\d{4}.*\d{2}\.\d{2}\.\d{4}"),
    re.compile(r"period.*\d{2}[./-]\d{2}[./-]\d{4}.*\d{2}[./-]\d{2}[./-]\d{4}"),
    re.compile(r"bank.*statement"),
    re.compile(r"financial.*report"),
    re.compile(r"account.*summary"),
    re.compile(r"transaction.*history"),
    re.compile(r"виписка.*операцій"),
    re.compile(r"выписка.*операций"),
    re.compile(r"звіт.*операці"),
    re.compile(r"отчет.*операци"),
    re.compile(r"банківська.*виписка"),
    re.compile(r"банковская.*выписка"),
    re.compile(r"^\s*банк\s+"),
    re.compile(r"^\s*bank\s+"),
    re.compile(r"card.*number.*\*+"),
    re.compile(r"номер.*карт.*\*+"),
]

DATE_HEADER = re.compile(r"дата|date|time|час|posting|datum|fecha|data", re.IGNORECASE)
AMOUNT_HEADER = re.compile(
    r"сума|сумма|amount|value|баланс|betrag|montant|importe|kwota", re.IGNORECASE
)
DESCRIPTION_HEADER = re.compile(
    r"опис|описание|деталі|детали|description|details|narrative|memo|reference",
    re.IGNORECASE,
)

# Exact cell texts that only ever appear in header rows
HEADER_CELL_PATTERNS = [
    re.compile(r"^(дата|date|fecha|datum|data)$"),
    re.compile(r"^(сума|сумма|amount|betrag|montant|importe|kwota)$"),
    re.compile(r"^(опис|описание|description|beschreibung|descripción|opis)$"),
    re.compile(r"^(баланс|balance|saldo)$"),
    re.compile(r"^\s*(no\.?|num\.?|#|№)\s*$"),
    re.compile(r"^\s*(total|subtotal|sum|всього|итого)\s*$"),
    re.compile(r"^(currency|валюта|монета)$"),
    re.compile(r"^(comment|коментар|примітк)$"),
]

DOCUMENT_TITLES = ["виписка з ваших карток", "выписка по вашим картам"]
MAX_LABEL_LENGTH = 60
KEYWORD_TOKEN = re.compile(
    r"^(дата|сума|сумма|опис|баланс|валюта|date|amount|description|balance|currency)$",
    re.IGNORECASE,
)


def _cell_text(cell: Any) -> str:
    return "" if cell is None else str(cell).strip()


def _row_text(row: list[Any]) -> str:
    return " ".join(_cell_text(cell) for cell in row).lower()


def _non_empty(row: list[Any]) -> int:
    return sum(1 for cell in row if _cell_text(cell))


def is_document_info_row(row: list[Any] | None) -> bool:
    """Check whether a row is blank or statement metadata rather than columns/data."""
    if not row:
        return True

    row_text = _row_text(row)
    if len(re.sub(r"\s", "", row_text)) < 3:
        return True

    return any(pattern.search(row_text) for pattern in DOCUMENT_INFO_PATTERNS)


def is_data_row(row: list[Any] | None) -> bool:
    """Check whether a row looks like a transaction (date, number and some text)."""
    if not row:
        return False

    row_text = _row_text(row)
    if len(re.sub(r"\s", "", row_text)) < 3:
        return False

    has_date = re.search(r"\d{1,2}[./-]\d{1,2}[./-]\d{4}", row_text) is not None
    has_amount = re.search(r"[-+]?\d+[.,]?\d*", row_text) is not None
    has_text = any(
        len(_cell_text(cell)) > 5
        and not re.match(
            r"^(дата|date|сума|amount|опис|description|баланс|balance)$",
            _cell_text(cell),
            re.IGNORECASE,
        )
        for cell in row
    )
    return has_date and has_amount and has_text


def is_header_row(row: list[Any] | None) -> bool:
    """Check whether a row repeats column labels (e.g. a header on every page)."""
    if not row:
        return True

    if is_data_row(row) or is_document_info_row(row):
        return False

    header_cells = [
        cell for cell in row
        if any(pattern.match(_cell_text(cell).lower()) for pattern in HEADER_CELL_PATTERNS)
    ]
    return len(header_cells) >= min(2, _non_empty(row))


def has_valid_column_structure(row: list[Any]) -> bool:
    """At least two labels, naming date+amount or two of date/amount/description."""
    if _non_empty(row) < 2:
        return False

    header_text = _row_text(row)
    has_date = DATE_HEADER.search(header_text) is not None
    has_amount = AMOUNT_HEADER.search(header_text) is not None
    has_description = DESCRIPTION_HEADER.search(header_text) is not None

    return (has_date and has_amount) or sum([has_date, has_amount, has_description]) >= 2


def clean_header_labels(row: list[Any]) -> list[str]:
    """Turn a header row into column labels.

    Document titles and over-long cells are blanked; labels that bury a
    keyword inside a descriptive phrase ("Сума в валюті операції") are reduced
    to that keyword unless another column already uses it.
    """
    labels = []
    for cell in row:
        label = _cell_text(cell)
        lower = label.lower()

        if len(label) > MAX_LABEL_LENGTH or any(title in lower for title in DOCUMENT_TITLES):
            labels.append("")
            continue

        if any(marker in lower for marker in ("період", "период", "операці", "операци")):
            keywords = [word for word in label.split() if KEYWORD_TOKEN.match(word)]
            if keywords and keywords[0] not in labels:
                label = keywords[0]

        labels.append(label)

    return labels


class HeaderLocator:
    """Locates the header row near the top of a statement grid."""

    def __init__(self, scan_rows: int = 20, fallback_scan_rows: int = 15):
        """Initialize the locator.

        Args:
            scan_rows: How many top rows to search for a proper header
            fallback_scan_rows: How many top rows to search for a fallback header
        """
        self.scan_rows = scan_rows
        self.fallback_scan_rows = fallback_scan_rows

    def locate(self, rows: list[list[Any]]) -> HeaderLocation:
        """Find the most plausible header row.

        Args:
            rows: Decoded grid

        Returns:
            HeaderLocation with the row index and cleaned labels

        Raises:
            NoColumnsDetectedError: If no row can serve as a header
        """
        skipped: list[str] = []

        for i, row in enumerate(rows[:self.scan_rows]):
            if is_document_info_row(row):
                if _non_empty(row or []):
                    logger.debug(f"Row {i + 1}: document info/metadata")
                    skipped.append(f"Row {i + 1}: Document info/metadata")
                continue

            if has_valid_column_structure(row):
                labels = clean_header_labels(row)
                logger.info(f"Found header row at index {i}: {labels}")
                return HeaderLocation(index=i, labels=labels, skipped_rows=skipped)

            skipped.append(f"Row {i + 1}: Insufficient column structure")

        for i, row in enumerate(rows[:self.fallback_scan_rows]):
            if row and _non_empty(row) >= 3:
                labels = clean_header_labels(row)
                if sum(1 for label in labels if label) < 2:
                    continue
                skipped.append(f"Row {i + 1}: Used as fallback header")
                logger.warning(f"No labelled header found, using row {i + 1} as header")
                return HeaderLocation(
                    index=i, labels=labels, used_fallback=True, skipped_rows=skipped
                )

        raise NoColumnsDetectedError(no_columns_detected(skipped))
