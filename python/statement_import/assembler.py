"""
Transaction Assembler Module

Turns one statement row into a Transaction using a resolved column
mapping. Row problems come back as ImportErrorEntry records; nothing in
here aborts a batch.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any

from .category_resolver import CategoryResolver
from .config import ImportSettings
from .currency import CurrencyRegistry, to_smallest_unit
from .models import (
    FIELD_NAMES,
    ColumnRef,
    ImportErrorEntry,
    ImportMapping,
    Transaction,
    TransactionMetadata,
)
from .parsers import (
    determine_is_income,
    extract_comment,
    extract_description,
    normalize_card_name,
    parse_amount,
    parse_date,
)

logger = logging.getLogger(__name__)


@dataclass
class RowOutcome:
    """What happened to one data row."""

    transaction: Transaction | None = None
    error: ImportErrorEntry | None = None
    skipped: bool = False


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def resolve_column(ref: ColumnRef | None, headers: list[str]) -> int | None:
    """Map a column reference to a cell index.

    Integers are used as-is. Labels are matched exactly, then ignoring case;
    an unknown label falls back to column 0 with a warning.

    Args:
        ref: Header label or zero-based index
        headers: Header labels of the file

    Returns:
        Column index, or None when the field is not mapped
    """
    if ref is None:
        return None

    if isinstance(ref, int):
        return ref

    if ref in headers:
        return headers.index(ref)

    lowered = [label.lower().strip() for label in headers]
    if ref.lower().strip() in lowered:
        return lowered.index(ref.lower().strip())

    logger.warning(f"Mapped column '{ref}' not found in header {headers}, using column 0")
    return 0


class TransactionAssembler:
    """Builds transactions for a single file."""

    def __init__(
        self,
        headers: list[str],
        mapping: ImportMapping,
        currency: str,
        batch_id: str,
        settings: ImportSettings | None = None,
        registry: CurrencyRegistry | None = None,
        category_resolver: CategoryResolver | None = None,
        fallback_card: str | None = None,
        today: date | None = None,
    ):
        """Initialize the assembler.

        Args:
            headers: Header labels used to resolve label-based mappings
            mapping: Column mapping for the file
            currency: Document currency code
            batch_id: Import batch id shared by all transactions of the file
            settings: Import settings
            registry: Currency registry for minor-unit conversion
            category_resolver: Resolver used when no category column is mapped
            fallback_card: Card label for rows without a usable card cell
            today: Reference day for the date sanity window
        """
        self.settings = settings or ImportSettings()
        self.mapping = mapping
        self.currency = currency
        self.batch_id = batch_id
        self.registry = registry or CurrencyRegistry()
        self.category_resolver = category_resolver or CategoryResolver(
            self.settings.category_patterns, self.settings.default_category
        )
        self.fallback_card = fallback_card or self.settings.default_card
        self.today = today

        self.columns: dict[str, int | None] = {
            name: resolve_column(mapping.column_for(name), headers) for name in FIELD_NAMES
        }

    def _column_name(self, field_name: str) -> str:
        """Mapped column as written in the mapping, for error entries."""
        ref = self.mapping.column_for(field_name)
        return field_name if ref is None else str(ref)

    def _cell(self, row: list[Any], field_name: str) -> Any:
        index = self.columns[field_name]
        if index is None or index < 0 or index >= len(row):
            return None
        return row[index]

    def assemble(self, row: list[Any], row_number: int) -> RowOutcome:
        """Build a transaction from one row.

        Args:
            row: Raw cell values
            row_number: 1-based row number in the file, used in error entries

        Returns:
            RowOutcome with a transaction, an error, or the skipped flag
        """
        try:
            raw_date = self._cell(row, "date")
            raw_amount = self._cell(row, "amount")
            raw_description = self._cell(row, "description")

            if _is_blank(raw_date) and _is_blank(raw_amount) and _is_blank(raw_description):
                return RowOutcome(skipped=True)

            parsed_date = parse_date(
                raw_date,
                today=self.today,
                past_years=self.settings.date_window_past_years,
                future_years=self.settings.date_window_future_years,
            )
            if parsed_date is None:
                return RowOutcome(error=ImportErrorEntry(
                    row=row_number,
                    column=self._column_name("date"),
                    error=f"Invalid date format: {raw_date}",
                    raw_data=list(row),
                ))

            parsed_amount = parse_amount(raw_amount)
            if parsed_amount is None:
                return RowOutcome(error=ImportErrorEntry(
                    row=row_number,
                    column=self._column_name("amount"),
                    error=f"Invalid amount format: {raw_amount}",
                    raw_data=list(row),
                ))

            return RowOutcome(transaction=self._build(
                row, parsed_date, raw_amount, parsed_amount, raw_description
            ))

        except Exception as e:
            logger.error(f"Row {row_number}: parsing failed: {e}")
            return RowOutcome(error=ImportErrorEntry(
                row=row_number,
                column="general",
                error=f"Row parsing failed: {e}",
                raw_data=list(row),
            ))

    def _build(self, row, parsed_date, raw_amount, parsed_amount, raw_description) -> Transaction:
        description = extract_description(raw_description, self.settings.default_description)
        comment = extract_comment(self._cell(row, "comment"), raw_description, description)

        card = self.fallback_card
        if self.columns["card"] is not None:
            card = normalize_card_name(self._cell(row, "card"), default=self.fallback_card)

        # A mapped category column is authoritative, blank cells included
        if self.columns["category"] is not None:
            raw_category = self._cell(row, "category")
            if _is_blank(raw_category):
                category = self.settings.default_category
            else:
                category = str(raw_category).strip()
        elif self.settings.infer_categories:
            category = self.category_resolver.resolve(description, comment)
        else:
            category = self.settings.default_category

        magnitude = to_smallest_unit(abs(parsed_amount), self.currency, self.registry)
        # Zero amounts count as income so the sign and is_income never disagree
        is_income = magnitude == 0 or determine_is_income(raw_amount, parsed_amount)

        original = None if _is_blank(raw_description) else str(raw_description).strip()

        return Transaction(
            id=str(uuid.uuid4()),
            date=parsed_date,
            card=card,
            amount=magnitude if is_income else -magnitude,
            currency=self.currency,
            description=description,
            category=category,
            is_income=is_income,
            metadata=TransactionMetadata(import_batch_id=self.batch_id),
            original_description=original,
            comment=comment,
        )
