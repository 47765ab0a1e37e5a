"""
Import Orchestrator Module

Runs the statement pipeline over a decoded grid: header location, column
classification, currency detection, row assembly and duplicate flagging.
"""

import logging
import uuid
from datetime import date
from typing import Any

from .assembler import TransactionAssembler
from .category_resolver import CategoryResolver
from .column_classifier import ColumnClassifier
from .config import ImportSettings
from .currency import CurrencyDetector, CurrencyRegistry
from .duplicate_detector import DuplicateDetector
from .errors import EmptyFileError, MappingDetectionError, NoColumnsDetectedError
from .header_locator import (
    HeaderLocator,
    clean_header_labels,
    is_data_row,
    is_document_info_row,
    is_header_row,
)
from .models import (
    FilePreview,
    ImportErrorEntry,
    ImportMapping,
    ImportResult,
    ImportSummary,
)
from .parsers import card_from_file_name
from .repository import TransactionRepository

logger = logging.getLogger(__name__)

PREVIEW_FALLBACK_ROWS = 5


def _cell_text(cell: Any) -> str:
    return "" if cell is None else str(cell).strip()


def _is_blank_row(row: list[Any] | None) -> bool:
    return not row or not any(_cell_text(cell) for cell in row)


def _column_ref(labels: list[str], index: int | None) -> str | int | None:
    """Prefer the header label; fall back to the index for blank or repeated labels."""
    if index is None:
        return None
    label = labels[index]
    if label and labels.count(label) == 1:
        return label
    return index


def _build_mapping(
    labels: list[str],
    assigned: dict[str, int | None],
    header_index: int,
    skipped_info: list[str] | None = None,
) -> ImportMapping:
    return ImportMapping(
        date_column=_column_ref(labels, assigned["date"]),
        amount_column=_column_ref(labels, assigned["amount"]),
        description_column=_column_ref(labels, assigned["description"]),
        card_column=_column_ref(labels, assigned["card"]),
        category_column=_column_ref(labels, assigned["category"]),
        comment_column=_column_ref(labels, assigned["comment"]),
        has_header=True,
        header_row_index=header_index,
        skipped_info=list(skipped_info or []),
    )


class ImportOrchestrator:
    """Turns decoded statement grids into ImportResults."""

    def __init__(
        self,
        settings: ImportSettings | None = None,
        registry: CurrencyRegistry | None = None,
        repository: TransactionRepository | None = None,
        today: date | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            settings: Import settings (defaults when omitted)
            registry: Currency registry; a fresh one per orchestrator when omitted
            repository: Repository consulted for duplicates (none: no duplicate check)
            today: Reference day for the date sanity window
        """
        self.settings = settings or ImportSettings()
        self.registry = registry or CurrencyRegistry()
        self.registry.add_many(self.settings.extra_currencies)
        self.repository = repository
        self.today = today

        self.header_locator = HeaderLocator(
            self.settings.header_scan_rows, self.settings.fallback_scan_rows
        )
        self.classifier = ColumnClassifier()
        self.currency_detector = CurrencyDetector(self.registry, self.settings.default_currency)
        self.category_resolver = CategoryResolver(
            self.settings.category_patterns, self.settings.default_category
        )
        self.duplicate_detector = DuplicateDetector(repository)

    def _suggest(self, labels: list[str]) -> dict[str, int | None]:
        assigned = self.classifier.classify(labels)
        if assigned["date"] is None and assigned["amount"] is None:
            return assigned
        return self.classifier.apply_fallbacks(labels, assigned)

    def detect_mapping(self, grid: list[list[Any]]) -> ImportMapping:
        """Locate the header row and map columns to fields.

        Args:
            grid: Decoded rows

        Returns:
            ImportMapping with both date and amount columns

        Raises:
            EmptyFileError: Grid has no rows
            NoColumnsDetectedError: No header row could be found
            MappingDetectionError: Date and amount could not both be located
        """
        if not grid:
            raise EmptyFileError("File is empty")

        location = self.header_locator.locate(grid)
        labels = location.labels
        assigned = self._suggest(labels)

        if assigned["date"] is None or assigned["amount"] is None:
            missing = [name for name in ("date", "amount") if assigned[name] is None]
            raise MappingDetectionError(
                f"Could not detect {' and '.join(missing)} column(s) in header {labels}. "
                "Please map the columns manually."
            )

        mapping = _build_mapping(labels, assigned, location.index, location.skipped_rows)
        logger.info(f"Detected column mapping: {mapping.to_dict()}")
        return mapping

    def extract_preview(self, grid: list[list[Any]]) -> FilePreview:
        """Header labels, a few sample rows and a suggested mapping.

        Args:
            grid: Decoded rows

        Returns:
            FilePreview; the suggested mapping may leave fields unset

        Raises:
            EmptyFileError: Grid has no rows
            NoColumnsDetectedError: No row could serve as a header
        """
        if not grid:
            raise EmptyFileError("File is empty")

        try:
            location = self.header_locator.locate(grid)
            header_index, labels = location.index, location.labels
        except NoColumnsDetectedError:
            header_index, labels = self._preview_fallback_header(grid)

        indices = [i for i, label in enumerate(labels) if label]
        columns = [labels[i] for i in indices]

        sample_rows = []
        for row in grid[header_index + 1:]:
            if len(sample_rows) >= self.settings.preview_sample_rows:
                break
            if _is_blank_row(row):
                continue
            sample_rows.append([_cell_text(row[i]) if i < len(row) else "" for i in indices])

        assigned = self._suggest(labels)
        suggested = _build_mapping(labels, assigned, header_index)

        return FilePreview(
            columns=columns,
            sample_rows=sample_rows,
            suggested_mapping=suggested,
            header_row_index=header_index,
        )

    def _preview_fallback_header(self, grid: list[list[Any]]) -> tuple[int, list[str]]:
        for i, row in enumerate(grid[:PREVIEW_FALLBACK_ROWS]):
            if not _is_blank_row(row):
                labels = [
                    _cell_text(cell) or f"Column {index + 1}" for index, cell in enumerate(row)
                ]
                logger.warning(f"Preview using row {i + 1} as header")
                return i, labels
        raise NoColumnsDetectedError("Unable to detect columns in file")

    def parse(
        self,
        grid: list[list[Any]],
        mapping: ImportMapping | None = None,
        file_name: str = "",
    ) -> ImportResult:
        """Parse a decoded statement into transactions.

        A supplied mapping is trusted as-is; without one the mapping is
        detected first. Row problems end up in ``result.errors``.

        Args:
            grid: Decoded rows
            mapping: Column mapping, or None to detect it
            file_name: Original file name (currency and card hints)

        Returns:
            ImportResult

        Raises:
            StatementImportError: On batch-fatal problems
        """
        if not grid or all(_is_blank_row(row) for row in grid):
            raise EmptyFileError("File is empty or contains no data")

        if mapping is None:
            mapping = self.detect_mapping(grid)
        elif mapping.date_column is None and mapping.amount_column is None:
            raise MappingDetectionError("Mapping must name a date or an amount column")

        if mapping.has_header:
            header_index = mapping.header_row_index
            headers = clean_header_labels(grid[header_index]) if header_index < len(grid) else []
            data_start = header_index + 1
        else:
            headers = []
            data_start = 0

        all_text = " ".join(
            str(cell) for row in grid if row for cell in row if cell is not None
        )
        currency = self.currency_detector.detect(all_text, file_name)
        logger.info(f"Detected currency {currency} for '{file_name or 'statement'}'")

        fallback_card = (
            card_from_file_name(file_name, self.settings.default_card)
            if file_name else self.settings.default_card
        )

        assembler = TransactionAssembler(
            headers=headers,
            mapping=mapping,
            currency=currency,
            batch_id=str(uuid.uuid4()),
            settings=self.settings,
            registry=self.registry,
            category_resolver=self.category_resolver,
            fallback_card=fallback_card,
            today=self.today,
        )

        result = ImportResult()
        data_rows = grid[data_start:]

        for offset, row in enumerate(data_rows):
            row_number = data_start + offset + 1

            if _is_blank_row(row) or is_header_row(row):
                continue
            if is_document_info_row(row) and not is_data_row(row):
                continue

            outcome = assembler.assemble(list(row), row_number)
            if outcome.skipped:
                continue
            if outcome.error:
                result.errors.append(outcome.error)
                continue

            transaction = outcome.transaction
            try:
                self.duplicate_detector.check(transaction)
            except Exception as e:
                logger.error(f"Row {row_number}: duplicate check failed: {e}")
                result.errors.append(ImportErrorEntry(
                    row=row_number,
                    column="duplicate_check",
                    error=f"Duplicate check failed: {e}",
                    raw_data=list(row),
                ))
                continue

            if transaction.is_duplicate:
                result.duplicates.append(transaction)
            result.transactions.append(transaction)

        dates = [t.date for t in result.transactions]
        result.summary = ImportSummary(
            total_rows=len(data_rows),
            successful_imports=len(result.transactions),
            duplicates_found=len(result.duplicates),
            errors_count=len(result.errors),
            earliest=min(dates) if dates else "",
            latest=max(dates) if dates else "",
        )

        logger.info(
            f"Parsed {result.summary.successful_imports} transactions "
            f"({result.summary.duplicates_found} duplicates, "
            f"{result.summary.errors_count} errors) from {len(data_rows)} rows"
        )
        return result
