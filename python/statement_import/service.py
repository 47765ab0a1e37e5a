"""
Import Service Module

Entry point for callers: picks a strategy by file type, runs previews and
imports, and saves reviewed transactions to a repository.
"""

import logging
from datetime import date
from pathlib import Path

from .config import ImportSettings, load_settings
from .currency import CurrencyRegistry
from .errors import UnsupportedFormatError, unsupported_format
from .models import FilePreview, ImportFile, ImportMapping, ImportResult, Transaction
from .orchestrator import ImportOrchestrator
from .report import ImportReportFormatter
from .repository import InMemoryTransactionRepository, TransactionRepository
from .strategies import ImportStrategy, SpreadsheetImportStrategy

logger = logging.getLogger(__name__)


class ImportService:
    """Statement import facade."""

    def __init__(
        self,
        config_dir: Path | str | None = None,
        settings: ImportSettings | None = None,
        repository: TransactionRepository | None = None,
        registry: CurrencyRegistry | None = None,
        today: date | None = None,
    ):
        """Initialize the service.

        Args:
            config_dir: Path to configuration directory (used when settings is None)
            settings: Explicit settings, bypassing the config file
            repository: Transaction store; in-memory when omitted
            registry: Currency registry; a fresh one when omitted
            today: Reference day for the date sanity window
        """
        self.settings = settings or load_settings(config_dir)
        if repository is None:
            repository = InMemoryTransactionRepository(
                amount_tolerance=self.settings.duplicate_amount_tolerance
            )
        self.repository = repository
        self.orchestrator = ImportOrchestrator(
            settings=self.settings,
            registry=registry,
            repository=self.repository,
            today=today,
        )

        self._strategies: dict[str, ImportStrategy] = {}
        self.register_strategy(SpreadsheetImportStrategy(self.orchestrator))

    def register_strategy(self, strategy: ImportStrategy) -> None:
        """Route every format the strategy supports to it."""
        for file_type in strategy.supported_formats():
            self._strategies[file_type] = strategy

    def _strategy_for(self, file: ImportFile) -> ImportStrategy:
        strategy = self._strategies.get(file.type.lower())
        if strategy is None:
            raise UnsupportedFormatError(unsupported_format(file.type))
        return strategy

    def get_supported_formats(self) -> list[str]:
        return list(self._strategies)

    def validate_file(self, file: ImportFile) -> bool:
        strategy = self._strategies.get(file.type.lower())
        return strategy.validate_file(file) if strategy else False

    def extract_preview(self, file: ImportFile) -> FilePreview:
        """Columns, sample rows and a suggested mapping for a mapping wizard."""
        return self._strategy_for(file).extract_preview(file)

    def import_file(self, file: ImportFile, mapping: ImportMapping | None = None) -> ImportResult:
        """Parse a statement file.

        Args:
            file: Statement file
            mapping: Finalized column mapping, or None to detect it

        Returns:
            ImportResult (nothing is saved)
        """
        result = self._strategy_for(file).parse(file, mapping)
        logger.info(
            f"Imported {file.name}: {result.summary.successful_imports} transactions, "
            f"{result.summary.duplicates_found} duplicates, {result.summary.errors_count} errors"
        )
        return result

    def preview_import(self, file: ImportFile, mapping: ImportMapping | None = None) -> ImportResult:
        """Same as import_file; kept separate so callers can show results before saving."""
        return self.import_file(file, mapping)

    def save_transactions(
        self, transactions: list[Transaction], ignore_duplicates: bool = True
    ) -> list[Transaction]:
        """Store reviewed transactions.

        Args:
            transactions: Transactions from an ImportResult
            ignore_duplicates: Skip transactions flagged as duplicates

        Returns:
            The transactions that were stored
        """
        to_save = [
            t for t in transactions if not (ignore_duplicates and t.is_duplicate)
        ]

        saved = [self.repository.create(t) for t in to_save]
        logger.info(f"Saved {len(saved)} of {len(transactions)} transactions")
        return saved

    def format_report(self, result: ImportResult, file_name: str | None = None) -> str:
        """Summary message showing at most max_reported_errors row errors."""
        formatter = ImportReportFormatter(
            max_errors=self.settings.max_reported_errors,
            registry=self.orchestrator.registry,
        )
        return formatter.format_result(result, file_name)

    @staticmethod
    def get_file_type_from_name(file_name: str) -> str | None:
        """'xls', 'xlsx' or 'csv' from the file extension, else None."""
        extension = Path(file_name).suffix.lower().lstrip(".")
        return extension if extension in ("xls", "xlsx", "csv") else None

    def load_file(self, file_path: Path | str) -> ImportFile:
        """Read a statement from disk.

        Args:
            file_path: Path to the statement

        Returns:
            ImportFile

        Raises:
            UnsupportedFormatError: Unknown extension
        """
        file_path = Path(file_path)
        file_type = self.get_file_type_from_name(file_path.name)
        if file_type is None:
            raise UnsupportedFormatError(f"Unsupported file type: {file_path.name}")

        content = file_path.read_bytes()
        return ImportFile(name=file_path.name, type=file_type, content=content, size=len(content))
