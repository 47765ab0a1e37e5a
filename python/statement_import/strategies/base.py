"""
Base Import Strategy Module

Abstract base class for statement format handlers.
"""

from abc import ABC, abstractmethod

from ..errors import UnsupportedFormatError, unsupported_format
from ..models import FilePreview, ImportFile, ImportMapping, ImportResult


class ImportStrategy(ABC):
    """Abstract base class for statement import strategies."""

    FORMATS: tuple[str, ...] = ()

    def supported_formats(self) -> list[str]:
        """File types this strategy handles."""
        return list(self.FORMATS)

    def validate_file(self, file: ImportFile) -> bool:
        """Check whether the strategy can handle the file."""
        return file.type.lower() in self.supported_formats()

    def ensure_supported(self, file: ImportFile) -> None:
        """Raise UnsupportedFormatError for files this strategy cannot handle."""
        if not self.validate_file(file):
            raise UnsupportedFormatError(unsupported_format(file.type))

    @abstractmethod
    def parse(self, file: ImportFile, mapping: ImportMapping | None = None) -> ImportResult:
        """Parse a statement file into transactions.

        Args:
            file: Statement file
            mapping: Column mapping, or None to detect it

        Returns:
            ImportResult
        """
        pass

    @abstractmethod
    def extract_preview(self, file: ImportFile) -> FilePreview:
        """Columns, sample rows and a suggested mapping for the file."""
        pass
