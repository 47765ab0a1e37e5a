"""
Statement Import Module

Heuristic import of exported bank statements (xlsx/xls/csv): header and
column detection, value parsing, currency and category inference, and
duplicate flagging.
"""

from .column_classifier import ColumnClassifier, score
from .config import ImportSettings, load_settings
from .currency import CurrencyDetector, CurrencyInfo, CurrencyRegistry, to_smallest_unit
from .category_resolver import CategoryResolver
from .decoder import decode_table
from .duplicate_detector import DuplicateDetector
from .errors import (
    EmptyFileError,
    FileDecodeError,
    MappingDetectionError,
    NoColumnsDetectedError,
    StatementImportError,
    UnsupportedFormatError,
)
from .header_locator import HeaderLocator
from .models import (
    ColumnAnalysis,
    FilePreview,
    ImportErrorEntry,
    ImportFile,
    ImportMapping,
    ImportResult,
    ImportSummary,
    Transaction,
    TransactionMetadata,
)
from .orchestrator import ImportOrchestrator
from .report import ImportReportFormatter
from .repository import InMemoryTransactionRepository, TransactionRepository
from .service import ImportService
from .strategies import ImportStrategy, SpreadsheetImportStrategy

__all__ = [
    # Service
    "ImportService",
    "ImportOrchestrator",
    "ImportStrategy",
    "SpreadsheetImportStrategy",
    # Models
    "ImportFile",
    "ImportMapping",
    "ColumnAnalysis",
    "Transaction",
    "TransactionMetadata",
    "ImportErrorEntry",
    "ImportSummary",
    "ImportResult",
    "FilePreview",
    # Detection
    "HeaderLocator",
    "ColumnClassifier",
    "score",
    "CurrencyInfo",
    "CurrencyRegistry",
    "CurrencyDetector",
    "to_smallest_unit",
    "CategoryResolver",
    "DuplicateDetector",
    "decode_table",
    # Storage
    "TransactionRepository",
    "InMemoryTransactionRepository",
    # Config & reporting
    "ImportSettings",
    "load_settings",
    "ImportReportFormatter",
    # Errors
    "StatementImportError",
    "EmptyFileError",
    "UnsupportedFormatError",
    "FileDecodeError",
    "NoColumnsDetectedError",
    "MappingDetectionError",
]
