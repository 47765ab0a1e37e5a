"""
Statement Import Models

Data classes shared by the header locator, column classifier, transaction
assembler and orchestrator.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

# A mapped column is either a header label or a zero-based column index
ColumnRef = str | int

FIELD_NAMES = ("date", "amount", "description", "card", "category", "comment")


@dataclass
class ImportFile:
    """A statement file as handed over by the caller."""

    name: str
    type: str  # 'xls', 'xlsx', 'csv'
    content: bytes
    size: int = 0

    def __post_init__(self) -> None:
        if not self.size:
            self.size = len(self.content)


@dataclass
class ImportMapping:
    """Which column holds which transaction field."""

    date_column: ColumnRef | None
    amount_column: ColumnRef | None
    description_column: ColumnRef | None = None
    card_column: ColumnRef | None = None
    category_column: ColumnRef | None = None
    comment_column: ColumnRef | None = None
    has_header: bool = True
    header_row_index: int = 0
    date_format: str = "auto"
    skipped_info: list[str] = field(default_factory=list)

    def column_for(self, field_name: str) -> ColumnRef | None:
        """Get the mapped column for a field name ('date', 'amount', ...)."""
        return getattr(self, f"{field_name}_column")

    def to_dict(self) -> dict:
        return {
            "date_column": self.date_column,
            "amount_column": self.amount_column,
            "description_column": self.description_column,
            "card_column": self.card_column,
            "category_column": self.category_column,
            "comment_column": self.comment_column,
            "has_header": self.has_header,
            "header_row_index": self.header_row_index,
            "date_format": self.date_format,
        }


@dataclass
class ColumnAnalysis:
    """Per-field scores for a single header cell."""

    index: int
    raw_label: str
    date_score: float = 0.0
    amount_score: float = 0.0
    description_score: float = 0.0
    card_score: float = 0.0
    category_score: float = 0.0
    comment_score: float = 0.0

    def score_for(self, field_name: str) -> float:
        return getattr(self, f"{field_name}_score")


@dataclass
class HeaderLocation:
    """Where the header row is and what it says."""

    index: int
    labels: list[str]
    used_fallback: bool = False
    skipped_rows: list[str] = field(default_factory=list)


@dataclass
class TransactionMetadata:
    """Bookkeeping attached to every imported transaction."""

    import_batch_id: str
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    imported_at: datetime = field(default_factory=datetime.now)
    source: str = "import"
    version: int = 1

    def to_dict(self) -> dict:
        return {
            "import_batch_id": self.import_batch_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "imported_at": self.imported_at.isoformat(),
            "source": self.source,
            "version": self.version,
        }


@dataclass
class Transaction:
    """A normalized transaction built from one statement row.

    ``amount`` is a signed count of the currency's minor unit: negative for
    expenses, positive for income, always agreeing with ``is_income``.
    """

    id: str
    date: str  # YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS
    card: str
    amount: int
    currency: str
    description: str
    category: str
    is_income: bool
    metadata: TransactionMetadata
    original_description: str | None = None
    comment: str | None = None
    is_duplicate: bool = False

    @property
    def magnitude(self) -> int:
        """Absolute amount in minor units."""
        return abs(self.amount)

    @property
    def calendar_date(self) -> str:
        """Date part of ``date`` without any time of day."""
        return self.date[:10]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "card": self.card,
            "amount": self.amount,
            "currency": self.currency,
            "description": self.description,
            "original_description": self.original_description,
            "category": self.category,
            "comment": self.comment,
            "is_income": self.is_income,
            "is_duplicate": self.is_duplicate,
            "metadata": self.metadata.to_dict(),
        }


@dataclass
class ImportErrorEntry:
    """A row that could not be turned into a transaction."""

    row: int
    column: str
    error: str
    raw_data: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "row": self.row,
            "column": self.column,
            "error": self.error,
            "raw_data": [None if cell is None else str(cell) for cell in self.raw_data],
        }


@dataclass
class ImportSummary:
    """Aggregate counts for one import."""

    total_rows: int = 0
    successful_imports: int = 0
    duplicates_found: int = 0
    errors_count: int = 0
    earliest: str = ""
    latest: str = ""

    def to_dict(self) -> dict:
        return {
            "total_rows": self.total_rows,
            "successful_imports": self.successful_imports,
            "duplicates_found": self.duplicates_found,
            "errors_count": self.errors_count,
            "time_range": {"earliest": self.earliest, "latest": self.latest},
        }


@dataclass
class ImportResult:
    """Outcome of parsing one statement.

    ``transactions`` includes duplicates too; they are flagged, not removed.
    """

    transactions: list[Transaction] = field(default_factory=list)
    duplicates: list[Transaction] = field(default_factory=list)
    errors: list[ImportErrorEntry] = field(default_factory=list)
    summary: ImportSummary = field(default_factory=ImportSummary)

    @property
    def new_transactions(self) -> list[Transaction]:
        return [t for t in self.transactions if not t.is_duplicate]

    def to_dict(self) -> dict:
        return {
            "transactions": [t.to_dict() for t in self.transactions],
            "duplicates": [t.id for t in self.duplicates],
            "errors": [e.to_dict() for e in self.errors],
            "summary": self.summary.to_dict(),
        }


@dataclass
class FilePreview:
    """Header, sample rows and a suggested mapping for a mapping wizard."""

    columns: list[str]
    sample_rows: list[list[str]]
    suggested_mapping: ImportMapping | None = None
    header_row_index: int = 0

    def to_dict(self) -> dict:
        return {
            "columns": self.columns,
            "sample_rows": self.sample_rows,
            "suggested_mapping": (
                self.suggested_mapping.to_dict() if self.suggested_mapping else None
            ),
            "header_row_index": self.header_row_index,
        }
