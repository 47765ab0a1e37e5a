"""
Statement Import Errors

Batch-fatal error types. Row-level problems never raise; they are collected
as ImportErrorEntry records on the ImportResult instead.
"""


class StatementImportError(ValueError):
    """Base class for errors that abort a whole import.

    Subclasses ValueError so callers that already guard parsing with
    ``except ValueError`` keep working.
    """


class EmptyFileError(StatementImportError):
    """The decoded file has no rows."""


class UnsupportedFormatError(StatementImportError):
    """No registered strategy handles the file type."""


class FileDecodeError(StatementImportError):
    """The file bytes could not be decoded into a grid of cells."""


class NoColumnsDetectedError(StatementImportError):
    """No plausible header row was found near the top of the file."""


class MappingDetectionError(StatementImportError):
    """Date and amount columns could not both be resolved."""


def unsupported_format(file_type: str) -> str:
    """Return message for an unknown file type."""
    return f"Unsupported file format: {file_type}"


def no_columns_detected(skipped_rows: list[str]) -> str:
    """Return message for a file without a recognisable header row."""
    skip_info = f" (Skipped: {', '.join(skipped_rows)})" if skipped_rows else ""
    return (
        "Unable to detect valid columns. "
        f"Please ensure the file has proper headers.{skip_info}"
    )
