"""
Tabular Decoder Module

Turns statement file bytes into a grid of raw cell values. Workbooks are
read with openpyxl (legacy .xls through pandas and xlrd), delimited text
with the csv module.
"""

import csv
import logging
from io import BytesIO, StringIO
from typing import Any
from zipfile import BadZipFile

import pandas as pd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from xlrd import XLRDError

from .errors import EmptyFileError, FileDecodeError, UnsupportedFormatError, unsupported_format

logger = logging.getLogger(__name__)

CSV_ENCODINGS = ("utf-8-sig", "cp1251")
CSV_DELIMITERS = ",;\t|"
WORKBOOK_TYPES = ("xlsx",)
LEGACY_WORKBOOK_TYPES = ("xls",)


def decode_text(content: bytes) -> str:
    """Decode CSV bytes, trying UTF-8 (with BOM) first, then Windows-1251."""
    for encoding in CSV_ENCODINGS:
        try:
            text = content.decode(encoding)
        except UnicodeDecodeError:
            continue
        logger.debug(f"Decoded CSV as {encoding}")
        return text

    raise FileDecodeError(f"Could not decode CSV with any of {', '.join(CSV_ENCODINGS)}")


def read_csv_rows(content: bytes) -> list[list[Any]]:
    """Read delimited text into rows of strings.

    Args:
        content: Raw file bytes

    Returns:
        List of rows
    """
    text = decode_text(content)

    # Normalize line endings
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    try:
        dialect = csv.Sniffer().sniff(text[:4096], delimiters=CSV_DELIMITERS)
        delimiter = dialect.delimiter
    except csv.Error:
        delimiter = ","

    try:
        return [row for row in csv.reader(StringIO(text), delimiter=delimiter)]
    except csv.Error as e:
        raise FileDecodeError(f"Malformed CSV: {e}") from e


def read_workbook_rows(content: bytes) -> list[list[Any]]:
    """Read the active sheet of a workbook into rows of native cell values.

    Args:
        content: Raw workbook bytes

    Returns:
        List of rows (strings, numbers, datetimes, None)
    """
    try:
        workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except (BadZipFile, InvalidFileException, KeyError, OSError) as e:
        raise FileDecodeError(f"Could not read workbook: {e}") from e

    try:
        sheet = workbook.active
        return [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def _legacy_cell(value: Any) -> Any:
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if not isinstance(value, str) and pd.isna(value):
        return None
    return value


def read_legacy_workbook_rows(content: bytes) -> list[list[Any]]:
    """Read the first sheet of a legacy BIFF (.xls) workbook.

    openpyxl only understands the xlsx container, so .xls files go through
    pandas with the xlrd engine.

    Args:
        content: Raw workbook bytes

    Returns:
        List of rows (strings, numbers, datetimes, None)
    """
    try:
        frame = pd.read_excel(
            BytesIO(content), sheet_name=0, header=None, engine="xlrd", dtype=object
        )
    except (XLRDError, ValueError, OSError) as e:
        raise FileDecodeError(f"Could not read .xls workbook: {e}") from e

    return [[_legacy_cell(value) for value in row] for row in frame.itertuples(index=False)]


def decode_table(content: bytes, file_type: str) -> list[list[Any]]:
    """Decode a statement file into a grid.

    Args:
        content: Raw file bytes
        file_type: 'xls', 'xlsx' or 'csv'

    Returns:
        Grid of raw cell values

    Raises:
        UnsupportedFormatError: Unknown file type
        FileDecodeError: Bytes could not be decoded
        EmptyFileError: Nothing but blank rows
    """
    file_type = (file_type or "").lower().lstrip(".")

    if not content:
        raise EmptyFileError("File is empty")

    if file_type == "csv":
        rows = read_csv_rows(content)
    elif file_type in WORKBOOK_TYPES:
        rows = read_workbook_rows(content)
    elif file_type in LEGACY_WORKBOOK_TYPES:
        rows = read_legacy_workbook_rows(content)
    else:
        raise UnsupportedFormatError(unsupported_format(file_type))

    if not any(
        any(cell is not None and str(cell).strip() for cell in row) for row in rows
    ):
        raise EmptyFileError("File is empty or contains no data")

    logger.info(f"Decoded {file_type} file into {len(rows)} rows")
    return rows
