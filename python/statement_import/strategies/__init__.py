"""
Format strategies for statement imports.
"""

from .base import ImportStrategy
from .spreadsheet import SpreadsheetImportStrategy

__all__ = [
    "ImportStrategy",
    "SpreadsheetImportStrategy",
]
