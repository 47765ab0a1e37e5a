"""
Spreadsheet Import Strategy

Handles .xlsx/.xls workbooks and .csv exports by decoding them into a grid
and handing the grid to the ImportOrchestrator.
"""

import logging

from ..decoder import decode_table
from ..models import FilePreview, ImportFile, ImportMapping, ImportResult
from ..orchestrator import ImportOrchestrator
from .base import ImportStrategy

logger = logging.getLogger(__name__)


class SpreadsheetImportStrategy(ImportStrategy):
    """Workbook and CSV statements."""

    FORMATS = ("xls", "xlsx", "csv")

    def __init__(self, orchestrator: ImportOrchestrator | None = None):
        self.orchestrator = orchestrator or ImportOrchestrator()

    def parse(self, file: ImportFile, mapping: ImportMapping | None = None) -> ImportResult:
        self.ensure_supported(file)

        grid = decode_table(file.content, file.type)
        logger.info(f"Parsing {file.name} ({file.type}, {file.size} bytes)")
        return self.orchestrator.parse(grid, mapping, file_name=file.name)

    def extract_preview(self, file: ImportFile) -> FilePreview:
        self.ensure_supported(file)

        grid = decode_table(file.content, file.type)
        return self.orchestrator.extract_preview(grid)
