"""
Pytest configuration and fixtures for statement import tests.
"""

import sys
from datetime import date, datetime
from io import BytesIO
from pathlib import Path

import pytest
from openpyxl import Workbook

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "python"))

from statement_import.config import ImportSettings  # noqa: E402
from statement_import.currency import CurrencyRegistry  # noqa: E402
from statement_import.orchestrator import ImportOrchestrator  # noqa: E402
from statement_import.repository import InMemoryTransactionRepository  # noqa: E402

# Reference day for the date sanity window (2014-01-01 .. 2025-12-31)
TODAY = date(2024, 6, 1)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def config_dir() -> Path:
    """Return the config directory path."""
    return PROJECT_ROOT / "config"


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def settings() -> ImportSettings:
    """Built-in defaults, independent of config/import_settings.yaml."""
    return ImportSettings()


@pytest.fixture
def registry() -> CurrencyRegistry:
    return CurrencyRegistry()


@pytest.fixture
def repository() -> InMemoryTransactionRepository:
    return InMemoryTransactionRepository()


@pytest.fixture
def orchestrator(settings, registry, repository) -> ImportOrchestrator:
    return ImportOrchestrator(
        settings=settings, registry=registry, repository=repository, today=TODAY
    )


@pytest.fixture
def simple_grid() -> list[list]:
    """Minimal Ukrainian statement: header on the first row."""
    return [
        ["Дата", "Сума", "Опис"],
        ["01.03.2024", "-123,45", "POS Purchase Shop"],
    ]


@pytest.fixture
def ua_statement_grid() -> list[list]:
    """Ukrainian card statement with banner rows, a repeated header and bad rows."""
    return [
        ["Виписка з ваших карток за період 01.03.2024 - 31.03.2024", None, None, None],
        [None, None, None, None],
        ["Дата", "Сума", "Опис", "Картка"],
        ["01.03.2024", "-123,45", "POS Purchase Shop", "**** 1234"],
        ["02.03.2024 14:30", "15 000,00", "Зарплата за лютий", "**** 1234"],
        ["03.03.2024", "abc", "Broken amount", "**** 1234"],
        [None, None, None, None],
        ["Дата", "Сума", "Опис", "Картка"],
        ["32.13.2024", "-10,00", "Bad date row", "**** 1234"],
        ["05.03.2024", "-250,00", "Аптека Доброго дня", "**** 1234"],
    ]


@pytest.fixture
def en_statement_grid() -> list[list]:
    """English export with category and notes columns."""
    return [
        ["Bank statement for account ****5678", None, None, None, None],
        ["Date", "Description", "Amount", "Category", "Notes"],
        ["2024-03-01", "Starbucks Coffee", "-4.50", "Coffee shops", "Morning"],
        ["2024-03-02", "Salary ACME", "2500.00", "", ""],
    ]


@pytest.fixture
def sample_csv_content() -> bytes:
    """Semicolon-separated CSV as exported by European banks."""
    return (
        "Date;Amount;Description\n"
        "01.03.2024;-123,45;POS Purchase Shop\n"
        "02.03.2024;1 000,00;Salary\n"
    ).encode("utf-8")


@pytest.fixture
def sample_xlsx_content() -> bytes:
    """Workbook with native datetime and numeric cells."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["Дата", "Сума", "Опис"])
    sheet.append([datetime(2024, 3, 1, 10, 15), -99.99, "Netflix"])
    sheet.append([datetime(2024, 3, 2), 1000, "Refund"])

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
