"""
Import Report Formatter Module

Formats ImportResults for chat and console display: summary counts, the
date range, totals and only the first few row errors.
"""

import logging
from decimal import Decimal

from .currency import CurrencyRegistry
from .models import ImportErrorEntry, ImportResult

logger = logging.getLogger(__name__)


class ImportReportFormatter:
    """Formats import results for display."""

    STATUS_EMOJI = {
        "success": "✅",
        "warning": "⚠️",
        "error": "❌",
        "duplicate": "🔁",
    }

    def __init__(
        self,
        max_errors: int = 5,
        max_message_length: int = 4096,
        registry: CurrencyRegistry | None = None,
    ):
        """Initialize formatter.

        Args:
            max_errors: How many row errors to list before summarising the rest
            max_message_length: Maximum message length
            registry: Currency registry for symbols and minor-unit digits
        """
        self.max_errors = max_errors
        self.max_length = max_message_length
        self.registry = registry or CurrencyRegistry()

    def truncate_message(self, message: str) -> str:
        """Truncate message if too long, cutting at a line break."""
        if len(message) <= self.max_length:
            return message

        truncate_at = self.max_length - 50
        last_newline = message[:truncate_at].rfind("\n")
        if last_newline > 0:
            truncate_at = last_newline

        return message[:truncate_at] + "\n\n_...message truncated_"

    def format_amount(self, amount: int, currency: str) -> str:
        """Render a minor-unit amount, e.g. -123456 UAH -> "-1,234.56 ₴"."""
        info = self.registry.lookup(currency)
        digits = self.registry.fraction_digits(currency)
        symbol = info.symbol if info else currency

        major = Decimal(amount).scaleb(-digits)
        return f"{major:,.{digits}f} {symbol}"

    def format_error(self, error: ImportErrorEntry) -> str:
        return f"• Row {error.row} ({error.column}): {error.error}"

    def format_result(self, result: ImportResult, file_name: str | None = None) -> str:
        """Format an import result.

        Args:
            result: ImportResult to describe
            file_name: Optional file name for the title

        Returns:
            Formatted message
        """
        summary = result.summary

        if summary.errors_count and not summary.successful_imports:
            status = "error"
        elif summary.errors_count:
            status = "warning"
        else:
            status = "success"

        title = f"{self.STATUS_EMOJI[status]} *Statement Import*"
        if file_name:
            title += f" - {file_name}"

        lines = [
            title,
            "",
            "*Summary:*",
            f"• Rows: {summary.total_rows}",
            f"• Imported: {summary.successful_imports}",
            f"• {self.STATUS_EMOJI['duplicate']} Duplicates: {summary.duplicates_found}",
            f"• Errors: {summary.errors_count}",
        ]

        if summary.earliest:
            lines.append(f"• Period: {summary.earliest[:10]} to {summary.latest[:10]}")

        new_transactions = result.new_transactions
        if new_transactions:
            lines.extend(["", "*Totals (new transactions):*"])
            totals: dict[str, tuple[int, int]] = {}
            for t in new_transactions:
                income, expenses = totals.get(t.currency, (0, 0))
                if t.is_income:
                    income += t.amount
                else:
                    expenses += t.amount
                totals[t.currency] = (income, expenses)

            for currency, (income, expenses) in totals.items():
                lines.append(f"• Income: {self.format_amount(income, currency)}")
                lines.append(f"• Expenses: {self.format_amount(expenses, currency)}")

        if result.errors:
            lines.extend(["", "*Errors:*"])
            for error in result.errors[:self.max_errors]:
                lines.append(self.format_error(error))

            remaining = len(result.errors) - self.max_errors
            if remaining > 0:
                lines.append(f"_... and {remaining} more_")

        return self.truncate_message("\n".join(lines))
