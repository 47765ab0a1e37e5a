"""
Amount Parser

Parses statement amount cells written in any of the common locale styles:
"1,234.56", "1.234,56", "1 234,56 ₴", "-123,45", "(45.00)", "$-12.00".
"""

import re
from decimal import Decimal, InvalidOperation

# Everything that is not a digit, separator, sign or parenthesis is noise:
# currency symbols and codes, spaces (incl. NBSP), apostrophes, words
NOISE_PATTERN = re.compile(r"[^\d,.\-+−()]")
MINUS_SIGNS = ("-", "−")

INCOME_HINTS = ("+", "credit", "кредит", "зарахування")
EXPENSE_HINTS = ("-", "−", "debit", "дебет", "списання")


def _normalize_separators(number: str) -> str:
    """Resolve comma vs period into a plain decimal string.

    If both appear, the rightmost one is the decimal separator. A lone comma
    exactly three characters from the end is a decimal comma; any other lone
    comma is thousands grouping.
    """
    has_comma = "," in number
    has_period = "." in number

    if has_comma and has_period:
        if number.rfind(",") > number.rfind("."):
            return number.replace(".", "").replace(",", ".")
        return number.replace(",", "")

    if has_comma:
        if number.rfind(",") == len(number) - 3 and number.count(",") == 1:
            return number.replace(",", ".")
        return number.replace(",", "")

    if number.count(".") > 1:
        return number.replace(".", "")

    return number


def parse_amount(value) -> Decimal | None:
    """Parse a raw amount cell.

    Args:
        value: Number or amount text

    Returns:
        Signed Decimal amount, or None when the value is not a number
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if value != value:  # NaN
            return None
        return Decimal(str(value))

    if isinstance(value, Decimal):
        return value

    text = str(value).strip()
    if not text:
        return None

    cleaned = NOISE_PATTERN.sub("", text)

    is_negative = False
    if cleaned.startswith("(") and cleaned.endswith(")"):
        is_negative = True
    elif cleaned.startswith(MINUS_SIGNS) or cleaned.endswith(MINUS_SIGNS):
        is_negative = True

    number = re.sub(r"[()+\-−]", "", cleaned)
    if not re.search(r"\d", number):
        return None

    number = _normalize_separators(number)

    try:
        amount = Decimal(number)
    except InvalidOperation:
        return None

    return -amount if is_negative else amount


def determine_is_income(raw_amount, parsed_amount: Decimal) -> bool:
    """Decide whether an amount is income.

    Explicit cues in the raw text win: minus signs and debit words mean an
    expense, plus signs and credit words mean income. Otherwise the sign of
    the parsed amount decides.

    Args:
        raw_amount: Raw amount cell as found in the file
        parsed_amount: Result of parse_amount for that cell

    Returns:
        True for income, False for expense
    """
    raw_text = str(raw_amount).lower()

    if any(hint in raw_text for hint in EXPENSE_HINTS):
        return False

    if any(hint in raw_text for hint in INCOME_HINTS):
        return True

    return parsed_amount >= 0
