"""
Card Name Parser

Normalizes card/account labels and derives a fallback label from the
statement file name.
"""

import re

MASKED_CARD_PATTERNS = [
    re.compile(r"\*{2,}\s*\d{2,4}"),           # ****1234, ** 12
    re.compile(r"\d{4}\s*\*{2,}"),             # 5168 ****
    re.compile(r"\d{2,6}[xX]{4,}\d{2,4}"),     # 516874XXXXXX1234
]

NULL_TOKENS = {
    "", "-", "—", "null", "none", "nan", "n/a", "na", "undefined", "unknown", "default",
}

# Lower-case token -> canonical spelling
KNOWN_BANKS = {
    "privatbank": "PrivatBank",
    "приватбанк": "ПриватБанк",
    "приват": "ПриватБанк",
    "monobank": "Monobank",
    "mono": "Monobank",
    "монобанк": "Monobank",
    "oschadbank": "Oschadbank",
    "ощадбанк": "Ощадбанк",
    "ощад": "Ощадбанк",
    "raiffeisen": "Raiffeisen",
    "райффайзен": "Райффайзен",
    "ukrsibbank": "UkrSibbank",
    "укрсиббанк": "УкрСиббанк",
    "hsbc": "HSBC",
    "amex": "Amex",
    "chase": "Chase",
    "barclays": "Barclays",
    "santander": "Santander",
    "monzo": "Monzo",
    "natwest": "NatWest",
    "lloyds": "Lloyds",
    "revolut": "Revolut",
    "wise": "Wise",
    "ing": "ING",
    "dkb": "DKB",
    "ubs": "UBS",
    "visa": "Visa",
    "mastercard": "Mastercard",
}

# Substrings that mark a file-name part as a bank name
FILE_NAME_BANKS = [
    "monzo", "santander", "chase", "amex", "barclays", "hsbc", "natwest", "lloyds",
    "приват", "privatbank", "mono", "ощад", "укрсиббанк", "укргазбанк", "альфа",
    "райффайзен", "raiffeisen", "agricole", "revolut", "ubs", "ing", "dkb",
]

FILE_EXTENSION = re.compile(r"\.(xlsx?|csv)$", re.IGNORECASE)


def is_masked_card(value: str) -> bool:
    """Check for a partially redacted card number."""
    return any(pattern.search(value) for pattern in MASKED_CARD_PATTERNS)


def _capitalize_word(word: str) -> str:
    canonical = KNOWN_BANKS.get(word.lower())
    if canonical:
        return canonical
    return word[:1].upper() + word[1:].lower()


def normalize_card_name(value, default: str = "Imported") -> str:
    """Normalize a card/account cell.

    Args:
        value: Raw card cell
        default: Placeholder for values that carry no card name

    Returns:
        Masked numbers verbatim, otherwise a capitalized label with known bank
        names canonicalized, or ``default``
    """
    if value is None or isinstance(value, (bool, int, float)):
        return default

    text = " ".join(str(value).split())

    if text.lower() in NULL_TOKENS:
        return default

    if is_masked_card(text):
        return text

    if re.fullmatch(r"[\d\s-]+", text):
        return default

    if len(text) < 3:
        return default

    return " ".join(_capitalize_word(word) for word in text.split(" "))


def card_from_file_name(file_name: str, default: str = "Imported") -> str:
    """Derive a card label from a statement file name.

    Args:
        file_name: e.g. "privatbank_statement_2024-03.xlsx"
        default: Label used when nothing meaningful is found

    Returns:
        Card label
    """
    name = FILE_EXTENSION.sub("", file_name or "")
    parts = [part for part in re.split(r"[-_\s]", name) if part]

    for part in parts:
        lower_part = part.lower()
        # Short names like "ing" only count as a whole part
        if any(
            bank in lower_part if len(bank) > 3 else bank == lower_part
            for bank in FILE_NAME_BANKS
        ):
            return part

    for part in parts:
        if 3 <= len(part) <= 20 and not part.isdigit():
            return part

    return parts[0] if parts else default
