"""
Description Parser

Cleans bank transaction descriptions and pulls out a secondary comment.
"""

import re

TRANSACTION_CODE_PREFIX = re.compile(
    r"^(POS|ATM|DIR|TFR|DD|SO|CHQ|FEE|INT|PAYMENT|PURCHASE|WITHDRAWAL"
    r"|ПОКУПКА|ПЛАТІЖ|ПЛАТЕЖ|БАНКОМАТ)\s+",
    re.IGNORECASE,
)

TRAILING_NOISE = [
    re.compile(r"\s+\d{2}[/.-]\d{2}[/.-]\d{4}$"),  # trailing full date
    re.compile(r"\s+\d{2}[/.-]\d{2}$"),            # trailing MM/DD
    re.compile(r"\s+\d{4}$"),                      # trailing year
]
MONTH_DAY_PREFIX = re.compile(r"^[A-Za-z]{3}\s+\d{1,2}\s+")  # "JAN 15 "

REFERENCE_PREFIX = re.compile(r"^REF:\s*", re.IGNORECASE)
REFERENCE_SUFFIXES = [
    re.compile(r"\s+REF\s+\w+$", re.IGNORECASE),
    re.compile(r"\s+TXN\s+\w+$", re.IGNORECASE),
    re.compile(r"\s+AUTH\s+\w+$", re.IGNORECASE),
]

SENTENCE_START = re.compile(r"([.!?]\s+)(\w)")
COMMENT_SPLIT = re.compile(r"[|;:]")


def _capitalize_sentences(text: str) -> str:
    text = text[:1].upper() + text[1:].lower()
    return SENTENCE_START.sub(lambda m: m.group(1) + m.group(2).upper(), text)


def clean_description(description: str, default: str = "Imported transaction") -> str:
    """Strip bank codes, trailing dates and reference ids from a description.

    Args:
        description: Raw description text
        default: Returned when nothing is left after cleaning

    Returns:
        Cleaned, sentence-capitalized description
    """
    cleaned = TRANSACTION_CODE_PREFIX.sub("", description.strip())
    for pattern in TRAILING_NOISE:
        cleaned = pattern.sub("", cleaned)
    cleaned = MONTH_DAY_PREFIX.sub("", cleaned)
    cleaned = re.sub(r"\s{2,}", " ", cleaned).strip()

    cleaned = REFERENCE_PREFIX.sub("", cleaned)
    for pattern in REFERENCE_SUFFIXES:
        cleaned = pattern.sub("", cleaned)
    cleaned = cleaned.strip()

    if not cleaned:
        return default

    return _capitalize_sentences(cleaned)


def extract_description(raw_description, default: str = "Imported transaction") -> str:
    """Cleaned description for a raw cell, or ``default`` when blank."""
    text = "" if raw_description is None else str(raw_description).strip()
    if not text:
        return default
    return clean_description(text, default)


def extract_comment(raw_comment, raw_description, cleaned_description: str) -> str | None:
    """Find a secondary comment for a transaction.

    A dedicated comment cell wins when it does not just repeat the
    description. Otherwise the second ``|;:``-separated fragment of the raw
    description is used. Best effort only.

    Args:
        raw_comment: Raw comment cell (may be None)
        raw_description: Raw description cell
        cleaned_description: Output of extract_description

    Returns:
        Comment text or None
    """
    raw_desc_text = "" if raw_description is None else str(raw_description).strip()

    if raw_comment is not None:
        comment = str(raw_comment).strip()
        if comment and comment != cleaned_description and comment != raw_desc_text:
            return comment

    parts = [part.strip() for part in COMMENT_SPLIT.split(raw_desc_text)]
    parts = [part for part in parts if part]

    if len(parts) > 1 and parts[1] != cleaned_description:
        return parts[1]

    return None
