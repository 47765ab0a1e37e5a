"""
Value parsers for statement cells.
"""

from .date_parser import parse_date, excel_serial_to_datetime, sanity_window
from .amount_parser import parse_amount, determine_is_income
from .card_parser import normalize_card_name, card_from_file_name, is_masked_card
from .description_parser import clean_description, extract_description, extract_comment

__all__ = [
    "parse_date",
    "excel_serial_to_datetime",
    "sanity_window",
    "parse_amount",
    "determine_is_income",
    "normalize_card_name",
    "card_from_file_name",
    "is_masked_card",
    "clean_description",
    "extract_description",
    "extract_comment",
]
