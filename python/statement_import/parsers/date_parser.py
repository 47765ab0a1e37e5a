"""
Date Parser

Turns statement date cells into a normalized ISO timestamp string.

Accepts spreadsheet serial numbers, native date/datetime values and free
text. Anything outside the sanity window is treated as unparseable so that
header cells and corrupted values never masquerade as dates.
"""

import logging
import re
from datetime import date, datetime, time, timedelta

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

# Serial day 0 of the 1900 date system (Excel counts the phantom 1900-02-29)
EXCEL_EPOCH = datetime(1899, 12, 30)
# Serials at or below this fall before the phantom leap day
EXCEL_LEAP_BUG_SERIAL = 59

HEADER_WORDS = re.compile(r"^(дата|date|fecha|datum|data|time|час)$", re.IGNORECASE)
YEAR_FIRST = re.compile(r"^\d{4}\D")
TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?$")

# (regex, (year, month, day) group positions), tried in order
DATE_FORMATS = [
    (re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$"), (3, 2, 1)),  # DD.MM.YYYY
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"), (3, 2, 1)),    # DD/MM/YYYY
    (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"), (1, 2, 3)),    # YYYY-MM-DD
    (re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"), (3, 2, 1)),    # DD-MM-YYYY
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"), (3, 1, 2)),    # MM/DD/YYYY
    (re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$"), (1, 2, 3)),    # YYYY/MM/DD
]


def excel_serial_to_datetime(serial: float) -> datetime:
    """Convert a spreadsheet date serial to a datetime.

    Args:
        serial: Days since the spreadsheet epoch, fraction is time of day

    Returns:
        Corresponding datetime
    """
    if serial > EXCEL_LEAP_BUG_SERIAL:
        return EXCEL_EPOCH + timedelta(seconds=round(serial * 86400))
    # Early serials count from 1900-01-01 as day 1
    return datetime(1900, 1, 1) + timedelta(seconds=round((serial - 1) * 86400))


def parse_time(value: str) -> time | None:
    """Parse an HH:MM[:SS] time of day."""
    match = TIME_PATTERN.match(value.strip())
    if not match:
        return None

    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    if hour > 23 or minute > 59 or second > 59:
        return None
    return time(hour, minute, second)


def parse_date_text(date_str: str) -> datetime | None:
    """Parse a free-text date, with an optional trailing time of day.

    Fixed formats are tried first; dateutil handles everything else.

    Args:
        date_str: Date text such as "01.03.2024 14:30"

    Returns:
        Parsed datetime or None
    """
    parts = date_str.split()
    if not parts:
        return None

    date_part = parts[0]
    time_part = parse_time(parts[1]) if len(parts) > 1 else None

    for regex, (y, m, d) in DATE_FORMATS:
        match = regex.match(date_part)
        if not match:
            continue
        try:
            parsed = date(int(match.group(y)), int(match.group(m)), int(match.group(d)))
        except ValueError:
            continue
        return datetime.combine(parsed, time_part or time())

    # Bare numbers other than YYYYMMDD are amounts or ids, not dates
    if date_str.isdigit() and len(date_str) != 8:
        return None

    # Day-first like the fixed formats, except for year-first text ("2024-03-01T...")
    dayfirst = YEAR_FIRST.match(date_str) is None
    try:
        return date_parser.parse(date_str, dayfirst=dayfirst)
    except (ValueError, OverflowError, TypeError):
        return None


def to_datetime(value) -> datetime | None:
    """Convert a raw cell value to a datetime without range checks."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime.combine(value, time())

    if isinstance(value, (int, float)):
        try:
            return excel_serial_to_datetime(float(value))
        except (OverflowError, ValueError):
            return None

    if isinstance(value, str):
        date_str = value.strip()
        if not date_str or HEADER_WORDS.match(date_str):
            return None
        return parse_date_text(date_str)

    return None


def sanity_window(
    today: date | None = None,
    past_years: int = 10,
    future_years: int = 1
) -> tuple[datetime, datetime]:
    """Earliest and latest acceptable statement dates."""
    today = today or date.today()
    start = datetime(today.year - past_years, 1, 1)
    end = datetime(today.year + future_years, 12, 31, 23, 59, 59)
    return start, end


def format_timestamp(dt: datetime) -> str:
    """Render a datetime as YYYY-MM-DD, adding the time only when set."""
    if dt.time() == time():
        return dt.strftime("%Y-%m-%d")
    return dt.strftime("%Y-%m-%dT%H:%M:%S")


def parse_date(
    value,
    today: date | None = None,
    past_years: int = 10,
    future_years: int = 1
) -> str | None:
    """Parse a statement date cell.

    Args:
        value: Raw cell value (serial number, date, datetime or text)
        today: Reference day for the sanity window
        past_years: How many years back a date may lie
        future_years: How many years ahead a date may lie

    Returns:
        Normalized timestamp string, or None when unparseable
    """
    dt = to_datetime(value)
    if dt is None:
        return None

    if dt.tzinfo is not None:
        dt = dt.replace(tzinfo=None)

    start, end = sanity_window(today, past_years, future_years)
    if dt < start or dt > end:
        logger.warning(f"Date {dt.isoformat()} seems unreasonable, skipping")
        return None

    return format_timestamp(dt)
