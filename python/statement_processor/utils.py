"""
Parsing Helpers

Loose-value coercion shared by the extractors, regex parsers and normalizer.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

# Day-first formats are tried before month-first ones
DATE_FORMATS = [
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%d/%m/%y",
    "%d-%b-%Y",
    "%d-%b-%y",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b, %Y",
]

CURRENCY_PATTERN = re.compile(r"(?:₦|NGN|N\$|\$|€|£|,|\s)", re.IGNORECASE)
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(
    r"^(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp][Mm])?$"
)


def parse_amount(value) -> Decimal | None:
    """Parse a loosely formatted amount.

    Args:
        value: Number or string (may include currency symbols, commas,
            parentheses or a trailing CR/DR marker)

    Returns:
        Parsed Decimal (sign preserved) or None if unparsable
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            return None
        return amount if amount.is_finite() else None

    cleaned = str(value).strip()
    if not cleaned:
        return None

    is_negative = False
    if cleaned.startswith("(") and cleaned.endswith(")"):
        cleaned = cleaned[1:-1]
        is_negative = True

    upper = cleaned.upper()
    if upper.endswith("CR") or upper.endswith("DR"):
        cleaned = cleaned[:-2]

    cleaned = CURRENCY_PATTERN.sub("", cleaned)
    if cleaned.startswith("-"):
        cleaned = cleaned[1:]
        is_negative = not is_negative
    elif cleaned.startswith("+"):
        cleaned = cleaned[1:]

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None

    if not amount.is_finite():
        return None

    return -amount if is_negative else amount


def parse_date(value) -> date | None:
    """Parse a loosely formatted date.

    Accepts date/datetime objects, ISO strings (with or without a time
    component) and the day-first formats in DATE_FORMATS.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    date_str = re.sub(r"\s+", " ", str(value).strip())
    if not date_str:
        return None

    try:
        return datetime.fromisoformat(date_str.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    return None


def to_iso_date(value) -> str:
    """Normalize a date string to YYYY-MM-DD, or return it unchanged."""
    parsed = parse_date(value)
    if parsed is None:
        return str(value or "").strip()
    return parsed.isoformat()


def is_iso_date(value: str) -> bool:
    return bool(value) and ISO_DATE_PATTERN.match(value) is not None


def normalize_time(value) -> str | None:
    """Convert 12h/24h time strings to HH:MM:SS.

    Returns:
        Normalized time or None if the value is not a recognizable time
    """
    if value is None:
        return None

    match = TIME_PATTERN.match(str(value).strip())
    if not match:
        return None

    hours, minutes, seconds, period = match.groups()
    hour = int(hours)
    minute = int(minutes)
    second = int(seconds or 0)

    if period:
        if hour < 1 or hour > 12:
            return None
        if period.upper() == "PM" and hour != 12:
            hour += 12
        elif period.upper() == "AM" and hour == 12:
            hour = 0

    if hour > 23 or minute > 59 or second > 59:
        return None

    return f"{hour:02d}:{minute:02d}:{second:02d}"


def extract_time(value) -> str | None:
    """Pull the time of day out of an ISO datetime string, if it has one."""
    if value is None:
        return None

    text = str(value).strip()
    if ":" not in text:
        return None

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None

    return parsed.strftime("%H:%M:%S")


def clean_text(value) -> str | None:
    """Strip a value to a string, mapping empty results to None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None
