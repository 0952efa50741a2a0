"""
Value predicates and parsers shared by inference, validation and cleaning.

Every helper accepts the tagged scalar union used for tabular rows
(str | int | float | bool | None) and never raises on bad input: parsers
return None and predicates return False.
"""

import math
import re
from datetime import date, datetime

from dateutil import parser as date_parser

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CURRENCY_PATTERN = re.compile(r"[$€£₹]|(usd|eur|gbp|inr|cad|aud)")
# Shape gate used before parsing so plain numbers are not taken for dates
DATE_SHAPE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}|^\d{2}/\d{2}/\d{4}|^\d{4}/\d{2}/\d{2}")
DATE_FALLBACK_PATTERN = re.compile(r"^\d{4}[-/]\d{2}[-/]\d{2}$|^\d{2}[-/]\d{2}[-/]\d{4}$")
# Non-printable characters, tab/newline/carriage return excluded
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
NON_DIGIT_PATTERN = re.compile(r"\D")

BOOLEAN_TOKENS = frozenset({"true", "false", "0", "1", "yes", "no", "y", "n"})


def is_blank(value: object) -> bool:
    """
    Check whether a value counts as missing.

    Examples:
        >>> is_blank(None)
        True
        >>> is_blank("   ")
        True
        >>> is_blank(0)
        False
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, float):
        return math.isnan(value)
    return False


def to_text(value: object) -> str:
    """Render a scalar as trimmed text (booleans as true/false)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).strip()


def is_email(value: object) -> bool:
    """Check a value against the standard email shape."""
    return isinstance(value, str) and bool(EMAIL_PATTERN.match(value.strip()))


def phone_digits(value: object) -> str:
    """
    Keep only the digits of a phone-like value.

    Integral floats (phone columns read as numbers) lose their ``.0``.

    Examples:
        >>> phone_digits("(555) 123-4567")
        '5551234567'
        >>> phone_digits(5551234567.0)
        '5551234567'
    """
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return NON_DIGIT_PATTERN.sub("", str(value))


def digit_count(value: object) -> int:
    """Count digits left after stripping every non-digit character."""
    return len(phone_digits(value))


def is_phone(value: object, min_digits: int = 7, max_digits: int = 15) -> bool:
    """Check whether a value has a phone-like digit count."""
    if value is None or isinstance(value, bool):
        return False
    return min_digits <= digit_count(value) <= max_digits


def has_currency(value: object) -> bool:
    """Check for a currency symbol or ISO currency code."""
    if value is None:
        return False
    return bool(CURRENCY_PATTERN.search(str(value).lower()))


def parse_number(value: object) -> float | None:
    """
    Parse a scalar as a finite-or-infinite number.

    Returns:
        The parsed float, or None if the value is not numeric

    Examples:
        >>> parse_number(" 12.5 ")
        12.5
        >>> parse_number("abc") is None
        True
        >>> parse_number(True) is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
        return None if math.isnan(number) else number

    text = str(value).strip()
    if not text or "_" in text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return None if math.isnan(number) else number


def is_numeric(value: object) -> bool:
    return parse_number(value) is not None


def is_booleanish(value: object) -> bool:
    """Check whether a value is a boolean or one of the boolean tokens."""
    if isinstance(value, bool):
        return True
    if value is None:
        return False
    return to_text(value).lower() in BOOLEAN_TOKENS


def parse_date(value: object) -> datetime | None:
    """
    Parse a date-like scalar with dateutil.

    Returns:
        Parsed datetime, or None if the value cannot be read as a date
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if value is None or isinstance(value, bool):
        return None

    text = str(value).strip()
    if not text:
        return None
    try:
        return date_parser.parse(text)
    except (ValueError, OverflowError):
        return None


def is_dateish(value: object) -> bool:
    """Check for a date-shaped value that also parses."""
    if isinstance(value, date):
        return True
    if value is None or isinstance(value, bool):
        return False
    text = str(value).strip()
    if not DATE_SHAPE_PATTERN.match(text):
        return False
    return parse_date(text) is not None


def has_control_characters(text: str) -> bool:
    return bool(CONTROL_CHAR_PATTERN.search(text))
