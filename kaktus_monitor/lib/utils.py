"""Locale value parsing for the Kaktus portal.

The portal renders Czech formatted values: "5.3.2024" dates, "3,5"
decimals and "1 234 Kč" amounts with spaces as thousands separators.
"""

from __future__ import annotations

import re
from datetime import date

from ..core.exceptions import ParsingError

_DATE_RE = re.compile(r"(\d{1,2})\.\s?(\d{1,2})\.\s?(\d{4})")
_LEADING_DECIMAL_RE = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")
# \s also covers the non-breaking spaces the portal uses between thousands
_INTEGER_RUN_RE = re.compile(r"\d[\d\s]*")


def parse_locale_date(text: str) -> date:
    """Parse the first D.M.YYYY date found in text.

    Args:
        text: Free text such as "do 5.3.2024" or "obnoví se 1. 4. 2024"

    Returns:
        Calendar date

    Raises:
        ParsingError: If no date is present or it is not a valid date
    """
    match = _DATE_RE.search(text)
    if not match:
        raise ParsingError("No D.M.YYYY date found", raw_value=text)

    day, month, year = (int(g) for g in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise ParsingError(f"Invalid date: {e}", raw_value=text) from e


def parse_locale_decimal(text: str) -> float:
    """Parse a decimal with a comma separator, ignoring trailing units.

    Only the first comma is treated as the decimal separator. Parsing stops
    at the first character that cannot continue the number, so "12,5 GB"
    yields 12.5 and "120:30" yields 120.0.

    Raises:
        ParsingError: If text does not start with a number
    """
    match = _LEADING_DECIMAL_RE.match(text.replace(",", ".", 1))
    if not match:
        raise ParsingError("Not a decimal number", raw_value=text)
    return float(match.group(1))


def extract_leading_integer(text: str) -> int:
    """Extract the first integer from text, joining whitespace-separated groups.

    "1 234 Kč do 5.3.2024" yields 1234.

    Raises:
        ParsingError: If text contains no digits
    """
    match = _INTEGER_RUN_RE.search(text)
    if not match:
        raise ParsingError("No integer found", raw_value=text)
    return int("".join(match.group(0).split()))


def parse_minutes_seconds(text: str) -> tuple[float, float]:
    """Parse a "MMM:SS" remaining-calls display.

    Seconds are the decimal value after the first colon, taken literally.
    Minutes are the value before the colon plus the seconds as a fraction
    of a minute.

    Returns:
        (minutes, seconds), e.g. (120.5, 30.0) for "120:30"
    """
    head, sep, tail = text.partition(":")
    minutes = parse_locale_decimal(head)
    if not sep:
        return minutes, 0.0

    seconds = parse_locale_decimal(tail)
    return minutes + seconds / 60, seconds
