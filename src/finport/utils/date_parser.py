"""Date parsing utilities for bank statement cells.

Each rule is a separate function so ambiguous inputs can be reasoned about
one rule at a time:

- ``from_spreadsheet_serial``: numeric day counts written by spreadsheets.
- ``parse_numeric_date_parts``: three all-digit parts such as ``31/01/2026``.
- ``parse_date_text``: any text cell, falling back to ``dateutil``.
- ``parse_date_cell``: dispatch on the native type of a cell.

All functions raise ``ValueError`` when no valid calendar date results.
"""

import math
import re
from datetime import date, datetime, timedelta

from dateutil import parser as date_parser

# Spreadsheet serial 0. Counting from 1899-12-30 absorbs the two-day offset
# spreadsheets carry from the phantom 1900-02-29.
SPREADSHEET_EPOCH = date(1899, 12, 30)

_SEPARATORS = re.compile(r"[/\-. ]")

# Fill-in values for fields missing from free-form text. They differ in year,
# month and day, so a date missing any of those parses differently under each.
_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def expand_two_digit_year(year: int) -> int:
    """Expand a 2-digit year: 00-49 become 20xx, 50-99 become 19xx."""
    return 2000 + year if year < 50 else 1900 + year


def from_spreadsheet_serial(serial: float) -> date:
    """Convert a spreadsheet day serial into a date.

    The fractional part carries the time of day and is discarded.

    Raises:
        ValueError: If the serial is negative, not finite or out of range
    """
    if isinstance(serial, bool) or not math.isfinite(serial) or serial < 0:
        raise ValueError(f"Invalid spreadsheet date serial: {serial!r}")
    try:
        return SPREADSHEET_EPOCH + timedelta(days=math.floor(serial))
    except OverflowError as e:
        raise ValueError(f"Spreadsheet date serial out of range: {serial!r}") from e


def parse_numeric_date_parts(first: str, second: str, third: str) -> date:
    """Build a date from three digit-only parts.

    Rules:
    - First part has 4 digits: year first. Middle part above 12 means
      year-day-month, otherwise year-month-day.
    - Last part has 4 digits (or 2, expanded): year last. First part above 12
      means day-month, else second part above 12 means month-day, otherwise
      the ambiguous case defaults to day-month.

    Raises:
        ValueError: If the parts do not form a valid calendar date
    """
    a, b, c = int(first), int(second), int(third)

    if len(first) == 4:
        if b > 12:
            return date(a, c, b)
        return date(a, b, c)

    if len(third) == 4:
        year = c
    elif len(third) == 2:
        year = expand_two_digit_year(c)
    else:
        raise ValueError(f"Cannot locate year in '{first}/{second}/{third}'")

    if a > 12:
        return date(year, b, a)
    if b > 12:
        return date(year, a, b)
    # Ambiguous: day first
    return date(year, b, a)


def parse_date_text(date_str: str) -> date:
    """Parse a textual date.

    Handles:
    - "31/01/2026", "31-01-2026", "31.01.2026", "31 01 2026"
    - "01/31/2026" (month first when the second part exceeds 12)
    - "2026-01-31", "2026/31/01"
    - "31/01/26"
    - anything ``dateutil`` understands, e.g. "Jan 31, 2026", as long as the
      text names a day, a month and a year

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip()
    if not date_str:
        raise ValueError("Empty date string")

    parts = _SEPARATORS.split(date_str)
    if len(parts) == 3 and all(part.isdigit() for part in parts):
        try:
            return parse_numeric_date_parts(*parts)
        except ValueError as e:
            raise ValueError(f"Could not parse date '{date_str}': {e}") from e

    try:
        first, second = (
            date_parser.parse(date_str, dayfirst=True, default=default).date()
            for default in _FILL_DEFAULTS
        )
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from e

    if first != second:
        raise ValueError(f"Date '{date_str}' is missing a day, month or year")
    return first


def parse_date_cell(value: object) -> date:
    """Parse a raw cell into a calendar date.

    Numeric cells are spreadsheet serials, text goes through
    :func:`parse_date_text`, and native dates keep their calendar day.

    Raises:
        ValueError: If the cell holds no valid date
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"Not a date: {value!r}")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        return from_spreadsheet_serial(value)
    if isinstance(value, str):
        return parse_date_text(value)
    raise ValueError(f"Unsupported date cell type: {type(value).__name__}")
