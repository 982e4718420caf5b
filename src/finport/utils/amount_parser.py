"""Amount parsing utilities."""

import math
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENTS = Decimal("0.01")

_CURRENCY = re.compile(r"R\$|[$€£¥]|\s")
_PLAIN_NUMBER = re.compile(r"\d+(\.\d+)?|\.\d+")


@dataclass(frozen=True)
class ParsedAmount:
    """Magnitude of an amount plus the sign it was written with."""

    magnitude: Decimal
    is_negative: bool


def strip_currency(amount_str: str) -> str:
    """Remove currency markers and every kind of whitespace."""
    return _CURRENCY.sub("", amount_str)


def normalize_separators(amount_str: str) -> str:
    """Rewrite decimal and thousands separators into a plain decimal string.

    - "1.234,56" -> "1234.56" (comma comes last, so it is the decimal mark)
    - "1,234.56" -> "1234.56"
    - "10,50" -> "10.50" (one comma followed by 1-2 digits)
    - "1.234" -> "1234" (three digits follow, so it groups thousands)
    """
    has_comma = "," in amount_str
    has_dot = "." in amount_str

    if has_comma and has_dot:
        if amount_str.rfind(",") > amount_str.rfind("."):
            return amount_str.replace(".", "").replace(",", ".")
        return amount_str.replace(",", "")

    for sep in (",", "."):
        if sep in amount_str:
            head, _, tail = amount_str.partition(sep)
            if sep not in tail and 1 <= len(tail) <= 2:
                return f"{head}.{tail}"
            return amount_str.replace(sep, "")

    return amount_str


def parse_amount(amount_str: str) -> ParsedAmount:
    """Parse an amount string into a magnitude and sign.

    Handles various formats:
    - "123.45", "R$ 1.234,56", "$1,234.56"
    - "-123,45", "123,45-" (negative)
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        ParsedAmount with a magnitude rounded to cents

    Raises:
        ValueError: If amount string cannot be parsed or is zero
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = strip_currency(amount_str)

    # Handle parentheses notation (negative)
    is_negative = False
    if cleaned.startswith("(") and cleaned.endswith(")"):
        is_negative = True
        cleaned = cleaned[1:-1]

    if cleaned.startswith("-") or cleaned.endswith("-"):
        is_negative = True
        cleaned = cleaned.strip("-")
    elif cleaned.startswith("+"):
        cleaned = cleaned[1:]

    # Currency may sit between the sign and the digits ("-R$ 10,00")
    cleaned = strip_currency(cleaned)
    cleaned = normalize_separators(cleaned)

    if not _PLAIN_NUMBER.fullmatch(cleaned):
        raise ValueError(f"Could not parse amount '{amount_str}'")

    try:
        magnitude = Decimal(cleaned).quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}") from e

    if magnitude == 0:
        raise ValueError(f"Amount '{amount_str}' is zero")
    return ParsedAmount(magnitude=magnitude, is_negative=is_negative)


def parse_amount_cell(value: object) -> ParsedAmount:
    """Parse a raw cell into a magnitude and sign.

    Raises:
        ValueError: If the cell holds no usable non-zero amount
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"Not an amount: {value!r}")
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"Not an amount: {value!r}")
        try:
            magnitude = abs(Decimal(str(value))).quantize(CENTS, rounding=ROUND_HALF_UP)
        except InvalidOperation as e:
            raise ValueError(f"Could not parse amount {value!r}: {e}") from e
        if magnitude == 0:
            raise ValueError(f"Amount {value!r} is zero")
        return ParsedAmount(magnitude=magnitude, is_negative=value < 0)
    if isinstance(value, str):
        return parse_amount(value)
    raise ValueError(f"Unsupported amount cell type: {type(value).__name__}")
