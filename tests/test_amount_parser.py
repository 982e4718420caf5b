"""Tests for amount parsing of statement cells."""

from decimal import Decimal

import pytest

from finport.utils.amount_parser import (
    ParsedAmount,
    normalize_separators,
    parse_amount,
    parse_amount_cell,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1.234,56", Decimal("1234.56")),
        ("1,234.56", Decimal("1234.56")),
        ("10,50", Decimal("10.50")),
        ("1.234", Decimal("1234.00")),
        ("10.5", Decimal("10.50")),
        ("1,234", Decimal("1234.00")),
        ("1.234.567,89", Decimal("1234567.89")),
        ("1,234,567.89", Decimal("1234567.89")),
        ("1.234.567", Decimal("1234567.00")),
        ("42", Decimal("42.00")),
    ],
)
def test_separator_disambiguation(text, expected):
    """Decimal and thousands separators are told apart by position and digits."""
    assert parse_amount(text).magnitude == expected


def test_normalize_separators():
    """The rule function can be checked on its own."""
    assert normalize_separators("1.234,56") == "1234.56"
    assert normalize_separators("1,234.56") == "1234.56"
    assert normalize_separators("10,5") == "10.5"
    assert normalize_separators("1,234") == "1234"
    assert normalize_separators("1234") == "1234"


@pytest.mark.parametrize(
    "text, magnitude, negative",
    [
        ("R$ 1.234,56", Decimal("1234.56"), False),
        ("-R$ 15,90", Decimal("15.90"), True),
        ("R$ -15,90", Decimal("15.90"), True),
        ("$1,234.56", Decimal("1234.56"), False),
        ("€ 9,99", Decimal("9.99"), False),
        ("-123.45", Decimal("123.45"), True),
        ("123,45-", Decimal("123.45"), True),
        ("(123.45)", Decimal("123.45"), True),
        ("+50,00", Decimal("50.00"), False),
        ("1 234,56", Decimal("1234.56"), False),
        ("1\u00a0234,56", Decimal("1234.56"), False),
    ],
)
def test_currency_and_sign(text, magnitude, negative):
    """Currency markers are stripped and the written sign is reported."""
    assert parse_amount(text) == ParsedAmount(magnitude=magnitude, is_negative=negative)


def test_rounds_to_cents():
    """Magnitudes are rounded half up to two places."""
    assert parse_amount("1.234,565").magnitude == Decimal("1234.57")
    assert parse_amount_cell(10.004).magnitude == Decimal("10.00")


@pytest.mark.parametrize("text", ["", "   ", "abc", "R$", "-", "12a", "NaN", "Infinity", "1e5", "0,00", "0"])
def test_unusable_text(text):
    """Empty, non-numeric and zero amounts raise ValueError."""
    with pytest.raises(ValueError):
        parse_amount(text)


def test_numeric_cells():
    """Numeric cells keep their sign separately from the magnitude."""
    assert parse_amount_cell(-15.9) == ParsedAmount(Decimal("15.90"), True)
    assert parse_amount_cell(5000) == ParsedAmount(Decimal("5000.00"), False)


@pytest.mark.parametrize("value", [0, 0.0, None, True, float("nan"), float("inf"), object()])
def test_unusable_cells(value):
    """Zero, absent, boolean, non-finite and unknown cells raise ValueError."""
    with pytest.raises(ValueError):
        parse_amount_cell(value)
