# tests/test_money.py
"""Tests for amount parsing, INR formatting and amount-in-words."""

from decimal import Decimal

import pytest

from ledgerdesk.domain.services.money import amount_in_words, format_inr, group_indian, to_decimal


# ---------------------------------------------------------------------------
# to_decimal
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("raw,expected", [
    (None, Decimal("0")),
    ("", Decimal("0")),
    (0.1, Decimal("0.1")),
    (1180, Decimal("1180")),
    ("1,23,456.50", Decimal("123456.50")),
    (" 42 ", Decimal("42")),
    (Decimal("7.25"), Decimal("7.25")),
])
def test_to_decimal_accepts_upstream_shapes(raw, expected):
    assert to_decimal(raw) == expected


@pytest.mark.parametrize("raw", ["abc", float("nan"), float("inf"), "Infinity", True, [1]])
def test_to_decimal_rejects_garbage(raw):
    with pytest.raises(ValueError):
        to_decimal(raw)


def test_float_does_not_leak_binary_expansion():
    assert to_decimal(0.1) + to_decimal(0.2) == Decimal("0.3")


# ---------------------------------------------------------------------------
# format_inr
# ---------------------------------------------------------------------------

def test_indian_grouping():
    assert group_indian("123") == "123"
    assert group_indian("1234") == "1,234"
    assert group_indian("123456") == "1,23,456"
    assert group_indian("12345678") == "1,23,45,678"


@pytest.mark.parametrize("value,expected", [
    (0, "₹0.00"),
    (100, "₹100.00"),
    (800, "₹800.00"),
    (1234567.891, "₹12,34,567.89"),
    ("12345678.9", "₹1,23,45,678.90"),
    (Decimal("0.005"), "₹0.01"),
    (-1234, "-₹1,234.00"),
])
def test_format_inr(value, expected):
    assert format_inr(value) == expected


def test_format_inr_custom_symbol():
    assert format_inr(1500, symbol="Rs ") == "Rs 1,500.00"


# ---------------------------------------------------------------------------
# amount_in_words
# ---------------------------------------------------------------------------

def test_words_lakh_and_thousand():
    assert amount_in_words(120000) == "Indian Rupee One Lakh Twenty Thousand Only"


def test_words_with_paise():
    assert amount_in_words(120050.5) == "Indian Rupee One Lakh Twenty Thousand Fifty and Fifty Paise Only"


def test_words_paise_only():
    assert amount_in_words(Decimal("0.75")) == "Indian Rupee Seventy Five Paise Only"


def test_words_zero():
    assert amount_in_words(0) == "Indian Rupee Zero Only"


def test_words_small_numbers():
    assert amount_in_words(1001) == "Indian Rupee One Thousand One Only"
    assert amount_in_words(1180) == "Indian Rupee One Thousand One Hundred Eighty Only"


def test_words_beyond_thousand_crore():
    assert amount_in_words(12345678901) == (
        "Indian Rupee One Thousand Two Hundred Thirty Four Crore "
        "Fifty Six Lakh Seventy Eight Thousand Nine Hundred One Only"
    )


def test_words_reject_negative():
    with pytest.raises(ValueError):
        amount_in_words(-1)
