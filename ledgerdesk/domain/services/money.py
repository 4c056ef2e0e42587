# ledgerdesk/domain/services/money.py
"""
Currency helpers shared by every view.

All arithmetic is done on ``Decimal``; values are only quantized when they
are formatted for display (2 places, ROUND_HALF_UP, Indian digit grouping).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
TWOPLACES = Decimal("0.01")

_ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

CRORE = 10_000_000
LAKH = 100_000


def to_decimal(value: Any) -> Decimal:
    """Convert an upstream JSON value to ``Decimal``.

    ``None`` and empty strings become zero. Floats go through ``str`` so that
    ``0.1`` stays ``Decimal("0.1")`` instead of its binary expansion.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError("Boolean is not a valid amount")
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return ZERO
        try:
            result = Decimal(text)
        except InvalidOperation as exc:
            raise ValueError(f"Invalid amount: {value!r}") from exc
    else:
        raise ValueError(f"Invalid amount: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return result


def quantize_money(value: Any) -> Decimal:
    """Round to paise for display."""
    return to_decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def group_indian(digits: str) -> str:
    """Group an integer digit string the Indian way: 12,34,56,789."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs) + "," + tail


def format_inr(value: Any, symbol: str = "₹") -> str:
    """Format an amount as ``₹1,23,456.78``."""
    amount = quantize_money(value)
    sign = "-" if amount < 0 else ""
    rupees, paise = f"{abs(amount):.2f}".split(".")
    return f"{sign}{symbol}{group_indian(rupees)}.{paise}"


def _below_thousand(n: int) -> str:
    words = []
    if n >= 100:
        words.append(f"{_ONES[n // 100]} Hundred")
        n %= 100
    if n >= 20:
        words.append(_TENS[n // 10])
        n %= 10
    if n > 0:
        words.append(_ONES[n])
    return " ".join(words)


def _integer_words(n: int) -> str:
    parts = []
    crore, n = divmod(n, CRORE)
    lakh, n = divmod(n, LAKH)
    thousand, rest = divmod(n, 1000)
    if crore:
        # 1000 crore and beyond are spelled out on the crore count itself
        parts.append(f"{_integer_words(crore)} Crore")
    if lakh:
        parts.append(f"{_below_thousand(lakh)} Lakh")
    if thousand:
        parts.append(f"{_below_thousand(thousand)} Thousand")
    if rest:
        parts.append(_below_thousand(rest))
    return " ".join(parts)


def amount_in_words(value: Any) -> str:
    """Spell an INR amount in the Indian numbering system.

    >>> amount_in_words(120050.5)
    'Indian Rupee One Lakh Twenty Thousand Fifty and Fifty Paise Only'
    """
    amount = quantize_money(value)
    if amount < 0:
        raise ValueError("Cannot spell a negative amount")

    rupees = int(amount)
    paise = int((amount - rupees) * 100)

    if rupees == 0 and paise == 0:
        return "Indian Rupee Zero Only"

    words = ["Indian Rupee"]
    if rupees:
        words.append(_integer_words(rupees))
    if paise:
        if rupees:
            words.append("and")
        words.append(f"{_below_thousand(paise)} Paise")
    words.append("Only")
    return " ".join(words)
