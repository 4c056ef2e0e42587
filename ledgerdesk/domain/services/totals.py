# ledgerdesk/domain/services/totals.py
"""
Document totals calculator.

Line taxable value = quantity x rate - discount (flat or percentage of the
gross, always applied before tax). Tax is split by scheme:

    INTRA_STATE  -> CGST + SGST, half each
    INTER_STATE  -> IGST
    FLAT         -> one tax_amount (supplier state unknown)

Nothing is rounded here; callers quantize only for display.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable

from ledgerdesk.domain.models.documents import BaseDocument, DiscountType, LineItem
from ledgerdesk.domain.services.money import ZERO, to_decimal

logger = logging.getLogger("totals")

HUNDRED = Decimal("100")
TWO = Decimal("2")


class TaxScheme(str, Enum):
    INTRA_STATE = "intra_state"
    INTER_STATE = "inter_state"
    FLAT = "flat"


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------

@dataclass
class LineTotals:
    gross: Decimal = ZERO
    discount: Decimal = ZERO
    taxable: Decimal = ZERO
    tax_rate: Decimal = ZERO
    tax: Decimal = ZERO

    @property
    def amount(self) -> Decimal:
        """Line amount including its tax."""
        return self.taxable + self.tax


@dataclass
class DocumentTotals:
    scheme: TaxScheme = TaxScheme.FLAT
    lines: list[LineTotals] = field(default_factory=list)
    sub_total: Decimal = ZERO
    discount_amount: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO
    tax_amount: Decimal = ZERO
    shipping_charges: Decimal = ZERO
    adjustment: Decimal = ZERO
    total: Decimal = ZERO

    @property
    def taxes(self) -> Decimal:
        return self.cgst + self.sgst + self.igst if self.scheme != TaxScheme.FLAT else self.tax_amount


# ---------------------------------------------------------------------------
# Scheme selection
# ---------------------------------------------------------------------------

_STATE_PREFIX = re.compile(r"^\s*\d+\s*[-:]?\s*")


def _state_key(value: str | None) -> str:
    # "27-Maharashtra", "27 - Maharashtra" and "maharashtra" compare equal
    if not value:
        return ""
    return _STATE_PREFIX.sub("", value).strip().casefold()


def tax_scheme_for(place_of_supply: str | None, source_state: str | None) -> TaxScheme:
    """Intra-state when supply and source match, inter-state when they differ."""
    supply, source = _state_key(place_of_supply), _state_key(source_state)
    if not supply or not source:
        return TaxScheme.FLAT
    return TaxScheme.INTRA_STATE if supply == source else TaxScheme.INTER_STATE


def scheme_of(document: BaseDocument) -> TaxScheme:
    """Infer the scheme from the tax buckets the server filled in."""
    if document.igst:
        return TaxScheme.INTER_STATE
    if document.cgst or document.sgst:
        return TaxScheme.INTRA_STATE
    return TaxScheme.FLAT


# ---------------------------------------------------------------------------
# Calculation
# ---------------------------------------------------------------------------

def compute_line(item: LineItem) -> LineTotals:
    """Compute gross, discount, taxable value and tax for one line."""
    qty, rate = item.quantity, item.rate
    if qty < 0:
        raise ValueError(f"Quantity cannot be negative ({qty})")
    if rate < 0:
        raise ValueError(f"Rate cannot be negative ({rate})")
    if item.discount < 0:
        raise ValueError(f"Discount cannot be negative ({item.discount})")
    if item.tax < 0:
        raise ValueError(f"Tax rate cannot be negative ({item.tax})")

    gross = qty * rate
    if item.discount_type == DiscountType.PERCENTAGE:
        if item.discount > HUNDRED:
            raise ValueError(f"Discount cannot exceed 100% ({item.discount}%)")
        discount = gross * item.discount / HUNDRED
    else:
        discount = item.discount
    if discount > gross:
        raise ValueError(f"Discount {discount} exceeds line value {gross}")

    taxable = gross - discount
    tax = taxable * item.tax / HUNDRED
    return LineTotals(gross=gross, discount=discount, taxable=taxable, tax_rate=item.tax, tax=tax)


def compute_document_totals(
    items: Iterable[LineItem],
    scheme: TaxScheme,
    shipping_charges: Any = ZERO,
    adjustment: Any = ZERO,
    flat_tax_amount: Any = None,
    discount_amount: Any = ZERO,
) -> DocumentTotals:
    """
    Sum line totals into document totals.

    ``flat_tax_amount`` overrides the summed line tax under the FLAT scheme
    (bills entered with one tax figure). ``discount_amount`` is a
    document-level discount taken off the sub-total. ``adjustment`` may be
    negative.
    """
    lines = [compute_line(item) for item in items]
    result = DocumentTotals(
        scheme=scheme,
        lines=lines,
        sub_total=sum((line.taxable for line in lines), ZERO),
        discount_amount=to_decimal(discount_amount),
        shipping_charges=to_decimal(shipping_charges),
        adjustment=to_decimal(adjustment),
    )
    line_tax = sum((line.tax for line in lines), ZERO)

    if scheme == TaxScheme.INTRA_STATE:
        result.cgst = line_tax / TWO
        result.sgst = line_tax - result.cgst
        result.tax_amount = line_tax
    elif scheme == TaxScheme.INTER_STATE:
        result.igst = line_tax
        result.tax_amount = line_tax
    else:
        result.tax_amount = line_tax if flat_tax_amount is None else to_decimal(flat_tax_amount)

    result.total = (
        result.sub_total
        - result.discount_amount
        + result.taxes
        + result.shipping_charges
        + result.adjustment
    )
    return result


def declared_total(document: BaseDocument) -> Decimal:
    """Total implied by the document's own sub-total, tax and charges."""
    return (
        document.sub_total
        - document.discount_amount
        + document.taxes
        + document.shipping_charges
        + document.adjustment
    )


def totals_discrepancy(document: BaseDocument) -> Decimal:
    """Server total minus the declared total; zero for a consistent document."""
    diff = document.total - declared_total(document)
    if diff:
        logger.warning(
            "Total mismatch on %s %s: server=%s declared=%s",
            getattr(document, "kind", "document"), document.id, document.total, declared_total(document),
        )
    return diff
