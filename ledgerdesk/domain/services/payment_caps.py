# ledgerdesk/domain/services/payment_caps.py
"""
Pre-submit checks for payments and refunds.

These run before any call to the books API so obviously wrong amounts never
leave the service. The server still has the final word.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping

from ledgerdesk.domain.models.documents import Bill, Invoice
from ledgerdesk.domain.services.money import ZERO, format_inr, to_decimal
from ledgerdesk.domain.services.reconciliation import document_balance_due

logger = logging.getLogger("payment_caps")

INVALID_PAYMENT = "Please enter a valid payment amount"
INVALID_REFUND = "Refund amount must be greater than 0"


class PaymentValidationError(ValueError):
    """Amount rejected before submission; ``message`` is shown to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _amount(value: Any, message: str) -> Decimal:
    try:
        amount = to_decimal(value)
    except ValueError:
        raise PaymentValidationError(message) from None
    if amount <= ZERO:
        raise PaymentValidationError(message)
    return amount


def validate_payment_amount(document: Invoice | Bill, amount: Any) -> Decimal:
    """Return the payment as ``Decimal`` or raise ``PaymentValidationError``."""
    value = _amount(amount, INVALID_PAYMENT)
    if document.status.value == "VOID":
        raise PaymentValidationError(f"Cannot record a payment on a void {document.kind}")
    balance = document_balance_due(document)
    if value > balance:
        raise PaymentValidationError(
            f"Payment amount cannot exceed balance due of {format_inr(balance)}"
        )
    return value


def refundable_amount(document: Invoice | Bill) -> Decimal:
    """Paid so far minus what has already been refunded, floored at zero."""
    paid = document.amount_paid or ZERO
    refunded = getattr(document, "amount_refunded", None)
    if refunded is None:
        refunded = sum((r.amount for r in getattr(document, "refunds", [])), ZERO)
    return max(ZERO, paid - refunded)


def validate_refund_amount(document: Invoice | Bill, amount: Any) -> Decimal:
    value = _amount(amount, INVALID_REFUND)
    refundable = refundable_amount(document)
    if value > refundable:
        raise PaymentValidationError(
            f"Refund amount cannot exceed refundable balance of {format_inr(refundable)}"
        )
    return value


def validate_allocations(
    payment_amount: Any,
    allocations: Mapping[str, Any],
    balances: Mapping[str, Any],
) -> dict[str, Decimal]:
    """
    Check a vendor payment's split across bills.

    ``allocations`` maps bill id to the amount applied; ``balances`` maps
    bill id to that bill's balance due. Zero allocations are dropped.
    """
    total = _amount(payment_amount, INVALID_PAYMENT)
    cleaned: dict[str, Decimal] = {}
    for bill_id, raw in allocations.items():
        try:
            value = to_decimal(raw)
        except ValueError:
            raise PaymentValidationError(f"Invalid amount for bill {bill_id}") from None
        if value < ZERO:
            raise PaymentValidationError(f"Amount for bill {bill_id} cannot be negative")
        if value == ZERO:
            continue
        if bill_id not in balances:
            raise PaymentValidationError(f"Unknown bill {bill_id}")
        balance = to_decimal(balances[bill_id])
        if value > balance:
            raise PaymentValidationError(
                f"Payment for bill {bill_id} cannot exceed its balance due of {format_inr(balance)}"
            )
        cleaned[bill_id] = value

    allocated = sum(cleaned.values(), ZERO)
    if allocated > total:
        raise PaymentValidationError(
            f"Allocated amount cannot exceed payment amount of {format_inr(total)}"
        )
    return cleaned
