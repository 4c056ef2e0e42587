# ledgerdesk/domain/services/reconciliation.py
"""
Balance and status reconciliation.

Derives what the detail and list views show from a document's stored
fields: balance due, unused payment amount, display status, due hints and
which actions are enabled. Every function here is pure; the server's
numbers are mirrored, never overwritten.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable

from ledgerdesk.domain.models.documents import (
    Bill,
    Document,
    Invoice,
    PaymentMade,
    Quote,
    SalesOrder,
)
from ledgerdesk.domain.models.status import (
    BillStatus,
    InvoiceStatus,
    QuoteStatus,
    SalesOrderStatus,
    is_terminal,
)
from ledgerdesk.domain.services.money import ZERO, to_decimal

logger = logging.getLogger("reconciliation")

PAID = "PAID"
PARTIALLY_PAID = "PARTIALLY PAID"
OVERDUE = "OVERDUE"
VOID = "VOID"

_QUOTE_TEXT = {
    QuoteStatus.SENT: "Quotation Sent",
    QuoteStatus.DRAFT: "Draft",
    QuoteStatus.ACCEPTED: "Accepted",
    QuoteStatus.DECLINED: "Declined",
    QuoteStatus.EXPIRED: "Expired",
    QuoteStatus.INVOICED: "Converted To Invoice",
}

_CONVERTED_TEXT = {
    "invoice": "Converted To Invoice",
    "sales-order": "Converted To Sales Order",
    "sales_order": "Converted To Sales Order",
}


# ---------------------------------------------------------------------------
# Balances
# ---------------------------------------------------------------------------

def compute_balance_due(total: Any, amount_paid: Any, credits: Iterable[Any] = ()) -> Decimal:
    """``max(0, total - paid - credits)``."""
    applied = sum((to_decimal(c) for c in credits), ZERO)
    return max(ZERO, to_decimal(total) - to_decimal(amount_paid) - applied)


def document_balance_due(document: Document) -> Decimal:
    """
    Balance due of an invoice or bill.

    Computed from ``amount_paid`` and the applied credits when the server
    sent ``amount_paid`` (detail payloads); list rows only carry
    ``balance_due``, which is then used as-is. Quotes and sales orders
    collect no payments, so their balance is the full total.
    """
    if not isinstance(document, (Invoice, Bill)):
        return max(ZERO, document.total)

    credits = [c.amount for c in document.credits_applied]
    if document.amount_paid is not None:
        computed = compute_balance_due(document.total, document.amount_paid, credits)
        if document.balance_due is not None and document.balance_due != computed:
            logger.warning(
                "Balance mismatch on %s %s: server=%s computed=%s",
                document.kind, document.id, document.balance_due, computed,
            )
        return computed
    if document.balance_due is not None:
        return max(ZERO, document.balance_due)
    return compute_balance_due(document.total, ZERO, credits)


def compute_unused_amount(payment_amount: Any, allocations: Iterable[Any]) -> Decimal:
    """``max(0, payment_amount - sum(allocations))``."""
    allocated = sum((to_decimal(a) for a in allocations), ZERO)
    return max(ZERO, to_decimal(payment_amount) - allocated)


def payment_unused_amount(payment: PaymentMade) -> Decimal:
    """Unused part of a vendor payment; the server's figure wins when present."""
    if payment.unused_amount is not None:
        return payment.unused_amount
    return compute_unused_amount(
        payment.payment_amount, [bp.payment_amount for bp in payment.bill_payments]
    )


def allocated_amount(payment: PaymentMade) -> Decimal:
    return sum((bp.payment_amount for bp in payment.bill_payments), ZERO)


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

def _quote_text(quote: Quote) -> str:
    if quote.status == QuoteStatus.CONVERTED:
        return _CONVERTED_TEXT.get((quote.converted_to or "").lower(), "Converted")
    if quote.status in _QUOTE_TEXT:
        return _QUOTE_TEXT[quote.status]
    return quote.status.label.title()


def derive_status(document: Document, today: date | None = None) -> str:
    """
    Display status of any document.

    For invoices and bills, in order:
      1. VOID stays VOID
      2. nothing left to pay on a non-zero total -> PAID
      3. something paid, something left -> PARTIALLY PAID
      4. explicit OVERDUE, or past due with a balance -> OVERDUE
      5. the stored status label

    Drafts are never date-overdue. Quotes use their display text and sales
    orders their order status.
    """
    if isinstance(document, Quote):
        return _quote_text(document)
    if isinstance(document, SalesOrder):
        return document.status.label

    status = document.status
    if status.value == VOID:
        return VOID

    today = today or date.today()
    balance = document_balance_due(document)
    total = document.total

    if balance == ZERO and total > ZERO:
        return PAID
    if ZERO < balance < total:
        return PARTIALLY_PAID
    if status.value == OVERDUE:
        return OVERDUE
    if (
        status.value != "DRAFT"
        and document.due_date is not None
        and document.due_date < today
        and balance > ZERO
    ):
        return OVERDUE
    return status.label


def days_overdue(document: Document, today: date | None = None) -> int | None:
    """Whole days past the due date (0 when not yet due); ``None`` without one."""
    due = getattr(document, "due_date", None)
    if due is None:
        return None
    today = today or date.today()
    return max(0, (today - due).days)


def due_hint(document: Document, today: date | None = None) -> str | None:
    """List-row hint: ``OVERDUE BY 3 DAYS``, ``DUE TODAY`` or ``DUE IN 5 DAYS``."""
    if not isinstance(document, (Invoice, Bill)) or document.due_date is None:
        return None
    if document.status.value in (VOID, "DRAFT") or document_balance_due(document) == ZERO:
        return None
    today = today or date.today()
    delta = (document.due_date - today).days
    if delta < 0:
        n = -delta
        return f"OVERDUE BY {n} DAY{'S' if n != 1 else ''}"
    if delta == 0:
        return "DUE TODAY"
    return f"DUE IN {delta} DAY{'S' if delta != 1 else ''}"


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

def available_actions(document: Document) -> dict[str, bool]:
    """Which detail-panel actions are enabled for ``document``."""
    from ledgerdesk.domain.services.payment_caps import refundable_amount

    status = document.status
    voided = status.value == VOID
    actions = {
        "record_payment": False,
        "refund": False,
        "void": not is_terminal(status),
        "mark_sent": False,
        "mark_paid": False,
        "convert_to_invoice": False,
        "expected_payment_date": False,
        "delete": True,
    }

    if isinstance(document, (Invoice, Bill)):
        balance = document_balance_due(document)
        actions["record_payment"] = not voided and balance > ZERO
        actions["void"] = not voided and not (balance == ZERO and document.total > ZERO)

    if isinstance(document, Invoice):
        actions["refund"] = not voided and refundable_amount(document) > ZERO
        actions["mark_sent"] = status in (
            InvoiceStatus.DRAFT, InvoiceStatus.APPROVED, InvoiceStatus.PENDING_APPROVAL,
        )
    elif isinstance(document, Bill):
        actions["mark_paid"] = actions["record_payment"]
        actions["expected_payment_date"] = not voided and status != BillStatus.PAID
    elif isinstance(document, SalesOrder):
        from ledgerdesk.domain.services.conversion import remaining_quantity

        open_order = status not in (
            SalesOrderStatus.CLOSED, SalesOrderStatus.VOID, SalesOrderStatus.CANCELLED,
        )
        actions["convert_to_invoice"] = open_order and any(
            remaining_quantity(item) > ZERO for item in document.items
        )
    elif isinstance(document, Quote):
        actions["void"] = False
        actions["mark_sent"] = status in (QuoteStatus.DRAFT, QuoteStatus.APPROVED)
        actions["convert_to_invoice"] = status in (
            QuoteStatus.ACCEPTED, QuoteStatus.SENT, QuoteStatus.CUSTOMER_VIEWED, QuoteStatus.APPROVED,
        )
    return actions


@dataclass
class PaymentProjection:
    balance_due: Decimal
    status: str


def project_after_payment(document: Invoice | Bill, amount: Any) -> PaymentProjection:
    """Balance and label the document would show after paying ``amount``."""
    balance = max(ZERO, document_balance_due(document) - to_decimal(amount))
    if balance == ZERO and document.total > ZERO:
        label = PAID
    elif balance < document.total:
        label = PARTIALLY_PAID
    else:
        label = document.status.label
    return PaymentProjection(balance_due=balance, status=label)
