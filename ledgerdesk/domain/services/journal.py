# ledgerdesk/domain/services/journal.py
"""
Journal table shown under a document.

The server's own journal entries are shown when it sends them. Otherwise an
illustrative journal is built from the document totals. Built journals get
an "Adjustment" line for any difference so debits always equal credits.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Literal

from ledgerdesk.domain.models.documents import Bill, Invoice, JournalEntry, PaymentMade
from ledgerdesk.domain.services.money import ZERO
from ledgerdesk.domain.services.reconciliation import allocated_amount, payment_unused_amount

logger = logging.getLogger("journal")

ADJUSTMENT_ACCOUNT = "Adjustment"


@dataclass
class JournalLine:
    account: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO


@dataclass
class JournalView:
    lines: list[JournalLine] = field(default_factory=list)
    source: Literal["server", "illustrative"] = "illustrative"

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), ZERO)

    @property
    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit


def _from_server(entries: Iterable[JournalEntry], label: str) -> JournalView:
    view = JournalView(
        lines=[JournalLine(e.account, e.debit, e.credit) for e in entries],
        source="server",
    )
    if not view.is_balanced:
        logger.warning(
            "Server journal for %s does not balance: debit=%s credit=%s",
            label, view.total_debit, view.total_credit,
        )
    return view


def _build(debits: list[tuple[str, Decimal]], credits: list[tuple[str, Decimal]]) -> JournalView:
    lines = [JournalLine(account, debit=amount) for account, amount in debits if amount]
    lines += [JournalLine(account, credit=amount) for account, amount in credits if amount]
    view = JournalView(lines=lines)

    diff = view.total_debit - view.total_credit
    if diff > ZERO:
        view.lines.append(JournalLine(ADJUSTMENT_ACCOUNT, credit=diff))
    elif diff < ZERO:
        view.lines.append(JournalLine(ADJUSTMENT_ACCOUNT, debit=-diff))
    return view


def _tax_lines(doc: Invoice | Bill, prefix: str, suffix: str, flat_label: str) -> list[tuple[str, Decimal]]:
    if doc.cgst or doc.sgst or doc.igst:
        return [
            (f"{prefix}CGST{suffix}", doc.cgst),
            (f"{prefix}SGST{suffix}", doc.sgst),
            (f"{prefix}IGST{suffix}", doc.igst),
        ]
    return [(flat_label, doc.tax_amount)]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def bill_journal(bill: Bill) -> JournalView:
    if bill.journal_entries:
        return _from_server(bill.journal_entries, f"bill {bill.bill_number}")
    debits = [("Purchases", bill.sub_total - bill.discount_amount)]
    debits += _tax_lines(bill, "Input ", "", "Input Tax Credits")
    debits.append(("Freight Charges", bill.shipping_charges))
    return _build(debits, [("Accounts Payable", bill.total)])


def invoice_journal(invoice: Invoice) -> JournalView:
    if invoice.journal_entries:
        return _from_server(invoice.journal_entries, f"invoice {invoice.invoice_number}")
    credits = [("Sales", invoice.sub_total - invoice.discount_amount)]
    credits += _tax_lines(invoice, "", " Payable", "Tax Payable")
    credits.append(("Shipping Charge", invoice.shipping_charges))
    return _build([("Accounts Receivable", invoice.total)], credits)


def payment_made_journal(payment: PaymentMade) -> JournalView:
    debits = [
        ("Accounts Payable", allocated_amount(payment)),
        ("Prepaid Expenses", payment_unused_amount(payment)),
    ]
    credits = [(payment.paid_through or "Cash", payment.payment_amount)]
    return _build(debits, credits)
