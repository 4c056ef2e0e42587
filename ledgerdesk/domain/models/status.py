# ledgerdesk/domain/models/status.py
"""
Closed status sets for every document type.

Upstream statuses arrive in mixed spellings ("PARTIALLY_PAID",
"partially paid", "Partially-Paid"); ``parse_status`` folds them onto one
enum member and rejects anything outside the set.
"""

from __future__ import annotations

from enum import Enum
from typing import Type, TypeVar

E = TypeVar("E", bound="StatusEnum")


class StatusEnum(str, Enum):
    """Base for document status enums."""

    @property
    def label(self) -> str:
        """Display label, e.g. ``PARTIALLY PAID``."""
        return self.value.replace("_", " ")


def normalize_status(raw: str | None) -> str:
    """Upper-case and join words with underscores; ``""`` when empty."""
    if raw is None:
        return ""
    text = str(raw).strip().upper().replace("-", " ")
    return "_".join(text.split())


def parse_status(enum_cls: Type[E], raw: str | E | None, default: E | None = None) -> E:
    """Map a raw upstream status onto ``enum_cls``.

    Empty input falls back to ``default``; unknown values raise ``ValueError``.
    """
    if isinstance(raw, enum_cls):
        return raw
    key = normalize_status(raw)
    if not key:
        if default is None:
            raise ValueError(f"Missing {enum_cls.__name__}")
        return default
    try:
        return enum_cls(key)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"Unknown {enum_cls.__name__} {raw!r}; expected one of: {allowed}") from None


class InvoiceStatus(StatusEnum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    LOCKED = "LOCKED"
    SENT = "SENT"
    CUSTOMER_VIEWED = "CUSTOMER_VIEWED"
    PENDING = "PENDING"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    VOID = "VOID"


class BillStatus(StatusEnum):
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    VOID = "VOID"


class SalesOrderStatus(StatusEnum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    CONFIRMED = "CONFIRMED"
    OVERDUE = "OVERDUE"
    CLOSED = "CLOSED"
    VOID = "VOID"
    CANCELLED = "CANCELLED"


class InvoicingStatus(StatusEnum):
    """How much of a sales order has been invoiced."""
    NOT_INVOICED = "NOT_INVOICED"
    PARTIALLY_INVOICED = "PARTIALLY_INVOICED"
    INVOICED = "INVOICED"


class QuoteStatus(StatusEnum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    SENT = "SENT"
    CUSTOMER_VIEWED = "CUSTOMER_VIEWED"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    EXPIRED = "EXPIRED"
    INVOICED = "INVOICED"
    CONVERTED = "CONVERTED"


class PaymentMadeStatus(StatusEnum):
    DRAFT = "DRAFT"
    PAID = "PAID"
    REFUNDED = "REFUNDED"


TERMINAL_STATUSES = frozenset({
    "PAID", "VOID", "DECLINED", "CONVERTED", "CLOSED", "CANCELLED",
})


def is_terminal(status: StatusEnum) -> bool:
    return status.value in TERMINAL_STATUSES
