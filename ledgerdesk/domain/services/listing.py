# ledgerdesk/domain/services/listing.py
"""
List-view helpers: named filters, free-text search and pagination.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Generic, Iterable, Sequence, TypeVar

from ledgerdesk.domain.models.documents import Bill, Document, PaymentMade, Vendor
from ledgerdesk.domain.services.money import ZERO
from ledgerdesk.domain.services.reconciliation import (
    OVERDUE,
    PAID,
    PARTIALLY_PAID,
    derive_status,
    document_balance_due,
)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10

Predicate = Callable[[Any, date], bool]


def _status_is(*values: str) -> Predicate:
    return lambda doc, today: doc.status.value in values


def _derived_is(label: str) -> Predicate:
    return lambda doc, today: derive_status(doc, today) == label


def _unpaid(doc, today) -> bool:
    balance = document_balance_due(doc)
    return balance > ZERO and balance == doc.total


def _past_due(doc, today) -> bool:
    if doc.status.value == OVERDUE:
        return True
    if doc.status.value in ("DRAFT", "VOID") or doc.due_date is None:
        return False
    return doc.due_date < today and document_balance_due(doc) > ZERO


def _quote_invoiced(doc, today) -> bool:
    if doc.status.value == "INVOICED":
        return True
    return doc.status.value == "CONVERTED" and (doc.converted_to or "").lower() == "invoice"


def _invoicing_is(value: str) -> Predicate:
    return lambda doc, today: doc.invoice_status.value == value


FILTERS: dict[str, dict[str, Predicate]] = {
    "invoice": {
        "All": lambda doc, today: True,
        "Draft": _status_is("DRAFT"),
        "Locked": _status_is("LOCKED"),
        "Pending Approval": _status_is("PENDING_APPROVAL"),
        "Approved": _status_is("APPROVED"),
        "Customer Viewed": _status_is("CUSTOMER_VIEWED"),
        "Partially Paid": _derived_is(PARTIALLY_PAID),
        "Unpaid": _unpaid,
        "Overdue": _past_due,
    },
    "bill": {
        "All": lambda doc, today: True,
        "Draft": _status_is("DRAFT"),
        "Open": _status_is("OPEN"),
        "Overdue": _past_due,
        "Partially Paid": _derived_is(PARTIALLY_PAID),
        "Paid": _derived_is(PAID),
        "Void": _status_is("VOID"),
    },
    "sales_order": {
        "All": lambda doc, today: True,
        "Draft": _status_is("DRAFT"),
        "Pending Approval": _status_is("PENDING_APPROVAL"),
        "Approved": _status_is("APPROVED"),
        "Confirmed": _status_is("CONFIRMED"),
        "Overdue": _status_is("OVERDUE"),
        "Partially Invoiced": _invoicing_is("PARTIALLY_INVOICED"),
        "Invoiced": _invoicing_is("INVOICED"),
        "Closed": _status_is("CLOSED"),
    },
    "quote": {
        "All": lambda doc, today: True,
        "Draft": _status_is("DRAFT"),
        "Pending Approval": _status_is("PENDING_APPROVAL"),
        "Approved": _status_is("APPROVED"),
        "Sent": _status_is("SENT"),
        "Customer Viewed": _status_is("CUSTOMER_VIEWED"),
        "Accepted": _status_is("ACCEPTED"),
        "Invoiced": _quote_invoiced,
        "Declined": _status_is("DECLINED"),
    },
}


def _filter_key(name: str) -> str:
    return " ".join(name.replace("_", " ").replace("-", " ").split()).casefold()


def resolve_filter(kind: str, name: str | None) -> str:
    """Canonical filter name for ``kind``; ``ValueError`` when unknown."""
    if kind not in FILTERS:
        raise ValueError(f"No filters for {kind!r}")
    if not name:
        return "All"
    wanted = _filter_key(name)
    for canonical in FILTERS[kind]:
        if _filter_key(canonical) == wanted:
            return canonical
    allowed = ", ".join(FILTERS[kind])
    raise ValueError(f"Unknown filter {name!r}; expected one of: {allowed}")


def apply_filter(kind: str, documents: Iterable[Document], name: str | None, today: date | None = None) -> list[Document]:
    predicate = FILTERS[kind][resolve_filter(kind, name)]
    today = today or date.today()
    return [doc for doc in documents if predicate(doc, today)]


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

def _search_fields(obj: Any) -> list[str | None]:
    if isinstance(obj, PaymentMade):
        return [obj.payment_number, obj.vendor_name, obj.reference]
    if isinstance(obj, Vendor):
        return [obj.name, obj.display_name, obj.company_name, obj.email, obj.gstin]
    if isinstance(obj, Bill):
        return [obj.number, obj.counterparty, obj.order_number]
    return [obj.number, obj.counterparty, getattr(obj, "reference_number", None)]


def search(items: Iterable[T], term: str | None) -> list[T]:
    """Case-insensitive substring match on number, party and reference."""
    items = list(items)
    needle = (term or "").strip().casefold()
    if not needle:
        return items
    return [
        item for item in items
        if any(needle in value.casefold() for value in _search_fields(item) if value)
    ]


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

@dataclass
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 1
    total_items: int = 0
    page_size: int = DEFAULT_PAGE_SIZE


def paginate(items: Sequence[T], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Page[T]:
    """Slice ``items``; out-of-range pages clamp to the first or last page."""
    if page_size < 1:
        raise ValueError("page_size must be at least 1")
    total = len(items)
    total_pages = max(1, math.ceil(total / page_size))
    current = min(max(1, page), total_pages)
    start = (current - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        current_page=current,
        total_pages=total_pages,
        total_items=total,
        page_size=page_size,
    )
