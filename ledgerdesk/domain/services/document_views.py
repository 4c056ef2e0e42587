# ledgerdesk/domain/services/document_views.py
"""
Page controllers for the document, payments-made and vendor views.

Each page owns its state explicitly: the loaded list, the selected
document and the notices raised by the last actions. Nothing here is
shared between pages or requests.

Action flow:
  1. local checks (amount caps, allowed transitions). A failure adds an
     error notice and nothing is sent.
  2. the request to the books API. A failure adds an error notice; the
     previous list and selection are left untouched.
  3. on success, a success notice, then list and detail are re-fetched
     so the page shows the server's numbers.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Awaitable, Callable, Literal, TypeVar

from ledgerdesk.config.settings import settings
from ledgerdesk.domain.models.documents import (
    Bill,
    Document,
    Invoice,
    PaymentMade,
    Quote,
    SalesOrder,
    Vendor,
)
from ledgerdesk.domain.models.status import (
    BillStatus,
    InvoiceStatus,
    QuoteStatus,
    SalesOrderStatus,
    parse_status,
)
from ledgerdesk.domain.services.conversion import build_invoice_payload, remaining_quantity
from ledgerdesk.domain.services.journal import (
    JournalView,
    bill_journal,
    invoice_journal,
    payment_made_journal,
)
from ledgerdesk.domain.services.listing import FILTERS, Page, apply_filter, paginate, search
from ledgerdesk.domain.services.money import amount_in_words, format_inr
from ledgerdesk.domain.services.payment_caps import (
    PaymentValidationError,
    refundable_amount,
    validate_payment_amount,
    validate_refund_amount,
)
from ledgerdesk.domain.services.reconciliation import (
    allocated_amount,
    available_actions,
    derive_status,
    document_balance_due,
    due_hint,
    payment_unused_amount,
)
from ledgerdesk.domain.services.totals import totals_discrepancy
from ledgerdesk.infrastructure.external.books_client import BooksApiError, BooksClient

logger = logging.getLogger("document_views")

T = TypeVar("T")

KINDS = {
    "invoices": "invoice",
    "bills": "bill",
    "sales-orders": "sales_order",
    "quotes": "quote",
}

LABELS = {
    "invoices": "invoice",
    "bills": "bill",
    "sales-orders": "sales order",
    "quotes": "quote",
    "payments-made": "payment",
    "vendors": "vendor",
}

BILL_PAYMENT_STATUSES = ("DRAFT", "PAID")

STATUS_ENUMS = {
    "invoices": InvoiceStatus,
    "bills": BillStatus,
    "sales-orders": SalesOrderStatus,
    "quotes": QuoteStatus,
}


# ---------------------------------------------------------------------------
# Notices and cancellable loads
# ---------------------------------------------------------------------------

@dataclass
class Notice:
    """User-facing outcome of a load or action."""
    level: Literal["success", "error"]
    message: str
    status_code: int | None = None
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.level == "success"


class StaleLoad(Exception):
    """The load was superseded by a newer one or the loader was closed."""


class LatestLoader:
    """
    Runs loads so that only the most recent one can deliver a result.

    Starting a load cancels the one in flight; the cancelled caller gets
    :class:`StaleLoad`. ``aclose()`` cancels whatever is pending.
    """

    def __init__(self) -> None:
        self._task: asyncio.Future | None = None
        self._generation = 0
        self._closed = False

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def cancel(self) -> None:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def run(self, load: Callable[[], Awaitable[T]]) -> T:
        if self._closed:
            raise StaleLoad("loader is closed")
        self.cancel()
        generation = self._generation
        task = asyncio.ensure_future(load())
        self._task = task
        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation or self._closed:
                raise StaleLoad("load was superseded") from None
            raise
        finally:
            if self._task is task:
                self._task = None
        if generation != self._generation:
            raise StaleLoad("load was superseded")
        return result

    async def aclose(self) -> None:
        self._closed = True
        task = self._task
        self.cancel()
        if task is not None:
            try:
                await task
            except (asyncio.CancelledError, StaleLoad):
                pass
            except BooksApiError as exc:
                logger.debug("Pending load failed while closing: %s", exc)


# ---------------------------------------------------------------------------
# View builders
# ---------------------------------------------------------------------------

def _money(value) -> str:
    return format_inr(value, symbol=settings.CURRENCY_SYMBOL)


def journal_view(view: JournalView) -> dict[str, Any]:
    return {
        "source": view.source,
        "lines": [
            {"account": line.account, "debit": line.debit, "credit": line.credit}
            for line in view.lines
        ],
        "totalDebit": view.total_debit,
        "totalCredit": view.total_credit,
        "isBalanced": view.is_balanced,
    }


def document_row(doc: Document, today: date | None = None) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": doc.id,
        "kind": doc.kind,
        "number": doc.number,
        "date": doc.document_date,
        "counterparty": doc.counterparty,
        "referenceNumber": getattr(doc, "reference_number", None),
        "status": derive_status(doc, today),
        "storedStatus": doc.status.value,
        "total": doc.total,
        "totalFormatted": _money(doc.total),
    }
    if isinstance(doc, (Invoice, Bill)):
        balance = document_balance_due(doc)
        row.update({
            "dueDate": doc.due_date,
            "balanceDue": balance,
            "balanceDueFormatted": _money(balance),
            "dueHint": due_hint(doc, today),
        })
    elif isinstance(doc, SalesOrder):
        row.update({
            "invoiceStatus": doc.invoice_status.label,
            "expectedShipmentDate": doc.expected_shipment_date,
        })
    elif isinstance(doc, Quote):
        row["expiryDate"] = doc.expiry_date
    return row


def document_detail(doc: Document, today: date | None = None) -> dict[str, Any]:
    detail = doc.model_dump(by_alias=True)
    detail.update({
        "number": doc.number,
        "displayStatus": derive_status(doc, today),
        "totalFormatted": _money(doc.total),
        "amountInWords": amount_in_words(max(doc.total, 0)),
        "totalsDiscrepancy": totals_discrepancy(doc),
        "actions": available_actions(doc),
    })
    if isinstance(doc, (Invoice, Bill)):
        balance = document_balance_due(doc)
        refundable = refundable_amount(doc)
        detail.update({
            "balanceDue": balance,
            "balanceDueFormatted": _money(balance),
            "refundableAmount": refundable,
            "dueHint": due_hint(doc, today),
            "journal": journal_view(invoice_journal(doc) if isinstance(doc, Invoice) else bill_journal(doc)),
        })
    elif isinstance(doc, SalesOrder):
        detail["remainingQuantities"] = {
            item.id: remaining_quantity(item) for item in doc.items if item.id is not None
        }
    return detail


def payment_row(payment: PaymentMade) -> dict[str, Any]:
    unused = payment_unused_amount(payment)
    return {
        "id": payment.id,
        "paymentNumber": payment.payment_number,
        "date": payment.payment_date,
        "vendorName": payment.vendor_name,
        "reference": payment.reference,
        "paymentMode": payment.payment_mode,
        "paidThrough": payment.paid_through,
        "amount": payment.payment_amount,
        "amountFormatted": _money(payment.payment_amount),
        "unusedAmount": unused,
        "unusedAmountFormatted": _money(unused),
        "status": payment.status.label,
    }


def payment_detail(payment: PaymentMade) -> dict[str, Any]:
    detail = payment.model_dump(by_alias=True)
    detail.update(payment_row(payment))
    detail.update({
        "allocatedAmount": allocated_amount(payment),
        "amountInWords": amount_in_words(payment.payment_amount),
        "journal": journal_view(payment_made_journal(payment)),
    })
    return detail


def vendor_row(vendor: Vendor) -> dict[str, Any]:
    return {
        "id": vendor.id,
        "name": vendor.display,
        "companyName": vendor.company_name,
        "email": vendor.email,
        "phone": vendor.phone,
        "gstin": vendor.gstin,
        "payables": vendor.payables,
        "payablesFormatted": _money(vendor.payables),
        "unusedCredits": vendor.unused_credits,
        "unusedCreditsFormatted": _money(vendor.unused_credits),
    }


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------

class BasePage:
    """List + selection state shared by every view."""

    resource: str = ""

    def __init__(self, client: BooksClient) -> None:
        self.client = client
        self.items: list[Any] = []
        self.selected: Any = None
        self.notices: list[Notice] = []
        self._loader = LatestLoader()

    @property
    def label(self) -> str:
        return LABELS[self.resource]

    @property
    def last_notice(self) -> Notice | None:
        return self.notices[-1] if self.notices else None

    def _notify(self, level: str, message: str, status_code: int | None = None, data: Any = None) -> Notice:
        notice = Notice(level=level, message=message, status_code=status_code, data=data)
        self.notices.append(notice)
        return notice

    def _invalid(self, message: str) -> Notice:
        logger.info("Rejected %s action: %s", self.label, message)
        return self._notify("error", message, status_code=422)

    def _upstream_failed(self, what: str, exc: BooksApiError) -> Notice:
        logger.error("%s failed: %s (status=%s)", what, exc.message, exc.status_code)
        code = 404 if exc.status_code == 404 else 502
        return self._notify("error", f"{what}: {exc.message}", status_code=code)

    # ----------------------------------------------------------------
    # Loading
    # ----------------------------------------------------------------

    async def refresh(self) -> list[Any]:
        """Reload the list; on failure keep the previous one."""
        try:
            self.items = await self.client.list_documents(self.resource)
        except BooksApiError as exc:
            self._upstream_failed(f"Failed to fetch {self.label}s", exc)
        return self.items

    async def _load_detail(self, doc_id: str) -> Any:
        return await self.client.get_document(self.resource, doc_id)

    async def select(self, doc_id: str) -> Any:
        """Load one record into the detail panel; superseded loads are dropped."""
        try:
            loaded = await self._loader.run(lambda: self._load_detail(doc_id))
        except StaleLoad:
            logger.debug("Dropped superseded %s load for %s", self.label, doc_id)
            return None
        except BooksApiError as exc:
            self._upstream_failed(f"Failed to fetch {self.label} details", exc)
            return None
        self.selected = loaded
        return loaded

    def close(self) -> None:
        self._loader.cancel()
        self.selected = None

    async def aclose(self) -> None:
        await self._loader.aclose()
        self.selected = None

    async def _reload(self, doc_id: str | None) -> None:
        await self.refresh()
        if doc_id is not None:
            await self.select(doc_id)

    def _require_selection(self) -> Notice | None:
        if self.selected is None:
            return self._invalid(f"No {self.label} selected")
        return None

    async def delete(self) -> Notice:
        missing = self._require_selection()
        if missing:
            return missing
        doc_id = self.selected.id
        try:
            await self.client.delete_document(self.resource, doc_id)
        except BooksApiError as exc:
            return self._upstream_failed(f"Failed to delete {self.label}", exc)
        notice = self._notify("success", f"{self.label.capitalize()} deleted successfully")
        self.close()
        await self.refresh()
        return notice


class DocumentPage(BasePage):
    """Invoices, bills, sales orders and quotes."""

    def __init__(self, client: BooksClient, resource: str) -> None:
        if resource not in KINDS:
            raise ValueError(f"Unknown document resource {resource!r}")
        super().__init__(client)
        self.resource = resource
        self.kind = KINDS[resource]

    def rows(
        self,
        filter_name: str | None = None,
        term: str | None = None,
        page: int = 1,
        page_size: int = settings.DEFAULT_PAGE_SIZE,
        today: date | None = None,
    ) -> Page[dict[str, Any]]:
        docs = self.items
        if self.kind in FILTERS:
            docs = apply_filter(self.kind, docs, filter_name, today)
        docs = search(docs, term)
        result = paginate(docs, page, page_size)
        result.items = [document_row(doc, today) for doc in result.items]
        return result

    def detail(self, today: date | None = None) -> dict[str, Any] | None:
        if self.selected is None:
            return None
        return document_detail(self.selected, today)

    # ----------------------------------------------------------------
    # Actions
    # ----------------------------------------------------------------

    async def record_payment(
        self,
        amount: Any,
        payment_mode: str = "cash",
        payment_date: date | None = None,
        details: dict[str, Any] | None = None,
        status: str = "PAID",
    ) -> Notice:
        """Record a payment; ``status`` (DRAFT or PAID) applies to bill payments only."""
        missing = self._require_selection()
        if missing:
            return missing
        doc = self.selected
        if not isinstance(doc, (Invoice, Bill)):
            return self._invalid(f"Payments cannot be recorded on a {self.label}")
        try:
            value = validate_payment_amount(doc, amount)
        except PaymentValidationError as exc:
            return self._invalid(exc.message)
        if status not in BILL_PAYMENT_STATUSES:
            return self._invalid(f"Payment status must be one of: {', '.join(BILL_PAYMENT_STATUSES)}")

        when = payment_date or date.today()
        payload: dict[str, Any] = {"amount": value, "paymentMode": payment_mode}
        if isinstance(doc, Invoice):
            payload["date"] = when
        else:
            payload["paymentDate"] = when
            payload["status"] = status
        payload.update(details or {})

        try:
            await self.client.record_payment(self.resource, doc.id, payload)
        except BooksApiError as exc:
            return self._upstream_failed("Failed to record payment", exc)
        notice = self._notify("success", "Payment recorded successfully")
        await self._reload(doc.id)
        return notice

    async def refund(self, amount: Any, mode: str = "cash", reason: str | None = None) -> Notice:
        missing = self._require_selection()
        if missing:
            return missing
        doc = self.selected
        if not isinstance(doc, Invoice):
            return self._invalid(f"Refunds are not supported for a {self.label}")
        try:
            value = validate_refund_amount(doc, amount)
        except PaymentValidationError as exc:
            return self._invalid(exc.message)

        payload = {"amount": value, "mode": mode, "reason": reason or "Refund processed"}
        try:
            await self.client.refund(self.resource, doc.id, payload)
        except BooksApiError as exc:
            return self._upstream_failed("Failed to process refund", exc)
        notice = self._notify("success", "Refund processed successfully")
        await self._reload(doc.id)
        return notice

    async def mark_status(self, status: str) -> Notice:
        missing = self._require_selection()
        if missing:
            return missing
        doc = self.selected
        try:
            target = parse_status(STATUS_ENUMS[self.resource], status)
        except ValueError as exc:
            return self._invalid(str(exc))
        if doc.status.value == "VOID":
            return self._invalid(f"Cannot change the status of a void {self.label}")

        try:
            await self.client.update_status(self.resource, doc.id, target.value)
        except BooksApiError as exc:
            return self._upstream_failed(f"Failed to update {self.label} status", exc)
        notice = self._notify("success", f"{self.label.capitalize()} marked as {target.label.lower()}")
        await self._reload(doc.id)
        return notice

    async def void(self) -> Notice:
        missing = self._require_selection()
        if missing:
            return missing
        doc = self.selected
        if not available_actions(doc)["void"]:
            return self._invalid(f"This {self.label} cannot be voided")
        try:
            await self.client.update_status(self.resource, doc.id, "VOID")
        except BooksApiError as exc:
            return self._upstream_failed(f"Failed to void {self.label}", exc)
        notice = self._notify("success", f"{self.label.capitalize()} voided successfully")
        await self._reload(doc.id)
        return notice

    async def send_invoice(self, recipient: str, from_email: str, organization: str = "our company") -> Notice:
        """Email the invoice, then mark it as sent."""
        missing = self._require_selection()
        if missing:
            return missing
        doc = self.selected
        if not isinstance(doc, Invoice):
            return self._invalid(f"Only invoices can be sent, not a {self.label}")
        if doc.status == InvoiceStatus.VOID:
            return self._invalid("Cannot send a void invoice")

        email = {
            "customerId": doc.customer_id,
            "transactionId": doc.id,
            "transactionType": "invoice",
            "subject": f"Invoice {doc.invoice_number} from {organization}",
            "body": f"Please find the attached invoice {doc.invoice_number} for your review.",
            "recipient": recipient,
            "fromEmail": from_email,
            "type": "manual",
        }
        try:
            await self.client.send_email(email)
            await self.client.update_status(self.resource, doc.id, InvoiceStatus.SENT.value)
        except BooksApiError as exc:
            return self._upstream_failed("Failed to send invoice", exc)
        notice = self._notify("success", "Invoice emailed and marked as sent")
        await self._reload(doc.id)
        return notice

    async def set_expected_payment_date(self, when: date) -> Notice:
        missing = self._require_selection()
        if missing:
            return missing
        doc = self.selected
        if not isinstance(doc, Bill):
            return self._invalid(f"Expected payment date applies to bills, not a {self.label}")
        payload = doc.model_dump(by_alias=True, exclude_none=True)
        payload["expectedPaymentDate"] = when
        try:
            await self.client.update_document(self.resource, doc.id, payload)
        except BooksApiError as exc:
            return self._upstream_failed("Failed to update expected payment date", exc)
        notice = self._notify("success", "Expected payment date updated")
        await self._reload(doc.id)
        return notice

    async def convert_to_invoice(
        self,
        item_ids: list[str] | None = None,
        today: date | None = None,
    ) -> Notice:
        missing = self._require_selection()
        if missing:
            return missing
        order = self.selected
        if not isinstance(order, SalesOrder):
            return self._invalid(f"Only sales orders can be converted, not a {self.label}")
        try:
            payload = build_invoice_payload(
                order, item_ids, today=today, source_state=settings.SOURCE_STATE or None,
            )
        except ValueError as exc:
            return self._invalid(str(exc))

        try:
            invoice = await self.client.create_invoice(payload)
        except BooksApiError as exc:
            return self._upstream_failed("Failed to create invoice", exc)
        notice = self._notify(
            "success",
            f"Invoice {invoice.invoice_number} has been created from sales order {order.sales_order_number}",
            data=invoice,
        )
        await self._reload(order.id)
        return notice


class PaymentsMadePage(BasePage):
    resource = "payments-made"

    def rows(self, term: str | None = None, page: int = 1, page_size: int = settings.DEFAULT_PAGE_SIZE) -> Page[dict[str, Any]]:
        result = paginate(search(self.items, term), page, page_size)
        result.items = [payment_row(p) for p in result.items]
        return result

    def detail(self) -> dict[str, Any] | None:
        if self.selected is None:
            return None
        return payment_detail(self.selected)

    async def next_number(self) -> str | None:
        try:
            return await self.client.next_payment_number()
        except BooksApiError as exc:
            self._upstream_failed("Failed to fetch next payment number", exc)
            return None


class VendorsPage(BasePage):
    resource = "vendors"

    def __init__(self, client: BooksClient) -> None:
        super().__init__(client)
        self.activity = None

    async def _load_detail(self, doc_id: str) -> Any:
        vendor, activity = await asyncio.gather(
            self.client.get_document(self.resource, doc_id),
            self.client.vendor_activity(doc_id),
        )
        return vendor, activity

    async def select(self, doc_id: str) -> Any:
        loaded = await super().select(doc_id)
        if loaded is None:
            return None
        self.selected, self.activity = loaded
        return self.selected

    def close(self) -> None:
        super().close()
        self.activity = None

    def rows(self, term: str | None = None, page: int = 1, page_size: int = settings.DEFAULT_PAGE_SIZE) -> Page[dict[str, Any]]:
        result = paginate(search(self.items, term), page, page_size)
        result.items = [vendor_row(v) for v in result.items]
        return result

    def detail(self) -> dict[str, Any] | None:
        if self.selected is None:
            return None
        detail = self.selected.model_dump(by_alias=True)
        detail.update(vendor_row(self.selected))
        if self.activity is not None:
            detail["activity"] = self.activity.model_dump(by_alias=True)
        return detail

    async def add_comment(self, text: str) -> Notice:
        missing = self._require_selection()
        if missing:
            return missing
        if not text or not text.strip():
            return self._invalid("Comment cannot be empty")
        try:
            comment = await self.client.add_vendor_comment(self.selected.id, text.strip())
        except BooksApiError as exc:
            return self._upstream_failed("Failed to add comment", exc)
        if self.activity is not None:
            self.activity.comments.append(comment)
        return self._notify("success", "Comment added successfully", data=comment)
