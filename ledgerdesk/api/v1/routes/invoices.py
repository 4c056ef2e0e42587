# ledgerdesk/api/v1/routes/invoices.py
"""Invoice endpoints: the shared document routes plus payments, refunds and sending."""

from __future__ import annotations

import logging

from fastapi import Depends

from ledgerdesk.api.v1.deps import get_books_client, raise_for_notice
from ledgerdesk.api.v1.envelope import ok
from ledgerdesk.api.v1.routes.documents import document_router, open_document
from ledgerdesk.api.v1.schemas.documents import RecordPaymentRequest, RefundRequest, SendInvoiceRequest
from ledgerdesk.infrastructure.external.books_client import BooksClient

logger = logging.getLogger("api.v1.invoices")

router = document_router("invoices", "Invoices")


@router.post("/{invoice_id}/record-payment")
async def record_payment(
    invoice_id: str,
    body: RecordPaymentRequest,
    client: BooksClient = Depends(get_books_client),
):
    """Record a customer payment after checking it against the balance due."""
    page = await open_document("invoices", invoice_id, client)
    notice = await page.record_payment(body.amount, body.payment_mode, body.payment_date, body.details())
    raise_for_notice(notice)
    return ok(data=page.detail(), message=notice.message)


@router.post("/{invoice_id}/refund")
async def refund(
    invoice_id: str,
    body: RefundRequest,
    client: BooksClient = Depends(get_books_client),
):
    """Refund part of what the customer paid."""
    page = await open_document("invoices", invoice_id, client)
    notice = await page.refund(body.amount, body.mode, body.reason)
    raise_for_notice(notice)
    return ok(data=page.detail(), message=notice.message)


@router.post("/{invoice_id}/send")
async def send_invoice(
    invoice_id: str,
    body: SendInvoiceRequest,
    client: BooksClient = Depends(get_books_client),
):
    page = await open_document("invoices", invoice_id, client)
    notice = await page.send_invoice(body.recipient, body.from_email, body.organization)
    raise_for_notice(notice)
    return ok(data=page.detail(), message=notice.message)
