# ledgerdesk/api/v1/routes/bills.py
"""Bill endpoints: the shared document routes plus payments and expected payment date."""

from __future__ import annotations

import logging

from fastapi import Depends

from ledgerdesk.api.v1.deps import get_books_client, raise_for_notice
from ledgerdesk.api.v1.envelope import ok
from ledgerdesk.api.v1.routes.documents import document_router, open_document
from ledgerdesk.api.v1.schemas.documents import ExpectedPaymentDateRequest, RecordPaymentRequest
from ledgerdesk.infrastructure.external.books_client import BooksClient

logger = logging.getLogger("api.v1.bills")

router = document_router("bills", "Bills")


@router.post("/{bill_id}/record-payment")
async def record_payment(
    bill_id: str,
    body: RecordPaymentRequest,
    client: BooksClient = Depends(get_books_client),
):
    """Record a payment to the vendor; also creates the matching payment made upstream."""
    page = await open_document("bills", bill_id, client)
    notice = await page.record_payment(
        body.amount, body.payment_mode, body.payment_date, body.details(), status=body.status,
    )
    raise_for_notice(notice)
    return ok(data=page.detail(), message=notice.message)


@router.put("/{bill_id}/expected-payment-date")
async def set_expected_payment_date(
    bill_id: str,
    body: ExpectedPaymentDateRequest,
    client: BooksClient = Depends(get_books_client),
):
    page = await open_document("bills", bill_id, client)
    notice = await page.set_expected_payment_date(body.expected_payment_date)
    raise_for_notice(notice)
    return ok(data=page.detail(), message=notice.message)
