# ledgerdesk/api/v1/routes/payments_made.py
"""Payments made to vendors."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ledgerdesk.api.v1.deps import ListParams, get_books_client, raise_for_notice
from ledgerdesk.api.v1.envelope import ok, paginated
from ledgerdesk.domain.services.document_views import PaymentsMadePage
from ledgerdesk.infrastructure.external.books_client import BooksClient

logger = logging.getLogger("api.v1.payments_made")

router = APIRouter(prefix="/payments-made", tags=["Payments Made"])


async def _open(payment_id: str, client: BooksClient) -> PaymentsMadePage:
    page = PaymentsMadePage(client)
    if await page.select(payment_id) is None:
        raise_for_notice(page.last_notice)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
    return page


@router.get("")
async def list_payments(
    params: ListParams = Depends(),
    client: BooksClient = Depends(get_books_client),
):
    page = PaymentsMadePage(client)
    await page.refresh()
    raise_for_notice(page.last_notice)
    return paginated(page.rows(params.search, params.page, params.page_size))


@router.get("/next-number")
async def next_number(client: BooksClient = Depends(get_books_client)):
    """Next payment number the books API will hand out."""
    page = PaymentsMadePage(client)
    number = await page.next_number()
    raise_for_notice(page.last_notice)
    return ok(data={"nextNumber": number})


@router.get("/{payment_id}")
async def get_payment(payment_id: str, client: BooksClient = Depends(get_books_client)):
    page = await _open(payment_id, client)
    return ok(data=page.detail())


@router.delete("/{payment_id}")
async def delete_payment(payment_id: str, client: BooksClient = Depends(get_books_client)):
    page = await _open(payment_id, client)
    notice = await page.delete()
    raise_for_notice(notice)
    return ok(data={"id": payment_id}, message=notice.message)
