# ledgerdesk/api/v1/routes/sales_orders.py
"""Sales order endpoints: the shared document routes plus conversion to an invoice."""

from __future__ import annotations

import logging

from fastapi import Depends

from ledgerdesk.api.v1.deps import get_books_client, raise_for_notice
from ledgerdesk.api.v1.envelope import ok
from ledgerdesk.api.v1.routes.documents import document_router, open_document
from ledgerdesk.api.v1.schemas.documents import ConvertRequest
from ledgerdesk.infrastructure.external.books_client import BooksClient

logger = logging.getLogger("api.v1.sales_orders")

router = document_router("sales-orders", "Sales Orders")


@router.post("/{order_id}/convert")
async def convert_to_invoice(
    order_id: str,
    body: ConvertRequest | None = None,
    client: BooksClient = Depends(get_books_client),
):
    """Create an invoice for the quantities not yet invoiced."""
    page = await open_document("sales-orders", order_id, client)
    notice = await page.convert_to_invoice(body.item_ids if body else None)
    raise_for_notice(notice)
    invoice = notice.data
    return ok(
        data={"invoice": invoice.model_dump(by_alias=True), "salesOrder": page.detail()},
        message=notice.message,
    )
