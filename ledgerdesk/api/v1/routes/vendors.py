# ledgerdesk/api/v1/routes/vendors.py
"""Vendor list, vendor detail with its activity tabs, and comments."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ledgerdesk.api.v1.deps import ListParams, get_books_client, raise_for_notice
from ledgerdesk.api.v1.envelope import ok, paginated
from ledgerdesk.api.v1.schemas.documents import VendorCommentRequest
from ledgerdesk.domain.services.document_views import VendorsPage
from ledgerdesk.infrastructure.external.books_client import BooksClient

logger = logging.getLogger("api.v1.vendors")

router = APIRouter(prefix="/vendors", tags=["Vendors"])


async def _open(vendor_id: str, client: BooksClient) -> VendorsPage:
    page = VendorsPage(client)
    if await page.select(vendor_id) is None:
        raise_for_notice(page.last_notice)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendor not found")
    return page


@router.get("")
async def list_vendors(
    params: ListParams = Depends(),
    client: BooksClient = Depends(get_books_client),
):
    page = VendorsPage(client)
    await page.refresh()
    raise_for_notice(page.last_notice)
    return paginated(page.rows(params.search, params.page, params.page_size))


@router.get("/{vendor_id}")
async def get_vendor(vendor_id: str, client: BooksClient = Depends(get_books_client)):
    page = await _open(vendor_id, client)
    return ok(data=page.detail())


@router.post("/{vendor_id}/comments")
async def add_comment(
    vendor_id: str,
    body: VendorCommentRequest,
    client: BooksClient = Depends(get_books_client),
):
    page = await _open(vendor_id, client)
    notice = await page.add_comment(body.text)
    raise_for_notice(notice)
    return ok(data=notice.data.model_dump(by_alias=True), message=notice.message)


@router.delete("/{vendor_id}")
async def delete_vendor(vendor_id: str, client: BooksClient = Depends(get_books_client)):
    page = await _open(vendor_id, client)
    notice = await page.delete()
    raise_for_notice(notice)
    return ok(data={"id": vendor_id}, message=notice.message)
