# ledgerdesk/api/v1/routes/documents.py
"""
Endpoints shared by every document resource (invoices, bills, sales
orders, quotes): list, detail, status change, void and delete.

Each request builds its own :class:`DocumentPage`; nothing is cached
between requests.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ledgerdesk.api.v1.deps import ListParams, get_books_client, raise_for_notice
from ledgerdesk.api.v1.envelope import ok, paginated
from ledgerdesk.api.v1.schemas.documents import StatusUpdateRequest
from ledgerdesk.domain.services.document_views import DocumentPage
from ledgerdesk.infrastructure.external.books_client import BooksClient

logger = logging.getLogger("api.v1.documents")


async def open_document(resource: str, doc_id: str, client: BooksClient) -> DocumentPage:
    """Page with ``doc_id`` selected; raises the HTTP error when loading fails."""
    page = DocumentPage(client, resource)
    if await page.select(doc_id) is None:
        raise_for_notice(page.last_notice)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{page.label.capitalize()} not found")
    return page


def document_router(resource: str, tag: str) -> APIRouter:
    router = APIRouter(prefix=f"/{resource}", tags=[tag])

    @router.get("")
    async def list_documents(
        filter_name: str | None = Query(None, alias="filter", description="Named list filter, e.g. Overdue"),
        params: ListParams = Depends(),
        client: BooksClient = Depends(get_books_client),
    ):
        page = DocumentPage(client, resource)
        await page.refresh()
        raise_for_notice(page.last_notice)
        try:
            rows = page.rows(filter_name, params.search, params.page, params.page_size)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
        return paginated(rows)

    @router.get("/{doc_id}")
    async def get_document(doc_id: str, client: BooksClient = Depends(get_books_client)):
        page = await open_document(resource, doc_id, client)
        return ok(data=page.detail())

    @router.patch("/{doc_id}/status")
    async def update_status(
        doc_id: str,
        body: StatusUpdateRequest,
        client: BooksClient = Depends(get_books_client),
    ):
        page = await open_document(resource, doc_id, client)
        notice = await page.mark_status(body.status)
        raise_for_notice(notice)
        return ok(data=page.detail(), message=notice.message)

    @router.post("/{doc_id}/void")
    async def void_document(doc_id: str, client: BooksClient = Depends(get_books_client)):
        page = await open_document(resource, doc_id, client)
        notice = await page.void()
        raise_for_notice(notice)
        return ok(data=page.detail(), message=notice.message)

    @router.delete("/{doc_id}")
    async def delete_document(doc_id: str, client: BooksClient = Depends(get_books_client)):
        page = await open_document(resource, doc_id, client)
        notice = await page.delete()
        raise_for_notice(notice)
        return ok(data={"id": doc_id}, message=notice.message)

    return router
