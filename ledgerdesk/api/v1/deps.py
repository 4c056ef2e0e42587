# ledgerdesk/api/v1/deps.py
"""
FastAPI dependencies for the v1 API layer.

``get_books_client`` is overridden in tests with a client bound to a mock
transport.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Query

from ledgerdesk.config.settings import settings
from ledgerdesk.domain.services.document_views import Notice
from ledgerdesk.infrastructure.external.books_client import BooksClient

logger = logging.getLogger("api.v1.deps")


def get_books_client() -> BooksClient:
    return BooksClient()


class ListParams:
    """Query parameters shared by the list endpoints (use as Depends)."""

    def __init__(
        self,
        search: str | None = Query(None, description="Match number, party or reference"),
        page: int = Query(1, ge=1),
        page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    ) -> None:
        self.search = search
        self.page = page
        self.page_size = page_size


def raise_for_notice(notice: Notice | None) -> None:
    """Turn an error notice into the matching HTTP error."""
    if notice is None or notice.ok:
        return
    raise HTTPException(status_code=notice.status_code or 502, detail=notice.message)
