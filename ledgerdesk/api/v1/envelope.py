# ledgerdesk/api/v1/envelope.py
"""
Response envelope used by all v1 endpoints.

Every response wraps data in:
    {
        "success": true | false,
        "data": <payload>,
        "message": <optional string>,
        "errors": <optional list of detail dicts>
    }
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from ledgerdesk.domain.services.listing import Page

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Standard envelope for all v1 API responses."""

    success: bool = True
    data: T | None = None
    message: str | None = None
    errors: list[dict[str, Any]] | None = None


class PageData(BaseModel, Generic[T]):
    """Wrapper for paginated list responses."""

    items: list[T]
    current_page: int
    total_pages: int
    total_items: int
    page_size: int


# ---------------------------------------------------------------------------
# Helpers for building responses
# ---------------------------------------------------------------------------

def ok(data: Any = None, message: str | None = None) -> dict:
    """Build a success response dict."""
    return ApiResponse(success=True, data=data, message=message).model_dump()


def error(message: str, errors: list[dict[str, Any]] | None = None) -> dict:
    """Build an error response dict."""
    return ApiResponse(success=False, message=message, errors=errors).model_dump()


def paginated(page: Page, message: str | None = None) -> dict:
    """Build a success response dict around a :class:`Page`."""
    data = PageData(
        items=page.items,
        current_page=page.current_page,
        total_pages=page.total_pages,
        total_items=page.total_items,
        page_size=page.page_size,
    )
    return ApiResponse(success=True, data=data, message=message).model_dump()
