# ledgerdesk/infrastructure/external/books_client.py
"""
Books API client.

The books service owns every document, payment and vendor. It answers with
an envelope:

    {"success": true, "data": <payload>, "message": <optional string>}

Non-2xx responses, ``success: false`` and timeouts all raise
:class:`BooksApiError`. Payloads are parsed into the domain models on the
way out of this module.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict

import httpx
from pydantic import BaseModel, ValidationError

from ledgerdesk.config.settings import settings
from ledgerdesk.domain.models.documents import (
    Bill,
    Invoice,
    PaymentMade,
    Quote,
    SalesOrder,
    Vendor,
    VendorActivity,
    VendorComment,
)

logger = logging.getLogger("books_client")

MODELS: Dict[str, type[BaseModel]] = {
    "invoices": Invoice,
    "bills": Bill,
    "sales-orders": SalesOrder,
    "quotes": Quote,
    "payments-made": PaymentMade,
    "vendors": Vendor,
}

TRANSACTION_GROUPS = ("bills", "billPayments", "expenses", "purchaseOrders", "vendorCredits", "journals")


class BooksApiError(Exception):
    """Raised when the books API fails or rejects a request."""

    def __init__(self, message: str, status_code: int = 0, response: dict | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response or {}


def _jsonable(value: Any) -> Any:
    """Make a payload JSON-serialisable (Decimal, date, Enum, models).

    Amounts go out as decimal strings so no value passes through float.
    """
    if isinstance(value, BaseModel):
        return _jsonable(value.model_dump(by_alias=True, exclude_none=True))
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _body(response: httpx.Response) -> Any:
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return {}


class BooksClient:
    """Async client for the books REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base = (base_url or settings.BOOKS_API_BASE_URL).rstrip("/")
        self.token = settings.BOOKS_API_TOKEN if token is None else token
        self.timeout = timeout or settings.BOOKS_API_TIMEOUT
        self.transport = transport

    # ----------------------------------------------------------------
    # HTTP transport
    # ----------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json_body: Any = None,
    ) -> Any:
        """Send one request and return the envelope's ``data``."""
        url = f"{self.base}{path}"
        logger.info("Books API %s %s", method, path)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                r = await client.request(
                    method,
                    url,
                    headers=self._headers(),
                    params=params,
                    json=_jsonable(json_body) if json_body is not None else None,
                )
                r.raise_for_status()
            except httpx.HTTPStatusError as exc:
                body = _body(exc.response)
                body = body if isinstance(body, dict) else {"data": body}
                logger.error(
                    "Books API HTTP error: %s %s -> %d", method, path, exc.response.status_code,
                )
                raise BooksApiError(
                    body.get("message") or f"Books API error: {exc.response.status_code}",
                    status_code=exc.response.status_code,
                    response=body,
                ) from exc
            except httpx.TimeoutException as exc:
                logger.error("Books API timeout: %s %s", method, path)
                raise BooksApiError("Books API timeout", status_code=504) from exc
            except httpx.HTTPError as exc:
                logger.error("Books API unreachable: %s %s (%s)", method, path, exc)
                raise BooksApiError(f"Books API unreachable: {exc}") from exc

        body = _body(r)
        if isinstance(body, dict):
            if body.get("success") is False:
                raise BooksApiError(
                    body.get("message") or "Books API request failed",
                    status_code=r.status_code,
                    response=body,
                )
            if "data" in body:
                return body["data"]
        return body

    @staticmethod
    def _model(resource: str) -> type[BaseModel]:
        if resource not in MODELS:
            raise ValueError(f"Unknown resource {resource!r}")
        return MODELS[resource]

    @staticmethod
    def _parse(model: type[BaseModel], data: Any, what: str) -> Any:
        try:
            if isinstance(data, list):
                return [model.model_validate(row) for row in data]
            return model.model_validate(data)
        except ValidationError as exc:
            logger.error("Malformed %s payload: %s", what, exc)
            raise BooksApiError(
                f"Malformed {what} payload from books API",
                response={"errors": exc.errors(include_url=False)},
            ) from exc

    # ----------------------------------------------------------------
    # Documents
    # ----------------------------------------------------------------

    async def list_documents(self, resource: str, params: Dict[str, Any] | None = None) -> list[Any]:
        model = self._model(resource)
        data = await self._request("GET", f"/{resource}", params=params)
        return self._parse(model, data or [], resource)

    async def get_document(self, resource: str, doc_id: str) -> Any:
        model = self._model(resource)
        data = await self._request("GET", f"/{resource}/{doc_id}")
        if not data:
            raise BooksApiError(f"{resource} {doc_id} not found", status_code=404)
        return self._parse(model, data, resource)

    async def update_status(self, resource: str, doc_id: str, status: str) -> Any:
        self._model(resource)
        return await self._request("PATCH", f"/{resource}/{doc_id}/status", json_body={"status": status})

    async def record_payment(self, resource: str, doc_id: str, payload: Dict[str, Any]) -> Any:
        self._model(resource)
        return await self._request("POST", f"/{resource}/{doc_id}/record-payment", json_body=payload)

    async def refund(self, resource: str, doc_id: str, payload: Dict[str, Any]) -> Any:
        self._model(resource)
        return await self._request("POST", f"/{resource}/{doc_id}/refund", json_body=payload)

    async def delete_document(self, resource: str, doc_id: str) -> Any:
        self._model(resource)
        return await self._request("DELETE", f"/{resource}/{doc_id}")

    async def update_document(self, resource: str, doc_id: str, payload: Dict[str, Any]) -> Any:
        self._model(resource)
        return await self._request("PUT", f"/{resource}/{doc_id}", json_body=payload)

    async def create_invoice(self, payload: Dict[str, Any]) -> Invoice:
        data = await self._request("POST", "/invoices", json_body=payload)
        return self._parse(Invoice, data, "invoices")

    async def next_payment_number(self) -> str:
        data = await self._request("GET", "/payments-made/next-number")
        if isinstance(data, dict):
            return str(data.get("nextNumber") or "")
        return str(data or "")

    # ----------------------------------------------------------------
    # Vendors
    # ----------------------------------------------------------------

    async def vendor_activity(self, vendor_id: str) -> VendorActivity:
        """Comments, transactions, mails and activities, fetched together."""
        base = f"/vendors/{vendor_id}"
        comments, transactions, mails, activities = await asyncio.gather(
            self._request("GET", f"{base}/comments"),
            self._request("GET", f"{base}/transactions"),
            self._request("GET", f"{base}/mails"),
            self._request("GET", f"{base}/activities"),
        )
        groups = {name: [] for name in TRANSACTION_GROUPS}
        if isinstance(transactions, dict):
            groups.update({k: v or [] for k, v in transactions.items()})
        return self._parse(
            VendorActivity,
            {
                "comments": comments or [],
                "transactions": groups,
                "mails": mails or [],
                "activities": activities or [],
            },
            "vendor activity",
        )

    async def add_vendor_comment(self, vendor_id: str, text: str) -> VendorComment:
        data = await self._request("POST", f"/vendors/{vendor_id}/comments", json_body={"text": text})
        return self._parse(VendorComment, data, "vendor comment")

    # ----------------------------------------------------------------
    # Email
    # ----------------------------------------------------------------

    async def send_email(self, payload: Dict[str, Any]) -> Any:
        return await self._request("POST", "/email/send", json_body=payload)
