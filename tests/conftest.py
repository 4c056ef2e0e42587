"""Shared test fixtures for the LedgerDesk test suite."""

import asyncio
import copy

import httpx
import pytest

from ledgerdesk.infrastructure.external.books_client import BooksClient

BOOKS_URL = "http://books.test"


@pytest.fixture(scope="session")
def event_loop():
    """Use a single event loop for the entire test session."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


# ---------------------------------------------------------------------------
# Upstream payloads (camelCase, as the books API sends them)
# ---------------------------------------------------------------------------

_INVOICE = {
    "id": "inv-1",
    "invoiceNumber": "INV-00001",
    "referenceNumber": "PO-778",
    "customerId": "cust-1",
    "customerName": "Acme Traders",
    "date": "2025-01-10",
    "dueDate": "2025-02-09",
    "placeOfSupply": "Maharashtra",
    "items": [
        {"id": "li-1", "name": "Widget", "quantity": 10, "rate": 100, "discount": 0,
         "discountType": "flat", "tax": 18, "amount": 1180},
    ],
    "subTotal": 1000,
    "cgst": 90,
    "sgst": 90,
    "igst": 0,
    "shippingCharges": 0,
    "adjustment": 0,
    "total": 1180,
    "amountPaid": 800,
    "balanceDue": 380,
    "status": "PARTIALLY_PAID",
    "payments": [{"paymentId": "p-1", "amount": 800, "date": "2025-01-15", "paymentMode": "UPI"}],
    "refunds": [],
    "creditsApplied": [],
}

_BILL = {
    "id": "bill-1",
    "billNumber": "BILL-001",
    "vendorId": "v-1",
    "vendorName": "Sharma Supplies",
    "billDate": "2025-01-05",
    "dueDate": "2025-02-04",
    "items": [
        {"id": "bi-1", "itemName": "Printer paper", "quantity": "10", "rate": "100",
         "tax": 0, "account": "Office Supplies"},
    ],
    "subTotal": "1000",
    "taxAmount": "0",
    "total": "1000",
    "amountPaid": "0",
    "balanceDue": "1000",
    "status": "OPEN",
}

_SALES_ORDER = {
    "id": "so-1",
    "salesOrderNumber": "SO-00001",
    "referenceNumber": "REF-9",
    "customerId": "cust-1",
    "customerName": "Acme Traders",
    "date": "2025-01-02",
    "placeOfSupply": "Maharashtra",
    "paymentTerms": "Net 30",
    "billingAddress": {"street1": "12 MG Road", "city": "Pune", "state": "Maharashtra", "pinCode": "411001"},
    "items": [
        {"id": "soi-1", "itemId": "item-1", "name": "Widget", "quantity": 10, "invoicedQty": 4,
         "rate": 100, "discount": 10, "discountType": "percentage", "tax": 18},
        {"id": "soi-2", "itemId": "item-2", "name": "Bolt", "quantity": 5, "invoicedQty": 5,
         "rate": 20, "tax": 18},
    ],
    "subTotal": 1000,
    "cgst": 90,
    "sgst": 90,
    "total": 1180,
    "orderStatus": "CONFIRMED",
    "invoiceStatus": "PARTIALLY_INVOICED",
}

_QUOTE = {
    "id": "q-1",
    "quoteNumber": "QT-00001",
    "customerName": "Acme Traders",
    "date": "2025-01-01",
    "expiryDate": "2025-01-31",
    "subTotal": 1000,
    "cgst": 90,
    "sgst": 90,
    "total": 1180,
    "status": "CONVERTED",
    "convertedTo": "invoice",
}

_PAYMENT_MADE = {
    "id": "pm-1",
    "paymentNumber": "PM-00001",
    "vendorId": "v-1",
    "vendorName": "Sharma Supplies",
    "paymentAmount": 5000,
    "paymentDate": "2025-01-20",
    "paymentMode": "Bank Transfer",
    "paidThrough": "HDFC Current",
    "reference": "UTR123",
    "billPayments": {
        "bill-9": {"billNumber": "BILL-009", "billAmount": 3000, "paymentAmount": 3000},
    },
    "status": "PAID",
}

_VENDOR = {
    "id": "v-1",
    "vendorName": "Sharma Supplies",
    "displayName": "Sharma Supplies",
    "companyName": "Sharma Supplies Pvt Ltd",
    "email": "accounts@sharma.example",
    "gstin": "27AAAPS1234C1Z5",
    "payables": 1000,
    "unusedCredits": 0,
}


@pytest.fixture
def invoice_json() -> dict:
    """Partially paid invoice: total 1180, paid 800."""
    return copy.deepcopy(_INVOICE)


@pytest.fixture
def bill_json() -> dict:
    """Open bill: total 1000, nothing paid."""
    return copy.deepcopy(_BILL)


@pytest.fixture
def sales_order_json() -> dict:
    return copy.deepcopy(_SALES_ORDER)


@pytest.fixture
def quote_json() -> dict:
    return copy.deepcopy(_QUOTE)


@pytest.fixture
def payment_made_json() -> dict:
    """Vendor payment of 5000 with 3000 allocated to one bill."""
    return copy.deepcopy(_PAYMENT_MADE)


@pytest.fixture
def vendor_json() -> dict:
    return copy.deepcopy(_VENDOR)


# ---------------------------------------------------------------------------
# Fake books API behind httpx.MockTransport
# ---------------------------------------------------------------------------

class FakeBooksApi:
    """
    Canned responses keyed by (method, path).

    Registering several responses for one key serves them in order; the
    last one keeps being served. Unknown keys answer 404.
    """

    def __init__(self):
        self.responses = {}
        self.calls = []

    def add(self, method, path, data=None, status=200, body=None):
        if body is None:
            body = {"success": True, "data": data}
        self.responses.setdefault((method, path), []).append((status, body))
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        queue = self.responses.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"success": False, "message": "Not found"})
        status, body = queue[0] if len(queue) == 1 else queue.pop(0)
        if isinstance(body, Exception):
            raise body
        return httpx.Response(status, json=body)

    def client(self) -> BooksClient:
        return BooksClient(base_url=BOOKS_URL, token="test-token", transport=httpx.MockTransport(self.handler))

    def requests(self, method, path):
        return [r for r in self.calls if r.method == method and r.url.path == path]


@pytest.fixture
def books_api() -> FakeBooksApi:
    return FakeBooksApi()
