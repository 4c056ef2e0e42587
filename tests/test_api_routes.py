# tests/test_api_routes.py
"""End-to-end tests of the v1 API against a mocked books API."""

import json

import pytest
from fastapi.testclient import TestClient

from ledgerdesk.api.v1.deps import get_books_client
from ledgerdesk.main import app


@pytest.fixture
def api(books_api):
    app.dependency_overrides[get_books_client] = books_api.client
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(api):
    r = api.get("/")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------

def test_list_invoices_with_filter(api, books_api, invoice_json):
    other = dict(invoice_json, id="inv-2", invoiceNumber="INV-00002", amountPaid=0, balanceDue=1180, status="DRAFT")
    books_api.add("GET", "/invoices", [invoice_json, other])

    r = api.get("/api/v1/invoices", params={"filter": "partially_paid"})

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["data"]["total_items"] == 1
    row = body["data"]["items"][0]
    assert row["number"] == "INV-00001"
    assert row["status"] == "PARTIALLY PAID"
    assert row["balanceDueFormatted"] == "₹380.00"


def test_list_search_and_page_size(api, books_api, invoice_json):
    rows = [dict(invoice_json, id=f"inv-{n}", invoiceNumber=f"INV-{n:05d}") for n in range(1, 13)]
    books_api.add("GET", "/invoices", rows)

    r = api.get("/api/v1/invoices", params={"page": 2, "page_size": 5})
    data = r.json()["data"]
    assert [row["id"] for row in data["items"]] == ["inv-6", "inv-7", "inv-8", "inv-9", "inv-10"]
    assert data["total_pages"] == 3

    r = api.get("/api/v1/invoices", params={"search": "INV-00012"})
    assert [row["id"] for row in r.json()["data"]["items"]] == ["inv-12"]


def test_unknown_filter_is_422(api, books_api):
    books_api.add("GET", "/bills", [])
    r = api.get("/api/v1/bills", params={"filter": "Shipped"})
    assert r.status_code == 422
    assert r.json()["success"] is False
    assert "Unknown filter" in r.json()["message"]


def test_upstream_failure_is_502(api, books_api):
    books_api.add("GET", "/quotes", status=500, body={"message": "database offline"})
    r = api.get("/api/v1/quotes")
    assert r.status_code == 502
    assert r.json()["message"] == "Failed to fetch quotes: database offline"


def test_page_size_is_bounded(api):
    r = api.get("/api/v1/invoices", params={"page_size": 0})
    assert r.status_code == 422
    assert r.json()["message"] == "Invalid request"


# ---------------------------------------------------------------------------
# Detail and actions
# ---------------------------------------------------------------------------

def test_invoice_detail(api, books_api, invoice_json):
    books_api.add("GET", "/invoices/inv-1", invoice_json)
    r = api.get("/api/v1/invoices/inv-1")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["invoiceNumber"] == "INV-00001"
    assert data["balanceDue"] == 380
    assert data["actions"]["record_payment"] is True
    assert data["journal"]["isBalanced"] is True


def test_missing_document_is_404(api):
    r = api.get("/api/v1/invoices/nope")
    assert r.status_code == 404
    assert r.json()["success"] is False


def test_refund_over_cap_is_rejected(api, books_api, invoice_json):
    books_api.add("GET", "/invoices/inv-1", invoice_json)
    r = api.post("/api/v1/invoices/inv-1/refund", json={"amount": 900})
    assert r.status_code == 422
    assert r.json()["message"] == "Refund amount cannot exceed refundable balance of ₹800.00"
    assert books_api.requests("POST", "/invoices/inv-1/refund") == []


def test_bill_payment_round_trip(api, books_api, bill_json):
    paid = dict(bill_json, amountPaid="1000", balanceDue="0", status="PAID")
    books_api.add("GET", "/bills/bill-1", bill_json).add("GET", "/bills/bill-1", paid)
    books_api.add("GET", "/bills", [paid])
    books_api.add("POST", "/bills/bill-1/record-payment", {"id": "pm-7"})

    r = api.post(
        "/api/v1/bills/bill-1/record-payment",
        json={"amount": 1000, "paymentMode": "Bank Transfer", "paymentDate": "2025-03-01", "reference": "UTR1"},
    )

    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Payment recorded successfully"
    assert body["data"]["displayStatus"] == "PAID"
    sent = json.loads(books_api.requests("POST", "/bills/bill-1/record-payment")[0].content)
    assert sent == {
        "amount": "1000",
        "paymentMode": "Bank Transfer",
        "paymentDate": "2025-03-01",
        "status": "PAID",
        "reference": "UTR1",
    }


def test_bill_payment_as_draft(api, books_api, bill_json):
    books_api.add("GET", "/bills/bill-1", bill_json)
    books_api.add("GET", "/bills", [bill_json])
    books_api.add("POST", "/bills/bill-1/record-payment", {"id": "pm-8"})

    r = api.post("/api/v1/bills/bill-1/record-payment", json={"amount": 250, "status": "DRAFT"})

    assert r.status_code == 200
    sent = json.loads(books_api.requests("POST", "/bills/bill-1/record-payment")[0].content)
    assert sent["status"] == "DRAFT"


def test_bill_payment_status_is_restricted(api, books_api, bill_json):
    books_api.add("GET", "/bills/bill-1", bill_json)
    r = api.post("/api/v1/bills/bill-1/record-payment", json={"amount": 250, "status": "VOID"})
    assert r.status_code == 422
    assert books_api.requests("POST", "/bills/bill-1/record-payment") == []


def test_quote_void_is_rejected(api, books_api, quote_json):
    quote_json.update(status="DRAFT", convertedTo=None)
    books_api.add("GET", "/quotes/q-1", quote_json)

    r = api.post("/api/v1/quotes/q-1/void")

    assert r.status_code == 422
    assert r.json()["message"] == "This quote cannot be voided"
    assert books_api.requests("PATCH", "/quotes/q-1/status") == []


def test_bad_status_is_422(api, books_api, invoice_json):
    books_api.add("GET", "/invoices/inv-1", invoice_json)
    r = api.patch("/api/v1/invoices/inv-1/status", json={"status": "SHIPPED"})
    assert r.status_code == 422
    assert books_api.requests("PATCH", "/invoices/inv-1/status") == []


def test_convert_sales_order(api, books_api, sales_order_json, invoice_json):
    books_api.add("GET", "/sales-orders/so-1", sales_order_json)
    books_api.add("GET", "/sales-orders", [sales_order_json])
    books_api.add("POST", "/invoices", dict(invoice_json, id="inv-9", invoiceNumber="INV-00009"))

    r = api.post("/api/v1/sales-orders/so-1/convert", json={"itemIds": ["soi-1"]})

    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Invoice INV-00009 has been created from sales order SO-00001"
    assert body["data"]["invoice"]["invoiceNumber"] == "INV-00009"
    sent = json.loads(books_api.requests("POST", "/invoices")[0].content)
    assert sent["items"][0]["quantity"] == "6"
    assert sent["selectedItemIds"] == ["soi-1"]


def test_convert_without_body_converts_everything(api, books_api, sales_order_json, invoice_json):
    books_api.add("GET", "/sales-orders/so-1", sales_order_json)
    books_api.add("GET", "/sales-orders", [sales_order_json])
    books_api.add("POST", "/invoices", invoice_json)
    r = api.post("/api/v1/sales-orders/so-1/convert")
    assert r.status_code == 200
    assert json.loads(books_api.requests("POST", "/invoices")[0].content)["convertAll"] is True


# ---------------------------------------------------------------------------
# Payments made and vendors
# ---------------------------------------------------------------------------

def test_payment_made_detail(api, books_api, payment_made_json):
    books_api.add("GET", "/payments-made/pm-1", payment_made_json)
    r = api.get("/api/v1/payments-made/pm-1")
    data = r.json()["data"]
    assert data["unusedAmount"] == 2000
    assert data["allocatedAmount"] == 3000
    assert data["amountInWords"] == "Indian Rupee Five Thousand Only"


def test_next_payment_number(api, books_api):
    books_api.add("GET", "/payments-made/next-number", {"nextNumber": "PM-00002"})
    r = api.get("/api/v1/payments-made/next-number")
    assert r.status_code == 200
    assert r.json()["data"] == {"nextNumber": "PM-00002"}


def test_vendor_detail_and_comment(api, books_api, vendor_json):
    books_api.add("GET", "/vendors/v-1", vendor_json)
    books_api.add("GET", "/vendors/v-1/comments", [])
    books_api.add("GET", "/vendors/v-1/transactions", {})
    books_api.add("GET", "/vendors/v-1/mails", [])
    books_api.add("GET", "/vendors/v-1/activities", [])
    books_api.add("POST", "/vendors/v-1/comments", {"id": "c-1", "text": "Net 15 agreed"})

    r = api.get("/api/v1/vendors/v-1")
    assert r.status_code == 200
    assert r.json()["data"]["payablesFormatted"] == "₹1,000.00"
    assert r.json()["data"]["activity"]["transactions"]["bills"] == []

    r = api.post("/api/v1/vendors/v-1/comments", json={"text": "Net 15 agreed"})
    assert r.status_code == 200
    assert r.json()["data"]["text"] == "Net 15 agreed"
