# tests/test_models.py
"""Tests for parsing upstream JSON into the document models."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from ledgerdesk.domain.models.documents import (
    Bill,
    DiscountType,
    Invoice,
    LineItem,
    PaymentMade,
    Quote,
    SalesOrder,
    Vendor,
)
from ledgerdesk.domain.models.status import (
    InvoiceStatus,
    InvoicingStatus,
    QuoteStatus,
    SalesOrderStatus,
    is_terminal,
    normalize_status,
    parse_status,
)


def test_invoice_parses_money_dates_and_status(invoice_json):
    inv = Invoice.model_validate(invoice_json)
    assert inv.kind == "invoice"
    assert inv.number == "INV-00001"
    assert inv.counterparty == "Acme Traders"
    assert inv.total == Decimal("1180")
    assert inv.amount_paid == Decimal("800")
    assert inv.date == date(2025, 1, 10)
    assert inv.status == InvoiceStatus.PARTIALLY_PAID
    assert inv.items[0].tax == Decimal("18")
    assert inv.payments[0].mode == "UPI"
    assert inv.taxes == Decimal("180")


def test_list_row_uses_amount_as_total():
    inv = Invoice.model_validate({"id": 7, "invoiceNumber": "INV-7", "amount": "500", "balanceDue": 200, "status": "SENT"})
    assert inv.id == "7"
    assert inv.total == Decimal("500")
    assert inv.amount_paid is None
    assert inv.balance_due == Decimal("200")


@pytest.mark.parametrize("raw", ["partially paid", "Partially-Paid", "PARTIALLY_PAID", " partially_paid "])
def test_status_spellings_fold_together(raw):
    assert Invoice.model_validate({"id": "x", "status": raw}).status == InvoiceStatus.PARTIALLY_PAID


def test_unknown_status_is_rejected():
    with pytest.raises(ValidationError):
        Invoice.model_validate({"id": "x", "status": "HALF_PAID"})


def test_missing_status_defaults():
    assert Invoice.model_validate({"id": "x"}).status == InvoiceStatus.DRAFT
    assert Bill.model_validate({"id": "x", "status": ""}).status.value == "OPEN"


def test_datetime_strings_become_dates():
    bill = Bill.model_validate({"id": "b", "billDate": "2025-01-15T10:30:00.000Z", "dueDate": ""})
    assert bill.bill_date == date(2025, 1, 15)
    assert bill.due_date is None


def test_bill_item_name_and_tax_label(bill_json):
    bill_json["items"][0]["tax"] = "GST18"
    bill = Bill.model_validate(bill_json)
    assert bill.items[0].name == "Printer paper"
    assert bill.items[0].tax == Decimal("18")
    assert bill.items[0].quantity == Decimal("10")


@pytest.mark.parametrize("label,rate", [("18%", "18"), ("IGST 12", "12"), ("GST0.25", "0.25"), ("", "0"), (None, "0")])
def test_tax_labels(label, rate):
    assert LineItem.model_validate({"tax": label}).tax == Decimal(rate)


def test_discount_type_aliases():
    assert LineItem.model_validate({"discountType": "percent"}).discount_type == DiscountType.PERCENTAGE
    assert LineItem.model_validate({"discountType": "AMOUNT"}).discount_type == DiscountType.FLAT
    assert LineItem.model_validate({}).discount_type == DiscountType.FLAT
    with pytest.raises(ValidationError):
        LineItem.model_validate({"discountType": "bogus"})


def test_sales_order_statuses(sales_order_json):
    so = SalesOrder.model_validate(sales_order_json)
    assert so.status == SalesOrderStatus.CONFIRMED
    assert so.invoice_status == InvoicingStatus.PARTIALLY_INVOICED
    assert so.items[0].invoiced_qty == Decimal("4")
    assert so.billing_address.pincode == "411001"
    assert so.number == "SO-00001"


def test_sales_order_invoice_status_with_spaces():
    so = SalesOrder.model_validate({"id": "s", "invoiceStatus": "not invoiced"})
    assert so.invoice_status == InvoicingStatus.NOT_INVOICED


def test_quote(quote_json):
    q = Quote.model_validate(quote_json)
    assert q.status == QuoteStatus.CONVERTED
    assert q.converted_to == "invoice"
    assert q.expiry_date == date(2025, 1, 31)


def test_payment_made_bill_payments_mapping(payment_made_json):
    pm = PaymentMade.model_validate(payment_made_json)
    assert len(pm.bill_payments) == 1
    assert pm.bill_payments[0].bill_id == "bill-9"
    assert pm.bill_payments[0].payment_amount == Decimal("3000")
    assert pm.unused_amount is None


def test_payment_made_bill_payments_list_and_corrupted_number(payment_made_json):
    payment_made_json["billPayments"] = [{"billId": "b1", "amount": 100}]
    payment_made_json["paymentNumber"] = {"nextNumber": "PM-00007"}
    pm = PaymentMade.model_validate(payment_made_json)
    assert pm.bill_payments[0].payment_amount == Decimal("100")
    assert pm.payment_number == "PM-00007"


def test_payment_made_null_bill_payments():
    pm = PaymentMade.model_validate({"id": "p", "paymentAmount": 10, "billPayments": None})
    assert pm.bill_payments == []


def test_vendor_display_name(vendor_json):
    v = Vendor.model_validate(vendor_json)
    assert v.name == "Sharma Supplies"
    assert v.display == "Sharma Supplies"
    assert v.payables == Decimal("1000")


def test_dump_uses_camel_case(invoice_json):
    dumped = Invoice.model_validate(invoice_json).model_dump(by_alias=True)
    assert dumped["invoiceNumber"] == "INV-00001"
    assert dumped["subTotal"] == Decimal("1000")


# ---------------------------------------------------------------------------
# status helpers
# ---------------------------------------------------------------------------

def test_normalize_status():
    assert normalize_status("pending  approval") == "PENDING_APPROVAL"
    assert normalize_status(None) == ""


def test_parse_status_without_default_requires_value():
    with pytest.raises(ValueError):
        parse_status(InvoiceStatus, "")


def test_labels_and_terminal_states():
    assert InvoiceStatus.PARTIALLY_PAID.label == "PARTIALLY PAID"
    assert is_terminal(InvoiceStatus.PAID)
    assert is_terminal(QuoteStatus.DECLINED)
    assert not is_terminal(InvoiceStatus.SENT)
