# tests/test_conversion.py
"""Tests for sales order -> invoice conversion."""

from datetime import date
from decimal import Decimal

import pytest

from ledgerdesk.domain.models.documents import SalesOrder
from ledgerdesk.domain.services.conversion import (
    NothingToInvoiceError,
    build_invoice_payload,
    remaining_quantity,
)
from ledgerdesk.domain.services.totals import TaxScheme

TODAY = date(2025, 3, 1)


@pytest.fixture
def order(sales_order_json) -> SalesOrder:
    return SalesOrder.model_validate(sales_order_json)


def test_remaining_quantity(order):
    assert [remaining_quantity(i) for i in order.items] == [Decimal("6"), Decimal("0")]


def test_converts_remaining_quantities_intra_state(order):
    payload = build_invoice_payload(order, today=TODAY, source_state="27-Maharashtra")

    assert len(payload["items"]) == 1
    item = payload["items"][0]
    assert item["itemId"] == "item-1"
    assert item["quantity"] == Decimal("6")
    assert item["discountType"] == "percentage"
    assert item["amount"] == Decimal("637.2")

    assert payload["subTotal"] == Decimal("540")
    assert payload["cgst"] == Decimal("48.6")
    assert payload["sgst"] == Decimal("48.6")
    assert payload["igst"] == Decimal("0")
    assert payload["total"] == Decimal("637.2")
    assert payload["date"] == TODAY
    assert payload["dueDate"] == date(2025, 3, 31)
    assert payload["status"] == "PENDING"
    assert payload["convertAll"] is True
    assert payload["salesOrderId"] == "so-1"
    assert payload["notes"] == "Converted from Sales Order: SO-00001"
    assert payload["billingAddress"]["city"] == "Pune"
    assert "selectedItemIds" not in payload


def test_inter_state_uses_igst(order):
    payload = build_invoice_payload(order, today=TODAY, source_state="Karnataka")
    assert payload["igst"] == Decimal("97.2")
    assert payload["cgst"] == payload["sgst"] == Decimal("0")
    assert payload["total"] == Decimal("637.2")


def test_unknown_source_state_falls_back_to_flat_tax(order):
    payload = build_invoice_payload(order, today=TODAY)
    assert payload["taxAmount"] == Decimal("97.2")
    assert payload["cgst"] == payload["igst"] == Decimal("0")


def test_explicit_scheme_wins(order):
    payload = build_invoice_payload(order, today=TODAY, scheme=TaxScheme.INTER_STATE, source_state="Maharashtra")
    assert payload["igst"] == Decimal("97.2")


def test_selected_items(order):
    payload = build_invoice_payload(order, item_ids=["soi-1"], today=TODAY)
    assert payload["convertAll"] is False
    assert payload["selectedItemIds"] == ["soi-1"]
    assert payload["notes"].endswith("(1 selected items)")


def test_order_is_not_mutated(order):
    build_invoice_payload(order, today=TODAY)
    assert order.items[0].quantity == Decimal("10")


@pytest.mark.parametrize("item_ids, message", [
    ([], "Please select at least one item"),
    (["soi-2"], "already been fully invoiced"),
])
def test_nothing_to_invoice(order, item_ids, message):
    with pytest.raises(NothingToInvoiceError, match=message):
        build_invoice_payload(order, item_ids=item_ids, today=TODAY)


def test_unknown_item_is_rejected(order):
    with pytest.raises(ValueError, match="soi-404"):
        build_invoice_payload(order, item_ids=["soi-404"], today=TODAY)


@pytest.mark.parametrize("status", ["CLOSED", "VOID", "CANCELLED"])
def test_closed_orders_cannot_be_invoiced(sales_order_json, status):
    sales_order_json["orderStatus"] = status
    with pytest.raises(NothingToInvoiceError, match="Cannot invoice"):
        build_invoice_payload(SalesOrder.model_validate(sales_order_json), today=TODAY)
