# ledgerdesk/domain/services/conversion.py
"""
Sales order -> invoice conversion.

Builds the invoice payload for POST /invoices from the items of a sales
order that still have quantity left to invoice.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterable

from ledgerdesk.domain.models.documents import SalesOrder, SalesOrderItem
from ledgerdesk.domain.models.status import SalesOrderStatus
from ledgerdesk.domain.services.money import ZERO
from ledgerdesk.domain.services.totals import TaxScheme, compute_document_totals, compute_line, tax_scheme_for

logger = logging.getLogger("conversion")

INVOICE_DUE_DAYS = 30

_CLOSED_ORDER = (SalesOrderStatus.CLOSED, SalesOrderStatus.VOID, SalesOrderStatus.CANCELLED)


class NothingToInvoiceError(ValueError):
    """No selected line has quantity left to invoice."""


def remaining_quantity(item: SalesOrderItem) -> Decimal:
    return max(ZERO, item.quantity - item.invoiced_qty)


def _item_payload(item: SalesOrderItem) -> dict[str, Any]:
    line = compute_line(item)
    return {
        "itemId": item.item_id or item.id,
        "name": item.name,
        "description": item.description,
        "hsnSac": item.hsn_sac,
        "unit": item.unit,
        "quantity": item.quantity,
        "rate": item.rate,
        "discount": item.discount,
        "discountType": item.discount_type.value,
        "tax": item.tax,
        "taxName": item.tax_name,
        "amount": line.amount,
    }


def build_invoice_payload(
    order: SalesOrder,
    item_ids: Iterable[str] | None = None,
    today: date | None = None,
    scheme: TaxScheme | None = None,
    source_state: str | None = None,
) -> dict[str, Any]:
    """
    Invoice payload for the remaining quantities of ``order``.

    ``item_ids`` limits the conversion to those lines; ``None`` converts
    everything still open. The tax scheme defaults to the one implied by the
    order's place of supply and ``source_state``.
    """
    if order.status in _CLOSED_ORDER:
        raise NothingToInvoiceError(f"Cannot invoice a {order.status.label.lower()} sales order")

    selected_ids = None if item_ids is None else [str(i) for i in item_ids]
    if selected_ids is not None and not selected_ids:
        raise NothingToInvoiceError("Please select at least one item")

    candidates = order.items
    if selected_ids is not None:
        known = {item.id for item in order.items}
        unknown = [i for i in selected_ids if i not in known]
        if unknown:
            raise ValueError(f"Unknown sales order item(s): {', '.join(unknown)}")
        candidates = [item for item in order.items if item.id in selected_ids]

    lines = [
        item.model_copy(update={"quantity": remaining_quantity(item)})
        for item in candidates
        if remaining_quantity(item) > ZERO
    ]
    if not lines:
        raise NothingToInvoiceError("All selected items have already been fully invoiced.")

    if scheme is None:
        scheme = tax_scheme_for(order.place_of_supply, source_state)
    totals = compute_document_totals(lines, scheme)
    today = today or date.today()

    notes = f"Converted from Sales Order: {order.sales_order_number}"
    if selected_ids is not None:
        notes += f" ({len(lines)} selected items)"

    logger.info(
        "Converting sales order %s: %d line(s), total=%s, scheme=%s",
        order.sales_order_number, len(lines), totals.total, scheme.value,
    )

    payload: dict[str, Any] = {
        "date": today,
        "dueDate": today + timedelta(days=INVOICE_DUE_DAYS),
        "salesOrderId": order.id,
        "customerId": order.customer_id,
        "customerName": order.customer_name,
        "items": [_item_payload(item) for item in lines],
        "convertAll": selected_ids is None,
        "billingAddress": order.billing_address.model_dump(by_alias=True, exclude_none=True) if order.billing_address else None,
        "shippingAddress": order.shipping_address.model_dump(by_alias=True, exclude_none=True) if order.shipping_address else None,
        "paymentTerms": order.payment_terms,
        "placeOfSupply": order.place_of_supply,
        "subTotal": totals.sub_total,
        "shippingCharges": totals.shipping_charges,
        "cgst": totals.cgst,
        "sgst": totals.sgst,
        "igst": totals.igst,
        "taxAmount": totals.tax_amount,
        "adjustment": totals.adjustment,
        "total": totals.total,
        "status": "PENDING",
        "notes": notes,
    }
    if selected_ids is not None:
        payload["selectedItemIds"] = selected_ids
    return payload
