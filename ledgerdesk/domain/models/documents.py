# ledgerdesk/domain/models/documents.py
"""
Typed shapes of the documents served by the books API.

The upstream JSON is camelCase and loosely typed (numbers as floats or
strings, ids as ints or strings, dates with or without a time part). These
models normalise all of that on the way in: money becomes ``Decimal``, dates
become ``date``, statuses become closed enums.
"""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ledgerdesk.domain.models.status import (
    BillStatus,
    InvoiceStatus,
    InvoicingStatus,
    PaymentMadeStatus,
    QuoteStatus,
    SalesOrderStatus,
    parse_status,
)
from ledgerdesk.domain.services.money import ZERO, to_decimal


# ---------------------------------------------------------------------------
# Field coercions
# ---------------------------------------------------------------------------

def _optional_money(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    return to_decimal(value)


def _ident(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _parse_date(value: Any) -> date | str | None:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        # "2025-01-15T10:30:00.000Z" -> "2025-01-15"
        return value.strip()[:10]
    return value


_RATE_RE = re.compile(r"(\d+(?:\.\d+)?)")


def _tax_rate(value: Any) -> Decimal:
    """Accept ``18``, ``"18"``, ``"18%"`` or labels such as ``"GST18"``."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, str):
        match = _RATE_RE.search(value)
        return Decimal(match.group(1)) if match else ZERO
    return to_decimal(value)


Money = Annotated[Decimal, BeforeValidator(to_decimal)]
OptionalMoney = Annotated[Optional[Decimal], BeforeValidator(_optional_money)]
Ident = Annotated[Optional[str], BeforeValidator(_ident)]
OptionalDate = Annotated[Optional[date], BeforeValidator(_parse_date)]
TaxRate = Annotated[Decimal, BeforeValidator(_tax_rate)]


class CamelModel(BaseModel):
    """Base model reading and writing the upstream camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class DiscountType(str, Enum):
    FLAT = "flat"
    PERCENTAGE = "percentage"


_DISCOUNT_ALIASES = {
    "percentage": DiscountType.PERCENTAGE,
    "percent": DiscountType.PERCENTAGE,
    "%": DiscountType.PERCENTAGE,
    "flat": DiscountType.FLAT,
    "amount": DiscountType.FLAT,
    "fixed": DiscountType.FLAT,
}


def _discount_type(value: Any) -> DiscountType:
    if isinstance(value, DiscountType):
        return value
    if not value:
        return DiscountType.FLAT
    key = str(value).strip().lower()
    if key not in _DISCOUNT_ALIASES:
        raise ValueError(f"Unknown discount type {value!r}")
    return _DISCOUNT_ALIASES[key]


# ---------------------------------------------------------------------------
# Shared parts
# ---------------------------------------------------------------------------

class Address(CamelModel):
    street: str | None = None
    street1: str | None = None
    street2: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    pincode: str | None = Field(default=None, validation_alias=AliasChoices("pincode", "pinCode"))
    gstin: str | None = None

    def lines(self) -> list[str]:
        parts = [self.street, self.street1, self.street2, self.city, self.state, self.country, self.pincode]
        present = [p for p in parts if p]
        return present or ["-"]


class LineItem(CamelModel):
    id: Ident = None
    name: str = Field(default="", validation_alias=AliasChoices("name", "itemName", "item_name"))
    description: str | None = None
    hsn_sac: str | None = None
    quantity: Money = ZERO
    rate: Money = ZERO
    discount: Money = ZERO
    discount_type: Annotated[DiscountType, BeforeValidator(_discount_type)] = DiscountType.FLAT
    tax: TaxRate = ZERO
    tax_name: str | None = None
    amount: OptionalMoney = None


class InvoiceItem(LineItem):
    pass


class BillItem(LineItem):
    account: str | None = None
    tax_amount: OptionalMoney = None
    customer_details: str | None = None


class SalesOrderItem(LineItem):
    item_id: Ident = None
    unit: str | None = None
    ordered: Money = ZERO
    invoiced_qty: Money = ZERO
    invoice_status: str | None = None


class JournalEntry(CamelModel):
    account: str
    debit: Money = ZERO
    credit: Money = ZERO


class CreditApplied(CamelModel):
    credit_id: Ident = None
    credit_number: str | None = None
    amount: Money = ZERO
    applied_date: OptionalDate = None


class PaymentApplication(CamelModel):
    """A payment recorded against an invoice or bill."""
    payment_id: Ident = Field(default=None, validation_alias=AliasChoices("paymentId", "id"))
    payment_number: str | None = None
    amount: Money = ZERO
    date: OptionalDate = None
    mode: str | None = Field(default=None, validation_alias=AliasChoices("mode", "paymentMode"))


class RefundRecord(CamelModel):
    id: Ident = None
    amount: Money = ZERO
    mode: str | None = None
    reason: str | None = None
    date: OptionalDate = None


class LinkedInvoice(CamelModel):
    """Invoice raised from a sales order."""
    id: Ident = None
    invoice_number: str = ""
    date: OptionalDate = None
    due_date: OptionalDate = None
    status: str | None = None
    amount: Money = ZERO
    balance_due: Money = ZERO


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

class BaseDocument(CamelModel):
    """Fields every priced document carries."""

    id: Ident = None
    sub_total: Money = Field(default=ZERO, validation_alias=AliasChoices("subTotal", "subtotal", "sub_total"))
    shipping_charges: Money = ZERO
    cgst: Money = ZERO
    sgst: Money = ZERO
    igst: Money = ZERO
    tax_amount: Money = ZERO
    discount_amount: Money = ZERO
    adjustment: Money = ZERO
    total: Money = Field(default=ZERO, validation_alias=AliasChoices("total", "amount"))

    @property
    def taxes(self) -> Decimal:
        """Document-level tax: the GST buckets when present, else ``tax_amount``."""
        buckets = self.cgst + self.sgst + self.igst
        return buckets if buckets else self.tax_amount


class Invoice(BaseDocument):
    kind: Literal["invoice"] = "invoice"
    invoice_number: str = ""
    reference_number: str | None = None
    customer_id: Ident = None
    customer_name: str = ""
    date: OptionalDate = None
    due_date: OptionalDate = None
    billing_address: Address | None = None
    shipping_address: Address | None = None
    salesperson: str | None = None
    place_of_supply: str | None = None
    payment_terms: str | None = Field(default=None, validation_alias=AliasChoices("paymentTerms", "terms"))
    items: list[InvoiceItem] = Field(default_factory=list)
    amount_paid: OptionalMoney = None
    balance_due: OptionalMoney = None
    amount_refunded: OptionalMoney = None
    credits_applied: list[CreditApplied] = Field(default_factory=list)
    payments: list[PaymentApplication] = Field(default_factory=list)
    refunds: list[RefundRecord] = Field(default_factory=list)
    journal_entries: list[JournalEntry] | None = None
    status: InvoiceStatus = InvoiceStatus.DRAFT

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v):
        return parse_status(InvoiceStatus, v, default=InvoiceStatus.DRAFT)

    @property
    def number(self) -> str:
        return self.invoice_number

    @property
    def counterparty(self) -> str:
        return self.customer_name

    @property
    def document_date(self) -> date | None:
        return self.date


class Bill(BaseDocument):
    kind: Literal["bill"] = "bill"
    bill_number: str = ""
    order_number: str | None = None
    vendor_id: Ident = None
    vendor_name: str = ""
    vendor_address: Address | None = None
    bill_date: OptionalDate = Field(default=None, validation_alias=AliasChoices("billDate", "date"))
    due_date: OptionalDate = None
    expected_payment_date: OptionalDate = None
    payment_terms: str | None = None
    reverse_charge: bool = False
    subject: str | None = None
    items: list[BillItem] = Field(default_factory=list)
    discount_type: str | None = None
    discount_value: OptionalMoney = None
    tax_type: str | None = None
    tax_category: str | None = None
    adjustment_description: str | None = None
    amount_paid: OptionalMoney = None
    balance_due: OptionalMoney = None
    notes: str | None = None
    credits_applied: list[CreditApplied] = Field(default_factory=list)
    payments_recorded: list[PaymentApplication] = Field(default_factory=list)
    payments_made_applied: list[PaymentApplication] = Field(default_factory=list)
    journal_entries: list[JournalEntry] | None = None
    status: BillStatus = BillStatus.OPEN

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v):
        return parse_status(BillStatus, v, default=BillStatus.OPEN)

    @property
    def number(self) -> str:
        return self.bill_number

    @property
    def counterparty(self) -> str:
        return self.vendor_name

    @property
    def document_date(self) -> date | None:
        return self.bill_date


class SalesOrder(BaseDocument):
    kind: Literal["sales_order"] = "sales_order"
    sales_order_number: str = ""
    reference_number: str | None = None
    customer_id: Ident = None
    customer_name: str = ""
    date: OptionalDate = None
    expected_shipment_date: OptionalDate = None
    billing_address: Address | None = None
    shipping_address: Address | None = None
    payment_terms: str | None = None
    delivery_method: str | None = None
    salesperson: str | None = None
    place_of_supply: str | None = None
    items: list[SalesOrderItem] = Field(default_factory=list)
    status: SalesOrderStatus = Field(
        default=SalesOrderStatus.DRAFT,
        validation_alias=AliasChoices("orderStatus", "status"),
    )
    invoice_status: InvoicingStatus = InvoicingStatus.NOT_INVOICED
    payment_status: str | None = None
    shipment_status: str | None = None
    invoices: list[LinkedInvoice] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v):
        return parse_status(SalesOrderStatus, v, default=SalesOrderStatus.DRAFT)

    @field_validator("invoice_status", mode="before")
    @classmethod
    def _invoice_status(cls, v):
        return parse_status(InvoicingStatus, v, default=InvoicingStatus.NOT_INVOICED)

    @property
    def number(self) -> str:
        return self.sales_order_number

    @property
    def counterparty(self) -> str:
        return self.customer_name

    @property
    def document_date(self) -> date | None:
        return self.date


class Quote(BaseDocument):
    kind: Literal["quote"] = "quote"
    quote_number: str = ""
    reference_number: str | None = None
    customer_id: Ident = None
    customer_name: str = ""
    date: OptionalDate = None
    expiry_date: OptionalDate = None
    billing_address: Address | None = None
    shipping_address: Address | None = None
    salesperson: str | None = None
    project_name: str | None = None
    subject: str | None = None
    place_of_supply: str | None = None
    items: list[InvoiceItem] = Field(default_factory=list)
    status: QuoteStatus = QuoteStatus.DRAFT
    converted_to: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v):
        return parse_status(QuoteStatus, v, default=QuoteStatus.DRAFT)

    @property
    def number(self) -> str:
        return self.quote_number

    @property
    def counterparty(self) -> str:
        return self.customer_name

    @property
    def document_date(self) -> date | None:
        return self.date


Document = Union[Invoice, Bill, SalesOrder, Quote]
PayableDocument = Union[Invoice, Bill]


# ---------------------------------------------------------------------------
# Payments made
# ---------------------------------------------------------------------------

class BillPayment(CamelModel):
    """Part of a vendor payment allocated to one bill."""
    bill_id: Ident = None
    bill_number: str | None = None
    bill_date: OptionalDate = None
    bill_amount: Money = ZERO
    payment_amount: Money = Field(default=ZERO, validation_alias=AliasChoices("paymentAmount", "amount"))


class PaymentMade(CamelModel):
    id: Ident = None
    payment_number: str = ""
    vendor_id: Ident = None
    vendor_name: str = ""
    vendor_address: Address | None = None
    payment_amount: Money = ZERO
    payment_date: OptionalDate = None
    payment_mode: str | None = None
    paid_through: str | None = None
    deposit_to: str | None = None
    payment_type: str | None = None
    reference: str | None = None
    source_of_supply: str | None = None
    destination_of_supply: str | None = None
    notes: str | None = None
    bill_payments: list[BillPayment] = Field(default_factory=list)
    unused_amount: OptionalMoney = None
    status: PaymentMadeStatus = PaymentMadeStatus.PAID

    @field_validator("payment_number", mode="before")
    @classmethod
    def _payment_number(cls, v):
        # Some stored payments carry the whole next-number response object.
        if isinstance(v, dict):
            return str(v.get("nextNumber") or "")
        if v is None:
            return ""
        return str(v)

    @field_validator("bill_payments", mode="before")
    @classmethod
    def _bill_payments(cls, v):
        if v is None:
            return []
        if isinstance(v, dict):
            rows = []
            for bill_id, entry in v.items():
                row = dict(entry or {})
                row.setdefault("billId", bill_id)
                rows.append(row)
            return rows
        return v

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v):
        return parse_status(PaymentMadeStatus, v, default=PaymentMadeStatus.PAID)


# ---------------------------------------------------------------------------
# Vendors
# ---------------------------------------------------------------------------

class Vendor(CamelModel):
    id: Ident = None
    name: str = Field(default="", validation_alias=AliasChoices("name", "vendorName"))
    display_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    company_name: str | None = None
    email: str | None = None
    phone: str | None = None
    gstin: str | None = None
    gst_treatment: str | None = None
    currency: str | None = None
    opening_balance: Money = ZERO
    payment_terms: str | None = None
    source_of_supply: str | None = None
    billing_address: Address | None = None
    shipping_address: Address | None = None
    payables: Money = ZERO
    unused_credits: Money = ZERO
    status: str | None = None

    @property
    def display(self) -> str:
        return self.display_name or self.name


class VendorTransaction(CamelModel):
    id: Ident = None
    type: str | None = None
    date: OptionalDate = None
    number: str | None = None
    order_number: str | None = None
    amount: Money = ZERO
    balance: Money = ZERO
    status: str | None = None
    vendor: str | None = None
    paid_through: str | None = None


class VendorComment(CamelModel):
    id: Ident = None
    text: str = ""
    author: str | None = None
    created_at: str | None = None


class VendorActivity(CamelModel):
    """Everything shown on the vendor detail tabs."""
    comments: list[VendorComment] = Field(default_factory=list)
    transactions: dict[str, list[VendorTransaction]] = Field(default_factory=dict)
    mails: list[dict[str, Any]] = Field(default_factory=list)
    activities: list[dict[str, Any]] = Field(default_factory=list)
