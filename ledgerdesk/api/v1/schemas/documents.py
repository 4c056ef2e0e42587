# ledgerdesk/api/v1/schemas/documents.py
"""Request bodies for the document action endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RecordPaymentRequest(_Body):
    # Left unconstrained so the amount checks report their own messages
    amount: Decimal
    payment_mode: str = "cash"
    payment_date: date | None = None
    status: Literal["DRAFT", "PAID"] = "PAID"
    payment_number: str | None = None
    paid_through: str | None = None
    reference: str | None = None
    notes: str | None = None

    def details(self) -> dict:
        extra = {
            "paymentNumber": self.payment_number,
            "paidThrough": self.paid_through,
            "reference": self.reference,
            "notes": self.notes,
        }
        return {k: v for k, v in extra.items() if v is not None}


class RefundRequest(_Body):
    amount: Decimal
    mode: str = "cash"
    reason: str | None = None


class StatusUpdateRequest(_Body):
    status: str = Field(..., min_length=1)


class ExpectedPaymentDateRequest(_Body):
    expected_payment_date: date


class ConvertRequest(_Body):
    item_ids: list[str] | None = Field(default=None, description="Omit to convert every open line")


class SendInvoiceRequest(_Body):
    recipient: str = Field(..., min_length=3)
    from_email: str = Field(..., min_length=3)
    organization: str = "our company"


class VendorCommentRequest(_Body):
    text: str = Field(..., min_length=1)
