# --- File: dairy_ops/schemas/invoice.py ---
"""
Invoice document schemas.

The document is the data handed to an invoice renderer; layout is the
renderer's concern.
"""

from __future__ import annotations

from datetime import date as Date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from dairy_ops.models.enums import DeliverySchedule, PaymentStatus
from dairy_ops.schemas.common.base import BaseSchema

__all__ = [
    "InvoiceParty",
    "InvoiceLineItem",
    "InvoiceDocument",
    "InvoiceResult",
]


class InvoiceParty(BaseSchema):
    member_id: UUID
    name: str
    email: Optional[str] = None
    mobile: Optional[str] = None
    address_lines: List[str] = Field(default_factory=list)


class InvoiceLineItem(BaseSchema):
    subscription_id: UUID
    product_name: str
    delivery_schedule: DeliverySchedule
    start_date: Date
    expiry_date: Date
    quantity: int
    unit_rate: Decimal
    amount: Decimal


class InvoiceDocument(BaseSchema):
    invoice_no: str
    invoice_date: Date
    order_id: UUID
    order_no: str
    currency: str
    bill_to: InvoiceParty
    items: List[InvoiceLineItem]
    total_amount: Decimal
    wallet_amount: Decimal
    amount_due: Decimal
    payment_status: PaymentStatus
    generated_at: datetime


class InvoiceResult(BaseSchema):
    order_id: UUID
    invoice_no: str
    invoice_path: str
