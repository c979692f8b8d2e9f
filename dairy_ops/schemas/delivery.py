# --- File: dairy_ops/schemas/delivery.py ---
"""
Delivery schedule entry schemas for fulfillment and lifecycle results.
"""

from __future__ import annotations

from datetime import date as Date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from dairy_ops.models.enums import DeliveryStatus
from dairy_ops.schemas.common.base import BaseResponseSchema, BaseSchema

__all__ = [
    "DeliveryEntryRead",
    "DeliveryStatusChange",
    "BulkAgencyAssignmentResult",
    "ProductQuantity",
    "AgencyDeliveryTotals",
    "AgencyDeliverySummary",
]


class DeliveryEntryRead(BaseResponseSchema):
    subscription_id: UUID
    member_id: UUID
    product_id: UUID
    delivery_address_id: Optional[UUID] = None
    agent_id: Optional[UUID] = None
    wallet_transaction_id: Optional[UUID] = None
    delivery_date: Date
    quantity: int
    status: DeliveryStatus
    admin_notes: Optional[str] = None


class DeliveryStatusChange(BaseSchema):
    """Outcome of a skip or status override on one entry."""

    entry: DeliveryEntryRead
    previous_status: DeliveryStatus
    refund_amount: Decimal = Field(
        Decimal("0.00"),
        description="Amount credited to the member wallet; zero when none",
    )
    wallet_transaction_id: Optional[UUID] = None
    wallet_balance: Optional[Decimal] = Field(
        None,
        description="Member wallet balance after the change",
    )


class BulkAgencyAssignmentResult(BaseSchema):
    agency_id: Optional[UUID] = None
    subscriptions_updated: int
    entries_updated: int


class ProductQuantity(BaseSchema):
    product_id: UUID
    product_name: str
    quantity: int


class AgencyDeliveryTotals(BaseSchema):
    agency_id: Optional[UUID] = Field(None, description="None for unassigned subscriptions")
    agency_name: str
    total_quantity: int
    products: List[ProductQuantity] = Field(default_factory=list)


class AgencyDeliverySummary(BaseSchema):
    """Per-agency, per-product quantities due on one date."""

    delivery_date: Date
    agencies: List[AgencyDeliveryTotals] = Field(default_factory=list)
