# --- File: dairy_ops/schemas/subscription.py ---
"""
Subscription request and response schemas.

Request schemas normalize client keyword variants before they reach the
scheduling core; response schemas are validated from ORM rows.
"""

from __future__ import annotations

from datetime import date as Date, datetime
from decimal import Decimal
from typing import List, Optional, Union
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from dairy_ops.models.enums import DeliverySchedule, PaymentMode, PaymentStatus
from dairy_ops.schemas.common.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseSchema,
    BaseUpdateSchema,
)
from dairy_ops.schemas.delivery import DeliveryEntryRead
from dairy_ops.schemas.invoice import InvoiceResult

__all__ = [
    "SubscriptionLine",
    "SubscriptionCreate",
    "OrderCreate",
    "OrderPaymentUpdate",
    "SubscriptionUpdate",
    "ProductOrderRead",
    "ProductOrderDetail",
    "SubscriptionRead",
    "SubscriptionDetail",
    "SubscriptionCreated",
    "OrderCreated",
    "ScheduledDeliveryRead",
    "SchedulePreview",
    "CancelSubscriptionResult",
]


def _calendar_date(value: object) -> object:
    """Strip any time-of-day component so scheduling works on calendar dates."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            return value
    return value


class SubscriptionLine(BaseCreateSchema):
    """
    One product line of an order.

    ``weekdays`` is only meaningful for SELECT_DAYS and is normalized to
    3-letter keys by the schedule generator.
    """

    product_id: UUID = Field(..., description="Product to subscribe to")
    period: int = Field(
        ...,
        ge=0,
        description="Subscription length in days; 0 means a single buy-once delivery",
    )
    delivery_schedule: DeliverySchedule = Field(
        ...,
        description="Recurrence rule",
    )
    weekdays: Union[List[str], None] = Field(
        None,
        description="Weekday names for SELECT_DAYS",
    )
    qty: int = Field(..., gt=0, description="Primary per-delivery quantity")
    alt_qty: Union[int, None] = Field(
        None,
        ge=0,
        description="Alternate quantity for ALTERNATE_DAYS and VARYING",
    )
    start_date: Date = Field(..., description="First delivery date")
    delivery_instructions: Union[str, None] = Field(
        None,
        max_length=2000,
        description="Free-text instructions for the delivery agent",
    )

    @field_validator("delivery_schedule", mode="before")
    @classmethod
    def parse_delivery_schedule(cls, v: object) -> DeliverySchedule:
        return DeliverySchedule.parse(v)  # type: ignore[arg-type]

    @field_validator("start_date", mode="before")
    @classmethod
    def strip_time_of_day(cls, v: object) -> object:
        return _calendar_date(v)

    @model_validator(mode="after")
    def validate_weekdays(self) -> "SubscriptionLine":
        """SELECT_DAYS needs at least one weekday; other rules ignore them."""
        if self.delivery_schedule is DeliverySchedule.SELECT_DAYS and not self.weekdays:
            raise ValueError("weekdays are required for SELECT_DAYS delivery")
        return self


class SubscriptionCreate(SubscriptionLine):
    """Member request to subscribe to a single product."""

    delivery_address_id: Union[UUID, None] = Field(
        None,
        description="Delivery address; None for pickup",
    )

    def as_line(self) -> SubscriptionLine:
        return SubscriptionLine.model_validate(self.model_dump(exclude={"delivery_address_id"}))


class OrderCreate(BaseCreateSchema):
    """
    Member request for one order holding several subscriptions.

    All lines share the delivery address. ``wallet_amount`` caps the
    wallet funds applied; None applies as much as the balance allows.
    """

    subscriptions: List[SubscriptionLine] = Field(..., min_length=1)
    delivery_address_id: Union[UUID, None] = Field(
        None,
        description="Delivery address for every line; None for pickup",
    )
    wallet_amount: Union[Decimal, None] = Field(
        None,
        ge=0,
        decimal_places=2,
        description="Wallet funds the member wants to use",
    )
    delivery_instructions: Union[str, None] = Field(
        None,
        max_length=2000,
        description="Applied to lines without their own instructions",
    )


def _upper_payment_mode(v: object) -> object:
    return v.strip().upper() if isinstance(v, str) else v


class SubscriptionUpdate(BaseUpdateSchema):
    """Admin/member edits that do not touch the delivery calendar."""

    delivery_instructions: Union[str, None] = Field(None, max_length=2000)
    payment_mode: Union[PaymentMode, None] = None
    payment_reference_no: Union[str, None] = Field(None, max_length=100)
    payment_date: Union[datetime, None] = None
    payment_status: Union[PaymentStatus, None] = None
    received_amount: Union[Decimal, None] = Field(None, ge=0, decimal_places=2)
    agency_id: Union[UUID, None] = Field(
        None,
        description="Agency routing; explicit None unassigns",
    )

    @field_validator("payment_mode", mode="before")
    @classmethod
    def upper_payment_mode(cls, v: object) -> object:
        return _upper_payment_mode(v)


class OrderPaymentUpdate(BaseUpdateSchema):
    """Admin record of an offline payment against a whole order."""

    payment_status: PaymentStatus
    payment_mode: Union[PaymentMode, None] = None
    payment_reference_no: Union[str, None] = Field(None, max_length=100)
    payment_date: Union[datetime, None] = None
    received_amount: Union[Decimal, None] = Field(None, ge=0, decimal_places=2)

    @field_validator("payment_mode", mode="before")
    @classmethod
    def upper_payment_mode(cls, v: object) -> object:
        return _upper_payment_mode(v)

    @field_validator("payment_status")
    @classmethod
    def paid_or_failed(cls, v: PaymentStatus) -> PaymentStatus:
        if v not in (PaymentStatus.PAID, PaymentStatus.FAILED):
            raise ValueError("payment_status must be PAID or FAILED")
        return v


class ProductOrderRead(BaseResponseSchema):
    order_no: str
    member_id: UUID
    total_qty: int
    total_amount: Decimal
    wallet_amount: Decimal
    payable_amount: Decimal
    received_amount: Decimal
    payment_status: PaymentStatus
    payment_mode: Optional[PaymentMode] = None
    payment_reference_no: Optional[str] = None
    payment_date: Optional[datetime] = None
    invoice_no: Optional[str] = None
    invoice_path: Optional[str] = None


class SubscriptionRead(BaseResponseSchema):
    member_id: UUID
    product_id: UUID
    product_order_id: Optional[UUID] = None
    delivery_address_id: Optional[UUID] = None
    depot_product_variant_id: Optional[UUID] = None
    agency_id: Optional[UUID] = None

    start_date: Date
    period: int
    expiry_date: Date
    delivery_schedule: DeliverySchedule
    weekdays: Optional[List[str]] = None
    qty: int
    alt_qty: Optional[int] = None

    rate: Decimal
    total_qty: int
    amount: Decimal
    wallet_amount: Decimal
    payable_amount: Decimal
    received_amount: Decimal
    payment_status: Optional[PaymentStatus] = None
    payment_mode: Optional[PaymentMode] = None
    payment_reference_no: Optional[str] = None
    payment_date: Optional[datetime] = None
    delivery_instructions: Optional[str] = None
    is_pricing_provisional: bool = Field(
        False,
        description="True when no depot variant was resolved and the amount is not final",
    )


class SubscriptionDetail(SubscriptionRead):
    """Subscription with its delivery calendar, ordered by date."""

    delivery_entries: List[DeliveryEntryRead] = Field(default_factory=list)


class SubscriptionCreated(BaseSchema):
    """Result of a committed subscription creation."""

    subscription: SubscriptionRead
    order: ProductOrderRead
    entry_count: int
    wallet_transaction_id: Optional[UUID] = None
    invoice: Optional[InvoiceResult] = Field(
        None,
        description="None when invoice generation failed; the subscription stands",
    )


class OrderCreated(BaseSchema):
    """Result of a committed order with all of its subscriptions."""

    order: ProductOrderRead
    subscriptions: List[SubscriptionRead]
    entry_count: int
    wallet_transaction_id: Optional[UUID] = None
    invoice: Optional[InvoiceResult] = Field(
        None,
        description="None when invoice generation failed; the order stands",
    )


class ProductOrderDetail(ProductOrderRead):
    """Order with its subscriptions."""

    subscriptions: List[SubscriptionRead] = Field(default_factory=list)


class ScheduledDeliveryRead(BaseSchema):
    delivery_date: Date
    quantity: int


class SchedulePreview(BaseSchema):
    """Side-effect-free dry run of scheduling, pricing and settlement."""

    start_date: Date
    expiry_date: Date
    delivery_schedule: DeliverySchedule
    deliveries: List[ScheduledDeliveryRead]
    total_qty: int
    unit_rate: Decimal
    amount: Decimal
    depot_product_variant_id: Optional[UUID] = None
    is_pricing_provisional: bool
    wallet_balance: Optional[Decimal] = None
    wallet_amount: Optional[Decimal] = None
    payable_amount: Optional[Decimal] = None
    payment_status: Optional[PaymentStatus] = None


class CancelSubscriptionResult(BaseSchema):
    subscription: SubscriptionRead
    cancelled_entries: int
