"""
Order and subscription models.

A ProductOrder wraps one or more subscriptions for invoicing. A
Subscription is created atomically with its order, its delivery
schedule entries and (when wallet funds are used) a ledger row; it is
never hard-deleted, cancellation is a payment status transition.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dairy_ops.models.base import BaseEntity
from dairy_ops.models.enums import DeliverySchedule, PaymentMode, PaymentStatus

if TYPE_CHECKING:
    from dairy_ops.models.catalog import Agency, DepotProductVariant, Product
    from dairy_ops.models.delivery import DeliveryScheduleEntry
    from dairy_ops.models.member import DeliveryAddress, Member


class ProductOrder(BaseEntity):
    """Invoicing wrapper holding aggregate totals for its subscriptions."""

    __tablename__ = "product_orders"
    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_order_total_amount_non_negative"),
        CheckConstraint("wallet_amount >= 0", name="ck_order_wallet_amount_non_negative"),
        CheckConstraint("payable_amount >= 0", name="ck_order_payable_amount_non_negative"),
    )

    order_no: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    member_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("members.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    total_qty: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    wallet_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    payable_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    received_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus, name="payment_status", native_enum=False, length=16),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    payment_mode: Mapped[Optional[PaymentMode]] = mapped_column(
        SQLEnum(PaymentMode, name="payment_mode", native_enum=False, length=16),
        nullable=True,
    )
    payment_reference_no: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    payment_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    invoice_no: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, unique=True)
    invoice_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    member: Mapped["Member"] = relationship()
    subscriptions: Mapped[List["Subscription"]] = relationship(back_populates="product_order")


class Subscription(BaseEntity):
    """A member's recurring (or one-off) order for one product."""

    __tablename__ = "subscriptions"
    __table_args__ = (
        CheckConstraint("period >= 0", name="ck_subscription_period_non_negative"),
        CheckConstraint("qty > 0", name="ck_subscription_qty_positive"),
        CheckConstraint("total_qty >= 0", name="ck_subscription_total_qty_non_negative"),
        CheckConstraint("amount >= 0", name="ck_subscription_amount_non_negative"),
        Index("ix_subscription_member_created", "member_id", "created_at"),
    )

    member_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("members.id", ondelete="RESTRICT"), nullable=False
    )
    product_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    product_order_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("product_orders.id", ondelete="SET NULL"), nullable=True, index=True
    )
    delivery_address_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("delivery_addresses.id", ondelete="SET NULL"),
        nullable=True,
        comment="Null for pickup subscriptions",
    )
    depot_product_variant_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("depot_product_variants.id", ondelete="SET NULL"),
        nullable=True,
        comment="Resolved by pricing; null when pricing could not be resolved",
    )
    agency_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("agencies.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Recurrence
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    period: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Length in days; 0 means a single buy-once delivery"
    )
    expiry_date: Mapped[date] = mapped_column(Date, nullable=False)
    delivery_schedule: Mapped[DeliverySchedule] = mapped_column(
        SQLEnum(DeliverySchedule, name="delivery_schedule", native_enum=False, length=16),
        nullable=False,
    )
    weekdays: Mapped[Optional[List[str]]] = mapped_column(
        JSON, nullable=True, comment="3-letter weekday keys; SELECT_DAYS only"
    )
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    alt_qty: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Pricing and settlement
    rate: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0.00"), comment="Resolved unit rate"
    )
    total_qty: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    wallet_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    payable_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    received_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    payment_status: Mapped[Optional[PaymentStatus]] = mapped_column(
        SQLEnum(PaymentStatus, name="payment_status", native_enum=False, length=16),
        nullable=True,
        default=PaymentStatus.PENDING,
    )
    payment_mode: Mapped[Optional[PaymentMode]] = mapped_column(
        SQLEnum(PaymentMode, name="payment_mode", native_enum=False, length=16),
        nullable=True,
    )
    payment_reference_no: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    payment_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    delivery_instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    member: Mapped["Member"] = relationship(back_populates="subscriptions")
    product: Mapped["Product"] = relationship()
    product_order: Mapped[Optional["ProductOrder"]] = relationship(back_populates="subscriptions")
    delivery_address: Mapped[Optional["DeliveryAddress"]] = relationship()
    depot_product_variant: Mapped[Optional["DepotProductVariant"]] = relationship()
    agency: Mapped[Optional["Agency"]] = relationship()
    delivery_entries: Mapped[List["DeliveryScheduleEntry"]] = relationship(
        back_populates="subscription",
        order_by="DeliveryScheduleEntry.delivery_date",
    )

    @property
    def is_pricing_provisional(self) -> bool:
        """True when no depot variant was resolved and the amount is not final."""
        return self.depot_product_variant_id is None
