"""
Delivery schedule entry model.

One row per calendar day produced by the schedule generator. Entries are
created in bulk with the subscription and then mutated individually by
fulfillment, skip and cancel operations; history is never deleted.
"""

from datetime import date
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Date,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dairy_ops.models.base import BaseEntity
from dairy_ops.models.enums import DeliveryStatus

if TYPE_CHECKING:
    from dairy_ops.models.catalog import Agency, Product
    from dairy_ops.models.member import DeliveryAddress, Member
    from dairy_ops.models.subscription import Subscription
    from dairy_ops.models.wallet import WalletTransaction


class DeliveryScheduleEntry(BaseEntity):
    """A dated, quantified delivery obligation derived from a subscription."""

    __tablename__ = "delivery_schedule_entries"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_delivery_entry_quantity_non_negative"),
        Index("ix_delivery_entry_date_status", "delivery_date", "status"),
        Index("ix_delivery_entry_subscription_status", "subscription_id", "status"),
    )

    subscription_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("subscriptions.id", ondelete="CASCADE"), nullable=False
    )
    member_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    delivery_address_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("delivery_addresses.id", ondelete="SET NULL"), nullable=True
    )
    agent_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("agencies.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Agency the delivery is routed to",
    )
    wallet_transaction_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("wallet_transactions.id", ondelete="SET NULL"),
        nullable=True,
        comment="Refund issued for this entry, if any",
    )

    delivery_date: Mapped[date] = mapped_column(Date, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[DeliveryStatus] = mapped_column(
        SQLEnum(DeliveryStatus, name="delivery_status", native_enum=False, length=32),
        nullable=False,
        default=DeliveryStatus.PENDING,
    )
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    subscription: Mapped["Subscription"] = relationship(back_populates="delivery_entries")
    member: Mapped["Member"] = relationship()
    product: Mapped["Product"] = relationship()
    delivery_address: Mapped[Optional["DeliveryAddress"]] = relationship()
    agent: Mapped[Optional["Agency"]] = relationship()
    wallet_transaction: Mapped[Optional["WalletTransaction"]] = relationship()
