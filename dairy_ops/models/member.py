"""
Member and delivery address models.

The member row carries the prepaid wallet balance, the one piece of
contended shared state in the system. It is only changed through
atomic increment/decrement statements while the row is locked.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dairy_ops.models.base import BaseEntity

if TYPE_CHECKING:
    from dairy_ops.models.subscription import Subscription
    from dairy_ops.models.wallet import WalletTransaction


class Member(BaseEntity):
    """Subscriber account with a prepaid wallet."""

    __tablename__ = "members"
    __table_args__ = (
        CheckConstraint("wallet_balance >= 0", name="ck_member_wallet_balance_non_negative"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    mobile: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    wallet_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0.00"),
        comment="Prepaid wallet balance; never negative",
    )

    addresses: Mapped[List["DeliveryAddress"]] = relationship(
        back_populates="member",
        lazy="select",
    )
    subscriptions: Mapped[List["Subscription"]] = relationship(
        back_populates="member",
        lazy="select",
    )
    wallet_transactions: Mapped[List["WalletTransaction"]] = relationship(
        back_populates="member",
        lazy="select",
    )


class DeliveryAddress(BaseEntity):
    """Where a member's deliveries are dropped; the pincode drives pricing."""

    __tablename__ = "delivery_addresses"

    member_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    recipient_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mobile: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    plot_building: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    street_area: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    landmark: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    pincode: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    label: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    member: Mapped["Member"] = relationship(back_populates="addresses")
