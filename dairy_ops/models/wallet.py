"""
Wallet ledger model.

Append-only record of member wallet balance changes. Amounts are stored
positive with a CREDIT/DEBIT flag; only the status of a pending top-up
is ever updated after insertion.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dairy_ops.models.base import BaseEntity
from dairy_ops.models.enums import TransactionStatus, TransactionType, WalletPaymentMethod

if TYPE_CHECKING:
    from dairy_ops.models.member import Member


class WalletTransaction(BaseEntity):
    """One wallet ledger entry."""

    __tablename__ = "wallet_transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_wallet_transaction_amount_positive"),
        Index("ix_wallet_transaction_member_created", "member_id", "created_at"),
    )

    member_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("members.id", ondelete="RESTRICT"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    type: Mapped[TransactionType] = mapped_column(
        SQLEnum(TransactionType, name="transaction_type", native_enum=False, length=8),
        nullable=False,
    )
    status: Mapped[TransactionStatus] = mapped_column(
        SQLEnum(TransactionStatus, name="transaction_status", native_enum=False, length=16),
        nullable=False,
        default=TransactionStatus.PENDING,
    )
    payment_method: Mapped[Optional[WalletPaymentMethod]] = mapped_column(
        SQLEnum(WalletPaymentMethod, name="wallet_payment_method", native_enum=False, length=16),
        nullable=True,
    )
    reference_number: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        unique=True,
        comment="Idempotency key for the logical event, e.g. SKIP_DELIVERY_<entry id>",
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    processed_by_admin_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, nullable=True, comment="Null for member self-service actions"
    )

    member: Mapped["Member"] = relationship(back_populates="wallet_transactions")

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.type is TransactionType.CREDIT else -self.amount
