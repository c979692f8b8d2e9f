"""
Wallet ledger repository.
"""

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from dairy_ops.models.enums import TransactionStatus
from dairy_ops.models.wallet import WalletTransaction
from dairy_ops.repositories.base import BaseRepository


class WalletTransactionRepository(BaseRepository[WalletTransaction]):
    """Repository for wallet ledger rows."""

    def __init__(self, session: Session):
        super().__init__(session, WalletTransaction)

    def get_by_reference(self, reference_number: str) -> Optional[WalletTransaction]:
        stmt = select(WalletTransaction).where(
            WalletTransaction.reference_number == reference_number
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_recent_for_member(self, member_id: UUID, limit: int) -> Sequence[WalletTransaction]:
        stmt = (
            select(WalletTransaction)
            .where(WalletTransaction.member_id == member_id)
            .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id)
            .limit(limit)
        )
        return self.session.execute(stmt).scalars().all()

    def mark_paid_if_pending(self, transaction_id: UUID, processed_by_admin_id: UUID) -> bool:
        """PENDING -> PAID exactly once; False if it was not PENDING."""
        stmt = (
            update(WalletTransaction)
            .where(
                WalletTransaction.id == transaction_id,
                WalletTransaction.status == TransactionStatus.PENDING,
            )
            .values(status=TransactionStatus.PAID, processed_by_admin_id=processed_by_admin_id)
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(stmt)
        self.session.flush()
        return (result.rowcount or 0) == 1
