"""
Member and delivery address repositories.

Wallet balance changes are issued as single conditional UPDATE
statements so concurrent writers can never drive the balance below zero.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from dairy_ops.models.member import DeliveryAddress, Member
from dairy_ops.repositories.base import BaseRepository


class MemberRepository(BaseRepository[Member]):
    """Repository for members and their wallet balance."""

    def __init__(self, session: Session):
        super().__init__(session, Member)

    def increment_balance(self, member_id: UUID, amount: Decimal) -> bool:
        """Atomically add ``amount`` to the wallet. Returns False if no such member."""
        stmt = (
            update(Member)
            .where(Member.id == member_id)
            .values(wallet_balance=Member.wallet_balance + amount)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        self._refresh_loaded(member_id)
        return (result.rowcount or 0) == 1

    def decrement_balance(self, member_id: UUID, amount: Decimal) -> bool:
        """
        Atomically subtract ``amount`` from the wallet.

        The update only applies while the balance covers the amount, so a
        False return means the balance was insufficient (or the member is
        missing) and nothing changed.
        """
        stmt = (
            update(Member)
            .where(Member.id == member_id, Member.wallet_balance >= amount)
            .values(wallet_balance=Member.wallet_balance - amount)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        self._refresh_loaded(member_id)
        return (result.rowcount or 0) == 1

    def _refresh_loaded(self, member_id: UUID) -> None:
        # Keep an already-loaded instance in step with the row.
        key = self.session.identity_key(Member, member_id)
        obj = self.session.identity_map.get(key)
        if obj is not None:
            self.session.refresh(obj, attribute_names=["wallet_balance"])


class DeliveryAddressRepository(BaseRepository[DeliveryAddress]):
    """Repository for member delivery addresses."""

    def __init__(self, session: Session):
        super().__init__(session, DeliveryAddress)

    def get_for_member(self, address_id: UUID, member_id: UUID) -> Optional[DeliveryAddress]:
        stmt = select(DeliveryAddress).where(
            DeliveryAddress.id == address_id,
            DeliveryAddress.member_id == member_id,
        )
        return self.session.execute(stmt).scalar_one_or_none()
