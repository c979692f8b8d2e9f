"""
Subscription repository.
"""

from typing import Iterable, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from dairy_ops.models.subscription import Subscription
from dairy_ops.repositories.base import BaseRepository


class SubscriptionRepository(BaseRepository[Subscription]):
    """Repository for subscriptions."""

    def __init__(self, session: Session):
        super().__init__(session, Subscription)

    def get_with_entries(self, subscription_id: UUID) -> Optional[Subscription]:
        stmt = (
            select(Subscription)
            .where(Subscription.id == subscription_id)
            .options(
                selectinload(Subscription.delivery_entries),
                selectinload(Subscription.product),
                selectinload(Subscription.product_order),
            )
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_recent(
        self,
        *,
        member_id: Optional[UUID] = None,
        agency_id: Optional[UUID] = None,
        limit: int = 100,
    ) -> Sequence[Subscription]:
        """Newest first; unfiltered when no owner is given."""
        stmt = select(Subscription).options(selectinload(Subscription.product))
        if member_id is not None:
            stmt = stmt.where(Subscription.member_id == member_id)
        if agency_id is not None:
            stmt = stmt.where(Subscription.agency_id == agency_id)
        stmt = stmt.order_by(Subscription.created_at.desc(), Subscription.id).limit(limit)
        return self.session.execute(stmt).scalars().all()

    def find_existing_ids(self, subscription_ids: Iterable[UUID]) -> set[UUID]:
        ids = list(subscription_ids)
        if not ids:
            return set()
        stmt = select(Subscription.id).where(Subscription.id.in_(ids))
        return set(self.session.execute(stmt).scalars().all())

    def set_agency(self, subscription_ids: Iterable[UUID], agency_id: Optional[UUID]) -> int:
        return self.bulk_update({"id": list(subscription_ids)}, {"agency_id": agency_id})
