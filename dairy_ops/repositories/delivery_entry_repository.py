"""
Delivery schedule entry repository.

Status changes go through conditional UPDATEs that name the status the
caller observed, so two concurrent writers cannot both act on the same
PENDING entry.
"""

from datetime import date
from typing import Any, Dict, Iterable, Optional, Sequence
from uuid import UUID

from sqlalchemy import Row, func, select, update
from sqlalchemy.orm import Session, selectinload

from dairy_ops.models.catalog import Agency, Product
from dairy_ops.models.delivery import DeliveryScheduleEntry
from dairy_ops.models.enums import REASSIGNABLE_DELIVERY_STATUSES, DeliveryStatus
from dairy_ops.models.subscription import Subscription
from dairy_ops.repositories.base import BaseRepository


class DeliveryEntryRepository(BaseRepository[DeliveryScheduleEntry]):
    """Repository for delivery schedule entries."""

    def __init__(self, session: Session):
        super().__init__(session, DeliveryScheduleEntry)

    def get_with_subscription(self, entry_id: UUID) -> Optional[DeliveryScheduleEntry]:
        stmt = (
            select(DeliveryScheduleEntry)
            .where(DeliveryScheduleEntry.id == entry_id)
            .options(selectinload(DeliveryScheduleEntry.subscription))
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def transition_status(
        self,
        entry_id: UUID,
        expected: DeliveryStatus,
        values: Dict[str, Any],
    ) -> bool:
        """
        Apply ``values`` only if the entry is still in ``expected`` status.

        Returns True when exactly one row changed.
        """
        stmt = (
            update(DeliveryScheduleEntry)
            .where(
                DeliveryScheduleEntry.id == entry_id,
                DeliveryScheduleEntry.status == expected,
            )
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(stmt)
        self.session.flush()
        return (result.rowcount or 0) == 1

    def cancel_future_pending(self, subscription_id: UUID, from_date: date) -> int:
        """Cancel PENDING entries dated on or after ``from_date``."""
        stmt = (
            update(DeliveryScheduleEntry)
            .where(
                DeliveryScheduleEntry.subscription_id == subscription_id,
                DeliveryScheduleEntry.status == DeliveryStatus.PENDING,
                DeliveryScheduleEntry.delivery_date >= from_date,
            )
            .values(status=DeliveryStatus.CANCELLED)
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(stmt)
        self.session.flush()
        return result.rowcount or 0

    def reassign_agent(
        self,
        subscription_ids: Iterable[UUID],
        agent_id: Optional[UUID],
    ) -> int:
        """Re-route entries that can still be fulfilled; history is left alone."""
        return self.bulk_update(
            {
                "subscription_id": list(subscription_ids),
                "status": REASSIGNABLE_DELIVERY_STATUSES,
            },
            {"agent_id": agent_id},
        )

    def list_for_date(
        self,
        delivery_date: date,
        *,
        status: Optional[DeliveryStatus] = None,
        agency_id: Optional[UUID] = None,
    ) -> Sequence[DeliveryScheduleEntry]:
        stmt = (
            select(DeliveryScheduleEntry)
            .where(DeliveryScheduleEntry.delivery_date == delivery_date)
            .options(
                selectinload(DeliveryScheduleEntry.product),
                selectinload(DeliveryScheduleEntry.member),
                selectinload(DeliveryScheduleEntry.delivery_address),
            )
        )
        if status is not None:
            stmt = stmt.where(DeliveryScheduleEntry.status == status)
        if agency_id is not None:
            stmt = stmt.where(DeliveryScheduleEntry.agent_id == agency_id)
        stmt = stmt.order_by(DeliveryScheduleEntry.member_id, DeliveryScheduleEntry.id)
        return self.session.execute(stmt).scalars().all()

    def quantities_by_agency_and_product(
        self,
        delivery_date: date,
        *,
        exclude_statuses: Iterable[DeliveryStatus] = (),
    ) -> Sequence[Row]:
        """
        Summed quantities for one date grouped by the subscription's agency
        and the product.

        Rows are ``(agency_id, agency_name, product_id, product_name, quantity)``;
        agency columns are None for unassigned subscriptions.
        """
        stmt = (
            select(
                Subscription.agency_id,
                Agency.name,
                Product.id,
                Product.name,
                func.sum(DeliveryScheduleEntry.quantity),
            )
            .join(Subscription, DeliveryScheduleEntry.subscription_id == Subscription.id)
            .join(Product, DeliveryScheduleEntry.product_id == Product.id)
            .outerjoin(Agency, Subscription.agency_id == Agency.id)
            .where(DeliveryScheduleEntry.delivery_date == delivery_date)
            .group_by(Subscription.agency_id, Agency.name, Product.id, Product.name)
            .order_by(Agency.name, Product.name)
        )
        excluded = list(exclude_statuses)
        if excluded:
            stmt = stmt.where(DeliveryScheduleEntry.status.not_in(excluded))
        return self.session.execute(stmt).all()
