"""
Product order repository.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session, selectinload

from dairy_ops.models.subscription import ProductOrder, Subscription
from dairy_ops.repositories.base import BaseRepository


class ProductOrderRepository(BaseRepository[ProductOrder]):
    """Repository for product orders and their invoice numbers."""

    def __init__(self, session: Session):
        super().__init__(session, ProductOrder)

    def exists_order_no(self, order_no: str) -> bool:
        stmt = select(exists().where(ProductOrder.order_no == order_no))
        return bool(self.session.execute(stmt).scalar())

    def get_with_details(self, order_id: UUID) -> Optional[ProductOrder]:
        """Order with member and subscriptions (product, address) eagerly loaded."""
        stmt = (
            select(ProductOrder)
            .where(ProductOrder.id == order_id)
            .options(
                selectinload(ProductOrder.member),
                selectinload(ProductOrder.subscriptions).selectinload(Subscription.product),
                selectinload(ProductOrder.subscriptions).selectinload(Subscription.delivery_address),
            )
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def latest_invoice_no(self, prefix: str) -> Optional[str]:
        """
        Highest invoice number starting with ``prefix``.

        Sequence parts are zero padded to a fixed width, so the
        lexicographic maximum is also the numeric one.
        """
        stmt = select(func.max(ProductOrder.invoice_no)).where(
            ProductOrder.invoice_no.startswith(prefix)
        )
        return self.session.execute(stmt).scalar_one_or_none()
