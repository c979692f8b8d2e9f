"""
Read-side repositories for catalog and routing master data.
"""

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from dairy_ops.models.catalog import Agency, AreaMaster, DepotProductVariant, Product
from dairy_ops.repositories.base import BaseRepository


class ProductRepository(BaseRepository[Product]):
    def __init__(self, session: Session):
        super().__init__(session, Product)


class AgencyRepository(BaseRepository[Agency]):
    def __init__(self, session: Session):
        super().__init__(session, Agency)


class AreaMasterRepository(BaseRepository[AreaMaster]):
    """Repository for delivery areas."""

    def __init__(self, session: Session):
        super().__init__(session, AreaMaster)

    def find_by_pincode(self, pincode: str) -> Optional[AreaMaster]:
        """
        First area (oldest first) whose pincode list contains ``pincode``
        as an exact token.

        The LIKE prefilter narrows candidates in SQL; ``AreaMaster.serves``
        rejects substring hits such as 4110 inside 411001.
        """
        wanted = (pincode or "").strip()
        if not wanted:
            return None

        stmt = (
            select(AreaMaster)
            .where(AreaMaster.pincodes.contains(wanted))
            .order_by(AreaMaster.created_at, AreaMaster.id)
        )
        for area in self.session.execute(stmt).scalars():
            if area.serves(wanted):
                return area
        return None


class DepotProductVariantRepository(BaseRepository[DepotProductVariant]):
    """Repository for depot-scoped product variants."""

    def __init__(self, session: Session):
        super().__init__(session, DepotProductVariant)

    def find_for_product_and_depot(
        self,
        product_id: UUID,
        depot_id: UUID,
    ) -> Optional[DepotProductVariant]:
        stmt = (
            select(DepotProductVariant)
            .where(
                DepotProductVariant.product_id == product_id,
                DepotProductVariant.depot_id == depot_id,
            )
            .order_by(DepotProductVariant.created_at, DepotProductVariant.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_for_depot(self, depot_id: UUID) -> Sequence[DepotProductVariant]:
        stmt = (
            select(DepotProductVariant)
            .where(DepotProductVariant.depot_id == depot_id)
            .order_by(DepotProductVariant.name)
        )
        return self.session.execute(stmt).scalars().all()
