"""
Catalog and routing master data read by the subscription core.

Products are priced per fulfillment depot; an area maps a set of
pincodes onto the depot that serves them.
"""

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dairy_ops.models.base import BaseEntity


class Product(BaseEntity):
    """Sellable product (e.g. cow milk)."""

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    variants: Mapped[List["DepotProductVariant"]] = relationship(back_populates="product")


class Depot(BaseEntity):
    """Fulfillment depot."""

    __tablename__ = "depots"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    areas: Mapped[List["AreaMaster"]] = relationship(back_populates="depot")
    variants: Mapped[List["DepotProductVariant"]] = relationship(back_populates="depot")


class AreaMaster(BaseEntity):
    """Delivery area; ``pincodes`` is a comma separated list."""

    __tablename__ = "area_masters"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    pincodes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    depot_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("depots.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    depot: Mapped[Optional["Depot"]] = relationship(back_populates="areas")

    def serves(self, pincode: str) -> bool:
        """Exact token match against the comma separated pincode list."""
        wanted = pincode.strip()
        return any(p.strip() == wanted for p in (self.pincodes or "").split(","))


class DepotProductVariant(BaseEntity):
    """Depot-scoped SKU with period-tiered per-unit prices."""

    __tablename__ = "depot_product_variants"
    __table_args__ = (
        Index("ix_depot_variant_product_depot", "product_id", "depot_id"),
    )

    depot_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("depots.id", ondelete="CASCADE"),
        nullable=False,
    )
    product_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    mrp: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    buy_once_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    price_3_day: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    price_7_day: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    price_15_day: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    price_1_month: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)

    depot: Mapped["Depot"] = relationship(back_populates="variants")
    product: Mapped["Product"] = relationship(back_populates="variants")


class Agency(BaseEntity):
    """Delivery agency that routes and fulfills entries."""

    __tablename__ = "agencies"
    __table_args__ = (
        UniqueConstraint("name", name="uq_agency_name"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    mobile: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
