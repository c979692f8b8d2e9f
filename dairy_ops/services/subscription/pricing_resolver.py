# dairy_ops/services/subscription/pricing_resolver.py
"""
Unit rate resolution.

address pincode -> area -> depot -> depot product variant -> period tier.
Read-only; an unresolvable chain yields a zero rate and no variant so the
subscription can proceed on the manual-pricing path.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from dairy_ops.models.catalog import DepotProductVariant
from dairy_ops.models.member import DeliveryAddress
from dairy_ops.repositories.catalog_repository import (
    AreaMasterRepository,
    DepotProductVariantRepository,
)

from ..common.money import CENT, ZERO

logger = logging.getLogger(__name__)

# Period length in days -> variant price column.
PERIOD_PRICE_TIERS: dict[int, str] = {
    1: "buy_once_price",
    3: "price_3_day",
    7: "price_7_day",
    15: "price_15_day",
    30: "price_1_month",
}


@dataclass(frozen=True)
class ResolvedPrice:
    unit_rate: Decimal
    depot_product_variant_id: Optional[UUID] = None

    @property
    def is_provisional(self) -> bool:
        return self.depot_product_variant_id is None


def _money(value: Optional[Decimal]) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(value).quantize(CENT)


def rate_for_period(variant: DepotProductVariant, period_in_days: int) -> Decimal:
    """
    Tier price for a period length.

    A tier period uses its own column (unset means 0). Any other period,
    including buy-once (0), falls back to MRP, then the one-off price.
    """
    column = PERIOD_PRICE_TIERS.get(period_in_days)
    if column is not None:
        return _money(getattr(variant, column))

    for fallback in (variant.mrp, variant.buy_once_price):
        if fallback is not None and Decimal(fallback) > 0:
            return _money(fallback)
    return ZERO


class PricingResolver:
    """Resolves the per-unit rate for a product delivered to an address."""

    def __init__(self, session: Session) -> None:
        self._areas = AreaMasterRepository(session)
        self._variants = DepotProductVariantRepository(session)

    def resolve(
        self,
        product_id: UUID,
        delivery_address: Optional[DeliveryAddress],
        period_in_days: int,
    ) -> ResolvedPrice:
        if delivery_address is None or not (delivery_address.pincode or "").strip():
            logger.info(
                "No delivery pincode; pricing left provisional",
                extra={"product_id": str(product_id)},
            )
            return ResolvedPrice(unit_rate=ZERO)

        area = self._areas.find_by_pincode(delivery_address.pincode)
        if area is None or area.depot_id is None:
            logger.info(
                f"No depot serves pincode {delivery_address.pincode}; pricing left provisional",
                extra={"product_id": str(product_id)},
            )
            return ResolvedPrice(unit_rate=ZERO)

        variant = self._variants.find_for_product_and_depot(product_id, area.depot_id)
        if variant is None:
            logger.info(
                "Product has no variant at the serving depot; pricing left provisional",
                extra={"product_id": str(product_id), "depot_id": str(area.depot_id)},
            )
            return ResolvedPrice(unit_rate=ZERO)

        return ResolvedPrice(
            unit_rate=rate_for_period(variant, period_in_days),
            depot_product_variant_id=variant.id,
        )
