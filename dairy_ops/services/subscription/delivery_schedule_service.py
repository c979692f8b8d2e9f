# dairy_ops/services/subscription/delivery_schedule_service.py
"""
Read-side queries over delivery schedule entries for fulfillment and
reporting.
"""
from __future__ import annotations

from collections import OrderedDict
from datetime import date
from typing import Callable, List, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from dairy_ops.models.enums import DeliveryStatus
from dairy_ops.repositories.delivery_entry_repository import DeliveryEntryRepository
from dairy_ops.schemas.delivery import (
    AgencyDeliverySummary,
    AgencyDeliveryTotals,
    DeliveryEntryRead,
    ProductQuantity,
)

from ..common import mapping
from ..common.unit_of_work import UnitOfWork
from .lifecycle_service import parse_delivery_status

UNASSIGNED_AGENCY_NAME = "Unassigned"

# Deliveries that will not go out and are left out of loading totals.
NOT_DISPATCHED_STATUSES = (
    DeliveryStatus.CANCELLED,
    DeliveryStatus.SKIPPED,
    DeliveryStatus.SKIP_BY_CUSTOMER,
)


class DeliveryScheduleService:
    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def list_entries(
        self,
        delivery_date: date,
        status: Optional[Union[DeliveryStatus, str]] = None,
        agency_id: Optional[UUID] = None,
    ) -> List[DeliveryEntryRead]:
        """Entries due on ``delivery_date``, optionally by status and agent."""
        wanted = parse_delivery_status(status) if status is not None else None
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            rows = uow.get_repo(DeliveryEntryRepository).list_for_date(
                delivery_date, status=wanted, agency_id=agency_id
            )
            return mapping.to_schema_list(rows, DeliveryEntryRead)

    def agency_summary_for_date(self, delivery_date: date) -> AgencyDeliverySummary:
        """
        Quantities to load per agency and product for one date.

        Grouping follows the subscription's agency; subscriptions without
        one are reported under "Unassigned".
        """
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            rows = uow.get_repo(DeliveryEntryRepository).quantities_by_agency_and_product(
                delivery_date, exclude_statuses=NOT_DISPATCHED_STATUSES
            )

        agencies: "OrderedDict[Optional[UUID], AgencyDeliveryTotals]" = OrderedDict()
        for agency_id, agency_name, product_id, product_name, quantity in rows:
            totals = agencies.get(agency_id)
            if totals is None:
                totals = AgencyDeliveryTotals(
                    agency_id=agency_id,
                    agency_name=agency_name or UNASSIGNED_AGENCY_NAME,
                    total_quantity=0,
                )
                agencies[agency_id] = totals
            qty = int(quantity or 0)
            totals.total_quantity += qty
            totals.products.append(
                ProductQuantity(product_id=product_id, product_name=product_name, quantity=qty)
            )

        return AgencyDeliverySummary(delivery_date=delivery_date, agencies=list(agencies.values()))
