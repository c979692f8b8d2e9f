# dairy_ops/services/subscription/schedule_generator.py
"""
Delivery calendar expansion.

Turns a subscription's recurrence rule into concrete (date, quantity)
pairs. Everything here is pure: no I/O, no clock, same inputs give the
same output, so previews and validation can re-run it freely.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from dairy_ops.models.enums import DeliverySchedule

from ..common.errors import ValidationError

# Keys follow date.weekday(): Monday is 0.
WEEKDAY_KEYS: tuple[str, ...] = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

_WEEKDAY_ALIASES = {
    "monday": "mon",
    "tues": "tue",
    "tuesday": "tue",
    "wednesday": "wed",
    "thur": "thu",
    "thurs": "thu",
    "thursday": "thu",
    "friday": "fri",
    "saturday": "sat",
    "sunday": "sun",
}


@dataclass(frozen=True)
class ScheduledDelivery:
    """One generated delivery obligation."""
    delivery_date: date
    quantity: int


def normalize_weekdays(values: Optional[Iterable[str]]) -> List[str]:
    """
    Map weekday names (``mon``, ``Monday``, ``MON``) to 3-letter keys.

    Duplicates are dropped and the result follows calendar order.

    Raises:
        ValidationError: for an unrecognized name
    """
    if not values:
        return []

    wanted: set[str] = set()
    for raw in values:
        key = str(raw).strip().lower()
        key = _WEEKDAY_ALIASES.get(key, key)
        if key not in WEEKDAY_KEYS:
            raise ValidationError(f"Invalid weekday: {raw!r}", field="weekdays")
        wanted.add(key)
    return [k for k in WEEKDAY_KEYS if k in wanted]


def expiry_date(start_date: date, period_in_days: int) -> date:
    """Last calendar day covered; a buy-once order expires on its start date."""
    if period_in_days <= 0:
        return start_date
    return start_date + timedelta(days=period_in_days - 1)


def total_quantity(deliveries: Sequence[ScheduledDelivery]) -> int:
    return sum(d.quantity for d in deliveries)


def generate_delivery_schedule(
    start_date: date,
    period_in_days: int,
    schedule: DeliverySchedule,
    qty: int,
    alt_qty: Optional[int] = None,
    weekdays: Optional[Iterable[str]] = None,
) -> List[ScheduledDelivery]:
    """
    Expand a recurrence rule into chronological deliveries.

    Day ``i`` is ``start_date + i`` for ``i`` in ``0 .. period_in_days - 1``;
    a period of 0 yields exactly one delivery on ``start_date``.

    - DAILY: every day gets ``qty``.
    - SELECT_DAYS: only days whose weekday is listed, each ``qty``.
    - ALTERNATE_DAYS: even day indices only; when ``alt_qty`` is positive
      the included days alternate ``qty``, ``alt_qty``, ``qty`` ...
    - VARYING: every day; even index ``qty``, odd index ``alt_qty``.
      Without a positive ``alt_qty`` it behaves like DAILY.

    An empty result is returned as-is; callers reject it.

    Raises:
        ValidationError: for a negative period, a non-positive quantity or
            a negative alternate quantity
    """
    if isinstance(start_date, datetime):
        start_date = start_date.date()
    elif not isinstance(start_date, date):
        raise ValidationError("start_date must be a calendar date", field="start_date")
    if isinstance(period_in_days, bool) or not isinstance(period_in_days, int) or period_in_days < 0:
        raise ValidationError("Period must be a whole number of days, 0 or more", field="period")
    if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
        raise ValidationError("Quantity must be a positive whole number", field="qty")
    if alt_qty is not None and (not isinstance(alt_qty, int) or alt_qty < 0):
        raise ValidationError("Alternate quantity cannot be negative", field="alt_qty")

    schedule = DeliverySchedule(schedule)
    if period_in_days == 0:
        return [ScheduledDelivery(delivery_date=start_date, quantity=qty)]

    has_alt = alt_qty is not None and alt_qty > 0

    if schedule is DeliverySchedule.SELECT_DAYS:
        selected = set(normalize_weekdays(weekdays))
    else:
        selected = set()

    deliveries: List[ScheduledDelivery] = []
    included = 0
    for index in range(period_in_days):
        day = start_date + timedelta(days=index)

        if schedule is DeliverySchedule.DAILY:
            quantity = qty
        elif schedule is DeliverySchedule.SELECT_DAYS:
            if WEEKDAY_KEYS[day.weekday()] not in selected:
                continue
            quantity = qty
        elif schedule is DeliverySchedule.ALTERNATE_DAYS:
            if index % 2 != 0:
                continue
            quantity = alt_qty if has_alt and included % 2 == 1 else qty
        else:  # VARYING
            quantity = alt_qty if has_alt and index % 2 == 1 else qty

        deliveries.append(ScheduledDelivery(delivery_date=day, quantity=quantity))  # type: ignore[arg-type]
        included += 1

    return deliveries
