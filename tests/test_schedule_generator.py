from datetime import date, datetime

import pytest

from dairy_ops.models.enums import DeliverySchedule
from dairy_ops.services.common.errors import ValidationError
from dairy_ops.services.subscription.schedule_generator import (
    ScheduledDelivery,
    expiry_date,
    generate_delivery_schedule,
    normalize_weekdays,
    total_quantity,
)

MONDAY = date(2025, 8, 4)


def _pairs(deliveries):
    return [(d.delivery_date.isoformat(), d.quantity) for d in deliveries]


class TestDaily:
    def test_one_delivery_per_day(self):
        result = generate_delivery_schedule(MONDAY, 3, DeliverySchedule.DAILY, 2)
        assert _pairs(result) == [("2025-08-04", 2), ("2025-08-05", 2), ("2025-08-06", 2)]

    def test_buy_once_period_yields_single_delivery(self):
        result = generate_delivery_schedule(MONDAY, 0, DeliverySchedule.DAILY, 3)
        assert result == [ScheduledDelivery(delivery_date=MONDAY, quantity=3)]

    def test_buy_once_ignores_weekday_filter(self):
        result = generate_delivery_schedule(MONDAY, 0, DeliverySchedule.SELECT_DAYS, 1, weekdays=["sun"])
        assert _pairs(result) == [("2025-08-04", 1)]

    def test_datetime_start_uses_calendar_date(self):
        result = generate_delivery_schedule(datetime(2025, 8, 4, 23, 30), 1, DeliverySchedule.DAILY, 1)
        assert result[0].delivery_date == MONDAY

    def test_month_boundary(self):
        result = generate_delivery_schedule(date(2025, 1, 30), 4, "DAILY", 1)
        assert [d.delivery_date for d in result][-1] == date(2025, 2, 2)


class TestSelectDays:
    def test_only_listed_weekdays(self):
        result = generate_delivery_schedule(
            MONDAY, 14, DeliverySchedule.SELECT_DAYS, 1, weekdays=["wed", "Monday"]
        )
        assert [d.delivery_date.weekday() for d in result] == [0, 2, 0, 2]
        assert total_quantity(result) == 4

    def test_no_matching_day_gives_empty_schedule(self):
        result = generate_delivery_schedule(MONDAY, 3, DeliverySchedule.SELECT_DAYS, 1, weekdays=["sun"])
        assert result == []

    def test_unknown_weekday_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            generate_delivery_schedule(MONDAY, 7, DeliverySchedule.SELECT_DAYS, 1, weekdays=["funday"])
        assert exc_info.value.field == "weekdays"


class TestAlternateDays:
    def test_every_other_day(self):
        result = generate_delivery_schedule(MONDAY, 5, DeliverySchedule.ALTERNATE_DAYS, 2)
        assert _pairs(result) == [("2025-08-04", 2), ("2025-08-06", 2), ("2025-08-08", 2)]

    def test_included_days_alternate_quantities(self):
        result = generate_delivery_schedule(MONDAY, 6, DeliverySchedule.ALTERNATE_DAYS, 2, alt_qty=1)
        assert [d.quantity for d in result] == [2, 1, 2]

    def test_zero_alt_qty_keeps_primary_quantity(self):
        result = generate_delivery_schedule(MONDAY, 6, DeliverySchedule.ALTERNATE_DAYS, 2, alt_qty=0)
        assert [d.quantity for d in result] == [2, 2, 2]


class TestVarying:
    def test_quantity_alternates_by_day(self):
        result = generate_delivery_schedule(MONDAY, 4, DeliverySchedule.VARYING, 2, alt_qty=3)
        assert [d.quantity for d in result] == [2, 3, 2, 3]
        assert len(result) == 4

    def test_without_alt_qty_behaves_like_daily(self):
        varying = generate_delivery_schedule(MONDAY, 4, DeliverySchedule.VARYING, 2)
        daily = generate_delivery_schedule(MONDAY, 4, DeliverySchedule.DAILY, 2)
        assert varying == daily


class TestValidation:
    @pytest.mark.parametrize("period", [-1, True, 2.5])
    def test_bad_period(self, period):
        with pytest.raises(ValidationError) as exc_info:
            generate_delivery_schedule(MONDAY, period, DeliverySchedule.DAILY, 1)
        assert exc_info.value.field == "period"

    @pytest.mark.parametrize("qty", [0, -2])
    def test_non_positive_qty(self, qty):
        with pytest.raises(ValidationError) as exc_info:
            generate_delivery_schedule(MONDAY, 3, DeliverySchedule.DAILY, qty)
        assert exc_info.value.field == "qty"

    def test_negative_alt_qty(self):
        with pytest.raises(ValidationError) as exc_info:
            generate_delivery_schedule(MONDAY, 3, DeliverySchedule.VARYING, 1, alt_qty=-1)
        assert exc_info.value.field == "alt_qty"


class TestHelpers:
    def test_expiry_date(self):
        assert expiry_date(MONDAY, 0) == MONDAY
        assert expiry_date(MONDAY, 1) == MONDAY
        assert expiry_date(MONDAY, 7) == date(2025, 8, 10)

    def test_normalize_weekdays_orders_and_dedupes(self):
        assert normalize_weekdays(["SUN", "mon", "Sunday", "thurs"]) == ["mon", "thu", "sun"]
        assert normalize_weekdays(None) == []

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("daily", DeliverySchedule.DAILY),
            ("SELECT-DAYS", DeliverySchedule.SELECT_DAYS),
            ("Select Days", DeliverySchedule.SELECT_DAYS),
            ("WEEKDAYS", DeliverySchedule.SELECT_DAYS),
            ("alternate-days", DeliverySchedule.ALTERNATE_DAYS),
            ("varying", DeliverySchedule.VARYING),
        ],
    )
    def test_schedule_keyword_variants(self, raw, expected):
        assert DeliverySchedule.parse(raw) is expected

    def test_unknown_schedule_keyword(self):
        with pytest.raises(ValueError):
            DeliverySchedule.parse("monthly")
