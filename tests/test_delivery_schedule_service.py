from datetime import date

import pytest

from dairy_ops.services.common.errors import ValidationError

DAY = date(2025, 8, 6)


@pytest.fixture
def routed(subscription_service, lifecycle_service, admin, seed, make_request):
    """Three subscriptions due on Aug 6: two routed to Sunrise, one unassigned."""
    first = subscription_service.create_subscription(seed.member_id, make_request(qty=2)).subscription
    second = subscription_service.create_subscription(seed.member_id, make_request(qty=3)).subscription
    unassigned = subscription_service.create_subscription(
        seed.other_member_id, make_request(qty=1, delivery_address_id=seed.other_address_id)
    ).subscription
    lifecycle_service.bulk_assign_agency(admin, [first.id, second.id], seed.agency_id)
    return first, second, unassigned


def test_list_entries_for_date(delivery_schedule_service, routed):
    entries = delivery_schedule_service.list_entries(DAY)
    assert len(entries) == 3
    assert all(e.delivery_date == DAY for e in entries)


def test_list_entries_by_agency_and_status(delivery_schedule_service, lifecycle_service, admin, seed, routed):
    first, _, _ = routed
    entry = next(e for e in delivery_schedule_service.list_entries(DAY) if e.subscription_id == first.id)
    lifecycle_service.admin_update_delivery_status(admin, entry.id, "DELIVERED")

    routed_entries = delivery_schedule_service.list_entries(DAY, agency_id=seed.agency_id)
    delivered = delivery_schedule_service.list_entries(DAY, status="delivered")

    assert len(routed_entries) == 2
    assert [e.id for e in delivered] == [entry.id]


def test_unknown_status_filter(delivery_schedule_service):
    with pytest.raises(ValidationError):
        delivery_schedule_service.list_entries(DAY, status="LOST")


def test_agency_summary(delivery_schedule_service, seed, routed):
    summary = delivery_schedule_service.agency_summary_for_date(DAY)

    by_name = {a.agency_name: a for a in summary.agencies}
    assert set(by_name) == {"Sunrise Agency", "Unassigned"}
    assert by_name["Sunrise Agency"].agency_id == seed.agency_id
    assert by_name["Sunrise Agency"].total_quantity == 5
    assert by_name["Sunrise Agency"].products[0].product_name == "Cow Milk"
    assert by_name["Unassigned"].agency_id is None
    assert by_name["Unassigned"].total_quantity == 1


def test_summary_leaves_out_skipped_deliveries(
    delivery_schedule_service, lifecycle_service, member_principal, routed
):
    _, second, _ = routed
    entry = next(e for e in delivery_schedule_service.list_entries(DAY) if e.subscription_id == second.id)
    lifecycle_service.skip_delivery(member_principal, entry.id)

    summary = delivery_schedule_service.agency_summary_for_date(DAY)

    sunrise = next(a for a in summary.agencies if a.agency_name == "Sunrise Agency")
    assert sunrise.total_quantity == 2


def test_empty_day(delivery_schedule_service, seed):
    summary = delivery_schedule_service.agency_summary_for_date(date(2030, 1, 1))
    assert summary.agencies == []
