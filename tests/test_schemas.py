from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

import pytest

from dairy_ops.models import Member
from dairy_ops.models.enums import DeliverySchedule, DeliveryStatus, PaymentMode, PaymentStatus, UserRole
from dairy_ops.schemas.subscription import (
    OrderCreate,
    OrderPaymentUpdate,
    SubscriptionCreate,
    SubscriptionLine,
    SubscriptionUpdate,
)
from dairy_ops.schemas.wallet import WalletAdjustment
from dairy_ops.services.common.errors import ValidationError
from dairy_ops.services.common.mapping import MappingError, parse_request, to_schema
from dairy_ops.services.common.money import to_money
from dairy_ops.services.common.permissions import PermissionDenied, Principal, require_member_access, require_role
from dairy_ops.services.subscription.lifecycle_service import parse_delivery_status


def _create_payload(**overrides):
    payload = {
        "productId": str(uuid4()),
        "period": 7,
        "deliverySchedule": "alternate-days",
        "qty": 1,
        "startDate": "2025-08-05",
    }
    payload.update(overrides)
    return payload


class TestSubscriptionCreate:
    def test_accepts_camel_case_and_normalizes_schedule(self):
        req = SubscriptionCreate.model_validate(_create_payload())
        assert req.delivery_schedule is DeliverySchedule.ALTERNATE_DAYS
        assert req.delivery_address_id is None

    def test_start_date_drops_time_of_day(self):
        req = SubscriptionCreate.model_validate(_create_payload(startDate=datetime(2025, 8, 5, 22, 15)))
        assert req.start_date == date(2025, 8, 5)

    def test_instructions_are_stripped(self):
        req = SubscriptionCreate.model_validate(_create_payload(deliveryInstructions="  gate 2  "))
        assert req.delivery_instructions == "gate 2"

    def test_parse_request_names_camel_case_field(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_request(_create_payload(deliverySchedule="hourly"), SubscriptionCreate)
        assert exc_info.value.field == "delivery_schedule"
        assert "hourly" in exc_info.value.message

    def test_parse_request_passes_instances_through(self):
        req = SubscriptionCreate.model_validate(_create_payload())
        assert parse_request(req, SubscriptionCreate) is req

    def test_as_line_drops_the_address(self):
        req = SubscriptionCreate.model_validate(_create_payload(deliveryAddressId=str(uuid4()), qty=3))
        line = req.as_line()
        assert type(line) is SubscriptionLine
        assert line.qty == 3
        assert line.delivery_schedule is DeliverySchedule.ALTERNATE_DAYS
        assert not hasattr(line, "delivery_address_id")


class TestOrderCreate:
    def test_camel_case_wallet_amount(self):
        req = OrderCreate.model_validate({"subscriptions": [_create_payload()], "walletAmount": "120.5"})
        assert req.wallet_amount == Decimal("120.5")
        assert req.subscriptions[0].period == 7

    def test_needs_at_least_one_line(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_request({"subscriptions": []}, OrderCreate)
        assert exc_info.value.field == "subscriptions"

    def test_negative_wallet_amount_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_request({"subscriptions": [_create_payload()], "walletAmount": "-1"}, OrderCreate)
        assert exc_info.value.field == "wallet_amount"


class TestOrderPaymentUpdate:
    def test_paid_with_mode(self):
        update = OrderPaymentUpdate.model_validate({"paymentStatus": "PAID", "paymentMode": "upi"})
        assert update.payment_status is PaymentStatus.PAID
        assert update.payment_mode is PaymentMode.UPI

    @pytest.mark.parametrize("status", ["PENDING", "CANCELLED"])
    def test_only_final_outcomes(self, status):
        with pytest.raises(ValidationError) as exc_info:
            parse_request({"paymentStatus": status}, OrderPaymentUpdate)
        assert exc_info.value.field == "payment_status"


class TestSubscriptionUpdate:
    def test_only_given_fields_are_set(self):
        update = SubscriptionUpdate.model_validate({"paymentMode": " cash ", "agencyId": None})
        assert update.payment_mode is PaymentMode.CASH
        assert update.model_fields_set == {"payment_mode", "agency_id"}

    def test_received_amount_precision(self):
        with pytest.raises(ValidationError):
            parse_request({"receivedAmount": "10.123"}, SubscriptionUpdate)


class TestWalletAdjustment:
    def test_amount_quantized(self):
        assert WalletAdjustment(amount=Decimal("10.5")).amount == Decimal("10.50")

    def test_sub_cent_amount_rejected(self):
        with pytest.raises(ValidationError):
            parse_request({"amount": "0.001"}, WalletAdjustment)


class TestMapping:
    def test_none_cannot_be_mapped(self):
        from dairy_ops.schemas.wallet import WalletTransactionRead

        with pytest.raises(MappingError):
            to_schema(None, WalletTransactionRead)

    def test_incomplete_row_raises_mapping_error(self):
        from dairy_ops.schemas.wallet import WalletSummary

        with pytest.raises(MappingError):
            to_schema(Member(name="x"), WalletSummary)


class TestMoneyAndStatus:
    def test_to_money(self):
        assert to_money("2.345", "amount") == Decimal("2.35")
        assert to_money(3, "amount") == Decimal("3.00")
        with pytest.raises(ValidationError):
            to_money(Decimal("NaN"), "amount")

    def test_status_parsing(self):
        assert parse_delivery_status("not-delivered") is DeliveryStatus.NOT_DELIVERED
        assert parse_delivery_status(DeliveryStatus.SKIPPED) is DeliveryStatus.SKIPPED

    def test_transition_rules(self):
        assert DeliveryStatus.PENDING.can_transition_to(DeliveryStatus.CANCELLED)
        assert DeliveryStatus.NOT_DELIVERED.can_transition_to(DeliveryStatus.DELIVERED)
        assert not DeliveryStatus.CANCELLED.can_transition_to(DeliveryStatus.DELIVERED)
        assert not DeliveryStatus.DELIVERED.can_transition_to(DeliveryStatus.PENDING)


class TestPermissions:
    def test_require_role(self):
        agency = Principal(user_id=uuid4(), role=UserRole.AGENCY, agency_id=uuid4())
        require_role(agency, [UserRole.AGENCY, UserRole.ADMIN])
        with pytest.raises(PermissionDenied) as exc_info:
            require_role(agency, [UserRole.ADMIN])
        assert exc_info.value.role is UserRole.AGENCY

    def test_member_access(self):
        member_id = uuid4()
        require_member_access(Principal(user_id=uuid4(), role=UserRole.ADMIN), member_id)
        require_member_access(Principal(user_id=uuid4(), role=UserRole.MEMBER, member_id=member_id), member_id)
        with pytest.raises(PermissionDenied):
            require_member_access(Principal(user_id=uuid4(), role=UserRole.MEMBER), member_id)
