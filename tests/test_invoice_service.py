import json
import os
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from dairy_ops.models import Member, ProductOrder
from dairy_ops.models.enums import PaymentStatus
from dairy_ops.services.common.errors import NotFoundError, TransactionError
from dairy_ops.services.invoice.invoice_number_generator import (
    InvoiceNumberGenerator,
    financial_year,
    is_valid_invoice_number,
    sequence_of,
)
from dairy_ops.services.invoice.invoice_service import InvoiceService
from dairy_ops.services.subscription.subscription_service import SubscriptionService

from .helpers import failing_commit_factory, get_row, set_wallet_balance


@pytest.fixture
def uninvoiced_service(session_factory, settings, clock):
    return SubscriptionService(session_factory, generate_invoices=False, settings=settings, clock=clock)


class TestInvoiceNumbers:
    @pytest.mark.parametrize(
        "on, expected",
        [
            (date(2025, 3, 31), "2425"),
            (date(2025, 4, 1), "2526"),
            (date(2025, 12, 31), "2526"),
            (date(2099, 6, 1), "9900"),
        ],
    )
    def test_financial_year(self, on, expected):
        assert financial_year(on) == expected

    def test_format_helpers(self):
        assert is_valid_invoice_number("2526-00042")
        assert not is_valid_invoice_number("2526-42")
        assert not is_valid_invoice_number(None)
        assert sequence_of("2526-00042") == 42
        assert sequence_of("garbage") is None

    def test_sequence_continues_within_year_and_restarts(self, session_factory, seed):
        session = session_factory()
        try:
            session.add_all(
                [
                    ProductOrder(order_no="ORD-A", member_id=seed.member_id, invoice_no="2526-00041"),
                    ProductOrder(order_no="ORD-B", member_id=seed.member_id, invoice_no="2526-00007"),
                    ProductOrder(order_no="ORD-C", member_id=seed.member_id, invoice_no="2425-00999"),
                ]
            )
            session.commit()

            generator = InvoiceNumberGenerator(session)
            assert generator.next_number(date(2025, 8, 4)) == "2526-00042"
            assert generator.next_number(date(2025, 2, 1)) == "2425-01000"
            assert generator.next_number(date(2026, 4, 1)) == "2627-00001"
        finally:
            session.close()


class TestGenerateForOrder:
    def test_document_and_write_back(self, uninvoiced_service, invoice_service, session_factory, seed, make_request):
        set_wallet_balance(session_factory, seed.member_id, "100.00")
        created = uninvoiced_service.create_subscription(seed.member_id, make_request())

        result = invoice_service.generate_for_order(created.order.id)

        assert result.invoice_no == "2526-00001"
        order = get_row(session_factory, ProductOrder, created.order.id)
        assert order.invoice_no == result.invoice_no
        assert order.invoice_path == result.invoice_path

        with open(result.invoice_path, encoding="utf-8") as fh:
            payload = json.load(fh)
        assert payload["order_no"] == created.order.order_no
        assert payload["currency"] == "INR"
        assert payload["bill_to"]["name"] == "Asha Patil"
        assert "Pune, MH, 411002" in payload["bill_to"]["address_lines"]
        assert len(payload["items"]) == 1
        assert payload["items"][0]["product_name"] == "Cow Milk"
        assert Decimal(payload["total_amount"]) == Decimal("700.00")
        assert Decimal(payload["amount_due"]) == Decimal("600.00")
        assert payload["payment_status"] == PaymentStatus.PENDING.value

    def test_regeneration_is_idempotent(self, uninvoiced_service, invoice_service, seed, make_request):
        created = uninvoiced_service.create_subscription(seed.member_id, make_request())

        first = invoice_service.generate_for_order(created.order.id)
        second = invoice_service.generate_for_order(created.order.id)

        assert first == second

    def test_numbers_increase_per_order(self, uninvoiced_service, invoice_service, seed, make_request):
        first = uninvoiced_service.create_subscription(seed.member_id, make_request())
        second = uninvoiced_service.create_subscription(seed.member_id, make_request())

        assert invoice_service.generate_for_order(first.order.id).invoice_no == "2526-00001"
        assert invoice_service.generate_for_order(second.order.id).invoice_no == "2526-00002"

    def test_pickup_order_bills_the_member(self, uninvoiced_service, invoice_service, session_factory, seed, make_request):
        created = uninvoiced_service.create_subscription(seed.member_id, make_request(delivery_address_id=None))
        order = get_row(session_factory, ProductOrder, created.order.id)

        session = session_factory()
        try:
            from dairy_ops.repositories.order_repository import ProductOrderRepository

            loaded = ProductOrderRepository(session).get_with_details(order.id)
            document = invoice_service.build_document(loaded, "2526-00099")
        finally:
            session.close()

        member = get_row(session_factory, Member, seed.member_id)
        assert document.bill_to.name == member.name
        assert document.bill_to.address_lines == ["-"]
        assert document.amount_due == Decimal("0.00")

    def test_unknown_order(self, invoice_service):
        with pytest.raises(NotFoundError):
            invoice_service.generate_for_order(uuid4())

    def test_recorded_payment_clears_amount_due(
        self, uninvoiced_service, invoice_service, admin, session_factory, seed, make_request
    ):
        set_wallet_balance(session_factory, seed.member_id, "0")
        created = uninvoiced_service.create_subscription(seed.member_id, make_request())
        uninvoiced_service.record_payment(
            admin, created.order.id, {"paymentStatus": "PAID", "receivedAmount": "700.00"}
        )

        result = invoice_service.generate_for_order(created.order.id)

        with open(result.invoice_path, encoding="utf-8") as fh:
            payload = json.load(fh)
        assert Decimal(payload["amount_due"]) == Decimal("0.00")
        assert payload["payment_status"] == PaymentStatus.PAID.value

    def test_failed_write_back_discards_document(
        self, uninvoiced_service, session_factory, settings, clock, seed, make_request
    ):
        created = uninvoiced_service.create_subscription(seed.member_id, make_request())
        service = InvoiceService(failing_commit_factory(session_factory), settings=settings, clock=clock)

        with pytest.raises(TransactionError):
            service.generate_for_order(created.order.id)

        assert os.listdir(settings.INVOICE_DIR) == []
        assert get_row(session_factory, ProductOrder, created.order.id).invoice_no is None
