"""
Shared fixtures: an in-memory sqlite database, seeded master data and a
pinned calendar date.
"""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from dairy_ops.config.database import Database, init_db
from dairy_ops.config.settings import Settings
from dairy_ops.models import (
    Agency,
    AreaMaster,
    DeliveryAddress,
    Depot,
    DepotProductVariant,
    Member,
    Product,
    UserRole,
)
from dairy_ops.services.common.permissions import Principal
from dairy_ops.services.invoice.invoice_service import InvoiceService
from dairy_ops.services.subscription.delivery_schedule_service import DeliveryScheduleService
from dairy_ops.services.subscription.lifecycle_service import LifecycleService
from dairy_ops.services.subscription.subscription_service import SubscriptionService
from dairy_ops.services.wallet.wallet_service import WalletService

# Monday
TODAY = date(2025, 8, 4)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        ENVIRONMENT="test",
        INVOICE_DIR=str(tmp_path / "invoices"),
        LOG_DIR=str(tmp_path / "logs"),
    )


@pytest.fixture
def database(settings):
    db = Database("sqlite://", settings=settings)
    init_db(db)
    yield db
    db.dispose()


@pytest.fixture
def session_factory(database):
    return database.session_factory


@pytest.fixture
def clock():
    return lambda: TODAY


@pytest.fixture
def seed(session_factory):
    """Catalog, two members with addresses and two agencies."""
    session = session_factory()
    try:
        product = Product(name="Cow Milk", unit="litre")
        other_product = Product(name="Buffalo Milk", unit="litre")
        depot = Depot(name="Kothrud Depot", city="Pune")
        session.add_all([product, other_product, depot])
        session.flush()

        area = AreaMaster(name="Kothrud", pincodes="411001, 411002", depot_id=depot.id)
        variant = DepotProductVariant(
            depot_id=depot.id,
            product_id=product.id,
            name="Cow Milk 1L",
            mrp=Decimal("60.00"),
            buy_once_price=Decimal("55.00"),
            price_3_day=Decimal("52.00"),
            price_7_day=Decimal("50.00"),
            price_15_day=Decimal("48.00"),
            price_1_month=Decimal("45.00"),
        )
        member = Member(name="Asha Patil", email="asha@example.com", mobile="9800000001",
                        wallet_balance=Decimal("1000.00"))
        other_member = Member(name="Ravi Kulkarni", wallet_balance=Decimal("0.00"))
        agency = Agency(name="Sunrise Agency", mobile="9800000100")
        other_agency = Agency(name="Moonlight Agency")
        session.add_all([area, variant, member, other_member, agency, other_agency])
        session.flush()

        address = DeliveryAddress(
            member_id=member.id,
            recipient_name="Asha Patil",
            plot_building="Flat 4, Green Park",
            street_area="Paud Road",
            city="Pune",
            state="MH",
            pincode="411002",
        )
        unserved_address = DeliveryAddress(
            member_id=member.id,
            recipient_name="Asha Patil",
            city="Nashik",
            pincode="422001",
        )
        other_address = DeliveryAddress(
            member_id=other_member.id,
            recipient_name="Ravi Kulkarni",
            city="Pune",
            pincode="411001",
        )
        session.add_all([address, unserved_address, other_address])
        session.commit()

        return SimpleNamespace(
            product_id=product.id,
            other_product_id=other_product.id,
            depot_id=depot.id,
            area_id=area.id,
            variant_id=variant.id,
            member_id=member.id,
            other_member_id=other_member.id,
            address_id=address.id,
            unserved_address_id=unserved_address.id,
            other_address_id=other_address.id,
            agency_id=agency.id,
            other_agency_id=other_agency.id,
        )
    finally:
        session.close()


@pytest.fixture
def admin():
    return Principal(user_id=uuid4(), role=UserRole.ADMIN)


@pytest.fixture
def member_principal(seed):
    return Principal(user_id=uuid4(), role=UserRole.MEMBER, member_id=seed.member_id)


@pytest.fixture
def other_member_principal(seed):
    return Principal(user_id=uuid4(), role=UserRole.MEMBER, member_id=seed.other_member_id)


@pytest.fixture
def agency_principal(seed):
    return Principal(user_id=uuid4(), role=UserRole.AGENCY, agency_id=seed.agency_id)


@pytest.fixture
def invoice_service(session_factory, settings, clock):
    return InvoiceService(session_factory, settings=settings, clock=clock)


@pytest.fixture
def subscription_service(session_factory, settings, clock, invoice_service):
    return SubscriptionService(
        session_factory,
        invoice_service=invoice_service,
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def lifecycle_service(session_factory, settings, clock):
    return LifecycleService(session_factory, settings=settings, clock=clock)


@pytest.fixture
def wallet_service(session_factory, settings):
    return WalletService(session_factory, settings=settings)


@pytest.fixture
def delivery_schedule_service(session_factory):
    return DeliveryScheduleService(session_factory)


@pytest.fixture
def make_request(seed):
    """Subscription payload with sensible defaults; keyword overrides win."""

    def _make(**overrides):
        payload = {
            "product_id": seed.product_id,
            "delivery_address_id": seed.address_id,
            "period": 7,
            "delivery_schedule": "DAILY",
            "qty": 2,
            "start_date": date(2025, 8, 5),
        }
        payload.update(overrides)
        return payload

    return _make
