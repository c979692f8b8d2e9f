# dairy_ops/services/subscription/subscription_service.py
"""
Subscription creation and maintenance.

``create_order`` is the transaction coordinator: it validates the
request, expands each line's delivery calendar, prices it, settles the
order against the member wallet and persists order, subscriptions,
delivery entries and the wallet ledger row in one UnitOfWork. Invoice
generation runs afterwards in its own transaction and never undoes a
committed order.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Any, Callable, List, Mapping, Optional, Union
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dairy_ops.config.settings import Settings, settings as default_settings
from dairy_ops.models.enums import DeliverySchedule, PaymentStatus, UserRole, WalletPaymentMethod
from dairy_ops.models.member import DeliveryAddress
from dairy_ops.models.subscription import Subscription
from dairy_ops.repositories.catalog_repository import AgencyRepository, ProductRepository
from dairy_ops.repositories.delivery_entry_repository import DeliveryEntryRepository
from dairy_ops.repositories.member_repository import DeliveryAddressRepository, MemberRepository
from dairy_ops.repositories.order_repository import ProductOrderRepository
from dairy_ops.repositories.subscription_repository import SubscriptionRepository
from dairy_ops.schemas.invoice import InvoiceResult
from dairy_ops.schemas.subscription import (
    OrderCreate,
    OrderCreated,
    OrderPaymentUpdate,
    ProductOrderDetail,
    ProductOrderRead,
    ScheduledDeliveryRead,
    SchedulePreview,
    SubscriptionCreate,
    SubscriptionCreated,
    SubscriptionDetail,
    SubscriptionLine,
    SubscriptionRead,
    SubscriptionUpdate,
)

from ..common import mapping
from ..common.clock import Clock, local_now, local_today
from ..common.errors import ConflictError, NotFoundError, ValidationError
from ..common.money import ZERO, to_money
from ..common.permissions import PermissionDenied, Principal, require_member_access, require_role
from ..common.unit_of_work import UnitOfWork
from ..invoice.invoice_service import InvoiceService
from ..wallet.wallet_service import lock_member, post_debit
from .pricing_resolver import PricingResolver, ResolvedPrice
from .schedule_generator import (
    ScheduledDelivery,
    expiry_date,
    generate_delivery_schedule,
    normalize_weekdays,
    total_quantity,
)
from .wallet_settlement import SettlementResult, settle, split_settlement

logger = logging.getLogger(__name__)

SubscriptionRequest = Union[SubscriptionCreate, Mapping[str, Any]]
OrderRequest = Union[OrderCreate, Mapping[str, Any]]

PAYMENT_FIELDS = frozenset(
    {"payment_mode", "payment_reference_no", "payment_date", "payment_status", "received_amount"}
)


def order_wallet_reference(order_id: UUID) -> str:
    """Ledger reference for the wallet debit funding an order."""
    return f"ORDER_WALLET_{order_id}"


def check_received_amount(received: Optional[Decimal], payable: Decimal, total: Decimal) -> Decimal:
    """
    Validate the amount recorded when a payment is marked PAID.

    It must equal what was payable. When nothing was payable the full
    total is accepted as well.

    Raises:
        ValidationError: missing or mismatching amount
    """
    if received is None:
        raise ValidationError(
            "received_amount is required to mark a payment as PAID",
            field="received_amount",
        )
    amount = to_money(received, "received_amount")
    if amount == payable or (payable == 0 and amount == total):
        return amount
    expected = total if payable == 0 and total > 0 else payable
    raise ValidationError(
        f"Received amount {amount} must equal payable amount {expected} to mark as PAID",
        field="received_amount",
    )


def check_subscription_access(principal: Principal, subscription: Subscription) -> None:
    """Admins see everything, members their own, agencies what is routed to them."""
    if principal.is_admin:
        return
    if principal.role == UserRole.MEMBER and principal.owns_member(subscription.member_id):
        return
    if (
        principal.role == UserRole.AGENCY
        and principal.agency_id is not None
        and subscription.agency_id == principal.agency_id
    ):
        return
    raise PermissionDenied(
        "You do not have access to this subscription",
        user_id=principal.user_id,
        role=principal.role,
    )


@dataclass(frozen=True)
class _PlannedLine:
    line: SubscriptionLine
    product_id: UUID
    weekdays: Optional[List[str]]
    deliveries: List[ScheduledDelivery]
    price: ResolvedPrice
    total_qty: int
    amount: Decimal


class SubscriptionService:
    """
    Creates, previews, renews, lists and edits subscriptions and records
    payments against their orders.

    Pass ``invoice_service=None`` with ``generate_invoices=False`` to skip
    invoicing entirely (e.g. bulk imports).
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        invoice_service: Optional[InvoiceService] = None,
        generate_invoices: bool = True,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        order_number_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or default_settings
        self._clock = clock or local_today
        self._invoice_service = invoice_service
        if self._invoice_service is None and generate_invoices:
            self._invoice_service = InvoiceService(
                session_factory, settings=self._settings, clock=self._clock
            )
        self._order_number_factory = order_number_factory or self._new_order_number

    # ------------------------------------------------------------------ #
    # Creation
    # ------------------------------------------------------------------ #

    def create_subscription(
        self,
        member_id: UUID,
        request: SubscriptionRequest,
    ) -> SubscriptionCreated:
        """
        Create a subscription with its order, calendar and wallet settlement.

        A single-line ``create_order``: as much wallet balance as the
        amount needs is applied.
        """
        req = mapping.parse_request(request, SubscriptionCreate)
        created = self.create_order(
            member_id,
            OrderCreate(subscriptions=[req.as_line()], delivery_address_id=req.delivery_address_id),
        )
        return SubscriptionCreated(
            subscription=created.subscriptions[0],
            order=created.order,
            entry_count=created.entry_count,
            wallet_transaction_id=created.wallet_transaction_id,
            invoice=created.invoice,
        )

    def create_order(self, member_id: UUID, request: OrderRequest) -> OrderCreated:
        """
        Create an order holding one subscription per requested line.

        The wallet portion (the requested amount capped by balance and
        total, or the whole usable balance when none is requested) is
        debited once and shared across the subscriptions by amount.
        Everything except the invoice commits or rolls back together.

        Raises:
            ValidationError: malformed request or an empty calendar
            NotFoundError: member, product or address missing
            ConflictError: no unique order number could be allocated, or a
                concurrent write hit a unique constraint
            TransactionError: the database rejected the commit
        """
        req = mapping.parse_request(request, OrderCreate)
        for line in req.subscriptions:
            self._check_period(line.period)

        with UnitOfWork(self._session_factory) as uow:
            try:
                created = self._create_in_uow(uow, member_id, req)
            except IntegrityError as exc:
                logger.warning(
                    "Order creation hit a unique constraint",
                    extra={"member_id": str(member_id)},
                )
                raise ConflictError(
                    "Order could not be saved because it conflicts with an existing record; retry the request",
                ) from exc

        logger.info(
            f"Order created with {len(created.subscriptions)} subscriptions and "
            f"{created.entry_count} deliveries, amount {created.order.total_amount}",
            extra={"member_id": str(member_id), "order_id": str(created.order.id)},
        )

        invoice = self._try_generate_invoice(created.order.id)
        if invoice is not None:
            created.invoice = invoice
            created.order = created.order.model_copy(
                update={"invoice_no": invoice.invoice_no, "invoice_path": invoice.invoice_path}
            )
        return created

    def _create_in_uow(self, uow: UnitOfWork, member_id: UUID, req: OrderCreate) -> OrderCreated:
        member = lock_member(uow, member_id)
        address = self._load_address(uow, member_id, req.delivery_address_id)

        products = uow.get_repo(ProductRepository)
        pricing = PricingResolver(uow.session)
        planned: List[_PlannedLine] = []
        for line in req.subscriptions:
            product = products.get(line.product_id)
            if product is None:
                raise NotFoundError("Product", line.product_id)
            weekdays = self._weekdays_for(line)
            deliveries = self._generate(line, weekdays)
            price = pricing.resolve(product.id, address, line.period)
            total_qty = total_quantity(deliveries)
            planned.append(
                _PlannedLine(
                    line=line,
                    product_id=product.id,
                    weekdays=weekdays,
                    deliveries=deliveries,
                    price=price,
                    total_qty=total_qty,
                    amount=to_money(price.unit_rate * total_qty, "amount"),
                )
            )

        order_total = sum((p.amount for p in planned), ZERO)
        usable = member.wallet_balance
        if req.wallet_amount is not None:
            usable = min(to_money(req.wallet_amount, "wallet_amount"), member.wallet_balance)
        settlement = settle(order_total, usable)
        shares = split_settlement(settlement, [p.amount for p in planned])

        order = uow.get_repo(ProductOrderRepository).create(
            {
                "order_no": self._allocate_order_number(uow),
                "member_id": member.id,
                "total_qty": sum(p.total_qty for p in planned),
                "total_amount": order_total,
                "wallet_amount": settlement.wallet_amount,
                "payable_amount": settlement.payable_amount,
                "received_amount": ZERO,
                "payment_status": settlement.payment_status,
            }
        )

        wallet_txn_id: Optional[UUID] = None
        if settlement.uses_wallet:
            txn = post_debit(
                uow,
                member_id=member.id,
                amount=settlement.wallet_amount,
                reference_number=order_wallet_reference(order.id),
                payment_method=WalletPaymentMethod.WALLET,
                notes=f"Wallet payment for order {order.order_no}",
            )
            wallet_txn_id = txn.id

        subs = uow.get_repo(SubscriptionRepository)
        entries = uow.get_repo(DeliveryEntryRepository)
        created_subs: List[Subscription] = []
        entry_count = 0
        for plan, share in zip(planned, shares):
            line = plan.line
            subscription = subs.create(
                {
                    "member_id": member.id,
                    "product_id": plan.product_id,
                    "product_order_id": order.id,
                    "delivery_address_id": address.id if address else None,
                    "depot_product_variant_id": plan.price.depot_product_variant_id,
                    "start_date": line.start_date,
                    "period": line.period,
                    "expiry_date": expiry_date(line.start_date, line.period),
                    "delivery_schedule": line.delivery_schedule,
                    "weekdays": plan.weekdays,
                    "qty": line.qty,
                    "alt_qty": line.alt_qty,
                    "rate": plan.price.unit_rate,
                    "total_qty": plan.total_qty,
                    "amount": plan.amount,
                    "wallet_amount": share.wallet_amount,
                    "payable_amount": share.payable_amount,
                    "received_amount": ZERO,
                    "payment_status": share.payment_status,
                    "delivery_instructions": line.delivery_instructions or req.delivery_instructions,
                }
            )
            rows = entries.bulk_create(
                {
                    "subscription_id": subscription.id,
                    "member_id": member.id,
                    "product_id": plan.product_id,
                    "delivery_address_id": address.id if address else None,
                    "agent_id": subscription.agency_id,
                    "delivery_date": d.delivery_date,
                    "quantity": d.quantity,
                }
                for d in plan.deliveries
            )
            created_subs.append(subscription)
            entry_count += len(rows)

        return OrderCreated(
            order=mapping.to_schema(order, ProductOrderRead),
            subscriptions=mapping.to_schema_list(created_subs, SubscriptionRead),
            entry_count=entry_count,
            wallet_transaction_id=wallet_txn_id,
        )

    def _try_generate_invoice(self, order_id: UUID) -> Optional[InvoiceResult]:
        if self._invoice_service is None:
            return None
        try:
            return self._invoice_service.generate_for_order(order_id)
        except Exception:
            logger.error(
                "Invoice generation failed; order kept",
                extra={"order_id": str(order_id)},
                exc_info=True,
            )
            return None

    # ------------------------------------------------------------------ #
    # Preview
    # ------------------------------------------------------------------ #

    def preview_schedule(
        self,
        request: SubscriptionRequest,
        member_id: Optional[UUID] = None,
    ) -> SchedulePreview:
        """
        Run generation, pricing and (with a member) settlement without
        writing anything.
        """
        req = mapping.parse_request(request, SubscriptionCreate)
        self._check_period(req.period)
        weekdays = self._weekdays_for(req)
        deliveries = self._generate(req, weekdays)

        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            if uow.get_repo(ProductRepository).get(req.product_id) is None:
                raise NotFoundError("Product", req.product_id)

            address: Optional[DeliveryAddress] = None
            if req.delivery_address_id is not None:
                if member_id is not None:
                    address = self._load_address(uow, member_id, req.delivery_address_id)
                else:
                    address = uow.get_repo(DeliveryAddressRepository).get(req.delivery_address_id)
                    if address is None:
                        raise NotFoundError("DeliveryAddress", req.delivery_address_id)

            price = PricingResolver(uow.session).resolve(req.product_id, address, req.period)
            total_qty = total_quantity(deliveries)
            amount = to_money(price.unit_rate * total_qty, "amount")

            settlement: Optional[SettlementResult] = None
            balance: Optional[Decimal] = None
            if member_id is not None:
                member = uow.get_repo(MemberRepository).get(member_id)
                if member is None:
                    raise NotFoundError("Member", member_id)
                balance = member.wallet_balance
                settlement = settle(amount, balance)

            return self._preview(req, deliveries, price, total_qty, amount, balance, settlement)

    @staticmethod
    def _preview(
        req: SubscriptionCreate,
        deliveries: List[ScheduledDelivery],
        price: ResolvedPrice,
        total_qty: int,
        amount: Decimal,
        balance: Optional[Decimal],
        settlement: Optional[SettlementResult],
    ) -> SchedulePreview:
        return SchedulePreview(
            start_date=req.start_date,
            expiry_date=expiry_date(req.start_date, req.period),
            delivery_schedule=req.delivery_schedule,
            deliveries=[
                ScheduledDeliveryRead(delivery_date=d.delivery_date, quantity=d.quantity)
                for d in deliveries
            ],
            total_qty=total_qty,
            unit_rate=price.unit_rate,
            amount=amount,
            depot_product_variant_id=price.depot_product_variant_id,
            is_pricing_provisional=price.is_provisional,
            wallet_balance=balance,
            wallet_amount=settlement.wallet_amount if settlement else None,
            payable_amount=settlement.payable_amount if settlement else None,
            payment_status=settlement.payment_status if settlement else None,
        )

    # ------------------------------------------------------------------ #
    # Renewal
    # ------------------------------------------------------------------ #

    def renew_subscription(self, principal: Principal, subscription_id: UUID) -> SubscriptionCreated:
        """
        Start a new subscription with the same recurrence, quantities and
        address, beginning the day after the old one expires (or tomorrow
        if that day has passed).
        """
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            old = uow.get_repo(SubscriptionRepository).get(subscription_id)
            if old is None:
                raise NotFoundError("Subscription", subscription_id)
            require_member_access(principal, old.member_id)

            tomorrow = self._clock() + timedelta(days=1)
            start = max(old.expiry_date + timedelta(days=1), tomorrow)
            request = SubscriptionCreate(
                product_id=old.product_id,
                delivery_address_id=old.delivery_address_id,
                period=old.period,
                delivery_schedule=old.delivery_schedule,
                weekdays=old.weekdays,
                qty=old.qty,
                alt_qty=old.alt_qty,
                start_date=start,
                delivery_instructions=old.delivery_instructions,
            )
            member_id = old.member_id

        logger.info(
            f"Renewing subscription from {start}",
            extra={"subscription_id": str(subscription_id), "member_id": str(member_id)},
        )
        return self.create_subscription(member_id, request)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def list_subscriptions(self, principal: Principal, *, limit: int = 100) -> List[SubscriptionRead]:
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            repo = uow.get_repo(SubscriptionRepository)
            if principal.is_admin:
                rows = repo.list_recent(limit=limit)
            elif principal.role == UserRole.MEMBER and principal.member_id is not None:
                rows = repo.list_recent(member_id=principal.member_id, limit=limit)
            elif principal.role == UserRole.AGENCY and principal.agency_id is not None:
                rows = repo.list_recent(agency_id=principal.agency_id, limit=limit)
            else:
                raise PermissionDenied(
                    "Caller has no member or agency profile",
                    user_id=principal.user_id,
                    role=principal.role,
                )
            return mapping.to_schema_list(rows, SubscriptionRead)

    def get_subscription(self, principal: Principal, subscription_id: UUID) -> SubscriptionDetail:
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            subscription = uow.get_repo(SubscriptionRepository).get_with_entries(subscription_id)
            if subscription is None:
                raise NotFoundError("Subscription", subscription_id)
            check_subscription_access(principal, subscription)
            return mapping.to_schema(subscription, SubscriptionDetail)

    # ------------------------------------------------------------------ #
    # Updates
    # ------------------------------------------------------------------ #

    def update_subscription(
        self,
        principal: Principal,
        subscription_id: UUID,
        update: Union[SubscriptionUpdate, Mapping[str, Any]],
    ) -> SubscriptionRead:
        """
        Apply the fields present in ``update``.

        Members may only edit delivery instructions of their own
        subscriptions. An agency change is cascaded to entries that can
        still be fulfilled. Payment changes are rolled up onto the order.
        """
        data = mapping.parse_request(update, SubscriptionUpdate)
        fields = set(data.model_fields_set)
        if not principal.is_admin and fields - {"delivery_instructions"}:
            require_role(
                principal,
                [UserRole.ADMIN],
                error_message="Only admins can change payment or routing details",
            )

        with UnitOfWork(self._session_factory) as uow:
            subs = uow.get_repo(SubscriptionRepository)
            subscription = subs.get_for_update(subscription_id)
            if subscription is None:
                raise NotFoundError("Subscription", subscription_id)
            require_member_access(principal, subscription.member_id)

            values = {name: getattr(data, name) for name in fields if name != "agency_id"}
            if values.get("payment_status") is PaymentStatus.PAID:
                values["received_amount"] = check_received_amount(
                    values.get("received_amount"),
                    subscription.payable_amount,
                    subscription.amount,
                )
            elif values.get("received_amount") is not None:
                values["received_amount"] = to_money(values["received_amount"], "received_amount")
            else:
                values.pop("received_amount", None)
            if values:
                subs.update(subscription, values)

            if fields & PAYMENT_FIELDS and subscription.product_order_id is not None:
                self._roll_up_order_payment(uow, subscription, fields)

            if "agency_id" in fields:
                self._reassign(uow, subscription, data.agency_id)

            logger.info(
                f"Subscription updated: {', '.join(sorted(fields)) or 'no fields'}",
                extra={"subscription_id": str(subscription.id)},
            )
            return mapping.to_schema(subscription, SubscriptionRead)

    def record_payment(
        self,
        principal: Principal,
        order_id: UUID,
        update: Union[OrderPaymentUpdate, Mapping[str, Any]],
    ) -> ProductOrderDetail:
        """
        Record an offline payment (or its failure) for a whole order.

        The order and each of its non-cancelled subscriptions are updated
        together. PAID requires the received amount to match the order's
        payable amount; every subscription is then marked as having
        received its own payable amount.

        Raises:
            PermissionDenied: caller is not an admin
            ValidationError: bad status or received amount
            NotFoundError: unknown order
        """
        require_role(principal, [UserRole.ADMIN], error_message="Only admins can record order payments")
        data = mapping.parse_request(update, OrderPaymentUpdate)

        with UnitOfWork(self._session_factory) as uow:
            orders = uow.get_repo(ProductOrderRepository)
            order = orders.get_for_update(order_id)
            if order is None:
                raise NotFoundError("ProductOrder", order_id)

            payment = {
                name: getattr(data, name)
                for name in ("payment_mode", "payment_reference_no", "payment_date")
                if name in data.model_fields_set
            }
            payment["payment_status"] = data.payment_status
            paid = data.payment_status is PaymentStatus.PAID
            received = order.received_amount
            if paid:
                received = check_received_amount(data.received_amount, order.payable_amount, order.total_amount)
            elif data.received_amount is not None:
                received = to_money(data.received_amount, "received_amount")
            orders.update(order, {**payment, "received_amount": received})

            subs = uow.get_repo(SubscriptionRepository)
            touched = 0
            for subscription in order.subscriptions:
                if subscription.payment_status is PaymentStatus.CANCELLED:
                    continue
                values = dict(payment)
                if paid:
                    values["received_amount"] = subscription.payable_amount
                subs.update(subscription, values)
                touched += 1

            logger.info(
                f"Order payment recorded as {data.payment_status.value} on {touched} subscriptions",
                extra={"order_id": str(order.id), "admin_id": str(principal.user_id)},
            )
            return mapping.to_schema(order, ProductOrderDetail)

    @staticmethod
    def _roll_up_order_payment(uow: UnitOfWork, subscription: Subscription, fields: set) -> None:
        """Derive the order's payment status and received total from its subscriptions."""
        orders = uow.get_repo(ProductOrderRepository)
        order = orders.get_for_update(subscription.product_order_id)
        if order is None:
            return

        live = [s for s in order.subscriptions if s.payment_status is not PaymentStatus.CANCELLED]
        statuses = {s.payment_status for s in live}
        if not live:
            status = order.payment_status
        elif statuses == {PaymentStatus.PAID}:
            status = PaymentStatus.PAID
        elif PaymentStatus.FAILED in statuses:
            status = PaymentStatus.FAILED
        else:
            status = PaymentStatus.PENDING

        values = {
            "payment_status": status,
            "received_amount": sum((s.received_amount for s in order.subscriptions), ZERO),
        }
        for name in ("payment_mode", "payment_reference_no", "payment_date"):
            if name in fields:
                values[name] = getattr(subscription, name)
        orders.update(order, values)

    def _reassign(self, uow: UnitOfWork, subscription: Subscription, agency_id: Optional[UUID]) -> None:
        if agency_id is not None and uow.get_repo(AgencyRepository).get(agency_id) is None:
            raise NotFoundError("Agency", agency_id)
        uow.get_repo(SubscriptionRepository).update(subscription, {"agency_id": agency_id})
        moved = uow.get_repo(DeliveryEntryRepository).reassign_agent([subscription.id], agency_id)
        logger.info(
            f"Agency reassigned on {moved} entries",
            extra={"subscription_id": str(subscription.id)},
        )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _check_period(self, period: int) -> None:
        limit = self._settings.MAX_SUBSCRIPTION_PERIOD_DAYS
        if period > limit:
            raise ValidationError(f"Period cannot exceed {limit} days", field="period")

    @staticmethod
    def _weekdays_for(req: SubscriptionLine) -> Optional[List[str]]:
        if req.delivery_schedule is not DeliverySchedule.SELECT_DAYS:
            return None
        return normalize_weekdays(req.weekdays)

    @staticmethod
    def _generate(req: SubscriptionLine, weekdays: Optional[List[str]]) -> List[ScheduledDelivery]:
        deliveries = generate_delivery_schedule(
            req.start_date,
            req.period,
            req.delivery_schedule,
            req.qty,
            req.alt_qty,
            weekdays,
        )
        if not deliveries:
            raise ValidationError(
                "No deliveries fall on the selected weekdays within the subscription period",
                field="weekdays",
            )
        return deliveries

    @staticmethod
    def _load_address(
        uow: UnitOfWork,
        member_id: UUID,
        address_id: Optional[UUID],
    ) -> Optional[DeliveryAddress]:
        if address_id is None:
            return None
        address = uow.get_repo(DeliveryAddressRepository).get_for_member(address_id, member_id)
        if address is None:
            raise NotFoundError("DeliveryAddress", address_id)
        return address

    def _allocate_order_number(self, uow: UnitOfWork) -> str:
        orders = uow.get_repo(ProductOrderRepository)
        attempts = self._settings.ORDER_NUMBER_MAX_ATTEMPTS
        for attempt in range(1, attempts + 1):
            candidate = self._order_number_factory()
            if not orders.exists_order_no(candidate):
                return candidate
            logger.warning(f"Order number {candidate} already taken (attempt {attempt}/{attempts})")
        raise ConflictError(
            f"Could not allocate a unique order number after {attempts} attempts",
            conflicting_field="order_no",
        )

    def _new_order_number(self) -> str:
        stamp = local_now(self._settings.TIMEZONE).strftime("%Y%m%d%H%M%S")
        return f"{self._settings.ORDER_NUMBER_PREFIX}-{stamp}-{secrets.token_hex(3).upper()}"
