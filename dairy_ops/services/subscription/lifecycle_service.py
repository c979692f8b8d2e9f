# dairy_ops/services/subscription/lifecycle_service.py
"""
Post-creation subscription and delivery entry mutations.

Cancellation, member skips with refund, admin and agency status
updates, and bulk agency reassignment. Each operation is one
transaction; wallet refunds lock the member row before the entry is
touched so concurrent requests for one member serialize.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from dairy_ops.config.settings import Settings, settings as default_settings
from dairy_ops.models.delivery import DeliveryScheduleEntry
from dairy_ops.models.enums import (
    AGENCY_SETTABLE_STATUSES,
    CANCELLABLE_PAYMENT_STATUSES,
    DeliveryStatus,
    PaymentStatus,
    UserRole,
    WalletPaymentMethod,
)
from dairy_ops.models.subscription import Subscription
from dairy_ops.repositories.catalog_repository import AgencyRepository
from dairy_ops.repositories.delivery_entry_repository import DeliveryEntryRepository
from dairy_ops.repositories.subscription_repository import SubscriptionRepository
from dairy_ops.schemas.delivery import (
    BulkAgencyAssignmentResult,
    DeliveryEntryRead,
    DeliveryStatusChange,
)
from dairy_ops.schemas.subscription import CancelSubscriptionResult, SubscriptionRead

from ..common import mapping
from ..common.clock import Clock, local_today
from ..common.errors import ConflictError, InsufficientStateError, NotFoundError, ValidationError
from ..common.money import ZERO
from ..common.permissions import PermissionDenied, Principal, require_member_access, require_role
from ..common.unit_of_work import UnitOfWork
from ..wallet.wallet_service import lock_member, post_credit, refund_amount

logger = logging.getLogger(__name__)

# Statuses that only mark routing; they never move money.
ROUTING_STATUSES = frozenset({DeliveryStatus.TRANSFER_TO_AGENT, DeliveryStatus.INDRAAI_DELIVERY})


def skip_reference(entry_id: UUID) -> str:
    return f"SKIP_DELIVERY_{entry_id}"


def admin_skip_reference(entry_id: UUID) -> str:
    return f"ADMIN_DELIVERY_{entry_id}"


def parse_delivery_status(value: Union[DeliveryStatus, str]) -> DeliveryStatus:
    if isinstance(value, DeliveryStatus):
        return value
    try:
        return DeliveryStatus(str(value).strip().upper().replace("-", "_").replace(" ", "_"))
    except ValueError:
        raise ValidationError(f"Invalid delivery status: {value!r}", field="status") from None


def _coerce_uuid(value: Union[UUID, str], field: str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise ValidationError(f"Invalid id in {field}: {value!r}", field=field) from None


class LifecycleService:
    """Cancel, skip, status overrides and bulk agency reassignment."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or default_settings
        self._clock = clock or local_today

    # ------------------------------------------------------------------ #
    # Cancel
    # ------------------------------------------------------------------ #

    def cancel_subscription(self, principal: Principal, subscription_id: UUID) -> CancelSubscriptionResult:
        """
        Cancel an unpaid subscription and its future pending deliveries.

        Past entries and entries already resolved are left untouched.

        Raises:
            NotFoundError: unknown subscription
            InsufficientStateError: the subscription is paid
        """
        with UnitOfWork(self._session_factory) as uow:
            subs = uow.get_repo(SubscriptionRepository)
            subscription = subs.get_for_update(subscription_id)
            if subscription is None:
                raise NotFoundError("Subscription", subscription_id)
            require_member_access(principal, subscription.member_id)

            if subscription.payment_status not in CANCELLABLE_PAYMENT_STATUSES:
                raise InsufficientStateError(
                    "subscription_not_cancellable",
                    f"Subscriptions with payment status {subscription.payment_status.value} "
                    "cannot be cancelled",
                )

            subs.update(subscription, {"payment_status": PaymentStatus.CANCELLED})
            today = self._clock()
            cancelled = uow.get_repo(DeliveryEntryRepository).cancel_future_pending(
                subscription.id, today
            )

            logger.info(
                f"Subscription cancelled; {cancelled} pending deliveries from {today} cancelled",
                extra={"subscription_id": str(subscription.id), "member_id": str(subscription.member_id)},
            )
            return CancelSubscriptionResult(
                subscription=mapping.to_schema(subscription, SubscriptionRead),
                cancelled_entries=cancelled,
            )

    # ------------------------------------------------------------------ #
    # Skip
    # ------------------------------------------------------------------ #

    def skip_delivery(self, principal: Principal, entry_id: UUID) -> DeliveryStatusChange:
        """
        Member skips one future delivery and is refunded to the wallet.

        Raises:
            NotFoundError: unknown entry
            PermissionDenied: caller does not own the subscription
            InsufficientStateError: entry not PENDING, or not after today
            ConflictError: a refund was already issued for the entry
        """
        require_role(principal, [UserRole.MEMBER], error_message="Only members can skip their deliveries")

        with UnitOfWork(self._session_factory) as uow:
            entries = uow.get_repo(DeliveryEntryRepository)
            entry = self._load_entry(entries, entry_id)
            subscription = entry.subscription
            if not principal.owns_member(subscription.member_id):
                raise PermissionDenied(
                    "You can only skip deliveries of your own subscriptions",
                    user_id=principal.user_id,
                    role=principal.role,
                )

            if entry.status is not DeliveryStatus.PENDING:
                raise InsufficientStateError(
                    "entry_not_pending",
                    f"Only pending deliveries can be skipped; this delivery is {entry.status.value}",
                )
            if entry.delivery_date <= self._clock():
                raise InsufficientStateError(
                    "skip_cutoff",
                    "Deliveries can only be skipped if scheduled strictly after today",
                )

            return self._apply_status(
                uow,
                entry,
                subscription,
                DeliveryStatus.SKIP_BY_CUSTOMER,
                reference=skip_reference(entry.id),
                processed_by_admin_id=None,
            )

    # ------------------------------------------------------------------ #
    # Status updates
    # ------------------------------------------------------------------ #

    def admin_update_delivery_status(
        self,
        principal: Principal,
        entry_id: UUID,
        status: Union[DeliveryStatus, str],
        *,
        notes: Optional[str] = None,
        agent_id: Optional[UUID] = None,
    ) -> DeliveryStatusChange:
        """
        Set an entry status as an admin.

        SKIP_BY_CUSTOMER refunds like a member skip. Routing statuses may
        carry a new agent.
        """
        require_role(principal, [UserRole.ADMIN], error_message="Only admins can override delivery status")
        target = parse_delivery_status(status)
        if agent_id is not None and target not in ROUTING_STATUSES:
            raise ValidationError(
                "An agent can only be assigned with TRANSFER_TO_AGENT or INDRAAI_DELIVERY",
                field="agent_id",
            )

        with UnitOfWork(self._session_factory) as uow:
            entries = uow.get_repo(DeliveryEntryRepository)
            entry = self._load_entry(entries, entry_id)
            self._check_transition(entry, target)

            if agent_id is not None and uow.get_repo(AgencyRepository).get(agent_id) is None:
                raise NotFoundError("Agency", agent_id)

            extra: dict = {}
            if notes is not None:
                extra["admin_notes"] = notes
            if agent_id is not None:
                extra["agent_id"] = agent_id

            return self._apply_status(
                uow,
                entry,
                entry.subscription,
                target,
                reference=admin_skip_reference(entry.id),
                processed_by_admin_id=principal.user_id,
                extra_values=extra,
            )

    def agency_update_delivery_status(
        self,
        principal: Principal,
        entry_id: UUID,
        status: Union[DeliveryStatus, str],
    ) -> DeliveryStatusChange:
        """Agency records DELIVERED or NOT_DELIVERED on an entry routed to it."""
        require_role(principal, [UserRole.AGENCY], error_message="Only agencies can record deliveries")
        if principal.agency_id is None:
            raise PermissionDenied(
                "Caller has no agency profile", user_id=principal.user_id, role=principal.role
            )
        target = parse_delivery_status(status)
        if target not in AGENCY_SETTABLE_STATUSES:
            raise ValidationError(
                "Agencies can only mark deliveries DELIVERED or NOT_DELIVERED",
                field="status",
            )

        with UnitOfWork(self._session_factory) as uow:
            entries = uow.get_repo(DeliveryEntryRepository)
            entry = self._load_entry(entries, entry_id)
            routed_to = entry.agent_id or entry.subscription.agency_id
            if routed_to != principal.agency_id:
                raise PermissionDenied(
                    "This delivery is not assigned to your agency",
                    user_id=principal.user_id,
                    role=principal.role,
                )
            self._check_transition(entry, target)

            return self._apply_status(
                uow,
                entry,
                entry.subscription,
                target,
                reference=None,
                processed_by_admin_id=None,
            )

    # ------------------------------------------------------------------ #
    # Bulk agency reassignment
    # ------------------------------------------------------------------ #

    def bulk_assign_agency(
        self,
        principal: Principal,
        subscription_ids: Iterable[Union[UUID, str]],
        agency_id: Optional[UUID],
    ) -> BulkAgencyAssignmentResult:
        """
        Route subscriptions to ``agency_id`` (None unassigns).

        Entries still PENDING or NOT_DELIVERED follow the subscription;
        resolved deliveries keep their agent.
        """
        require_role(principal, [UserRole.ADMIN], error_message="Only admins can reassign agencies")

        ids: List[UUID] = []
        for raw in subscription_ids or []:
            value = _coerce_uuid(raw, "subscription_ids")
            if value not in ids:
                ids.append(value)
        if not ids:
            raise ValidationError("At least one subscription id is required", field="subscription_ids")
        limit = self._settings.BULK_ASSIGNMENT_LIMIT
        if len(ids) > limit:
            raise ValidationError(
                f"At most {limit} subscriptions can be reassigned at once",
                field="subscription_ids",
            )

        with UnitOfWork(self._session_factory) as uow:
            if agency_id is not None and uow.get_repo(AgencyRepository).get(agency_id) is None:
                raise NotFoundError("Agency", agency_id)

            subs = uow.get_repo(SubscriptionRepository)
            existing = subs.find_existing_ids(ids)
            missing = [i for i in ids if i not in existing]
            if missing:
                raise NotFoundError(
                    "Subscription",
                    missing[0],
                    details={"missing_ids": [str(i) for i in missing]},
                )

            updated = subs.set_agency(ids, agency_id)
            entries_updated = uow.get_repo(DeliveryEntryRepository).reassign_agent(ids, agency_id)

            logger.info(
                f"Reassigned {updated} subscriptions and {entries_updated} entries",
                extra={"agency_id": str(agency_id) if agency_id else None},
            )
            return BulkAgencyAssignmentResult(
                agency_id=agency_id,
                subscriptions_updated=updated,
                entries_updated=entries_updated,
            )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _load_entry(entries: DeliveryEntryRepository, entry_id: UUID) -> DeliveryScheduleEntry:
        entry = entries.get_with_subscription(entry_id)
        if entry is None:
            raise NotFoundError("DeliveryScheduleEntry", entry_id)
        return entry

    @staticmethod
    def _check_transition(entry: DeliveryScheduleEntry, target: DeliveryStatus) -> None:
        if not entry.status.can_transition_to(target):
            raise InsufficientStateError(
                "invalid_status_transition",
                f"A {entry.status.value} delivery cannot be changed to {target.value}",
            )

    def _apply_status(
        self,
        uow: UnitOfWork,
        entry: DeliveryScheduleEntry,
        subscription: Subscription,
        target: DeliveryStatus,
        *,
        reference: Optional[str],
        processed_by_admin_id: Optional[UUID],
        extra_values: Optional[dict] = None,
    ) -> DeliveryStatusChange:
        """
        Move ``entry`` to ``target`` with a conditional update and, for
        SKIP_BY_CUSTOMER, credit the refund and link it to the entry.
        """
        refunds = target is DeliveryStatus.SKIP_BY_CUSTOMER
        if refunds and entry.wallet_transaction_id is not None:
            raise ConflictError(
                "A refund has already been issued for this delivery",
                conflicting_field="wallet_transaction_id",
            )

        member = lock_member(uow, subscription.member_id) if refunds else None
        previous = entry.status
        entries = uow.get_repo(DeliveryEntryRepository)
        values = {"status": target, **(extra_values or {})}
        if not entries.transition_status(entry.id, previous, values):
            raise ConflictError(
                "The delivery was changed by another request; reload and retry",
                conflicting_field="status",
            )

        refund = ZERO
        txn_id: Optional[UUID] = None
        if refunds:
            refund = refund_amount(subscription.rate, entry.quantity)
            if refund > 0:
                txn = post_credit(
                    uow,
                    member_id=subscription.member_id,
                    amount=refund,
                    reference_number=reference,
                    payment_method=WalletPaymentMethod.SYSTEM_CREDIT,
                    notes=f"Refund for skipped delivery on {entry.delivery_date.isoformat()}",
                    processed_by_admin_id=processed_by_admin_id,
                )
                txn_id = txn.id
                entries.update(entry, {"wallet_transaction_id": txn.id})

        logger.info(
            f"Delivery {previous.value} -> {target.value}, refund {refund}",
            extra={
                "entry_id": str(entry.id),
                "subscription_id": str(subscription.id),
                "member_id": str(subscription.member_id),
            },
        )
        return DeliveryStatusChange(
            entry=mapping.to_schema(entry, DeliveryEntryRead),
            previous_status=previous,
            refund_amount=refund,
            wallet_transaction_id=txn_id,
            wallet_balance=member.wallet_balance if member is not None else None,
        )
