# dairy_ops/services/wallet/wallet_service.py
"""
Member wallet ledger.

Every balance change is an atomic increment/decrement on the locked
member row plus one append-only ledger row, inside the caller's
transaction. ``post_credit`` and ``post_debit`` are shared with the
subscription and lifecycle services so all wallet writes follow the
same path.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from dairy_ops.config.settings import Settings, settings as default_settings
from dairy_ops.models.enums import TransactionStatus, TransactionType, WalletPaymentMethod
from dairy_ops.models.member import Member
from dairy_ops.models.wallet import WalletTransaction
from dairy_ops.repositories.member_repository import MemberRepository
from dairy_ops.repositories.wallet_transaction_repository import WalletTransactionRepository
from dairy_ops.schemas.wallet import WalletAdjustment, WalletSummary, WalletTransactionRead

from ..common import mapping
from ..common.errors import ConflictError, InsufficientStateError, NotFoundError, ValidationError
from ..common.money import ZERO, to_money
from ..common.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def refund_amount(rate: Optional[Decimal], quantity: Optional[int]) -> Decimal:
    """``rate * quantity`` when both are positive, else zero."""
    if rate is None or quantity is None:
        return ZERO
    rate = Decimal(rate)
    if rate <= 0 or quantity <= 0:
        return ZERO
    return to_money(rate * quantity, "refund")


def _positive_amount(amount: Union[Decimal, int, str]) -> Decimal:
    value = to_money(amount, "amount")
    if value <= 0:
        raise ValidationError("Amount must be greater than zero", field="amount")
    return value


def lock_member(uow: UnitOfWork, member_id: UUID) -> Member:
    member = uow.get_repo(MemberRepository).get_for_update(member_id)
    if member is None:
        raise NotFoundError("Member", member_id)
    return member


def _ensure_reference_unused(uow: UnitOfWork, reference_number: Optional[str]) -> None:
    if reference_number is None:
        return
    existing = uow.get_repo(WalletTransactionRepository).get_by_reference(reference_number)
    if existing is not None:
        raise ConflictError(
            f"Wallet transaction {reference_number} has already been recorded",
            conflicting_field="reference_number",
        )


def post_credit(
    uow: UnitOfWork,
    *,
    member_id: UUID,
    amount: Decimal,
    reference_number: Optional[str],
    payment_method: Optional[WalletPaymentMethod],
    notes: Optional[str] = None,
    processed_by_admin_id: Optional[UUID] = None,
) -> WalletTransaction:
    """Increment the (already locked) member balance and append a PAID CREDIT row."""
    _ensure_reference_unused(uow, reference_number)
    if not uow.get_repo(MemberRepository).increment_balance(member_id, amount):
        raise NotFoundError("Member", member_id)

    txn = uow.get_repo(WalletTransactionRepository).create(
        {
            "member_id": member_id,
            "amount": amount,
            "type": TransactionType.CREDIT,
            "status": TransactionStatus.PAID,
            "payment_method": payment_method,
            "reference_number": reference_number,
            "notes": notes,
            "processed_by_admin_id": processed_by_admin_id,
        }
    )
    logger.info(
        f"Wallet credited {amount}",
        extra={"member_id": str(member_id), "reference_number": reference_number},
    )
    return txn


def post_debit(
    uow: UnitOfWork,
    *,
    member_id: UUID,
    amount: Decimal,
    reference_number: Optional[str],
    payment_method: Optional[WalletPaymentMethod],
    notes: Optional[str] = None,
    processed_by_admin_id: Optional[UUID] = None,
) -> WalletTransaction:
    """
    Decrement the (already locked) member balance and append a PAID DEBIT row.

    Raises:
        InsufficientStateError: if the balance does not cover ``amount``
    """
    _ensure_reference_unused(uow, reference_number)
    if not uow.get_repo(MemberRepository).decrement_balance(member_id, amount):
        raise InsufficientStateError(
            "insufficient_wallet_balance",
            f"Wallet balance is lower than the debit amount {amount}",
        )

    txn = uow.get_repo(WalletTransactionRepository).create(
        {
            "member_id": member_id,
            "amount": amount,
            "type": TransactionType.DEBIT,
            "status": TransactionStatus.PAID,
            "payment_method": payment_method,
            "reference_number": reference_number,
            "notes": notes,
            "processed_by_admin_id": processed_by_admin_id,
        }
    )
    logger.info(
        f"Wallet debited {amount}",
        extra={"member_id": str(member_id), "reference_number": reference_number},
    )
    return txn


class WalletService:
    """Credits, debits and top-up approvals outside subscription creation."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        settings: Optional[Settings] = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or default_settings

    def credit(
        self,
        member_id: UUID,
        amount: Union[Decimal, int, str],
        *,
        reference_number: Optional[str] = None,
        notes: Optional[str] = None,
        payment_method: Optional[WalletPaymentMethod] = None,
        processed_by_admin_id: Optional[UUID] = None,
    ) -> WalletTransactionRead:
        value = _positive_amount(amount)
        with UnitOfWork(self._session_factory) as uow:
            lock_member(uow, member_id)
            txn = post_credit(
                uow,
                member_id=member_id,
                amount=value,
                reference_number=reference_number,
                payment_method=payment_method,
                notes=notes,
                processed_by_admin_id=processed_by_admin_id,
            )
            return mapping.to_schema(txn, WalletTransactionRead)

    def debit(
        self,
        member_id: UUID,
        amount: Union[Decimal, int, str],
        *,
        reference_number: Optional[str] = None,
        notes: Optional[str] = None,
        payment_method: Optional[WalletPaymentMethod] = None,
        processed_by_admin_id: Optional[UUID] = None,
    ) -> WalletTransactionRead:
        """
        Remove funds from a wallet.

        Raises:
            InsufficientStateError: if the balance does not cover the amount
        """
        value = _positive_amount(amount)
        with UnitOfWork(self._session_factory) as uow:
            lock_member(uow, member_id)
            txn = post_debit(
                uow,
                member_id=member_id,
                amount=value,
                reference_number=reference_number,
                payment_method=payment_method,
                notes=notes,
                processed_by_admin_id=processed_by_admin_id,
            )
            return mapping.to_schema(txn, WalletTransactionRead)

    def request_top_up(
        self,
        member_id: UUID,
        request: Union[WalletAdjustment, Mapping[str, Any]],
    ) -> WalletTransactionRead:
        """Record a PENDING credit; the balance only moves on approval."""
        req = mapping.parse_request(request, WalletAdjustment)
        value = req.amount
        reference_number = req.reference_number
        with UnitOfWork(self._session_factory) as uow:
            member = uow.get_repo(MemberRepository).get(member_id)
            if member is None:
                raise NotFoundError("Member", member_id)
            _ensure_reference_unused(uow, reference_number)

            txn = uow.get_repo(WalletTransactionRepository).create(
                {
                    "member_id": member_id,
                    "amount": value,
                    "type": TransactionType.CREDIT,
                    "status": TransactionStatus.PENDING,
                    "payment_method": req.payment_method,
                    "reference_number": reference_number,
                    "notes": req.notes,
                }
            )
            logger.info(
                f"Wallet top-up of {value} requested",
                extra={"member_id": str(member_id)},
            )
            return mapping.to_schema(txn, WalletTransactionRead)

    def approve_top_up(
        self,
        transaction_id: UUID,
        admin_id: UUID,
        *,
        notes: Optional[str] = None,
    ) -> WalletTransactionRead:
        """
        Mark a pending top-up PAID and credit the wallet, exactly once.

        Raises:
            NotFoundError: unknown transaction
            InsufficientStateError: transaction is not a pending credit
        """
        with UnitOfWork(self._session_factory) as uow:
            txns = uow.get_repo(WalletTransactionRepository)
            txn = txns.get(transaction_id)
            if txn is None:
                raise NotFoundError("WalletTransaction", transaction_id)
            if txn.type is not TransactionType.CREDIT or txn.status is not TransactionStatus.PENDING:
                raise InsufficientStateError(
                    "top_up_not_pending",
                    f"Only pending top-ups can be approved; this transaction is {txn.status.value}",
                )

            lock_member(uow, txn.member_id)
            if not txns.mark_paid_if_pending(txn.id, admin_id):
                raise ConflictError("Top-up was processed concurrently", conflicting_field="status")
            uow.get_repo(MemberRepository).increment_balance(txn.member_id, txn.amount)
            if notes:
                txns.update(txn, {"notes": notes})

            logger.info(
                f"Wallet top-up of {txn.amount} approved",
                extra={"member_id": str(txn.member_id), "transaction_id": str(txn.id)},
            )
            return mapping.to_schema(txn, WalletTransactionRead)

    def get_wallet(self, member_id: UUID) -> WalletSummary:
        with UnitOfWork(self._session_factory) as uow:
            member = uow.get_repo(MemberRepository).get(member_id)
            if member is None:
                raise NotFoundError("Member", member_id)
            recent = uow.get_repo(WalletTransactionRepository).list_recent_for_member(
                member_id, self._settings.WALLET_HISTORY_LIMIT
            )
            return WalletSummary(
                member_id=member.id,
                balance=member.wallet_balance,
                transactions=mapping.to_schema_list(recent, WalletTransactionRead),
            )
