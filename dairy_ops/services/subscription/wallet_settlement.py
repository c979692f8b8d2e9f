# dairy_ops/services/subscription/wallet_settlement.py
"""
Split an order total between prepaid wallet funds and the amount due,
and spread the wallet portion over the lines of the order.

Pure computation; the caller applies the balance change inside its own
transaction.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List

from dairy_ops.models.enums import PaymentStatus

from ..common.errors import ValidationError
from ..common.money import CENT, ZERO, Amount, to_money


@dataclass(frozen=True)
class SettlementResult:
    wallet_amount: Decimal
    payable_amount: Decimal
    new_balance: Decimal
    payment_status: PaymentStatus

    @property
    def uses_wallet(self) -> bool:
        return self.wallet_amount > 0


def settle(order_total: Amount, wallet_balance: Amount) -> SettlementResult:
    """
    Settle ``order_total`` against ``wallet_balance``.

    - balance covers the total: all from wallet, PAID
    - 0 < balance < total: whole balance used, rest payable, PENDING
    - empty wallet: nothing from wallet, everything payable, PENDING

    An empty wallet is PENDING even for a zero total.

    Raises:
        ValidationError: for negative or non-decimal inputs
    """
    total = to_money(order_total, "order_total")
    balance = to_money(wallet_balance, "wallet_balance")
    if total < 0:
        raise ValidationError("Order total cannot be negative", field="order_total")
    if balance < 0:
        raise ValidationError("Wallet balance cannot be negative", field="wallet_balance")

    if balance > 0 and balance >= total:
        return SettlementResult(
            wallet_amount=total,
            payable_amount=ZERO,
            new_balance=balance - total,
            payment_status=PaymentStatus.PAID,
        )
    if balance > 0:
        return SettlementResult(
            wallet_amount=balance,
            payable_amount=total - balance,
            new_balance=ZERO,
            payment_status=PaymentStatus.PENDING,
        )
    return SettlementResult(
        wallet_amount=ZERO,
        payable_amount=total,
        new_balance=balance,
        payment_status=PaymentStatus.PENDING,
    )


@dataclass(frozen=True)
class LineSettlement:
    amount: Decimal
    wallet_amount: Decimal
    payable_amount: Decimal
    payment_status: PaymentStatus


def distribute_wallet(wallet_amount: Amount, line_amounts: Iterable[Amount]) -> List[Decimal]:
    """
    Share ``wallet_amount`` across lines in proportion to their amounts.

    Each share is rounded half up to the cent and the last line takes the
    remainder, so the shares always sum to ``wallet_amount``. Shares are
    clamped so no line receives more than its amount or less than zero.

    Raises:
        ValidationError: negative amounts, or more wallet funds than the lines cost
    """
    amounts = [to_money(a, "amount") for a in line_amounts]
    used = to_money(wallet_amount, "wallet_amount")
    if any(a < 0 for a in amounts):
        raise ValidationError("Line amounts cannot be negative", field="amount")
    if used < 0:
        raise ValidationError("Wallet amount cannot be negative", field="wallet_amount")

    total = sum(amounts, ZERO)
    if used > total:
        raise ValidationError("Wallet amount exceeds the order total", field="wallet_amount")
    if not amounts:
        return []
    if used == 0:
        return [ZERO for _ in amounts]

    shares: List[Decimal] = []
    remaining = used
    after = total
    for amount in amounts[:-1]:
        after -= amount
        share = (amount * used / total).quantize(CENT, rounding=ROUND_HALF_UP)
        share = min(max(share, remaining - after), amount, remaining)
        shares.append(share)
        remaining -= share
    shares.append(remaining)
    return shares


def split_settlement(settlement: SettlementResult, line_amounts: Iterable[Amount]) -> List[LineSettlement]:
    """
    Per-line wallet share, payable amount and status for a settled order.

    A line is PAID once nothing is payable on it, except that a zero-cost
    line of a PENDING order with no wallet share stays PENDING.
    """
    amounts = [to_money(a, "amount") for a in line_amounts]
    lines = []
    for amount, share in zip(amounts, distribute_wallet(settlement.wallet_amount, amounts)):
        payable = amount - share
        paid = payable == 0 and (share > 0 or settlement.payment_status is PaymentStatus.PAID)
        lines.append(
            LineSettlement(
                amount=amount,
                wallet_amount=share,
                payable_amount=payable,
                payment_status=PaymentStatus.PAID if paid else PaymentStatus.PENDING,
            )
        )
    return lines
