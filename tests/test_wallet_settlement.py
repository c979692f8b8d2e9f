from decimal import Decimal

import pytest

from dairy_ops.models.enums import PaymentStatus
from dairy_ops.services.common.errors import ValidationError
from dairy_ops.services.subscription.wallet_settlement import distribute_wallet, settle, split_settlement


def test_balance_covers_total():
    result = settle(Decimal("350.00"), Decimal("1000.00"))
    assert result.wallet_amount == Decimal("350.00")
    assert result.payable_amount == Decimal("0.00")
    assert result.new_balance == Decimal("650.00")
    assert result.payment_status is PaymentStatus.PAID
    assert result.uses_wallet


def test_exact_balance_is_paid():
    result = settle("700", "700.00")
    assert result.payment_status is PaymentStatus.PAID
    assert result.new_balance == Decimal("0.00")


def test_partial_balance_leaves_remainder_payable():
    result = settle(Decimal("700.00"), Decimal("100.00"))
    assert result.wallet_amount == Decimal("100.00")
    assert result.payable_amount == Decimal("600.00")
    assert result.new_balance == Decimal("0.00")
    assert result.payment_status is PaymentStatus.PENDING


def test_empty_wallet_pays_nothing():
    result = settle(Decimal("700.00"), Decimal("0"))
    assert result.wallet_amount == Decimal("0.00")
    assert result.payable_amount == Decimal("700.00")
    assert result.payment_status is PaymentStatus.PENDING
    assert not result.uses_wallet


def test_zero_total_with_empty_wallet_stays_pending():
    result = settle(Decimal("0"), Decimal("0"))
    assert result.payment_status is PaymentStatus.PENDING
    assert result.payable_amount == Decimal("0.00")


def test_zero_total_with_funds_is_paid_without_debit():
    result = settle(Decimal("0"), Decimal("25.00"))
    assert result.payment_status is PaymentStatus.PAID
    assert not result.uses_wallet
    assert result.new_balance == Decimal("25.00")


def test_amounts_are_rounded_to_cents():
    result = settle("10.005", "20")
    assert result.wallet_amount == Decimal("10.01")


def test_split_always_adds_up():
    for total, balance in [("12.34", "5.00"), ("99.99", "100"), ("0.01", "0")]:
        result = settle(total, balance)
        assert result.wallet_amount + result.payable_amount == Decimal(total)


@pytest.mark.parametrize(
    "total, balance, field",
    [
        (Decimal("-1"), Decimal("10"), "order_total"),
        (Decimal("10"), Decimal("-0.01"), "wallet_balance"),
        (10.5, Decimal("10"), "order_total"),
        (Decimal("10"), "abc", "wallet_balance"),
    ],
)
def test_invalid_inputs(total, balance, field):
    with pytest.raises(ValidationError) as exc_info:
        settle(total, balance)
    assert exc_info.value.field == field


class TestDistributeWallet:
    def test_shares_follow_line_amounts(self):
        shares = distribute_wallet("500.00", ["700.00", "156.00"])
        assert shares == [Decimal("408.88"), Decimal("91.12")]
        assert sum(shares) == Decimal("500.00")

    def test_rounding_remainder_goes_to_last_line(self):
        shares = distribute_wallet("10.00", ["10.00", "10.00", "10.00"])
        assert shares == [Decimal("3.33"), Decimal("3.33"), Decimal("3.34")]

    def test_shares_never_exceed_line_or_go_negative(self):
        shares = distribute_wallet("0.05", ["0.05", "0.05", "0.00"])
        assert shares == [Decimal("0.03"), Decimal("0.02"), Decimal("0.00")]

    def test_full_cover_matches_amounts(self):
        assert distribute_wallet("856.00", ["700.00", "156.00"]) == [Decimal("700.00"), Decimal("156.00")]

    def test_nothing_used(self):
        assert distribute_wallet("0", ["700.00", "156.00"]) == [Decimal("0.00"), Decimal("0.00")]

    def test_more_than_total_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            distribute_wallet("10.01", ["10.00"])
        assert exc_info.value.field == "wallet_amount"


class TestSplitSettlement:
    def test_partial_wallet_leaves_every_line_pending(self):
        lines = split_settlement(settle("856.00", "500.00"), ["700.00", "156.00"])

        assert [l.wallet_amount for l in lines] == [Decimal("408.88"), Decimal("91.12")]
        assert [l.payable_amount for l in lines] == [Decimal("291.12"), Decimal("64.88")]
        assert all(l.payment_status is PaymentStatus.PENDING for l in lines)

    def test_covered_order_pays_every_line(self):
        lines = split_settlement(settle("856.00", "1000.00"), ["700.00", "156.00"])
        assert all(l.payable_amount == Decimal("0.00") for l in lines)
        assert all(l.payment_status is PaymentStatus.PAID for l in lines)

    def test_zero_cost_line_follows_the_order(self):
        pending = split_settlement(settle("700.00", "0"), ["700.00", "0"])
        paid = split_settlement(settle("700.00", "1000.00"), ["700.00", "0"])

        assert pending[1].payment_status is PaymentStatus.PENDING
        assert paid[1].payment_status is PaymentStatus.PAID
