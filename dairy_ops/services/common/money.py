# dairy_ops/services/common/money.py
"""Decimal money helpers; amounts are kept to cents."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from .errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Amount = Union[Decimal, int, str]


def to_money(value: Amount, field: str) -> Decimal:
    """Quantize to cents; floats are rejected to keep amounts exact."""
    if isinstance(value, (float, bool)):
        raise ValidationError(f"{field} must be a decimal amount", field=field)
    try:
        amount = Decimal(value)
    except (ArithmeticError, ValueError, TypeError):
        raise ValidationError(f"{field} must be a decimal amount", field=field) from None
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite amount", field=field)
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
