# --- File: dairy_ops/schemas/wallet.py ---
"""
Wallet ledger schemas.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Union
from uuid import UUID

from pydantic import Field, field_validator

from dairy_ops.models.enums import TransactionStatus, TransactionType, WalletPaymentMethod
from dairy_ops.schemas.common.base import BaseCreateSchema, BaseResponseSchema, BaseSchema

__all__ = [
    "WalletAdjustment",
    "WalletTransactionRead",
    "WalletSummary",
]


class WalletAdjustment(BaseCreateSchema):
    """Admin credit/debit or member top-up request."""

    amount: Decimal = Field(..., gt=0, description="Positive amount in the wallet currency")
    payment_method: Union[WalletPaymentMethod, None] = None
    reference_number: Union[str, None] = Field(
        None,
        max_length=100,
        description="Idempotency key for the logical event",
    )
    notes: Union[str, None] = Field(None, max_length=1000)

    @field_validator("amount")
    @classmethod
    def quantize_amount(cls, v: Decimal) -> Decimal:
        quantized = v.quantize(Decimal("0.01"))
        if quantized <= 0:
            raise ValueError("Amount must be at least 0.01")
        return quantized


class WalletTransactionRead(BaseResponseSchema):
    member_id: UUID
    amount: Decimal
    type: TransactionType
    status: TransactionStatus
    payment_method: Optional[WalletPaymentMethod] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    processed_by_admin_id: Optional[UUID] = None


class WalletSummary(BaseSchema):
    """Balance plus the most recent ledger rows, newest first."""

    member_id: UUID
    balance: Decimal
    transactions: List[WalletTransactionRead] = Field(default_factory=list)
