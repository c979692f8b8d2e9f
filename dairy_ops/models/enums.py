"""
Database enums shared by models, schemas and services.

Closed vocabularies for recurrence types, delivery statuses, payment
statuses and ledger flags.
"""

import enum
from typing import FrozenSet, Optional


class UserRole(str, enum.Enum):
    """Role of the authenticated caller."""
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"
    AGENCY = "AGENCY"


class DeliverySchedule(str, enum.Enum):
    """Recurrence rule for a subscription; each value is stored as-is."""
    DAILY = "DAILY"
    SELECT_DAYS = "SELECT_DAYS"
    ALTERNATE_DAYS = "ALTERNATE_DAYS"
    VARYING = "VARYING"

    @classmethod
    def parse(cls, raw: "str | DeliverySchedule") -> "DeliverySchedule":
        """
        Normalize client keyword variants.

        Accepts case and separator variants (``select-days``, ``Select Days``)
        plus the legacy ``WEEKDAYS`` alias for SELECT_DAYS.

        Raises:
            ValueError: for an unsupported keyword
        """
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str) or not raw.strip():
            raise ValueError(f"Invalid delivery schedule type: {raw!r}")

        key = raw.strip().upper().replace("-", "_").replace(" ", "_")
        key = _SCHEDULE_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Invalid delivery schedule type: {raw!r}") from None


_SCHEDULE_ALIASES = {
    "WEEKDAYS": "SELECT_DAYS",
    "SELECTDAYS": "SELECT_DAYS",
    "ALTERNATE": "ALTERNATE_DAYS",
    "ALTERNATEDAYS": "ALTERNATE_DAYS",
}


class DeliveryStatus(str, enum.Enum):
    """State of one delivery schedule entry."""
    PENDING = "PENDING"
    DELIVERED = "DELIVERED"
    NOT_DELIVERED = "NOT_DELIVERED"
    CANCELLED = "CANCELLED"
    SKIPPED = "SKIPPED"
    SKIP_BY_CUSTOMER = "SKIP_BY_CUSTOMER"
    TRANSFER_TO_AGENT = "TRANSFER_TO_AGENT"
    INDRAAI_DELIVERY = "INDRAAI_DELIVERY"

    @property
    def is_terminal(self) -> bool:
        return self is not DeliveryStatus.PENDING

    def can_transition_to(self, target: "DeliveryStatus") -> bool:
        """PENDING may move anywhere; fulfilled outcomes may only be corrected."""
        if target is DeliveryStatus.PENDING:
            return False
        if self is DeliveryStatus.PENDING:
            return True
        return self in _CORRECTABLE and target in _CORRECTABLE


_CORRECTABLE: FrozenSet[DeliveryStatus] = frozenset(
    {DeliveryStatus.DELIVERED, DeliveryStatus.NOT_DELIVERED}
)

# Entries whose routing may still change when the agency is reassigned.
REASSIGNABLE_DELIVERY_STATUSES: FrozenSet[DeliveryStatus] = frozenset(
    {DeliveryStatus.PENDING, DeliveryStatus.NOT_DELIVERED}
)

# Statuses an agency user may record from the field.
AGENCY_SETTABLE_STATUSES: FrozenSet[DeliveryStatus] = frozenset(
    {DeliveryStatus.DELIVERED, DeliveryStatus.NOT_DELIVERED}
)


class PaymentStatus(str, enum.Enum):
    """Payment state of an order or subscription."""
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


CANCELLABLE_PAYMENT_STATUSES: FrozenSet[Optional[PaymentStatus]] = frozenset(
    {PaymentStatus.PENDING, PaymentStatus.FAILED, PaymentStatus.CANCELLED, None}
)


class PaymentMode(str, enum.Enum):
    """How the payable remainder was collected."""
    ONLINE = "ONLINE"
    CASH = "CASH"
    UPI = "UPI"
    BANK = "BANK"


class TransactionType(str, enum.Enum):
    """Direction of a wallet ledger entry; amounts are stored positive."""
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class TransactionStatus(str, enum.Enum):
    """Wallet ledger entry status."""
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"


class WalletPaymentMethod(str, enum.Enum):
    """Funding channel recorded on a ledger entry."""
    WALLET = "WALLET"
    SYSTEM_CREDIT = "SYSTEM_CREDIT"
    ONLINE = "ONLINE"
    CASH = "CASH"
    UPI = "UPI"
    BANK = "BANK"
