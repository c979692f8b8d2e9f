"""
SQLAlchemy models.

Importing this package registers every table on ``Base.metadata``.
"""

from dairy_ops.models.base import Base, BaseEntity
from dairy_ops.models.catalog import Agency, AreaMaster, Depot, DepotProductVariant, Product
from dairy_ops.models.delivery import DeliveryScheduleEntry
from dairy_ops.models.enums import (
    DeliverySchedule,
    DeliveryStatus,
    PaymentMode,
    PaymentStatus,
    TransactionStatus,
    TransactionType,
    UserRole,
    WalletPaymentMethod,
)
from dairy_ops.models.member import DeliveryAddress, Member
from dairy_ops.models.subscription import ProductOrder, Subscription
from dairy_ops.models.wallet import WalletTransaction

__all__ = [
    "Base",
    "BaseEntity",
    # Master data
    "Agency",
    "AreaMaster",
    "Depot",
    "DepotProductVariant",
    "Product",
    # Members
    "Member",
    "DeliveryAddress",
    # Orders and subscriptions
    "ProductOrder",
    "Subscription",
    "DeliveryScheduleEntry",
    "WalletTransaction",
    # Enums
    "DeliverySchedule",
    "DeliveryStatus",
    "PaymentMode",
    "PaymentStatus",
    "TransactionStatus",
    "TransactionType",
    "UserRole",
    "WalletPaymentMethod",
]
