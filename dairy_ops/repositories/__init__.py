"""
Session-bound repositories. None of them commit; the caller's
UnitOfWork owns the transaction.
"""

from dairy_ops.repositories.base import BaseRepository
from dairy_ops.repositories.catalog_repository import (
    AgencyRepository,
    AreaMasterRepository,
    DepotProductVariantRepository,
    ProductRepository,
)
from dairy_ops.repositories.delivery_entry_repository import DeliveryEntryRepository
from dairy_ops.repositories.member_repository import DeliveryAddressRepository, MemberRepository
from dairy_ops.repositories.order_repository import ProductOrderRepository
from dairy_ops.repositories.subscription_repository import SubscriptionRepository
from dairy_ops.repositories.wallet_transaction_repository import WalletTransactionRepository

__all__ = [
    "BaseRepository",
    "AgencyRepository",
    "AreaMasterRepository",
    "DepotProductVariantRepository",
    "ProductRepository",
    "DeliveryEntryRepository",
    "DeliveryAddressRepository",
    "MemberRepository",
    "ProductOrderRepository",
    "SubscriptionRepository",
    "WalletTransactionRepository",
]
