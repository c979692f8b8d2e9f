"""
Service layer.

Services receive a ``session_factory`` and open one UnitOfWork per
operation; they never build engines themselves.
"""

from dairy_ops.services.invoice import InvoiceService
from dairy_ops.services.subscription import (
    DeliveryScheduleService,
    LifecycleService,
    SubscriptionService,
)
from dairy_ops.services.wallet import WalletService

__all__ = [
    "DeliveryScheduleService",
    "InvoiceService",
    "LifecycleService",
    "SubscriptionService",
    "WalletService",
]
