"""
Pydantic request/response schemas.
"""

from dairy_ops.schemas.delivery import (
    AgencyDeliverySummary,
    AgencyDeliveryTotals,
    BulkAgencyAssignmentResult,
    DeliveryEntryRead,
    DeliveryStatusChange,
    ProductQuantity,
)
from dairy_ops.schemas.invoice import InvoiceDocument, InvoiceLineItem, InvoiceParty, InvoiceResult
from dairy_ops.schemas.subscription import (
    CancelSubscriptionResult,
    OrderCreate,
    OrderCreated,
    OrderPaymentUpdate,
    ProductOrderDetail,
    ProductOrderRead,
    ScheduledDeliveryRead,
    SchedulePreview,
    SubscriptionCreate,
    SubscriptionCreated,
    SubscriptionDetail,
    SubscriptionLine,
    SubscriptionRead,
    SubscriptionUpdate,
)
from dairy_ops.schemas.wallet import WalletAdjustment, WalletSummary, WalletTransactionRead

__all__ = [
    "AgencyDeliverySummary",
    "AgencyDeliveryTotals",
    "BulkAgencyAssignmentResult",
    "DeliveryEntryRead",
    "DeliveryStatusChange",
    "ProductQuantity",
    "InvoiceDocument",
    "InvoiceLineItem",
    "InvoiceParty",
    "InvoiceResult",
    "CancelSubscriptionResult",
    "OrderCreate",
    "OrderCreated",
    "OrderPaymentUpdate",
    "ProductOrderDetail",
    "ProductOrderRead",
    "ScheduledDeliveryRead",
    "SchedulePreview",
    "SubscriptionCreate",
    "SubscriptionCreated",
    "SubscriptionDetail",
    "SubscriptionLine",
    "SubscriptionRead",
    "SubscriptionUpdate",
    "WalletAdjustment",
    "WalletSummary",
    "WalletTransactionRead",
]
