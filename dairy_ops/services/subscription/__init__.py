from .delivery_schedule_service import DeliveryScheduleService
from .lifecycle_service import LifecycleService
from .pricing_resolver import PricingResolver, ResolvedPrice, rate_for_period
from .schedule_generator import (
    ScheduledDelivery,
    expiry_date,
    generate_delivery_schedule,
    normalize_weekdays,
    total_quantity,
)
from .subscription_service import SubscriptionService
from .wallet_settlement import SettlementResult, settle

__all__ = [
    "DeliveryScheduleService",
    "LifecycleService",
    "PricingResolver",
    "ResolvedPrice",
    "rate_for_period",
    "ScheduledDelivery",
    "expiry_date",
    "generate_delivery_schedule",
    "normalize_weekdays",
    "total_quantity",
    "SubscriptionService",
    "SettlementResult",
    "settle",
]
