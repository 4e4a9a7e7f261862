"""
E-commerce Domain Services

Domain services that encapsulate business logic
that doesn't belong to a single entity.
"""

from app.domains.ecommerce.domain.services.discount_resolution import (
    PriceResolution,
    resolve,
    select_winning_rule,
)
from app.domains.ecommerce.domain.services.order_pricing import (
    CartLine,
    OrderPricing,
    OrderPricingService,
    PricedLine,
)
from app.domains.ecommerce.domain.services.order_state_machine import (
    OrderStateMachine,
    TransitionResult,
)
from app.domains.ecommerce.domain.services.order_tracking import (
    OrderTrackingService,
    StatusInfo,
    TimelineStep,
)

__all__ = [
    "resolve",
    "select_winning_rule",
    "PriceResolution",
    "CartLine",
    "PricedLine",
    "OrderPricing",
    "OrderPricingService",
    "OrderStateMachine",
    "TransitionResult",
    "OrderTrackingService",
    "StatusInfo",
    "TimelineStep",
]
