"""
Track Order Use Case

Business logic for the public tracking page.
"""

import logging
from dataclasses import dataclass

from app.core.domain import EntityNotFoundException, WrongCodeFormatException
from app.domains.ecommerce.application.ports import IOrderRepository
from app.domains.ecommerce.domain.entities.order import Order
from app.domains.ecommerce.domain.services.order_tracking import (
    OrderTrackingService,
    StatusInfo,
    TimelineStep,
)

logger = logging.getLogger(__name__)


@dataclass
class TrackOrderResponse:
    """Response from order tracking."""

    order: Order
    status_info: StatusInfo
    timeline: list[TimelineStep]


class TrackOrderUseCase:
    """
    Use Case: Track Order

    Retrieves tracking information for an order.

    Responsibilities:
    - Find order by order number
    - Tell payment references apart from unknown order numbers
    - Project status history into status info and timeline
    """

    def __init__(self, order_repository: IOrderRepository, tracking_service: OrderTrackingService):
        """
        Initialize use case with dependencies.

        Args:
            order_repository: Repository for order data access
            tracking_service: Status info and timeline projection
        """
        self.order_repository = order_repository
        self.tracking_service = tracking_service

    async def execute(self, order_number: str) -> TrackOrderResponse:
        """
        Get tracking information for an order.

        Raises:
            WrongCodeFormatException: The code looks like a payment or shipment reference
            EntityNotFoundException: No order with this number
        """
        code = (order_number or "").strip()
        order = await self.order_repository.get_by_order_number(code) if code else None

        if order is None:
            if self.tracking_service.looks_like_reference(code):
                logger.info(f"Tracking lookup with reference-like code: {code}")
                raise WrongCodeFormatException(code)
            raise EntityNotFoundException("Order", code, message=f"Order {code} not found")

        return TrackOrderResponse(
            order=order,
            status_info=self.tracking_service.status_info(order.status),
            timeline=self.tracking_service.timeline(order),
        )


__all__ = ["TrackOrderUseCase", "TrackOrderResponse"]
