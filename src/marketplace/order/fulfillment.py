"""Order fulfillment — commands and handler.

Handles the post-payment pipeline: preparation, shipment and delivery.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class StartPreparation:
    """Signal that the stores started picking and packing."""

    order_id = Identifier(required=True)


@marketplace.command(part_of="Order")
class MarkShipped:
    """Record that the order left the stores."""

    order_id = Identifier(required=True)


@marketplace.command(part_of="Order")
class MarkDelivered:
    """Record that the customer received the order."""

    order_id = Identifier(required=True)


@marketplace.command_handler(part_of=Order)
class FulfillmentHandler:
    @handle(StartPreparation)
    def start_preparation(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.start_preparation()
        repo.add(order)
        logger.info("Order preparation started", order_id=str(order.id))

    @handle(MarkShipped)
    def mark_shipped(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_shipped()
        repo.add(order)
        logger.info("Order shipped", order_id=str(order.id))

    @handle(MarkDelivered)
    def mark_delivered(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_delivered()
        repo.add(order)
        logger.info("Order delivered", order_id=str(order.id))
