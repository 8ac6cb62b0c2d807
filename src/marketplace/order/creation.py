"""Order creation — command and handler."""

import json

import structlog
from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class CreateOrder:
    """Open a new order (cart) for a customer."""

    customer_id = Identifier(required=True)
    delivery_address = Text(required=True)  # JSON: address dict


@marketplace.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        delivery_address = (
            json.loads(command.delivery_address)
            if isinstance(command.delivery_address, str)
            else command.delivery_address
        )

        order = Order.create(
            customer_id=command.customer_id,
            delivery_address=delivery_address,
        )
        current_domain.repository_for(Order).add(order)

        logger.info("Order created", order_id=str(order.id), customer_id=str(command.customer_id))
        return str(order.id)
