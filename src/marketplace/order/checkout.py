"""Order checkout — command and handler.

Finalizing closes the cart: every store among the line items must already
have a shipment, and the chosen payment method is recorded.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.errors import MissingShipment
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class FinalizeOrder:
    order_id = Identifier(required=True)
    payment_method = String(required=True, max_length=50)


@marketplace.command_handler(part_of=Order)
class FinalizeOrderHandler:
    @handle(FinalizeOrder)
    def finalize_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        try:
            order.finalize(payment_method=command.payment_method)
        except MissingShipment as exc:
            logger.warning(
                "Checkout blocked, shipping not quoted",
                order_id=str(command.order_id),
                store_ids=exc.store_ids,
            )
            raise

        repo.add(order)
        logger.info(
            "Order awaiting payment",
            order_id=str(order.id),
            payment_method=order.payment_method,
            grand_total=order.grand_total,
        )
