"""Order cancellation — command and handler.

If payment had already been confirmed, ``StockEffectsHandler`` restores the
stock decremented at payment once the cancellation has been committed.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)


@marketplace.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        adjustment = order.cancel(reason=command.reason)
        repo.add(order)

        logger.info(
            "Order cancelled",
            order_id=str(order.id),
            to_restore=adjustment.quantities,
        )
