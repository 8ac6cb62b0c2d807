"""Payment confirmation — command and handler.

The handler takes an authoritative stock snapshot for every product in the
order and lets the aggregate decide. The stock itself is decremented by
``StockEffectsHandler`` once the paid order has been committed.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.inventory import get_inventory
from marketplace.order.errors import StockInsufficient
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class ConfirmPayment:
    order_id = Identifier(required=True)


@marketplace.command_handler(part_of=Order)
class ConfirmPaymentHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        snapshot = get_inventory().stock_snapshot(order.stock_quantities().keys())
        try:
            adjustment = order.confirm_payment(snapshot)
        except StockInsufficient as exc:
            logger.warning(
                "Payment confirmation rejected, insufficient stock",
                order_id=str(command.order_id),
                product_id=exc.product_id,
                requested=exc.requested,
                available=exc.available,
            )
            raise

        repo.add(order)

        logger.info(
            "Payment confirmed",
            order_id=str(order.id),
            grand_total=order.grand_total,
            to_decrement=adjustment.quantities,
        )
