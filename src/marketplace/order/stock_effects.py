"""Stock effects of committed orders — event handler.

Paying for an order consumes its stock; cancelling an order that had been paid
returns it. Both effects are applied from the events, which are dispatched
only after the order has been committed, so an order that fails to persist
never moves stock.
"""

import json

import structlog
from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.inventory import get_inventory
from marketplace.order.adjustment import StockAdjustment
from marketplace.order.events import OrderCancelled, PaymentConfirmed
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


@marketplace.event_handler(part_of=Order)
class StockEffectsHandler:
    """Applies the stock adjustment each committed transition owes."""

    @handle(PaymentConfirmed)
    def on_payment_confirmed(self, event: PaymentConfirmed) -> None:
        adjustment = StockAdjustment.decrement(json.loads(event.quantities))
        get_inventory().apply(adjustment)
        logger.info(
            "Stock decremented for paid order",
            order_id=str(event.order_id),
            quantities=adjustment.quantities,
        )

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        if not event.restock_required:
            return

        adjustment = StockAdjustment.restore(json.loads(event.quantities or "{}"))
        get_inventory().apply(adjustment)
        logger.info(
            "Stock restored for cancelled order",
            order_id=str(event.order_id),
            quantities=adjustment.quantities,
        )
