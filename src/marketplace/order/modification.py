"""Cart modification — commands and handler.

Item additions and quantity changes consult the inventory oracle for an
optimistic stock figure before the aggregate decides. All modifications are
only allowed in Cart state.
"""

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.inventory import get_inventory
from marketplace.order.errors import StockInsufficient
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class AddItem:
    """Add units of a store's product to an order (merges with an existing line)."""

    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    store_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True)


@marketplace.command(part_of="Order")
class UpdateItemQuantity:
    """Replace the quantity of an existing line item."""

    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    new_quantity = Integer(required=True, min_value=1)


@marketplace.command(part_of="Order")
class RemoveItem:
    """Remove a line item from an order."""

    order_id = Identifier(required=True)
    item_id = Identifier(required=True)


@marketplace.command_handler(part_of=Order)
class ModifyOrderHandler:
    @handle(AddItem)
    def add_item(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        available = get_inventory().available_stock(str(command.product_id))

        try:
            item = order.add_item(
                product_id=command.product_id,
                store_id=command.store_id,
                quantity=command.quantity,
                unit_price=command.unit_price,
                available_stock=available,
            )
        except StockInsufficient as exc:
            logger.warning(
                "Item rejected, insufficient stock",
                order_id=str(command.order_id),
                product_id=exc.product_id,
                requested=exc.requested,
                available=exc.available,
            )
            raise

        repo.add(order)
        return str(item.id)

    @handle(UpdateItemQuantity)
    def update_item_quantity(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        item = next((i for i in order.line_items() if str(i.id) == str(command.item_id)), None)
        available = get_inventory().available_stock(str(item.product_id)) if item is not None else 0

        order.update_item_quantity(
            item_id=command.item_id,
            new_quantity=command.new_quantity,
            available_stock=available,
        )
        repo.add(order)

    @handle(RemoveItem)
    def remove_item(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.remove_item(item_id=command.item_id)
        repo.add(order)
