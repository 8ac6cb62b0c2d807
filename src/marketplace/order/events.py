"""Domain events for the Order aggregate.

All events are versioned, immutable facts raised by a successful mutation.
A call that fails raises no event. Item and shipment events carry the totals
recomputed after the change; stock-relevant events carry the quantity map the
inventory collaborator has to apply.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderCreated:
    """A customer opened a new order (in Cart state)."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    delivery_address = Text(required=True)  # JSON: address dict
    created_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class ItemAdded:
    """A product was added to the order, or merged into its existing line."""

    __version__ = 1

    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    store_id = Identifier(required=True)
    quantity = Integer(required=True)  # units added by this call
    line_quantity = Integer(required=True)  # units on the line afterwards
    unit_price = Float(required=True)
    new_items_total = Float(required=True)
    new_grand_total = Float(required=True)


@marketplace.event(part_of="Order")
class ItemQuantityUpdated:
    """The quantity of an existing line item was replaced."""

    __version__ = 1

    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    new_items_total = Float(required=True)
    new_grand_total = Float(required=True)


@marketplace.event(part_of="Order")
class ItemRemoved:
    """A line item was removed from the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    new_items_total = Float(required=True)
    new_grand_total = Float(required=True)


@marketplace.event(part_of="Order")
class ShipmentSet:
    """A store's shipping charge was attached, replacing any previous one."""

    __version__ = 1

    order_id = Identifier(required=True)
    store_id = Identifier(required=True)
    value = Float(required=True)
    previous_value = Float()
    new_shipping_total = Float(required=True)
    new_grand_total = Float(required=True)


@marketplace.event(part_of="Order")
class OrderFinalized:
    """The cart was closed and the order now awaits payment."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_method = String(required=True)
    items_total = Float(required=True)
    shipping_total = Float(required=True)
    grand_total = Float(required=True)
    finalized_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class PaymentConfirmed:
    """Payment was confirmed after the authoritative stock check passed.

    Stock for every line has to be decremented by the inventory collaborator.
    """

    __version__ = 1

    order_id = Identifier(required=True)
    payment_method = String(required=True)
    grand_total = Float(required=True)
    quantities = Text(required=True)  # JSON: {product_id: units} to decrement
    paid_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class PreparationStarted:
    """Stores started picking and packing the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    started_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderShipped:
    """The order left the stores and is in transit."""

    __version__ = 1

    order_id = Identifier(required=True)
    shipped_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderDelivered:
    """The order reached the customer. Terminal."""

    __version__ = 1

    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled. Terminal.

    When ``restock_required`` is set, the quantities previously decremented at
    payment have to be restored.
    """

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = String(max_length=500)
    restock_required = Boolean(default=False)
    quantities = Text()  # JSON: {product_id: units} to restore
    cancelled_at = DateTime(required=True)
