"""Order aggregate — a multi-store cart that becomes a paid, delivered order.

An order collects line items from any number of independently operated stores,
carries one shipping charge per store, and moves through a strictly forward
state machine:

State Machine:
    CART → AWAITING_PAYMENT → PAID → PREPARING → SHIPPED → DELIVERED
    CANCELLED (from every state except DELIVERED and CANCELLED)

Stock is checked twice. Adding or resizing a line is checked against an
optimistic figure from the inventory oracle; confirming payment re-checks every
line against an authoritative snapshot, because other orders may have consumed
the same stock in between. The aggregate never performs I/O: transitions that
owe a stock effect return a ``StockAdjustment`` the caller must apply.

Every mutating method validates all of its preconditions before changing
anything, so a failed call leaves the order exactly as it was.
"""

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from marketplace.domain import marketplace
from marketplace.order.adjustment import StockAdjustment
from marketplace.order.errors import (
    IllegalStateTransition,
    InvalidArgument,
    MissingShipment,
    NotFound,
    StockInsufficient,
)
from marketplace.order.events import (
    ItemAdded,
    ItemQuantityUpdated,
    ItemRemoved,
    OrderCancelled,
    OrderCreated,
    OrderDelivered,
    OrderFinalized,
    OrderShipped,
    PaymentConfirmed,
    PreparationStarted,
    ShipmentSet,
)
from marketplace.order.views import LineItemView, ShipmentView
from marketplace.shared.address import Address, to_address
from marketplace.shared.money import is_quantity, money_sum, to_decimal, to_money


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    CART = "Cart"
    AWAITING_PAYMENT = "Awaiting_Payment"
    PAID = "Paid"
    PREPARING = "Preparing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentMethod(Enum):
    CREDIT_CARD = "Credit_Card"
    DEBIT_CARD = "Debit_Card"
    PIX = "Pix"
    BOLETO = "Boleto"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.CART: {OrderStatus.AWAITING_PAYMENT, OrderStatus.CANCELLED},
    OrderStatus.AWAITING_PAYMENT: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Stock was decremented at payment; cancelling from these owes a restore
_STOCK_CONSUMED_STATES = {
    OrderStatus.PAID,
    OrderStatus.PREPARING,
    OrderStatus.SHIPPED,
}

_SHIPMENT_EDITABLE_STATES = {
    OrderStatus.CART,
    OrderStatus.AWAITING_PAYMENT,
}

_MAX_REASON_LENGTH = 500


# ---------------------------------------------------------------------------
# Argument checks
# ---------------------------------------------------------------------------
def _require_id(field, value):
    if value is None or not str(value).strip():
        raise InvalidArgument.for_field(field, f"{field} must not be empty")
    return str(value)


def _require_positive_quantity(field, value):
    if not is_quantity(value) or value <= 0:
        raise InvalidArgument.for_field(field, f"{field} must be a positive integer, got {value!r}")
    return value


def _require_stock_figure(field, value):
    if not is_quantity(value) or value < 0:
        raise InvalidArgument.for_field(field, f"{field} must be a non-negative integer, got {value!r}")
    return value


def _require_amount(field, value, allow_zero):
    try:
        amount = to_decimal(value)
    except ValueError:
        raise InvalidArgument.for_field(field, f"{value!r} is not a valid amount") from None

    if amount < 0 or (amount == 0 and not allow_zero):
        bound = "non-negative" if allow_zero else "greater than zero"
        raise InvalidArgument.for_field(field, f"{field} must be {bound}, got {value!r}")
    return amount


def _as_payment_method(value):
    if isinstance(value, PaymentMethod):
        return value
    try:
        return PaymentMethod(value)
    except ValueError:
        pass
    if isinstance(value, str) and value.upper() in PaymentMethod.__members__:
        return PaymentMethod[value.upper()]
    raise InvalidArgument.for_field(
        "payment_method",
        f"Unsupported payment method {value!r}. Choose one of: {', '.join(m.value for m in PaymentMethod)}",
    )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class LineItem:
    """One product line: which store sells it, how many units, at what price.

    The unit price is locked when the product first enters the order. The
    quantity may change while the order is still a cart.
    """

    product_id = Identifier(required=True)
    store_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)

    @classmethod
    def create(cls, product_id, store_id, quantity, unit_price):
        product_id = _require_id("product_id", product_id)
        store_id = _require_id("store_id", store_id)
        quantity = _require_positive_quantity("quantity", quantity)
        price = _require_amount("unit_price", unit_price, allow_zero=False)

        return cls(
            product_id=product_id,
            store_id=store_id,
            quantity=quantity,
            unit_price=float(price),
        )

    @property
    def subtotal(self):
        return to_money(to_decimal(self.unit_price) * self.quantity)

    def update_quantity(self, new_quantity):
        """Replace the quantity. Only the owning Order calls this, while it is a cart."""
        self.quantity = _require_positive_quantity("quantity", new_quantity)


@marketplace.entity(part_of="Order")
class StoreShipment:
    """The shipping charge quoted for one store's share of an order.

    Never edited in place: setting a new charge for the store replaces it.
    """

    store_id = Identifier(required=True)
    value = Float(required=True, min_value=0.0)

    @classmethod
    def create(cls, store_id, value):
        store_id = _require_id("store_id", store_id)
        amount = _require_amount("value", value, allow_zero=True)
        return cls(store_id=store_id, value=float(amount))

    @property
    def amount(self):
        return to_money(self.value)

    def same_as(self, other):
        """Value comparison on (store, charge), regardless of entity identity."""
        return (
            isinstance(other, StoreShipment)
            and str(self.store_id) == str(other.store_id)
            and self.amount == other.amount
        )


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    customer_id = Identifier(required=True)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.CART.value,
    )
    items = HasMany(LineItem)
    shipments = HasMany(StoreShipment)
    delivery_address = ValueObject(Address)
    payment_method = String(choices=PaymentMethod, max_length=50)
    cancellation_reason = String(max_length=_MAX_REASON_LENGTH)
    created_at = DateTime()
    updated_at = DateTime()
    paid_at = DateTime()

    @invariant.post
    def one_line_item_per_product(self):
        product_ids = [str(i.product_id) for i in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["An order holds at most one line item per product"]})

    @invariant.post
    def one_shipment_per_store(self):
        store_ids = [str(s.store_id) for s in self.shipments]
        if len(store_ids) != len(set(store_ids)):
            raise ValidationError({"shipments": ["An order holds at most one shipment per store"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id, delivery_address):
        """Open a new order in Cart state.

        Args:
            customer_id: The customer placing the order.
            delivery_address: An ``Address`` or a dict with street, number,
                complement, district, city, state and postal_code. It is
                snapshotted on the order.
        """
        customer_id = _require_id("customer_id", customer_id)
        address = to_address(delivery_address, field="delivery_address")
        now = datetime.now(UTC)

        order = cls(
            customer_id=customer_id,
            delivery_address=address,
            status=OrderStatus.CART.value,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                customer_id=customer_id,
                delivery_address=json.dumps(address.to_dict()),
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Read-only views and derived totals
    # -------------------------------------------------------------------
    def line_items(self):
        """Frozen snapshots of the line items, in the order they were added."""
        return tuple(LineItemView.of(item) for item in self.items)

    def store_shipments(self):
        """Frozen snapshots of the store shipments, in the order they were set."""
        return tuple(ShipmentView.of(shipment) for shipment in self.shipments)

    def stores(self):
        """Distinct store ids among the line items, in first-seen order."""
        seen = []
        for item in self.items:
            store_id = str(item.store_id)
            if store_id not in seen:
                seen.append(store_id)
        return seen

    def stores_missing_shipment(self):
        quoted = {str(s.store_id) for s in self.shipments}
        return [store_id for store_id in self.stores() if store_id not in quoted]

    def item_for_product(self, product_id):
        item = self._line_for_product(product_id)
        return LineItemView.of(item) if item is not None else None

    def shipment_for(self, store_id):
        shipment = self._shipment_of_store(store_id)
        return ShipmentView.of(shipment) if shipment is not None else None

    def stock_quantities(self):
        """Units per product id across all line items."""
        return {str(item.product_id): item.quantity for item in self.items}

    @property
    def items_total(self):
        return money_sum(item.subtotal for item in self.items)

    @property
    def shipping_total(self):
        return money_sum(shipment.amount for shipment in self.shipments)

    @property
    def grand_total(self):
        return self.items_total + self.shipping_total

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _assert_status(self, allowed, action):
        current = OrderStatus(self.status)
        if current not in allowed:
            raise IllegalStateTransition(current.value, action)

    def _assert_can_transition(self, target_status, action):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise IllegalStateTransition(current.value, action)

    def _line_for_product(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def _shipment_of_store(self, store_id):
        return next((s for s in self.shipments if str(s.store_id) == str(store_id)), None)

    def _find_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise NotFound(item_id)
        return item

    # -------------------------------------------------------------------
    # Cart assembly (only in CART state)
    # -------------------------------------------------------------------
    def add_item(self, product_id, store_id, quantity, unit_price, available_stock):
        """Add a product to the cart, merging with its existing line if present.

        ``available_stock`` is the inventory oracle's current figure for the
        product. The cumulative quantity on the line, not just the units being
        added, must fit within it.

        Returns a snapshot of the resulting line item.
        """
        self._assert_status({OrderStatus.CART}, "add items to")

        candidate = LineItem.create(product_id, store_id, quantity, unit_price)
        available = _require_stock_figure("available_stock", available_stock)

        existing = self._line_for_product(candidate.product_id)
        if existing is not None and str(existing.store_id) != str(candidate.store_id):
            raise InvalidArgument.for_field(
                "store_id",
                f"Product {candidate.product_id} is already in the order from store {existing.store_id}",
            )

        requested = quantity + (existing.quantity if existing else 0)
        if requested > available:
            raise StockInsufficient(candidate.product_id, requested, available)

        if existing:
            existing.update_quantity(requested)
            item = existing
        else:
            self.add_items(candidate)
            item = candidate

        self.updated_at = datetime.now(UTC)

        self.raise_(
            ItemAdded(
                order_id=str(self.id),
                item_id=str(item.id),
                product_id=str(item.product_id),
                store_id=str(item.store_id),
                quantity=quantity,
                line_quantity=item.quantity,
                unit_price=item.unit_price,
                new_items_total=float(self.items_total),
                new_grand_total=float(self.grand_total),
            )
        )
        return LineItemView.of(item)

    def update_item_quantity(self, item_id, new_quantity, available_stock):
        """Replace a line's quantity, checked against the oracle's figure."""
        self._assert_status({OrderStatus.CART}, "update items of")
        _require_positive_quantity("quantity", new_quantity)
        available = _require_stock_figure("available_stock", available_stock)

        item = self._find_item(item_id)
        if new_quantity > available:
            raise StockInsufficient(item.product_id, new_quantity, available)

        previous_quantity = item.quantity
        item.update_quantity(new_quantity)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ItemQuantityUpdated(
                order_id=str(self.id),
                item_id=str(item.id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
                new_items_total=float(self.items_total),
                new_grand_total=float(self.grand_total),
            )
        )

    def remove_item(self, item_id):
        """Remove a line item from the cart."""
        self._assert_status({OrderStatus.CART}, "remove items from")
        item = self._find_item(item_id)

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ItemRemoved(
                order_id=str(self.id),
                item_id=str(item.id),
                product_id=str(item.product_id),
                new_items_total=float(self.items_total),
                new_grand_total=float(self.grand_total),
            )
        )

    # -------------------------------------------------------------------
    # Shipping (CART or AWAITING_PAYMENT)
    # -------------------------------------------------------------------
    def set_shipment(self, store_id, value):
        """Attach a store's shipping charge, replacing any previous one."""
        self._assert_status(_SHIPMENT_EDITABLE_STATES, "set shipping on")
        shipment = StoreShipment.create(store_id, value)

        previous = self._shipment_of_store(shipment.store_id)
        with atomic_change(self):
            if previous is not None:
                self.remove_shipments(previous)
            self.add_shipments(shipment)

        self.updated_at = datetime.now(UTC)

        self.raise_(
            ShipmentSet(
                order_id=str(self.id),
                store_id=str(shipment.store_id),
                value=shipment.value,
                previous_value=previous.value if previous is not None else None,
                new_shipping_total=float(self.shipping_total),
                new_grand_total=float(self.grand_total),
            )
        )
        return ShipmentView.of(shipment)

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def finalize(self, payment_method):
        """Close the cart and wait for payment.

        Requires at least one line item and a shipment for every store that
        sells one of them.
        """
        self._assert_can_transition(OrderStatus.AWAITING_PAYMENT, "finalize")
        method = _as_payment_method(payment_method)

        if not self.items:
            raise IllegalStateTransition(
                self.status,
                "finalize",
                "Cannot finalize an order without items",
            )

        missing = self.stores_missing_shipment()
        if missing:
            raise MissingShipment(missing)

        now = datetime.now(UTC)
        self.payment_method = method.value
        self.status = OrderStatus.AWAITING_PAYMENT.value
        self.updated_at = now

        self.raise_(
            OrderFinalized(
                order_id=str(self.id),
                payment_method=method.value,
                items_total=float(self.items_total),
                shipping_total=float(self.shipping_total),
                grand_total=float(self.grand_total),
                finalized_at=now,
            )
        )

    def confirm_payment(self, stock_snapshot):
        """Confirm payment after re-checking stock authoritatively.

        Args:
            stock_snapshot: Mapping of product id to units available right
                now. A product missing from the snapshot counts as zero.

        Returns:
            ``StockAdjustment`` to decrement every line's quantity.
        """
        self._assert_can_transition(OrderStatus.PAID, "confirm payment for")
        if not isinstance(stock_snapshot, Mapping):
            raise InvalidArgument.for_field("stock_snapshot", "A stock snapshot mapping is required")

        snapshot = {str(product_id): units for product_id, units in stock_snapshot.items()}
        for item in self.items:
            available = _require_stock_figure(
                f"stock_snapshot[{item.product_id}]",
                snapshot.get(str(item.product_id), 0),
            )
            if item.quantity > available:
                raise StockInsufficient(item.product_id, item.quantity, available)

        quantities = self.stock_quantities()
        now = datetime.now(UTC)
        self.status = OrderStatus.PAID.value
        self.paid_at = now
        self.updated_at = now

        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                payment_method=self.payment_method,
                grand_total=float(self.grand_total),
                quantities=json.dumps(quantities),
                paid_at=now,
            )
        )
        return StockAdjustment.decrement(quantities)

    def start_preparation(self):
        """Stores start picking and packing."""
        self._assert_can_transition(OrderStatus.PREPARING, "start preparing")
        now = datetime.now(UTC)
        self.status = OrderStatus.PREPARING.value
        self.updated_at = now

        self.raise_(PreparationStarted(order_id=str(self.id), started_at=now))

    def mark_shipped(self):
        """The order left the stores."""
        self._assert_can_transition(OrderStatus.SHIPPED, "ship")
        now = datetime.now(UTC)
        self.status = OrderStatus.SHIPPED.value
        self.updated_at = now

        self.raise_(OrderShipped(order_id=str(self.id), shipped_at=now))

    def mark_delivered(self):
        """The customer received the order."""
        self._assert_can_transition(OrderStatus.DELIVERED, "deliver")
        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        self.updated_at = now

        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=now))

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, reason=None):
        """Cancel the order.

        Cancelling an already cancelled or a delivered order is an error, not a
        no-op. Stock is owed back only if payment had been confirmed; an order
        cancelled while awaiting payment never consumed any.

        Returns:
            ``StockAdjustment`` to restore every line's quantity, or one with
            no action.
        """
        current = OrderStatus(self.status)
        self._assert_can_transition(OrderStatus.CANCELLED, "cancel")
        if reason is not None and len(str(reason)) > _MAX_REASON_LENGTH:
            raise InvalidArgument.for_field(
                "reason", f"Cancellation reason must be at most {_MAX_REASON_LENGTH} characters"
            )

        restock_required = current in _STOCK_CONSUMED_STATES
        quantities = self.stock_quantities() if restock_required else {}

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                previous_status=current.value,
                reason=reason,
                restock_required=restock_required,
                quantities=json.dumps(quantities),
                cancelled_at=now,
            )
        )

        if restock_required:
            return StockAdjustment.restore(quantities)
        return StockAdjustment.none()
