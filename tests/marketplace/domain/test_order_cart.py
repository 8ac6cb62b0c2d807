"""Tests for cart assembly: adding, resizing and removing line items."""

from decimal import Decimal

import pytest
from marketplace.order.errors import IllegalStateTransition, InvalidArgument, NotFound, StockInsufficient
from marketplace.order.events import ItemAdded, ItemQuantityUpdated, ItemRemoved
from marketplace.order.order import Order, OrderStatus

ADDRESS = {
    "street": "Avenida Paulista",
    "number": "1000",
    "district": "Bela Vista",
    "city": "Sao Paulo",
    "state": "SP",
    "postal_code": "01310-100",
}


def _make_order():
    order = Order.create(customer_id="cust-001", delivery_address=ADDRESS)
    order._events.clear()
    return order


class TestAddItem:
    def test_add_item(self):
        order = _make_order()
        item = order.add_item("prod-A", "store-1", 2, 10.0, available_stock=5)
        assert len(order.line_items()) == 1
        assert item.product_id == "prod-A"
        assert item.quantity == 2
        assert order.items_total == Decimal("20.00")

    def test_add_items_from_several_stores(self):
        order = _make_order()
        order.add_item("prod-A", "store-1", 1, 10.0, available_stock=5)
        order.add_item("prod-B", "store-2", 1, 15.0, available_stock=5)
        assert order.stores() == ["store-1", "store-2"]

    def test_quantity_equal_to_stock_is_accepted(self):
        order = _make_order()
        order.add_item("prod-A", "store-1", 5, 10.0, available_stock=5)
        assert order.item_for_product("prod-A").quantity == 5

    def test_add_item_raises_event(self):
        order = _make_order()
        item = order.add_item("prod-A", "store-1", 2, 10.0, available_stock=5)
        events = [e for e in order._events if isinstance(e, ItemAdded)]
        assert len(events) == 1
        assert events[0].item_id == str(item.id)
        assert events[0].quantity == 2
        assert events[0].line_quantity == 2
        assert events[0].new_items_total == 20.0

    def test_stock_insufficient(self):
        order = _make_order()
        with pytest.raises(StockInsufficient) as exc_info:
            order.add_item("prod-A", "store-1", 6, 10.0, available_stock=5)
        assert exc_info.value.product_id == "prod-A"
        assert exc_info.value.requested == 6
        assert exc_info.value.available == 5
        assert order.line_items() == ()
        assert order._events == []

    def test_zero_stock(self):
        order = _make_order()
        with pytest.raises(StockInsufficient):
            order.add_item("prod-A", "store-1", 1, 10.0, available_stock=0)

    @pytest.mark.parametrize("available", [-1, 2.5, None, True])
    def test_stock_figure_must_be_non_negative_integer(self, available):
        order = _make_order()
        with pytest.raises(InvalidArgument) as exc_info:
            order.add_item("prod-A", "store-1", 1, 10.0, available_stock=available)
        assert "available_stock" in exc_info.value.messages

    @pytest.mark.parametrize(
        "args, field",
        [
            (("", "store-1", 1, 10.0), "product_id"),
            (("prod-A", "", 1, 10.0), "store_id"),
            (("prod-A", "store-1", 0, 10.0), "quantity"),
            (("prod-A", "store-1", -2, 10.0), "quantity"),
            (("prod-A", "store-1", 1, 0.0), "unit_price"),
            (("prod-A", "store-1", 1, -1.0), "unit_price"),
        ],
    )
    def test_invalid_arguments(self, args, field):
        order = _make_order()
        with pytest.raises(InvalidArgument) as exc_info:
            order.add_item(*args, available_stock=10)
        assert field in exc_info.value.messages
        assert order.line_items() == ()

    def test_invalid_argument_is_a_validation_error(self):
        from protean.exceptions import ValidationError

        order = _make_order()
        with pytest.raises(ValidationError):
            order.add_item("prod-A", "store-1", 0, 10.0, available_stock=10)


class TestAddItemMerging:
    def test_same_product_merges_into_one_line(self):
        order = _make_order()
        first = order.add_item("prod-A", "store-1", 2, 10.0, available_stock=10)
        second = order.add_item("prod-A", "store-1", 3, 10.0, available_stock=10)
        assert len(order.line_items()) == 1
        assert second.id == first.id
        assert order.item_for_product("prod-A").quantity == 5

    def test_merge_keeps_first_price(self):
        order = _make_order()
        order.add_item("prod-A", "store-1", 1, 10.0, available_stock=10)
        order.add_item("prod-A", "store-1", 1, 12.0, available_stock=10)
        item = order.item_for_product("prod-A")
        assert item.unit_price == 10.0
        assert order.items_total == Decimal("20.00")

    def test_merge_checks_cumulative_quantity(self):
        order = _make_order()
        order.add_item("prod-A", "store-1", 3, 10.0, available_stock=5)
        with pytest.raises(StockInsufficient) as exc_info:
            order.add_item("prod-A", "store-1", 3, 10.0, available_stock=5)
        assert exc_info.value.requested == 6
        assert order.item_for_product("prod-A").quantity == 3

    def test_merge_event_reports_added_and_line_quantity(self):
        order = _make_order()
        order.add_item("prod-A", "store-1", 2, 10.0, available_stock=10)
        order._events.clear()
        order.add_item("prod-A", "store-1", 3, 10.0, available_stock=10)
        event = order._events[0]
        assert event.quantity == 3
        assert event.line_quantity == 5

    def test_same_product_from_another_store_is_rejected(self):
        order = _make_order()
        order.add_item("prod-A", "store-1", 1, 10.0, available_stock=10)
        with pytest.raises(InvalidArgument) as exc_info:
            order.add_item("prod-A", "store-2", 1, 10.0, available_stock=10)
        assert "store_id" in exc_info.value.messages
        assert order.item_for_product("prod-A").store_id == "store-1"


class TestUpdateItemQuantity:
    def test_update_quantity(self):
        order = _make_order()
        item = order.add_item("prod-A", "store-1", 1, 10.0, available_stock=10)
        order.update_item_quantity(str(item.id), 4, available_stock=10)
        assert order.item_for_product("prod-A").quantity == 4
        assert order.items_total == Decimal("40.00")

    def test_update_quantity_raises_event(self):
        order = _make_order()
        item = order.add_item("prod-A", "store-1", 1, 10.0, available_stock=10)
        order._events.clear()
        order.update_item_quantity(str(item.id), 4, available_stock=10)
        event = order._events[0]
        assert isinstance(event, ItemQuantityUpdated)
        assert event.previous_quantity == 1
        assert event.new_quantity == 4

    def test_update_beyond_stock(self):
        order = _make_order()
        item = order.add_item("prod-A", "store-1", 1, 10.0, available_stock=10)
        with pytest.raises(StockInsufficient):
            order.update_item_quantity(str(item.id), 4, available_stock=3)
        assert order.item_for_product("prod-A").quantity == 1

    def test_update_to_zero(self):
        order = _make_order()
        item = order.add_item("prod-A", "store-1", 1, 10.0, available_stock=10)
        with pytest.raises(InvalidArgument):
            order.update_item_quantity(str(item.id), 0, available_stock=10)

    def test_unknown_item(self):
        order = _make_order()
        with pytest.raises(NotFound) as exc_info:
            order.update_item_quantity("missing", 2, available_stock=10)
        assert exc_info.value.item_id == "missing"


class TestRemoveItem:
    def test_remove_item(self):
        order = _make_order()
        item = order.add_item("prod-A", "store-1", 1, 10.0, available_stock=10)
        order.add_item("prod-B", "store-2", 1, 5.0, available_stock=10)
        order.remove_item(str(item.id))
        assert [i.product_id for i in order.line_items()] == ["prod-B"]
        assert order.items_total == Decimal("5.00")

    def test_remove_item_raises_event(self):
        order = _make_order()
        item = order.add_item("prod-A", "store-1", 1, 10.0, available_stock=10)
        order._events.clear()
        order.remove_item(str(item.id))
        event = order._events[0]
        assert isinstance(event, ItemRemoved)
        assert event.product_id == "prod-A"
        assert event.new_items_total == 0.0

    def test_remove_unknown_item(self):
        order = _make_order()
        order.add_item("prod-A", "store-1", 1, 10.0, available_stock=10)
        with pytest.raises(NotFound):
            order.remove_item("missing")
        assert len(order.line_items()) == 1

    def test_removed_product_can_be_added_again(self):
        order = _make_order()
        item = order.add_item("prod-A", "store-1", 1, 10.0, available_stock=10)
        order.remove_item(str(item.id))
        order.add_item("prod-A", "store-2", 2, 11.0, available_stock=10)
        assert order.item_for_product("prod-A").store_id == "store-2"


class TestCartOnlyOperations:
    def _awaiting_payment_order(self):
        order = _make_order()
        item = order.add_item("prod-A", "store-1", 1, 10.0, available_stock=10)
        order.set_shipment("store-1", 5.0)
        order.finalize("Pix")
        return order, item

    def test_add_item_after_finalize(self):
        order, _ = self._awaiting_payment_order()
        with pytest.raises(IllegalStateTransition) as exc_info:
            order.add_item("prod-B", "store-1", 1, 10.0, available_stock=10)
        assert exc_info.value.current_status == OrderStatus.AWAITING_PAYMENT.value
        assert "status" in exc_info.value.messages

    def test_update_item_after_finalize(self):
        order, item = self._awaiting_payment_order()
        with pytest.raises(IllegalStateTransition):
            order.update_item_quantity(str(item.id), 2, available_stock=10)

    def test_remove_item_after_finalize(self):
        order, item = self._awaiting_payment_order()
        with pytest.raises(IllegalStateTransition):
            order.remove_item(str(item.id))

    def test_state_is_checked_before_arguments(self):
        order, _ = self._awaiting_payment_order()
        with pytest.raises(IllegalStateTransition):
            order.add_item("", "store-1", 0, 10.0, available_stock=10)
