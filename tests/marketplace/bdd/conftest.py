"""Shared BDD fixtures and step definitions for the marketplace order."""

from decimal import Decimal

import pytest
from marketplace.inventory import get_inventory
from marketplace.order.order import Order
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from pytest_bdd import given, parsers, then, when

_ORDER_ERRORS = (ValidationError, InvalidOperationError, ObjectNotFoundError)


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the error raised by the last When step."""
    return {"exc": None}


@pytest.fixture()
def inventory():
    return get_inventory()


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('an order for customer "{customer_id}"'), target_fixture="order")
def order_for_customer(customer_id, delivery_address):
    return Order.create(customer_id=customer_id, delivery_address=delivery_address)


@given(parsers.cfparse('the inventory holds {units:d} units of product "{product_id}"'))
def inventory_holds(inventory, units, product_id):
    inventory.set_stock(product_id, units)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('product "{product_id}" from store "{store_id}" is added with quantity {qty:d} at {price:f}'))
@when(parsers.cfparse('product "{product_id}" from store "{store_id}" is added with quantity {qty:d} at {price:f}'))
def add_product(order, inventory, product_id, store_id, qty, price, error):
    try:
        order.add_item(
            product_id=product_id,
            store_id=store_id,
            quantity=qty,
            unit_price=price,
            available_stock=inventory.available_stock(product_id),
        )
    except _ORDER_ERRORS as exc:
        error["exc"] = exc


@given(parsers.cfparse('shipping for store "{store_id}" is set to {value:f}'))
@when(parsers.cfparse('shipping for store "{store_id}" is set to {value:f}'))
def set_shipping(order, store_id, value, error):
    try:
        order.set_shipment(store_id, value)
    except _ORDER_ERRORS as exc:
        error["exc"] = exc


@given(parsers.cfparse('the order is finalized with payment method "{method}"'))
@when(parsers.cfparse('the order is finalized with payment method "{method}"'))
def finalize_order(order, method, error):
    try:
        order.finalize(method)
    except _ORDER_ERRORS as exc:
        error["exc"] = exc


@given("payment is confirmed")
@when("payment is confirmed")
def confirm_payment(order, inventory, error):
    snapshot = inventory.stock_snapshot(order.stock_quantities().keys())
    try:
        adjustment = order.confirm_payment(snapshot)
    except _ORDER_ERRORS as exc:
        error["exc"] = exc
        return
    inventory.apply(adjustment)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then(parsers.cfparse("the items total is {amount}"))
def items_total_is(order, amount):
    assert order.items_total == Decimal(amount)


@then(parsers.cfparse("the shipping total is {amount}"))
def shipping_total_is(order, amount):
    assert order.shipping_total == Decimal(amount)


@then(parsers.cfparse("the grand total is {amount}"))
def grand_total_is(order, amount):
    assert order.grand_total == Decimal(amount)


@then(parsers.cfparse("the order has {count:d} line items"))
def order_has_line_items(order, count):
    assert len(order.line_items()) == count


@then(parsers.cfparse('the inventory holds {units:d} units of product "{product_id}"'))
def inventory_still_holds(inventory, units, product_id):
    assert inventory.available_stock(product_id) == units


@then(parsers.cfparse('the operation fails with "{error_name}"'))
def operation_fails_with(error, error_name):
    assert error["exc"] is not None
    assert type(error["exc"]).__name__ == error_name


@then("no error is raised")
def no_error(error):
    assert error["exc"] is None
