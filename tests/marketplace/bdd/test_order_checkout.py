"""BDD tests for multi-store checkout."""

from pytest_bdd import parsers, scenarios, then

scenarios("features/order_checkout.feature")


@then(parsers.cfparse('the missing shipment is for store "{store_id}"'))
def missing_shipment_for(error, store_id):
    assert error["exc"].store_ids == [store_id]
