"""Order error kinds.

Each error extends the matching ``protean.exceptions`` class, so callers that
already catch ``ValidationError``, ``InvalidOperationError`` or
``ObjectNotFoundError`` keep working. All of them carry ``messages`` in the
usual ``{field: [message]}`` shape plus structured attributes for callers that
build their own user-facing text.
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError


class InvalidArgument(ValidationError):
    """Malformed input: empty id, non-positive quantity or price, negative value."""

    @classmethod
    def for_field(cls, field, message):
        return cls({field: [message]})


class _WithMessages:
    """``messages`` for protean exceptions that only keep their payload in ``args``."""

    def _set_messages(self, field, message):
        self.messages = {field: [message]}
        return self.messages


class IllegalStateTransition(_WithMessages, InvalidOperationError):
    """The operation is not permitted in the order's current status."""

    def __init__(self, current_status, action, detail=None):
        self.current_status = current_status
        self.action = action
        super().__init__(
            self._set_messages("status", detail or f"Cannot {action} an order in {current_status} state")
        )


class StockInsufficient(_WithMessages, InvalidOperationError):
    """Requested quantity exceeds the stock reported for the product."""

    def __init__(self, product_id, requested, available):
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available
        super().__init__(
            self._set_messages(
                "quantity",
                f"Insufficient stock for product {self.product_id}: {requested} requested, {available} available",
            )
        )


class MissingShipment(_WithMessages, InvalidOperationError):
    """One or more stores in the order have no shipment quote attached."""

    def __init__(self, store_ids):
        self.store_ids = sorted(str(s) for s in store_ids)
        super().__init__(
            self._set_messages("shipments", f"Shipping not quoted for store(s): {', '.join(self.store_ids)}")
        )


class NotFound(_WithMessages, ObjectNotFoundError):
    """The referenced line item does not belong to the order."""

    def __init__(self, item_id):
        self.item_id = str(item_id)
        super().__init__(self._set_messages("item_id", f"Item {self.item_id} not found in order"))
