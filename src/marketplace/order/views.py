"""Read-only snapshots of an order's line items and store shipments.

The Order hands these out instead of its child entities. They are frozen
copies taken at the moment of the call: changing the order later does not
change a snapshot, and a snapshot offers no way to change the order.
"""

from dataclasses import dataclass
from decimal import Decimal

from marketplace.shared.money import to_decimal, to_money


@dataclass(frozen=True)
class LineItemView:
    """One product line as it stood when the snapshot was taken."""

    id: str
    product_id: str
    store_id: str
    quantity: int
    unit_price: float

    @classmethod
    def of(cls, item) -> "LineItemView":
        return cls(
            id=str(item.id),
            product_id=str(item.product_id),
            store_id=str(item.store_id),
            quantity=item.quantity,
            unit_price=item.unit_price,
        )

    @property
    def subtotal(self) -> Decimal:
        return to_money(to_decimal(self.unit_price) * self.quantity)


@dataclass(frozen=True)
class ShipmentView:
    """A store's shipping charge. Equal when store and charge match."""

    store_id: str
    value: float

    @classmethod
    def of(cls, shipment) -> "ShipmentView":
        return cls(store_id=str(shipment.store_id), value=shipment.value)

    @property
    def amount(self) -> Decimal:
        return to_money(self.value)
