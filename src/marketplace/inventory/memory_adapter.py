"""In-memory inventory adapter — per-product stock counts for tests and development."""

from collections.abc import Mapping

import structlog

from marketplace.inventory.port import InventoryOracle
from marketplace.order.errors import StockInsufficient

logger = structlog.get_logger(__name__)


class InMemoryInventory(InventoryOracle):
    """Keeps stock counts in a dict. Unknown products have no stock."""

    def __init__(self, stock: Mapping[str, int] | None = None):
        self._stock: dict[str, int] = {}
        for product_id, units in (stock or {}).items():
            self.set_stock(product_id, units)

    def set_stock(self, product_id: str, units: int) -> None:
        if units < 0:
            raise ValueError(f"Stock cannot be negative: {units}")
        self._stock[str(product_id)] = units

    def available_stock(self, product_id: str) -> int:
        return self._stock.get(str(product_id), 0)

    def decrement(self, quantities: Mapping[str, int]) -> None:
        # All or nothing: check every product before touching any count
        for product_id, units in quantities.items():
            available = self.available_stock(product_id)
            if units > available:
                raise StockInsufficient(product_id, units, available)

        for product_id, units in quantities.items():
            self._stock[str(product_id)] = self.available_stock(product_id) - units

        logger.info("Stock decremented", quantities=dict(quantities))

    def restore(self, quantities: Mapping[str, int]) -> None:
        for product_id, units in quantities.items():
            self._stock[str(product_id)] = self.available_stock(product_id) + units

        logger.info("Stock restored", quantities=dict(quantities))
