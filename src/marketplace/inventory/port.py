"""Inventory oracle port — abstract interface to the stock-keeping system.

The order aggregate only consumes figures fetched through this port; command
handlers do the fetching and apply the ``StockAdjustment`` a transition owes.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping

from marketplace.order.adjustment import StockAction, StockAdjustment


class InventoryOracle(ABC):
    """Abstract interface for inventory adapters."""

    @abstractmethod
    def available_stock(self, product_id: str) -> int:
        """Units of the product currently available (never negative).

        The figure may be stale by the time the order is paid.
        """
        ...

    @abstractmethod
    def decrement(self, quantities: Mapping[str, int]) -> None:
        """Consume stock for every product in ``quantities``."""
        ...

    @abstractmethod
    def restore(self, quantities: Mapping[str, int]) -> None:
        """Return previously consumed stock for every product in ``quantities``."""
        ...

    def stock_snapshot(self, product_ids: Iterable[str]) -> dict[str, int]:
        """Authoritative availability for several products at once."""
        return {str(product_id): self.available_stock(str(product_id)) for product_id in product_ids}

    def apply(self, adjustment: StockAdjustment) -> None:
        """Carry out the stock effect a transition owes."""
        if adjustment.action == StockAction.DECREMENT:
            self.decrement(adjustment.quantities)
        elif adjustment.action == StockAction.RESTORE:
            self.restore(adjustment.quantities)
