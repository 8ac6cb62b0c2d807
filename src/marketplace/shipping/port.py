"""Shipping ports — abstract interfaces for quoting shipping and measuring distance.

The order aggregate never quotes shipping itself. The ``QuoteShipment``
command handler asks a ``ShippingQuoteService`` for a store's charge and
attaches the result with ``Order.set_shipment``.
"""

from abc import ABC, abstractmethod
from decimal import Decimal


class ShippingQuoteService(ABC):
    """Abstract interface for shipping quotes."""

    @abstractmethod
    def quote(self, origin, destination) -> Decimal:
        """Shipping cost from ``origin`` to ``destination`` (both ``Address``).

        Returns:
            Non-negative amount in cents.
        """
        ...


class DistancePort(ABC):
    """Abstract interface for distance providers (maps APIs and the like)."""

    @abstractmethod
    def distance_km(self, origin, destination) -> Decimal:
        """Road distance in kilometres between two addresses."""
        ...
