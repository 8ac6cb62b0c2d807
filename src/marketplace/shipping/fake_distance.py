"""Fake distance provider — deterministic distances for testing and development."""

from decimal import Decimal

from marketplace.shared.money import to_decimal
from marketplace.shipping.port import DistancePort


class FakeDistance(DistancePort):
    """Returns a configured distance, optionally per (origin, destination) postal code pair."""

    def __init__(self, default_km=Decimal("10")):
        self.default_km = to_decimal(default_km)
        self.routes: dict[tuple[str, str], Decimal] = {}

    def configure(self, default_km=None, routes=None):
        """Configure the fake distances for testing."""
        if default_km is not None:
            self.default_km = to_decimal(default_km)
        for (origin_code, destination_code), km in (routes or {}).items():
            self.routes[(origin_code, destination_code)] = to_decimal(km)

    def distance_km(self, origin, destination) -> Decimal:
        return self.routes.get((origin.postal_code, destination.postal_code), self.default_km)
