"""Tariff-based shipping quotes.

Each store prices shipping with one tariff: free, a fixed charge, a rate per
kilometre, or a table of distance bands. Free and fixed tariffs never consult
the distance provider.
"""

from collections.abc import Sequence
from decimal import Decimal
from enum import Enum

from protean.exceptions import InvalidOperationError

from marketplace.order.errors import InvalidArgument
from marketplace.shared.money import ZERO, to_decimal, to_money
from marketplace.shipping.port import DistancePort, ShippingQuoteService


class TariffType(Enum):
    PER_KM = "Per_Km"
    FIXED = "Fixed"
    DISTANCE_BAND = "Distance_Band"
    FREE = "Free"


def _as_tariff_type(value):
    if isinstance(value, TariffType):
        return value
    try:
        return TariffType(value)
    except ValueError:
        raise InvalidArgument.for_field("tariff_type", f"Unsupported tariff type {value!r}") from None


class TariffShippingQuote(ShippingQuoteService):
    """Quote shipping with a store's tariff.

    Args:
        distance: provider used by PER_KM and DISTANCE_BAND tariffs.
        tariff_type: a ``TariffType`` or its value.
        rate: charge for FIXED, charge per km for PER_KM. Ignored otherwise.
        bands: for DISTANCE_BAND, ``(max_km, charge)`` pairs. The first band
            whose upper bound covers the distance applies.
    """

    def __init__(
        self,
        distance: DistancePort,
        tariff_type,
        rate=ZERO,
        bands: Sequence[tuple] = (),
    ):
        self.distance = distance
        self.tariff_type = _as_tariff_type(tariff_type)

        try:
            self.rate = to_decimal(rate)
            self.bands = sorted((to_decimal(max_km), to_decimal(charge)) for max_km, charge in bands)
        except ValueError:
            raise InvalidArgument.for_field("rate", "Tariff rate and bands must be numeric") from None

        if self.rate < 0:
            raise InvalidArgument.for_field("rate", "Tariff rate cannot be negative")
        if any(max_km < 0 or charge < 0 for max_km, charge in self.bands):
            raise InvalidArgument.for_field("bands", "Distance bands cannot be negative")
        if self.tariff_type == TariffType.DISTANCE_BAND and not self.bands:
            raise InvalidArgument.for_field("bands", "A distance band tariff needs at least one band")

    def quote(self, origin, destination) -> Decimal:
        if origin is None or destination is None:
            raise InvalidArgument.for_field("address", "Origin and destination are required")

        if self.tariff_type == TariffType.FREE:
            return ZERO
        if self.tariff_type == TariffType.FIXED:
            return to_money(self.rate)

        km = to_decimal(self.distance.distance_km(origin, destination))
        if km < 0:
            raise InvalidOperationError({"distance": [f"Distance cannot be negative, got {km}"]})

        if self.tariff_type == TariffType.PER_KM:
            return to_money(self.rate * km)

        for max_km, charge in self.bands:
            if km <= max_km:
                return to_money(charge)
        raise InvalidArgument.for_field(
            "destination",
            f"Destination is {km} km away, beyond the last delivery band ({self.bands[-1][0]} km)",
        )
