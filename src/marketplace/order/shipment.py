"""Store shipments — commands and handler.

``SetShipment`` attaches a charge the caller already knows. ``QuoteShipment``
prices it with the store's tariff from the store's address to the order's
delivery address, then attaches it.
"""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order
from marketplace.shared.address import to_address
from marketplace.shipping import get_distance
from marketplace.shipping.tariff import TariffShippingQuote

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class SetShipment:
    """Attach a store's shipping charge, replacing any previous one."""

    order_id = Identifier(required=True)
    store_id = Identifier(required=True)
    value = Float(required=True)


@marketplace.command(part_of="Order")
class QuoteShipment:
    """Quote and attach a store's shipping charge from its tariff."""

    order_id = Identifier(required=True)
    store_id = Identifier(required=True)
    origin_address = Text(required=True)  # JSON: the store's address dict
    tariff_type = String(required=True, max_length=20)
    tariff_rate = Float(default=0.0)
    distance_bands = Text()  # JSON: list of [max_km, charge]


@marketplace.command_handler(part_of=Order)
class ShipmentHandler:
    @handle(SetShipment)
    def set_shipment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        shipment = order.set_shipment(store_id=command.store_id, value=command.value)
        repo.add(order)
        return float(shipment.value)

    @handle(QuoteShipment)
    def quote_shipment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        origin = to_address(
            json.loads(command.origin_address)
            if isinstance(command.origin_address, str)
            else command.origin_address
        )
        bands = json.loads(command.distance_bands) if command.distance_bands else []

        quote_service = TariffShippingQuote(
            distance=get_distance(),
            tariff_type=command.tariff_type,
            rate=command.tariff_rate or 0.0,
            bands=[tuple(band) for band in bands],
        )
        value = quote_service.quote(origin, order.delivery_address)

        shipment = order.set_shipment(store_id=command.store_id, value=value)
        repo.add(order)

        logger.info(
            "Shipment quoted",
            order_id=str(order.id),
            store_id=str(command.store_id),
            tariff_type=command.tariff_type,
            value=value,
        )
        return float(shipment.value)
