"""Inventory oracle — pluggable source of stock figures and stock effects."""

from marketplace.utils.adapters import AdapterRegistry

_inventories = AdapterRegistry(
    kind="inventory",
    env_var="INVENTORY_ADAPTER",
    default="memory",
    adapters={"memory": "marketplace.inventory.memory_adapter:InMemoryInventory"},
)


def get_inventory():
    """The process-wide inventory oracle, ``InMemoryInventory`` unless INVENTORY_ADAPTER says otherwise."""
    return _inventories.get()


def reset_inventory():
    _inventories.reset()
