"""Shipping quotes — store tariffs priced over a pluggable distance provider."""

from marketplace.utils.adapters import AdapterRegistry

_distances = AdapterRegistry(
    kind="distance",
    env_var="DISTANCE_ADAPTER",
    default="fake",
    adapters={"fake": "marketplace.shipping.fake_distance:FakeDistance"},
)


def get_distance():
    """The process-wide distance provider, ``FakeDistance`` unless DISTANCE_ADAPTER says otherwise."""
    return _distances.get()


def reset_distance():
    _distances.reset()
