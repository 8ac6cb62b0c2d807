import pytest
from protean.integrations.pytest import DomainFixture

from marketplace.inventory import reset_inventory
from marketplace.shipping import reset_distance


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def _collaborators():
    """Fresh inventory and distance adapters for every test."""
    reset_inventory()
    reset_distance()
    yield
    reset_inventory()
    reset_distance()


@pytest.fixture()
def delivery_address():
    return {
        "street": "Avenida Paulista",
        "number": "1000",
        "complement": "Apto 12",
        "district": "Bela Vista",
        "city": "Sao Paulo",
        "state": "SP",
        "postal_code": "01310-100",
    }


@pytest.fixture()
def store_address():
    return {
        "street": "Rua Augusta",
        "number": "500",
        "district": "Consolacao",
        "city": "Sao Paulo",
        "state": "SP",
        "postal_code": "01304-000",
    }
