import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    from ordering.catalogue import reset_catalogue

    reset_catalogue()
    with ordering_bed.domain_context():
        yield

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()
    reset_catalogue()


@pytest.fixture()
def fake_catalogue():
    """An in-memory catalogue installed as the active adapter for one test."""
    from ordering.catalogue import set_catalogue
    from ordering.catalogue.fake_adapter import FakeCatalogue

    catalogue = FakeCatalogue()
    set_catalogue(catalogue)
    return catalogue


@pytest.fixture()
def address():
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "street": "12 Analytical Way",
        "city": "London",
        "state": "LDN",
        "zip_code": "N1 9GU",
        "country": "UK",
        "phone": "+44 20 7946 0000",
    }
