import pytest
from ordering.catalogue.management import RegisterProduct
from protean import current_domain


@pytest.fixture()
def register_product():
    """Register a product through the command pipeline and return its id."""

    def _register(name="Widget", price=10.0, stock=10, sku=None):
        return current_domain.process(
            RegisterProduct(name=name, price=price, stock=stock, sku=sku),
            asynchronous=False,
        )

    return _register
