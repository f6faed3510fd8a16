"""Catalogue adapter factory.

Provides get_catalogue() / set_catalogue() to swap implementations:
- ProductStoreCatalogue (default) backed by the Product and StockLevel repositories
- FakeCatalogue for development and testing
"""

from ordering import settings
from ordering.catalogue.port import Catalogue

_current_catalogue: Catalogue | None = None


def get_catalogue() -> Catalogue:
    """Return the configured catalogue adapter (singleton).

    Chosen by the CATALOGUE_ADAPTER environment variable on first use.
    """
    global _current_catalogue
    if _current_catalogue is None:
        adapter = settings.catalogue_adapter()
        if adapter == "store":
            from ordering.catalogue.store_adapter import ProductStoreCatalogue

            _current_catalogue = ProductStoreCatalogue()
        elif adapter == "fake":
            from ordering.catalogue.fake_adapter import FakeCatalogue

            _current_catalogue = FakeCatalogue()
        else:
            raise ValueError(f"Unknown catalogue adapter: {adapter}")
    return _current_catalogue


def set_catalogue(catalogue: Catalogue) -> None:
    """Override the active catalogue (useful for tests)."""
    global _current_catalogue
    _current_catalogue = catalogue


def reset_catalogue() -> None:
    global _current_catalogue
    _current_catalogue = None
