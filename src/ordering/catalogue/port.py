"""Catalogue port (abstract interface).

The narrow contract the ordering flow needs from the catalogue: product
lookup and one atomic stock primitive. Everything else about stock
(reservations, releases, adjustments) is built on top of it by the
inventory ledger.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ProductRecord:
    """Read-only view of a catalogue product at lookup time."""

    id: str
    name: str
    price: float
    stock: int
    is_active: bool


class Catalogue(ABC):
    """Abstract catalogue interface."""

    @abstractmethod
    def find_products_by_ids(self, product_ids: list[str]) -> list[ProductRecord]:
        """Return the records for the ids that exist. Unknown ids are omitted."""
        ...

    @abstractmethod
    def stock_of(self, product_id: str) -> int:
        """Return the current stock. Raises ObjectNotFoundError for unknown products."""
        ...

    @abstractmethod
    def compare_and_set_stock(self, product_id: str, expected: int, new: int) -> bool:
        """Atomically replace the stock with ``new`` if it still equals ``expected``.

        Returns False, without writing, when another writer got there first.
        """
        ...
