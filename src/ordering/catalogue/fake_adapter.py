"""In-memory catalogue for development and testing.

Holds product records in a dict guarded by a lock, so the compare-and-set
primitive is atomic across threads exactly like a conditional update in a
real store. It can also simulate a concurrent sale landing between the
order builder's availability check and its reservations.
"""

import threading

from protean.exceptions import ObjectNotFoundError

from ordering.catalogue.port import Catalogue, ProductRecord


class FakeCatalogue(Catalogue):
    """Configurable in-memory catalogue."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._products: dict[str, dict] = {}
        self._pending_sales: dict[str, int] = {}
        self.calls: list[dict] = []

    def add_product(self, product_id, name="Product", price=10.0, stock=0, is_active=True) -> None:
        with self._lock:
            self._products[str(product_id)] = {
                "name": name,
                "price": price,
                "stock": stock,
                "is_active": is_active,
            }

    def schedule_concurrent_sale(self, product_id, quantity) -> None:
        """Sell ``quantity`` units right after the next product lookup returns."""
        self._pending_sales[str(product_id)] = quantity

    def find_products_by_ids(self, product_ids):
        self.calls.append({"method": "find_products_by_ids", "product_ids": list(product_ids)})
        with self._lock:
            records = [
                ProductRecord(
                    id=product_id,
                    name=data["name"],
                    price=data["price"],
                    stock=data["stock"],
                    is_active=data["is_active"],
                )
                for product_id in (str(pid) for pid in product_ids)
                if (data := self._products.get(product_id)) is not None
            ]
            for product_id, quantity in self._pending_sales.items():
                if product_id in self._products:
                    current = self._products[product_id]["stock"]
                    self._products[product_id]["stock"] = max(0, current - quantity)
            self._pending_sales.clear()
        return records

    def stock_of(self, product_id):
        with self._lock:
            data = self._products.get(str(product_id))
            if data is None:
                raise ObjectNotFoundError({"_entity": [f"Product {product_id} not found"]})
            return data["stock"]

    def compare_and_set_stock(self, product_id, expected, new):
        self.calls.append(
            {"method": "compare_and_set_stock", "product_id": str(product_id), "expected": expected, "new": new}
        )
        with self._lock:
            data = self._products.get(str(product_id))
            if data is None or data["stock"] != expected:
                return False
            data["stock"] = new
            return True
