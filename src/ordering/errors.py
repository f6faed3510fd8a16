"""Domain errors for the Ordering context.

Validation and not-found failures reuse Protean's exception types so that
they surface through the same handlers as field validation errors. The
subclasses here carry the extra detail callers need.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class InsufficientStock(ValidationError):
    """Requested quantity exceeds the stock available for a product."""

    def __init__(self, product_id, available, requested):
        self.product_id = str(product_id)
        self.available = available
        self.requested = requested
        super().__init__(
            {
                "stock": [
                    f"Insufficient stock for product {product_id}. Available: {available}, Requested: {requested}"
                ]
            }
        )


class AlreadyCancelled(ValidationError):
    """The order has already been cancelled."""

    def __init__(self, order_id):
        self.order_id = str(order_id)
        super().__init__({"status": ["Order is already cancelled"]})


class ItemNotFound(ObjectNotFoundError):
    """The product is not in the cart."""

    def __init__(self, product_id):
        self.product_id = str(product_id)
        super().__init__({"product_id": [f"Item {product_id} not found in cart"]})


class Forbidden(Exception):
    """The caller is authenticated but not allowed to perform the action."""


class Unauthenticated(Exception):
    """No caller identity was supplied with the request."""


class StockContention(Exception):
    """A stock change could not be applied within the compare-and-set bound."""

    def __init__(self, product_id, attempts):
        self.product_id = str(product_id)
        self.attempts = attempts
        super().__init__(f"Stock for product {product_id} changed concurrently {attempts} times in a row")
