"""Cart aggregate (CQRS) — one cart per customer, emptied when an order is placed from it.

The cart's identity is the owning customer's id, so a customer can never end
up with two carts. Items are kept one line per product; line totals and the
cart's summary figures are recomputed from the lines after every change.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer

from ordering.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartItemUpdated
from ordering.domain import ordering
from ordering.errors import ItemNotFound


def _money(amount):
    return round(amount, 2)


@ordering.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    line_total = Float(default=0.0)


@ordering.aggregate
class Cart:
    customer_id = Identifier(identifier=True, required=True)
    items = HasMany(CartItem)
    subtotal = Float(default=0.0)
    total_items = Integer(default=0)
    unique_items = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=customer_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, unit_price):
        """Add a product to the cart, or increase the quantity of its existing line.

        The line's unit price is refreshed to ``unit_price`` either way.
        """
        existing = self._line_for(product_id)

        if existing:
            existing.quantity += quantity
            existing.unit_price = unit_price
            existing.line_total = _money(existing.quantity * unit_price)
        else:
            self.add_items(
                CartItem(
                    product_id=product_id,
                    quantity=quantity,
                    unit_price=unit_price,
                    line_total=_money(quantity * unit_price),
                )
            )

        self._recalculate()
        self.raise_(
            CartItemAdded(
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                quantity=quantity,
                unit_price=unit_price,
            )
        )

    def update_item(self, product_id, quantity):
        """Set a line's quantity. Zero or less removes the line."""
        item = self._line_for(product_id)
        if item is None:
            raise ItemNotFound(product_id)

        if quantity <= 0:
            self.remove_item(product_id)
            return

        previous_quantity = item.quantity
        item.quantity = quantity
        item.line_total = _money(quantity * item.unit_price)

        self._recalculate()
        self.raise_(
            CartItemUpdated(
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        item = self._line_for(product_id)
        if item is None:
            return

        self.remove_items(item)
        self._recalculate()
        self.raise_(CartItemRemoved(customer_id=str(self.customer_id), product_id=str(product_id)))

    def clear(self):
        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)

        self._recalculate()
        self.raise_(CartCleared(customer_id=str(self.customer_id), items_removed=removed))

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def is_empty(self):
        return not self.items

    def _line_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def _recalculate(self):
        self.subtotal = _money(sum(item.line_total for item in self.items))
        self.total_items = sum(item.quantity for item in self.items)
        self.unique_items = len(self.items)
        self.updated_at = datetime.now(UTC)


@ordering.repository(part_of=Cart)
class CartRepository:
    def for_customer(self, customer_id) -> Cart:
        """Return the customer's cart, or a new empty one if they have none yet."""
        try:
            return self.get(str(customer_id))
        except ObjectNotFoundError:
            return Cart.create(customer_id=str(customer_id))
