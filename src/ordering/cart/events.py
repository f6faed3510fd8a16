"""Domain events for the Cart aggregate."""

from protean.fields import Float, Identifier, Integer

from ordering.domain import ordering


@ordering.event(part_of="Cart")
class CartItemAdded:
    """A product was added to the cart, or its quantity increased."""

    __version__ = 1

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    unit_price = Float(required=True)


@ordering.event(part_of="Cart")
class CartItemUpdated:
    """The quantity of a cart line was set to a new value."""

    __version__ = 1

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="Cart")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = 1

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@ordering.event(part_of="Cart")
class CartCleared:
    """Every line was removed from the cart."""

    __version__ = 1

    customer_id = Identifier(required=True)
    items_removed = Integer(required=True)
