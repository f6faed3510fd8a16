"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Product")
class ProductRegistered:
    """A product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    initial_stock = Integer(required=True)
    registered_at = DateTime(required=True)


@ordering.event(part_of="Product")
class ProductPriceChanged:
    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)


@ordering.event(part_of="Product")
class ProductDeactivated:
    """The product can no longer be added to carts or ordered."""

    __version__ = 1

    product_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)


@ordering.event(part_of="Product")
class ProductActivated:
    __version__ = 1

    product_id = Identifier(required=True)
    activated_at = DateTime(required=True)
