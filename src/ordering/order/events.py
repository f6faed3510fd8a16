"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """An order was created with stock reserved for every item."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    item_count = Integer(required=True)
    subtotal = Float(required=True)
    grand_total = Float(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to a new status."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled by its customer or an administrator."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = String(max_length=500)
    cancelled_by = String(required=True)
    cancelled_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentStatusUpdated:
    """The payment status recorded on the order changed."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String()
    new_status = String(required=True)
    updated_at = DateTime(required=True)
