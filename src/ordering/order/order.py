"""Order aggregate (CQRS): the committed record of a purchase and its status machine.

An order is created in ``pending`` once stock for every item has been
reserved, and from then on only moves along the transition table below.
Status changes carry their own effects (shipping details, delivery
timestamps, cancellation bookkeeping); releasing stock for a cancelled order
is done by the handler that cancels it.

State Machine:
    pending → confirmed → processing → shipped → delivered
    pending | confirmed | processing | shipped → cancelled
    delivered, cancelled are terminal
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from ordering import settings
from ordering.domain import ordering
from ordering.errors import AlreadyCancelled
from ordering.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged, PaymentStatusUpdated


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class CancellationActor(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class Address:
    """A delivery or billing address captured when the order is placed."""

    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(required=True, max_length=30)


@ordering.value_object(part_of="Order")
class OrderPricing:
    """Financial summary of an order, locked when it is placed.

    The grand total is always derived from the stored components and is
    never persisted on its own.
    """

    subtotal = Float(default=0.0)
    tax_rate = Float(default=0.0, min_value=0.0, max_value=1.0)
    tax_amount = Float(default=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)

    @property
    def grand_total(self):
        return round(self.subtotal + self.tax_amount + self.shipping_cost, 2)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A line of the order with the product name and price as they were when ordered."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=200)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(Address)
    billing_address = ValueObject(Address)
    pricing = ValueObject(OrderPricing)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    tracking_number = String(max_length=255)
    estimated_delivery = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    cancel_reason = String(max_length=500)
    cancelled_by = String(choices=CancellationActor)
    notes = Text()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_id, items_data, shipping_address, pricing, billing_address=None, notes=None):
        """Create a pending order from already-reserved items.

        Args:
            customer_id: The customer placing the order.
            items_data: List of dicts with product_id, product_name,
                        quantity, unit_price, line_total.
            shipping_address: Dict with the Address fields.
            pricing: Dict with subtotal, tax_rate, tax_amount, shipping_cost.
            billing_address: Same shape as shipping_address; defaults to it.
            notes: Free text from the customer.
        """
        now = datetime.now(UTC)
        order = cls(
            customer_id=str(customer_id),
            shipping_address=Address(**shipping_address),
            billing_address=Address(**(billing_address or shipping_address)),
            pricing=OrderPricing(**pricing),
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        order.add_items([OrderItem(**item) for item in items_data])

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                item_count=len(items_data),
                subtotal=order.pricing.subtotal,
                grand_total=order.pricing.grand_total,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _move_to(self, target_status):
        previous = self.status
        now = datetime.now(UTC)
        self.status = target_status.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target_status.value,
                changed_at=now,
            )
        )
        return now

    # -------------------------------------------------------------------
    # Order lifecycle transitions
    # -------------------------------------------------------------------
    def transition_to(self, status, tracking_number=None, reason=None, cancelled_by=None):
        """Move the order to ``status``, applying that status's effects."""
        try:
            target = OrderStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status: {status}"]}) from None

        if target == OrderStatus.CONFIRMED:
            self.confirm()
        elif target == OrderStatus.PROCESSING:
            self.start_processing()
        elif target == OrderStatus.SHIPPED:
            self.ship(tracking_number=tracking_number)
        elif target == OrderStatus.DELIVERED:
            self.deliver()
        elif target == OrderStatus.CANCELLED:
            self.cancel(reason=reason, cancelled_by=cancelled_by or CancellationActor.ADMIN.value)
        else:
            # Nothing moves back to pending
            self._assert_can_transition(target)

    def confirm(self):
        self._assert_can_transition(OrderStatus.CONFIRMED)
        self._move_to(OrderStatus.CONFIRMED)

    def start_processing(self):
        self._assert_can_transition(OrderStatus.PROCESSING)
        self._move_to(OrderStatus.PROCESSING)

    def ship(self, tracking_number=None):
        """Mark the order shipped. A tracking number also sets the estimated delivery date."""
        self._assert_can_transition(OrderStatus.SHIPPED)
        now = self._move_to(OrderStatus.SHIPPED)
        if tracking_number:
            self.tracking_number = tracking_number
            self.estimated_delivery = now + timedelta(days=settings.estimated_delivery_days())

    def deliver(self):
        """Mark the order delivered. Delivery on this storefront implies payment was collected."""
        self._assert_can_transition(OrderStatus.DELIVERED)
        now = self._move_to(OrderStatus.DELIVERED)
        self.delivered_at = now
        if self.payment_status != PaymentStatus.PAID.value:
            self.update_payment_status(PaymentStatus.PAID.value)

    def cancel(self, reason=None, cancelled_by=CancellationActor.CUSTOMER.value):
        """Cancel the order. The caller is responsible for returning its items to stock."""
        if OrderStatus(self.status) == OrderStatus.CANCELLED:
            raise AlreadyCancelled(self.id)
        self._assert_can_transition(OrderStatus.CANCELLED)

        if reason and len(reason) > 500:
            raise ValidationError({"reason": ["Reason cannot exceed 500 characters"]})

        previous_status = self.status
        now = self._move_to(OrderStatus.CANCELLED)
        self.cancelled_at = now
        self.cancel_reason = reason
        self.cancelled_by = CancellationActor(cancelled_by).value

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                previous_status=previous_status,
                reason=reason,
                cancelled_by=self.cancelled_by,
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def update_payment_status(self, payment_status):
        """Record a payment outcome reported by an administrator or payment collaborator."""
        try:
            new_status = PaymentStatus(payment_status)
        except ValueError:
            raise ValidationError({"payment_status": [f"Unknown payment status: {payment_status}"]}) from None

        previous = self.payment_status
        now = datetime.now(UTC)
        self.payment_status = new_status.value
        self.updated_at = now

        self.raise_(
            PaymentStatusUpdated(
                order_id=str(self.id),
                previous_status=previous,
                new_status=new_status.value,
                updated_at=now,
            )
        )

    @property
    def is_terminal(self):
        return not _VALID_TRANSITIONS[OrderStatus(self.status)]
