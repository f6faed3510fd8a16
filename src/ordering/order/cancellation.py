"""Order cancellation: command and handler.

A customer may cancel their own order while it is still pending. Every other
case (unknown order, someone else's order, an order already moving) gets the
same not-found answer so callers learn nothing about orders they do not own.
Administrators may cancel any order that has not reached a terminal state;
cancelling one twice is reported as a conflict.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.inventory.ledger import InventoryLedger
from ordering.order.order import CancellationActor, Order, OrderStatus

logger = structlog.get_logger(__name__)

NOT_CANCELLABLE = "Order not found or cannot be cancelled"


def release_order_stock(order):
    """Return every item of a cancelled order to stock."""
    ledger = InventoryLedger()
    for item in order.items:
        ledger.release(str(item.product_id), item.quantity)
    logger.info("Stock released for cancelled order", order_id=str(order.id), items=len(order.items))


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)  # The caller
    reason = String(max_length=500)
    by_admin = Boolean(default=False)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)

        if command.by_admin:
            # Administrators may cancel any order that is not yet terminal
            order = repo.get(command.order_id)
            actor = CancellationActor.ADMIN.value
        else:
            try:
                order = repo.get(command.order_id)
            except ObjectNotFoundError:
                raise ObjectNotFoundError({"_entity": [NOT_CANCELLABLE]}) from None

            if str(order.customer_id) != str(command.customer_id) or order.status != OrderStatus.PENDING.value:
                raise ObjectNotFoundError({"_entity": [NOT_CANCELLABLE]})
            actor = CancellationActor.CUSTOMER.value

        order.cancel(reason=command.reason, cancelled_by=actor)
        release_order_stock(order)
        repo.add(order)
        logger.info("Order cancelled", order_id=str(order.id), cancelled_by=actor)
