"""Order status changes by administrators: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.cancellation import release_order_stock
from ordering.order.order import CancellationActor, Order, OrderStatus

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    tracking_number = String(max_length=255)
    reason = Text()


@ordering.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous_status = order.status

        order.transition_to(
            command.status,
            tracking_number=command.tracking_number,
            reason=command.reason,
            cancelled_by=CancellationActor.ADMIN.value,
        )
        if order.status == OrderStatus.CANCELLED.value:
            release_order_stock(order)

        repo.add(order)
        logger.info(
            "Order status updated",
            order_id=str(order.id),
            previous_status=previous_status,
            new_status=order.status,
        )
