"""Payment status updates: command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order, PaymentStatus


@ordering.command(part_of="Order")
class UpdatePaymentStatus:
    order_id = Identifier(required=True)
    payment_status = String(required=True, choices=PaymentStatus)


@ordering.command_handler(part_of=Order)
class UpdatePaymentStatusHandler:
    @handle(UpdatePaymentStatus)
    def update_payment_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.update_payment_status(command.payment_status)
        repo.add(order)
