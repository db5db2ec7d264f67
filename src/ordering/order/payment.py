"""Payment status recording — command and handler.

No gateway is involved; the payment provider's outcome and transaction
reference are recorded as reported.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order, parse_payment_status


@ordering.command(part_of="Order")
class UpdatePaymentStatus:
    order_id = Identifier(required=True)
    payment_status = String(required=True, max_length=20)
    transaction_id = String(max_length=255)


@ordering.command_handler(part_of=Order)
class UpdatePaymentStatusHandler:
    @handle(UpdatePaymentStatus)
    def update_payment_status(self, command):
        parse_payment_status(command.payment_status)

        repo = current_domain.repository_for(Order)
        order = repo.fetch(command.order_id)
        order.update_payment_status(command.payment_status, transaction_id=command.transaction_id)
        repo.add(order)
