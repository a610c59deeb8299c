"""Tracking, payment status and admin notes: commands and handler."""

from protean import handle
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.status import load_order


@ordering.command(part_of="Order")
class UpdateTracking:
    order_id = Identifier(required=True)
    carrier = String(max_length=100)
    tracking_number = String(max_length=255)
    estimated_delivery = DateTime()


@ordering.command(part_of="Order")
class UpdatePaymentStatus:
    order_id = Identifier(required=True)
    payment_status = String(required=True, max_length=30)
    payment_id = String(max_length=255)


@ordering.command(part_of="Order")
class AddAdminNote:
    order_id = Identifier(required=True)
    note = String(required=True, max_length=1000)
    actor = String(max_length=255)


@ordering.command_handler(part_of=Order)
class OrderFulfilmentHandler:
    @handle(UpdateTracking)
    def update_tracking(self, command):
        order = load_order(command.order_id)
        order.update_tracking(
            carrier=command.carrier,
            tracking_number=command.tracking_number,
            estimated_delivery=command.estimated_delivery,
        )
        current_domain.repository_for(Order).add(order)

    @handle(UpdatePaymentStatus)
    def update_payment_status(self, command):
        order = load_order(command.order_id)
        order.update_payment_status(command.payment_status, payment_id=command.payment_id)
        current_domain.repository_for(Order).add(order)

    @handle(AddAdminNote)
    def add_admin_note(self, command):
        order = load_order(command.order_id)
        order.add_admin_note(command.note, actor=command.actor)
        current_domain.repository_for(Order).add(order)
