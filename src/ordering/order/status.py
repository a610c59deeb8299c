"""Order status changes: commands and handler."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order, OrderStatus
from shared.errors import NotFoundError, StateError

logger = structlog.get_logger(__name__)


def load_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(str(order_id))
    except ObjectNotFoundError as exc:
        raise NotFoundError({"order_id": [f"Order {order_id} not found"]}) from exc


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    note = String(max_length=500)
    actor = String(max_length=255)


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)
    actor = String(max_length=255)


@ordering.command(part_of="Order")
class ReturnOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)
    actor = String(max_length=255)


@ordering.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        order = load_order(command.order_id)
        changed = order.transition_status(command.status, note=command.note, actor=command.actor)
        if changed:
            current_domain.repository_for(Order).add(order)
            logger.info("order_status_updated", order_number=order.order_number, status=order.status)
        return order.current_status_info()

    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_order(command.order_id)
        if not order.can_be_cancelled():
            raise StateError({"status": [f"Order cannot be cancelled while {order.status}"]})

        order.transition_status(
            OrderStatus.CANCELLED.value,
            note=command.reason or "Cancelled",
            actor=command.actor,
        )
        current_domain.repository_for(Order).add(order)
        logger.info("order_cancelled", order_number=order.order_number, actor=command.actor)
        return order.current_status_info()

    @handle(ReturnOrder)
    def return_order(self, command):
        order = load_order(command.order_id)
        if not order.can_be_returned():
            raise StateError({"status": ["Order can only be returned within 7 days of delivery"]})

        order.transition_status(
            OrderStatus.RETURNED.value,
            note=command.reason or "Returned",
            actor=command.actor,
        )
        current_domain.repository_for(Order).add(order)
        logger.info("order_returned", order_number=order.order_number, actor=command.actor)
        return order.current_status_info()
