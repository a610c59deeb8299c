"""Broadcasts order placement and status changes to listening clients."""

from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.order.events import OrderPlaced, OrderStatusChanged
from ordering.order.order import Order
from realtime import broadcast


@ordering.event_handler(part_of=Order)
class OrderBroadcastHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced):
        broadcast(
            "order_created",
            order={
                "order_id": str(event.order_id),
                "order_number": event.order_number,
                "customer_key": event.customer_key,
                "item_count": event.item_count,
                "total": event.total,
                "status": "pending",
            },
        )

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged):
        broadcast(
            "order_status_changed",
            identity=event.customer_key,
            order={
                "order_id": str(event.order_id),
                "order_number": event.order_number,
                "previous_status": event.previous_status,
                "status": event.status,
                "note": event.note,
                "changed_at": event.changed_at.isoformat() if event.changed_at else None,
            },
        )
