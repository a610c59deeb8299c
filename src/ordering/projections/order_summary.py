"""Order summary: lightweight listing view used by order history and admin analytics."""

from protean.core.projector import on
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.events import OrderPaymentStatusUpdated, OrderPlaced, OrderStatusChanged
from ordering.order.order import Order


@ordering.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(required=True, max_length=50)
    customer_key = String(required=True, max_length=300)
    status = String(required=True, max_length=20)
    payment_status = String(max_length=30, default="pending")
    item_count = Integer(default=0)
    total = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()


@ordering.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                order_number=event.order_number,
                customer_key=event.customer_key,
                status="pending",
                item_count=event.item_count,
                total=event.total,
                created_at=event.placed_at,
                updated_at=event.placed_at,
            )
        )

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.status = event.status
        summary.updated_at = event.changed_at
        repo.add(summary)

    @on(OrderPaymentStatusUpdated)
    def on_payment_status_updated(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.payment_status = event.payment_status
        repo.add(summary)
