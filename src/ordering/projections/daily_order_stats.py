"""Daily order stats projection: per-day counts and revenue for the admin dashboard.

Keyed by date (YYYY-MM-DD). Placements count towards the day the order was
placed; cancellations, deliveries and returns towards the day the status
changed.
"""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.events import OrderPlaced, OrderStatusChanged
from ordering.order.order import Order, OrderStatus


@ordering.projection
class DailyOrderStats:
    date = String(identifier=True, required=True, max_length=10)  # YYYY-MM-DD
    orders_placed = Integer(default=0)
    orders_cancelled = Integer(default=0)
    orders_delivered = Integer(default=0)
    orders_returned = Integer(default=0)
    total_revenue = Integer(default=0)
    total_discount = Integer(default=0)


_STATUS_COUNTERS = {
    OrderStatus.CANCELLED.value: "orders_cancelled",
    OrderStatus.DELIVERED.value: "orders_delivered",
    OrderStatus.RETURNED.value: "orders_returned",
}


def _get_or_create(date_key):
    repo = current_domain.repository_for(DailyOrderStats)
    try:
        return repo.get(date_key)
    except ObjectNotFoundError:
        return DailyOrderStats(
            date=date_key,
            orders_placed=0,
            orders_cancelled=0,
            orders_delivered=0,
            orders_returned=0,
            total_revenue=0,
            total_discount=0,
        )


@ordering.projector(projector_for=DailyOrderStats, aggregates=[Order])
class DailyOrderStatsProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        record = _get_or_create(event.placed_at.date().isoformat())
        record.orders_placed = (record.orders_placed or 0) + 1
        record.total_revenue = (record.total_revenue or 0) + (event.total or 0)
        record.total_discount = (record.total_discount or 0) + (event.discount or 0)
        current_domain.repository_for(DailyOrderStats).add(record)

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        counter = _STATUS_COUNTERS.get(event.status)
        if counter is None:
            return

        record = _get_or_create(event.changed_at.date().isoformat())
        setattr(record, counter, (getattr(record, counter) or 0) + 1)
        current_domain.repository_for(DailyOrderStats).add(record)
