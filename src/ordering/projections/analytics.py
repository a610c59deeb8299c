"""Order listings and admin statistics, read from the OrderSummary projection."""

from datetime import UTC, date, datetime

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.order.order import Order, OrderStatus
from ordering.projections.daily_order_stats import DailyOrderStats
from ordering.projections.order_summary import OrderSummary

TOP_PRODUCTS_LIMIT = 10

_PERIOD_KEYS = {
    "daily": lambda day: day.isoformat(),
    "weekly": lambda day: f"{day.isocalendar().year}-W{day.isocalendar().week:02d}",
    "monthly": lambda day: f"{day.year}-{day.month:02d}",
    "quarterly": lambda day: f"{day.year}-Q{(day.month - 1) // 3 + 1}",
    "yearly": lambda day: str(day.year),
}


def _as_dict(summary: OrderSummary) -> dict:
    return {
        "order_id": str(summary.order_id),
        "order_number": summary.order_number,
        "customer_key": summary.customer_key,
        "status": summary.status,
        "payment_status": summary.payment_status,
        "item_count": summary.item_count,
        "total": summary.total,
        "created_at": summary.created_at,
        "updated_at": summary.updated_at,
    }


def _aware(moment: datetime | None) -> datetime | None:
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def _in_range(moment: datetime | None, date_from: datetime | None, date_to: datetime | None) -> bool:
    moment = _aware(moment)
    if date_from and (moment is None or moment < date_from):
        return False
    if date_to and (moment is None or moment > date_to):
        return False
    return True


def _newest_first(summaries) -> list[dict]:
    ordered = sorted(
        summaries,
        key=lambda s: _aware(s.created_at) or datetime.min.replace(tzinfo=UTC),
        reverse=True,
    )
    return [_as_dict(s) for s in ordered]


def orders_for_customer(customer_key: str, status: str | None = None) -> list[dict]:
    filters = {"customer_key": customer_key}
    if status:
        filters["status"] = status
    dao = current_domain.repository_for(OrderSummary)._dao
    return _newest_first(dao.query.filter(**filters).all().items)


def orders_by_status(status: str) -> list[dict]:
    dao = current_domain.repository_for(OrderSummary)._dao
    return _newest_first(dao.query.filter(status=status).all().items)


def order_statistics(
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    timeframe: str = "monthly",
) -> dict:
    """Order count, revenue, average order value and per-status counts for a date range.

    Also carries the same range grouped by ``timeframe`` and the top products.
    """
    date_from, date_to = _aware(date_from), _aware(date_to)
    dao = current_domain.repository_for(OrderSummary)._dao
    orders = [s for s in dao.query.all().items if _in_range(s.created_at, date_from, date_to)]

    total_revenue = sum(o.total or 0 for o in orders)
    breakdown = {status.value: 0 for status in OrderStatus}
    for order in orders:
        breakdown[order.status] = breakdown.get(order.status, 0) + 1

    return {
        "total_orders": len(orders),
        "total_revenue": total_revenue,
        "average_order_value": round(total_revenue / len(orders), 2) if orders else 0,
        "status_breakdown": breakdown,
        "by_period": orders_by_period(timeframe, date_from, date_to),
        "top_products": top_products(date_from=date_from, date_to=date_to),
    }


def orders_by_period(
    timeframe: str = "monthly",
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list[dict]:
    """Orders placed and revenue grouped by day, week, month, quarter or year, oldest period first."""
    if timeframe not in _PERIOD_KEYS:
        raise ValidationError({"timeframe": [f"Timeframe must be one of: {', '.join(_PERIOD_KEYS)}"]})
    period_of = _PERIOD_KEYS[timeframe]
    first_day = _aware(date_from).date() if date_from else None
    last_day = _aware(date_to).date() if date_to else None

    periods: dict[str, dict] = {}
    for record in current_domain.repository_for(DailyOrderStats)._dao.query.all().items:
        day = date.fromisoformat(record.date)
        if (first_day and day < first_day) or (last_day and day > last_day):
            continue

        key = period_of(day)
        bucket = periods.setdefault(
            key,
            {"period": key, "orders": 0, "revenue": 0, "discount": 0, "cancelled": 0, "returned": 0},
        )
        bucket["orders"] += record.orders_placed or 0
        bucket["revenue"] += record.total_revenue or 0
        bucket["discount"] += record.total_discount or 0
        bucket["cancelled"] += record.orders_cancelled or 0
        bucket["returned"] += record.orders_returned or 0

    return [periods[key] for key in sorted(periods)]


def top_products(
    limit: int = TOP_PRODUCTS_LIMIT,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list[dict]:
    """Best sellers across placed orders: units sold and line revenue per product, most units first."""
    date_from, date_to = _aware(date_from), _aware(date_to)
    repo = current_domain.repository_for(Order)

    products: dict[str, dict] = {}
    for record in repo._dao.query.all().items:
        if not _in_range(record.created_at, date_from, date_to):
            continue
        for item in repo.get(record.id).items:
            entry = products.setdefault(
                str(item.product_id),
                {"product_id": str(item.product_id), "product_name": item.product_name, "units_sold": 0, "revenue": 0},
            )
            entry["units_sold"] += item.quantity
            entry["revenue"] += item.total

    ranked = sorted(products.values(), key=lambda p: (-p["units_sold"], -p["revenue"], p["product_id"]))
    return ranked[:limit]
