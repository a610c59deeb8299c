"""Integration tests for the OrderSummary projection and analytics queries."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from ordering.cart.items import AddToCart
from ordering.cart.management import ResolveCart
from ordering.order.fulfilment import UpdatePaymentStatus
from ordering.order.placement import PlaceOrder
from ordering.order.status import CancelOrder, UpdateOrderStatus
from ordering.projections.analytics import (
    order_statistics,
    orders_by_period,
    orders_by_status,
    orders_for_customer,
    top_products,
)
from ordering.projections.daily_order_stats import DailyOrderStats
from ordering.projections.order_summary import OrderSummary
from protean import current_domain
from protean.exceptions import ValidationError


def _place_order(customer_id, quantity=1, product_id="prod-case", variant_id=None):
    cart_id = current_domain.process(ResolveCart(customer_id=customer_id), asynchronous=False)["cart_id"]
    current_domain.process(
        AddToCart(cart_id=cart_id, product_id=product_id, variant_id=variant_id, quantity=quantity),
        asynchronous=False,
    )
    return current_domain.process(
        PlaceOrder(
            cart_id=cart_id,
            shipping_address=json.dumps({"full_name": "A", "street": "1 Street", "city": "Hanoi"}),
            payment_method="cod",
        ),
        asynchronous=False,
    )


class TestOrderSummaryProjection:
    def test_created_on_placement(self, catalog):
        result = _place_order("cust-001", quantity=2)

        summary = current_domain.repository_for(OrderSummary).get(result["order_id"])
        assert summary.order_number == result["order_number"]
        assert summary.customer_key == "customer:cust-001"
        assert summary.status == "pending"
        assert summary.item_count == 2
        assert summary.total == result["total"]

    def test_follows_status_and_payment(self, catalog):
        order_id = _place_order("cust-001")["order_id"]
        current_domain.process(UpdateOrderStatus(order_id=order_id, status="shipped"), asynchronous=False)
        current_domain.process(UpdatePaymentStatus(order_id=order_id, payment_status="paid"), asynchronous=False)

        summary = current_domain.repository_for(OrderSummary).get(order_id)
        assert summary.status == "shipped"
        assert summary.payment_status == "paid"


class TestOrderQueries:
    def test_orders_for_customer(self, catalog):
        _place_order("cust-001")
        _place_order("cust-001")
        _place_order("cust-002")

        assert len(orders_for_customer("customer:cust-001")) == 2
        assert orders_for_customer("customer:cust-001", status="shipped") == []

    def test_orders_by_status(self, catalog):
        order_id = _place_order("cust-001")["order_id"]
        _place_order("cust-002")
        current_domain.process(UpdateOrderStatus(order_id=order_id, status="confirmed"), asynchronous=False)

        confirmed = orders_by_status("confirmed")
        assert [o["order_id"] for o in confirmed] == [order_id]


class TestOrderStatistics:
    def test_totals_and_breakdown(self, catalog):
        first = _place_order("cust-001")
        second = _place_order("cust-002", quantity=2, product_id="prod-phone", variant_id="var-black")
        current_domain.process(UpdateOrderStatus(order_id=first["order_id"], status="delivered"), asynchronous=False)

        stats = order_statistics()

        assert stats["total_orders"] == 2
        assert stats["total_revenue"] == first["total"] + second["total"]
        assert stats["average_order_value"] == round((first["total"] + second["total"]) / 2, 2)
        assert stats["status_breakdown"]["delivered"] == 1
        assert stats["status_breakdown"]["pending"] == 1
        assert stats["status_breakdown"]["returned"] == 0

    def test_date_range(self, catalog):
        _place_order("cust-001")

        stats = order_statistics(date_from=datetime.now(UTC) + timedelta(days=1))

        assert stats["total_orders"] == 0
        assert stats["average_order_value"] == 0


class TestDailyOrderStats:
    def test_counts_placements_and_cancellations_by_day(self, catalog):
        first = _place_order("cust-001")
        second = _place_order("cust-002", quantity=2)
        current_domain.process(CancelOrder(order_id=first["order_id"], reason="Changed mind"), asynchronous=False)

        record = current_domain.repository_for(DailyOrderStats).get(datetime.now(UTC).date().isoformat())

        assert record.orders_placed == 2
        assert record.orders_cancelled == 1
        assert record.total_revenue == first["total"] + second["total"]

    def test_grouped_by_period(self, catalog):
        first = _place_order("cust-001")
        second = _place_order("cust-002")
        today = datetime.now(UTC).date()

        yearly = orders_by_period("yearly")
        monthly = orders_by_period("monthly")

        assert yearly == [
            {
                "period": str(today.year),
                "orders": 2,
                "revenue": first["total"] + second["total"],
                "discount": 0,
                "cancelled": 0,
                "returned": 0,
            }
        ]
        assert monthly[0]["period"] == f"{today.year}-{today.month:02d}"

    def test_period_range_excludes_other_days(self, catalog):
        _place_order("cust-001")
        assert orders_by_period("daily", date_from=datetime.now(UTC) + timedelta(days=1)) == []

    def test_unknown_timeframe(self):
        with pytest.raises(ValidationError):
            orders_by_period("fortnightly")


class TestTopProducts:
    def test_ranked_by_units_sold(self, catalog):
        _place_order("cust-001", quantity=1)
        _place_order("cust-002", quantity=2, product_id="prod-phone", variant_id="var-black")
        _place_order("cust-003", quantity=3)

        ranked = top_products()

        assert [p["product_id"] for p in ranked] == ["prod-case", "prod-phone"]
        assert ranked[0]["units_sold"] == 4
        assert ranked[0]["revenue"] == 4 * 80_000
        assert ranked[1]["product_name"] == "Phone X"

    def test_limit(self, catalog):
        _place_order("cust-001")
        _place_order("cust-002", product_id="prod-phone", variant_id="var-black")

        assert len(top_products(limit=1)) == 1

    def test_included_in_statistics(self, catalog):
        _place_order("cust-001", quantity=2)

        stats = order_statistics(timeframe="daily")

        assert stats["by_period"][0]["orders"] == 1
        assert stats["top_products"][0]["units_sold"] == 2
