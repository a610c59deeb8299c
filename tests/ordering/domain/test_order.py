"""Tests for the Order aggregate: placement, status history and predicates."""

from datetime import UTC, datetime, timedelta

import pytest
from ordering.identity import OrderCustomer
from ordering.order.events import OrderPlaced, OrderStatusChanged
from ordering.order.order import (
    Address,
    Order,
    OrderStatus,
    PaymentMethod,
    generate_order_number,
    normalize_payment_method,
)
from protean.exceptions import ValidationError
from shared.errors import EmptyCartError


def _snapshot(**overrides):
    snapshot = {
        "cart_id": "cart-001",
        "owner_key": "customer:cust-001",
        "items": (
            {
                "product_id": "prod-001",
                "variant_id": "var-001",
                "quantity": 2,
                "price": 500_000,
                "product_name": "Phone X",
                "variant_name": "Black",
            },
        ),
        "discount_code": None,
        "discount_type": "percentage",
        "discount_value": 0.0,
        "discount_max_amount": None,
        "loyalty_points_used": 0,
        "subtotal": 1_000_000,
        "tax": 100_000,
        "shipping": 0,
        "discount": 0,
        "loyalty_discount": 0,
        "total": 1_100_000,
    }
    snapshot.update(overrides)
    return snapshot


def _address():
    return Address(full_name="Nguyen Van A", street="12 Le Loi", city="Ho Chi Minh City")


def _order(customer=None, **snapshot_overrides):
    return Order.place(
        snapshot=_snapshot(**snapshot_overrides),
        order_number=generate_order_number(),
        customer=customer or OrderCustomer.registered("cust-001"),
        shipping_address=_address(),
        payment_method="cod",
    )


class TestOrderNumber:
    def test_format(self):
        number = generate_order_number(datetime(2026, 10, 18, 12, 0, tzinfo=UTC))
        prefix, millis, suffix = number.split("-")
        assert prefix == "ORD"
        assert len(millis) == 8 and millis.isdigit()
        assert len(suffix) == 5 and suffix.isalnum() and suffix.upper() == suffix


class TestPaymentMethod:
    @pytest.mark.parametrize(
        "given, expected",
        [
            ("credit", PaymentMethod.CREDIT_CARD.value),
            ("Card", PaymentMethod.CREDIT_CARD.value),
            ("bank", PaymentMethod.BANK_TRANSFER.value),
            ("cod", PaymentMethod.COD.value),
        ],
    )
    def test_aliases(self, given, expected):
        assert normalize_payment_method(given) == expected

    def test_unknown_method(self):
        with pytest.raises(ValidationError):
            normalize_payment_method("barter")


class TestPlacement:
    def test_captures_lines_and_totals(self):
        order = _order()

        assert order.status == OrderStatus.PENDING.value
        assert order.item_count == 2
        assert order.items[0].product_name == "Phone X"
        assert order.items[0].total == 1_000_000
        assert order.total == 1_100_000

    def test_seeds_history_with_pending(self):
        order = _order()
        assert len(order.history) == 1
        assert order.latest_entry.status == OrderStatus.PENDING.value
        assert order.latest_entry.note == "Order placed"

    def test_billing_defaults_to_shipping(self):
        assert _order().billing_address == _address()

    def test_loyalty_points_earned(self):
        assert _order().loyalty_points_earned == 110

    def test_raises_order_placed(self):
        order = _order()
        placed = [e for e in order._events if isinstance(e, OrderPlaced)]
        assert len(placed) == 1
        assert placed[0].customer_key == "customer:cust-001"

    def test_empty_snapshot_rejected(self):
        with pytest.raises(EmptyCartError):
            _order(items=())

    def test_guest_customer(self):
        order = _order(customer=OrderCustomer.guest("jane@example.com", "Jane Doe"))
        summary = order.summary()
        assert summary["customer_key"] == "guest:jane@example.com"
        assert summary["customer_name"] == "Jane Doe"


class TestStatusTransitions:
    def test_transition_appends_history(self):
        order = _order()
        changed = order.transition_status(OrderStatus.CONFIRMED.value, note="Payment received", actor="admin")

        assert changed is True
        assert order.status == OrderStatus.CONFIRMED.value
        assert [e.status for e in order.ordered_history()] == ["pending", "confirmed"]
        assert order.current_status_info()["note"] == "Payment received"

    def test_same_status_is_a_no_op(self):
        order = _order()
        order.transition_status(OrderStatus.SHIPPED.value)
        order._events.clear()
        updated_at = order.updated_at

        assert order.transition_status(OrderStatus.SHIPPED.value) is False
        assert len(order.history) == 2
        assert order.updated_at == updated_at
        assert order._events == []

    def test_any_known_status_may_follow(self):
        order = _order()
        order.transition_status(OrderStatus.DELIVERED.value)
        order.transition_status(OrderStatus.PROCESSING.value)
        assert order.status == OrderStatus.PROCESSING.value

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            _order().transition_status("teleported")

    def test_delivery_stamps_actual_delivery(self):
        order = _order()
        order.transition_status(OrderStatus.DELIVERED.value)
        assert order.actual_delivery is not None

    def test_raises_status_changed(self):
        order = _order()
        order._events.clear()
        order.transition_status(OrderStatus.SHIPPED.value)

        event = order._events[0]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "pending"
        assert event.status == "shipped"
        assert event.loyalty_points_earned == 110


class TestPredicates:
    @pytest.mark.parametrize("status", ["pending", "confirmed"])
    def test_cancellable_states(self, status):
        order = _order()
        order.transition_status(status)
        assert order.can_be_cancelled()

    def test_shipped_order_cannot_be_cancelled(self):
        order = _order()
        order.transition_status(OrderStatus.SHIPPED.value)
        assert not order.can_be_cancelled()

    def test_returnable_within_seven_days_of_delivery(self):
        order = _order()
        order.transition_status(OrderStatus.DELIVERED.value)

        assert order.can_be_returned()
        assert not order.can_be_returned(now=datetime.now(UTC) + timedelta(days=8))

    def test_undelivered_order_is_not_returnable(self):
        assert not _order().can_be_returned()


class TestAdminDetails:
    def test_admin_notes_accumulate(self):
        order = _order()
        order.add_admin_note("Called customer", actor="admin")
        order.add_admin_note("Left voicemail")
        assert order.admin_notes == "[admin] Called customer\nLeft voicemail"

    def test_admin_notes_limit(self):
        order = _order()
        with pytest.raises(ValidationError):
            order.add_admin_note("x" * 1001)

    def test_tracking(self):
        order = _order()
        order.update_tracking(carrier="VNPost", tracking_number="VN123")
        assert order.carrier == "VNPost"
        assert order.details()["tracking_number"] == "VN123"

    def test_unknown_payment_status(self):
        with pytest.raises(ValidationError):
            _order().update_payment_status("lost")
