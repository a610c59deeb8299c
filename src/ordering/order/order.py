"""Order aggregate: an immutable capture of a checked-out cart plus its status lifecycle.

Lines and pricing are frozen at placement. Afterwards only the status,
tracking, payment status and admin notes change. Every status change appends
an entry to the order's history, so the current status is always the last
history entry's status.

No transition graph is enforced: any known status may follow any other.
Cancellation and returns are gated by their own predicates.
"""

import secrets
import string
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.identity import OrderCustomer
from ordering.order.events import (
    OrderPaymentStatusUpdated,
    OrderPlaced,
    OrderStatusChanged,
    OrderTrackingUpdated,
)
from ordering.pricing import DiscountType, loyalty_points_earned
from shared.errors import EmptyCartError

RETURN_WINDOW = timedelta(days=7)
_BASE36 = string.digits + string.ascii_uppercase


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


class PaymentMethod(Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank_transfer"
    COD = "cod"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


_PAYMENT_METHOD_ALIASES = {
    "credit": PaymentMethod.CREDIT_CARD.value,
    "card": PaymentMethod.CREDIT_CARD.value,
    "bank": PaymentMethod.BANK_TRANSFER.value,
}

_CANCELLABLE_STATES = {OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value}


def normalize_payment_method(payment_method: str) -> str:
    method = (payment_method or "").strip().lower()
    method = _PAYMENT_METHOD_ALIASES.get(method, method)
    if method not in {m.value for m in PaymentMethod}:
        raise ValidationError({"payment_method": [f"Unsupported payment method: {payment_method}"]})
    return method


def generate_order_number(now: datetime | None = None) -> str:
    """``ORD-<last 8 digits of the epoch millis>-<5 random base36 chars>``."""
    now = now or datetime.now(UTC)
    millis = str(int(now.timestamp() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"ORD-{millis[-8:]}-{suffix}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class Address:
    """A shipping or billing address captured at checkout."""

    full_name = String(required=True, max_length=255)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    zip_code = String(max_length=20)
    country = String(max_length=100, default="Vietnam")
    phone = String(max_length=30)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    product_name = String(required=True, max_length=255)
    variant_name = String(max_length=255, default="Default")
    quantity = Integer(required=True, min_value=1)
    price = Integer(required=True, min_value=0)
    total = Integer(required=True, min_value=0)


@ordering.entity(part_of="Order")
class StatusEntry:
    """One step in the order's status history. Entries are never edited."""

    status = String(required=True, choices=OrderStatus)
    timestamp = DateTime(required=True)
    note = String(max_length=500)
    actor = String(max_length=255)
    sequence = Integer(required=True, min_value=0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, max_length=50)
    customer = ValueObject(OrderCustomer, required=True)
    customer_key = String(required=True, max_length=300)
    cart_id = Identifier()
    items = HasMany(OrderItem)
    shipping_address = ValueObject(Address, required=True)
    billing_address = ValueObject(Address)

    payment_method = String(required=True, choices=PaymentMethod)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_id = String(max_length=255)

    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    history = HasMany(StatusEntry)

    subtotal = Integer(default=0)
    tax = Integer(default=0)
    shipping = Integer(default=0)
    discount = Integer(default=0)
    loyalty_discount = Integer(default=0)
    total = Integer(default=0)
    discount_code = String(max_length=5)
    discount_type = String(choices=DiscountType)
    discount_value = Float(default=0.0)
    loyalty_points_used = Integer(default=0)
    loyalty_points_earned = Integer(default=0)

    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    estimated_delivery = DateTime()
    actual_delivery = DateTime()

    customer_notes = String(max_length=500)
    admin_notes = Text()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def status_matches_latest_history_entry(self):
        latest = self.latest_entry
        if latest is not None and latest.status != self.status:
            raise ValidationError({"status": ["Order status must match the latest status history entry"]})

    @invariant.post
    def admin_notes_within_limit(self):
        if self.admin_notes and len(self.admin_notes) > 1000:
            raise ValidationError({"admin_notes": ["Admin notes cannot exceed 1000 characters"]})

    @invariant.post
    def total_is_never_negative(self):
        if self.total < 0:
            raise ValidationError({"total": ["Order total cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        snapshot: dict,
        order_number: str,
        customer: OrderCustomer,
        shipping_address: Address,
        payment_method: str,
        billing_address: Address | None = None,
        customer_notes: str | None = None,
    ):
        """Finalize a cart snapshot into a pending order.

        ``snapshot`` is what ``ShoppingCart.snapshot()`` returns, with each
        line optionally carrying ``product_name`` and ``variant_name``.
        """
        lines = snapshot.get("items") or ()
        if not lines:
            raise EmptyCartError({"cart": ["Cannot place an order from an empty cart"]})

        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer=customer,
            customer_key=customer.key,
            cart_id=snapshot.get("cart_id"),
            items=[
                OrderItem(
                    product_id=line["product_id"],
                    variant_id=line.get("variant_id"),
                    product_name=line.get("product_name") or str(line["product_id"]),
                    variant_name=line.get("variant_name") or "Default",
                    quantity=line["quantity"],
                    price=line["price"],
                    total=line["price"] * line["quantity"],
                )
                for line in lines
            ],
            shipping_address=shipping_address,
            billing_address=billing_address or shipping_address,
            payment_method=normalize_payment_method(payment_method),
            payment_status=PaymentStatus.PENDING.value,
            status=OrderStatus.PENDING.value,
            history=[
                StatusEntry(
                    status=OrderStatus.PENDING.value,
                    timestamp=now,
                    note="Order placed",
                    actor=customer.key,
                    sequence=0,
                )
            ],
            subtotal=snapshot["subtotal"],
            tax=snapshot["tax"],
            shipping=snapshot["shipping"],
            discount=snapshot["discount"],
            loyalty_discount=snapshot["loyalty_discount"],
            total=snapshot["total"],
            discount_code=snapshot.get("discount_code"),
            discount_type=snapshot.get("discount_type") if snapshot.get("discount_code") else None,
            discount_value=snapshot.get("discount_value") or 0.0,
            loyalty_points_used=snapshot.get("loyalty_points_used") or 0,
            customer_notes=customer_notes,
            created_at=now,
            updated_at=now,
        )
        order.loyalty_points_earned = order.compute_loyalty_points_earned()

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                customer_key=order.customer_key,
                customer_id=customer.customer_id,
                item_count=order.item_count,
                subtotal=order.subtotal,
                tax=order.tax,
                shipping=order.shipping,
                discount=order.discount,
                loyalty_discount=order.loyalty_discount,
                total=order.total,
                discount_code=order.discount_code,
                loyalty_points_used=order.loyalty_points_used,
                payment_method=order.payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def latest_entry(self):
        if not self.history:
            return None
        return max(self.history, key=lambda entry: entry.sequence)

    def ordered_history(self) -> list:
        return sorted(self.history, key=lambda entry: entry.sequence)

    def compute_loyalty_points_earned(self) -> int:
        return loyalty_points_earned(self.total)

    def current_status_info(self) -> dict:
        latest = self.latest_entry
        return {
            "status": self.status,
            "timestamp": latest.timestamp if latest else None,
            "note": latest.note if latest else None,
            "actor": latest.actor if latest else None,
        }

    def can_be_cancelled(self) -> bool:
        return self.status in _CANCELLABLE_STATES

    def can_be_returned(self, now: datetime | None = None) -> bool:
        if self.status != OrderStatus.DELIVERED.value or self.actual_delivery is None:
            return False
        now = now or datetime.now(UTC)
        delivered_at = self.actual_delivery
        if delivered_at.tzinfo is None:
            delivered_at = delivered_at.replace(tzinfo=UTC)
        return now - delivered_at <= RETURN_WINDOW

    def summary(self) -> dict:
        if self.customer.is_registered:
            customer_name, customer_email = None, None
        else:
            customer_name, customer_email = self.customer.full_name, self.customer.email
        return {
            "order_number": self.order_number,
            "status": self.status,
            "total": self.total,
            "item_count": self.item_count,
            "created_at": self.created_at,
            "customer_key": self.customer_key,
            "customer_name": customer_name,
            "customer_email": customer_email,
        }

    # -------------------------------------------------------------------
    # Status lifecycle
    # -------------------------------------------------------------------
    def transition_status(self, new_status, note=None, actor=None) -> bool:
        """Move to ``new_status`` and record it in the history.

        Returns False, changing nothing, when the order is already in that
        status.
        """
        if new_status not in {s.value for s in OrderStatus}:
            raise ValidationError({"status": [f"Unknown order status: {new_status}"]})

        if new_status == self.status:
            return False

        previous_status = self.status
        latest = self.latest_entry
        now = datetime.now(UTC)

        with atomic_change(self):
            self.status = new_status
            self.add_history(
                StatusEntry(
                    status=new_status,
                    timestamp=now,
                    note=note,
                    actor=actor,
                    sequence=(latest.sequence + 1) if latest else 0,
                )
            )
            if new_status == OrderStatus.DELIVERED.value:
                self.actual_delivery = now
            self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_key=self.customer_key,
                customer_id=self.customer.customer_id,
                previous_status=previous_status,
                status=new_status,
                note=note,
                actor=actor,
                total=self.total,
                loyalty_points_earned=self.loyalty_points_earned,
                changed_at=now,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Fulfilment and payment details
    # -------------------------------------------------------------------
    def update_tracking(self, carrier=None, tracking_number=None, estimated_delivery=None):
        now = datetime.now(UTC)
        with atomic_change(self):
            if carrier is not None:
                self.carrier = carrier
            if tracking_number is not None:
                self.tracking_number = tracking_number
            if estimated_delivery is not None:
                self.estimated_delivery = estimated_delivery
            self.updated_at = now

        self.raise_(
            OrderTrackingUpdated(
                order_id=str(self.id),
                order_number=self.order_number,
                carrier=self.carrier,
                tracking_number=self.tracking_number,
                estimated_delivery=self.estimated_delivery,
            )
        )

    def update_payment_status(self, payment_status, payment_id=None):
        if payment_status not in {s.value for s in PaymentStatus}:
            raise ValidationError({"payment_status": [f"Unknown payment status: {payment_status}"]})

        previous = self.payment_status
        with atomic_change(self):
            self.payment_status = payment_status
            if payment_id:
                self.payment_id = payment_id
            self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderPaymentStatusUpdated(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_payment_status=previous,
                payment_status=payment_status,
                payment_id=self.payment_id,
            )
        )

    def add_admin_note(self, note: str, actor=None):
        """Append a line to the admin notes; the notes as a whole stay within 1000 characters."""
        entry = f"[{actor}] {note}" if actor else note
        combined = f"{self.admin_notes}\n{entry}" if self.admin_notes else entry
        if len(combined) > 1000:
            raise ValidationError({"admin_notes": ["Admin notes cannot exceed 1000 characters"]})
        self.admin_notes = combined
        self.updated_at = datetime.now(UTC)

    def details(self) -> dict:
        return {
            "order_id": str(self.id),
            **self.summary(),
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "items": [
                {
                    "product_id": str(item.product_id),
                    "variant_id": str(item.variant_id) if item.variant_id else None,
                    "product_name": item.product_name,
                    "variant_name": item.variant_name,
                    "quantity": item.quantity,
                    "price": item.price,
                    "total": item.total,
                }
                for item in self.items
            ],
            "pricing": {
                "subtotal": self.subtotal,
                "tax": self.tax,
                "shipping": self.shipping,
                "discount": self.discount,
                "loyalty_discount": self.loyalty_discount,
                "total": self.total,
            },
            "discount_code": self.discount_code,
            "loyalty_points_used": self.loyalty_points_used,
            "loyalty_points_earned": self.loyalty_points_earned,
            "tracking_number": self.tracking_number,
            "carrier": self.carrier,
            "estimated_delivery": self.estimated_delivery,
            "actual_delivery": self.actual_delivery,
            "history": [
                {
                    "status": entry.status,
                    "timestamp": entry.timestamp,
                    "note": entry.note,
                    "actor": entry.actor,
                }
                for entry in self.ordered_history()
            ],
        }
