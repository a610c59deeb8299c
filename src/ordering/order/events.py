"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A cart was checked out into a pending order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_key = String(required=True)
    customer_id = Identifier()
    item_count = Integer(default=0)
    subtotal = Integer(default=0)
    tax = Integer(default=0)
    shipping = Integer(default=0)
    discount = Integer(default=0)
    loyalty_discount = Integer(default=0)
    total = Integer(required=True)
    discount_code = String()
    loyalty_points_used = Integer(default=0)
    payment_method = String()
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to a new status and the move was recorded in its history."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_key = String(required=True)
    customer_id = Identifier()
    previous_status = String(required=True)
    status = String(required=True)
    note = String()
    actor = String()
    total = Integer(default=0)
    loyalty_points_earned = Integer(default=0)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderTrackingUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    carrier = String()
    tracking_number = String()
    estimated_delivery = DateTime()


@ordering.event(part_of="Order")
class OrderPaymentStatusUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_payment_status = String()
    payment_status = String(required=True)
    payment_id = String()
