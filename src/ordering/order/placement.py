"""Checkout: turning an active cart into an order.

Everything happens in the command's unit of work. The cart is re-checked
against the catalog, any attached discount is re-checked and redeemed, any
attached loyalty points are debited, and the cart is deactivated. A failure
at any step leaves every aggregate untouched.
"""

import json
import math

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.cart.management import load_cart
from ordering.catalog.lookup import resolve_price
from ordering.discount.discount import REASON_INVALID, DiscountCode
from ordering.discount.queries import find_by_code
from ordering.domain import ordering
from ordering.identity import OrderCustomer
from ordering.loyalty.account import LoyaltyAccount
from ordering.loyalty.management import find_account
from ordering.order.order import Address, Order, generate_order_number
from ordering.pricing import LOYALTY_POINT_VALUE
from shared.errors import EmptyCartError, IneligibleError, InsufficientResourceError, StateError

logger = structlog.get_logger(__name__)

_ORDER_NUMBER_ATTEMPTS = 5


@ordering.command(part_of="Order")
class PlaceOrder:
    cart_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict, defaults to shipping
    payment_method = String(required=True, max_length=50)
    customer_notes = String(max_length=500)
    guest_email = String(max_length=254)
    guest_full_name = String(max_length=255)
    guest_phone = String(max_length=30)


def _parse_address(raw, field: str = "shipping_address") -> Address | None:
    if not raw:
        return None
    try:
        data = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError as exc:
        raise ValidationError({field: ["Address must be a JSON object"]}) from exc
    if not isinstance(data, dict):
        raise ValidationError({field: ["Address must be a JSON object"]})
    return Address(**data)


def _unique_order_number() -> str:
    dao = current_domain.repository_for(Order)._dao
    for _ in range(_ORDER_NUMBER_ATTEMPTS):
        candidate = generate_order_number()
        if not dao.query.filter(order_number=candidate).all().items:
            return candidate
    raise StateError({"order_number": ["Could not allocate a unique order number"]})


def points_to_debit(points_attached: int, loyalty_discount: int) -> int:
    """Points actually spent: only as many as the deduction used, rounded up."""
    if not points_attached or loyalty_discount <= 0:
        return 0
    return min(points_attached, math.ceil(loyalty_discount / LOYALTY_POINT_VALUE))


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        with structlog.contextvars.bound_contextvars(cart_id=str(command.cart_id)):
            return self._place(command)

    def _place(self, command):
        cart = load_cart(command.cart_id)
        if not cart.is_active:
            raise StateError({"cart": [f"Cart is {cart.status.lower()} and cannot be checked out"]})
        if not cart.items:
            raise EmptyCartError({"cart": ["Cart is empty"]})

        customer = self._customer_for(cart, command)

        # Catalog re-check: products still sellable and in stock
        snapshot = cart.snapshot()
        lines = []
        for line in snapshot["items"]:
            resolved = resolve_price(line["product_id"], line["variant_id"], line["quantity"])
            lines.append({**line, "product_name": resolved.product_name, "variant_name": resolved.variant_name})
        snapshot = {**snapshot, "items": tuple(lines)}

        discount_code = self._eligible_discount(snapshot, customer)
        loyalty_account, debit = self._loyalty_debit(snapshot, customer)

        order = Order.place(
            snapshot=snapshot,
            order_number=_unique_order_number(),
            customer=customer,
            shipping_address=_parse_address(command.shipping_address),
            billing_address=_parse_address(command.billing_address, "billing_address"),
            payment_method=command.payment_method,
            customer_notes=command.customer_notes,
        )

        if discount_code is not None:
            discount_code.use_code(customer.key, order.order_number, order.discount)
            current_domain.repository_for(DiscountCode).add(discount_code)

        if debit:
            loyalty_account.debit(debit, reason="Redeemed at checkout", order_number=order.order_number)
            current_domain.repository_for(LoyaltyAccount).add(loyalty_account)

        cart.convert_to_order(order_id=order.id, order_number=order.order_number)

        current_domain.repository_for(Order).add(order)
        current_domain.repository_for(ShoppingCart).add(cart)

        logger.info(
            "order_placed",
            order_number=order.order_number,
            customer=customer.key,
            total=order.total,
            discount_code=order.discount_code,
            loyalty_points_debited=debit,
        )
        return {"order_id": str(order.id), "order_number": order.order_number, "total": order.total}

    def _customer_for(self, cart: ShoppingCart, command) -> OrderCustomer:
        if cart.owner.is_registered:
            return OrderCustomer.registered(cart.owner.customer_id)
        if not command.guest_email or not command.guest_full_name:
            raise ValidationError({"guest": ["Guest checkout requires an email and a full name"]})
        return OrderCustomer.guest(
            email=command.guest_email,
            full_name=command.guest_full_name,
            phone=command.guest_phone,
        )

    def _eligible_discount(self, snapshot: dict, customer: OrderCustomer) -> DiscountCode | None:
        if not snapshot["discount_code"]:
            return None

        discount_code = find_by_code(snapshot["discount_code"])
        if discount_code is None:
            raise IneligibleError({"discount_code": [REASON_INVALID]})

        eligibility = discount_code.can_be_used_by(customer.key, snapshot["subtotal"])
        if not eligibility.valid:
            raise IneligibleError({"discount_code": [eligibility.reason]})
        return discount_code

    def _loyalty_debit(self, snapshot: dict, customer: OrderCustomer):
        debit = points_to_debit(snapshot["loyalty_points_used"], snapshot["loyalty_discount"])
        if not debit:
            return None, 0
        if not customer.is_registered:
            raise ValidationError({"loyalty_points": ["Loyalty points are only available to registered customers"]})

        account = find_account(customer.customer_id)
        balance = account.balance if account else 0
        if balance < debit:
            raise InsufficientResourceError({"loyalty_points": [f"Insufficient loyalty points. Available: {balance}"]})
        return account, debit
