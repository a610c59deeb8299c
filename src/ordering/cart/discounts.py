"""Attaching discount codes to a cart: commands and handler.

Attaching is a preview. The code's eligibility is checked against the
cart's current subtotal, but no use is consumed until an order is placed.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.cart.management import cart_view, load_cart
from ordering.discount.queries import find_by_code
from ordering.domain import ordering
from shared.errors import IneligibleError, NotFoundError


@ordering.command(part_of="ShoppingCart")
class ApplyDiscountCode:
    cart_id = Identifier(required=True)
    code = String(required=True, max_length=20)


@ordering.command(part_of="ShoppingCart")
class RemoveDiscountCode:
    cart_id = Identifier(required=True)


@ordering.command_handler(part_of=ShoppingCart)
class CartDiscountHandler:
    @handle(ApplyDiscountCode)
    def apply_discount_code(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = load_cart(command.cart_id)

        discount_code = find_by_code(command.code)
        if discount_code is None:
            raise NotFoundError({"code": ["Invalid discount code"]})

        eligibility = discount_code.can_be_used_by(cart.owner_key, cart.calculate_totals().subtotal)
        if not eligibility.valid:
            raise IneligibleError({"code": [eligibility.reason]})

        amount = cart.apply_discount(
            code=discount_code.code,
            discount_type=discount_code.discount_type,
            value=discount_code.discount_value,
            max_discount=discount_code.max_discount_amount,
        )
        repo.add(cart)
        return {**cart_view(cart), "discount_amount": amount}

    @handle(RemoveDiscountCode)
    def remove_discount_code(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = load_cart(command.cart_id)
        cart.remove_discount()
        repo.add(cart)
        return cart_view(cart)
