"""Spending loyalty points on a cart: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.cart.management import cart_view, load_cart
from ordering.domain import ordering
from ordering.loyalty.management import balance_of
from shared.errors import InsufficientResourceError


@ordering.command(part_of="ShoppingCart")
class UseLoyaltyPoints:
    cart_id = Identifier(required=True)
    points = Integer(required=True)


@ordering.command(part_of="ShoppingCart")
class RemoveLoyaltyPoints:
    cart_id = Identifier(required=True)


@ordering.command_handler(part_of=ShoppingCart)
class CartLoyaltyHandler:
    @handle(UseLoyaltyPoints)
    def use_loyalty_points(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = load_cart(command.cart_id)

        if not cart.owner.is_registered:
            raise ValidationError({"points": ["Loyalty points are only available to registered customers"]})

        available = balance_of(cart.owner.customer_id)
        if command.points > available:
            raise InsufficientResourceError({"points": [f"Insufficient loyalty points. Available: {available}"]})

        cart.use_loyalty_points(command.points)
        repo.add(cart)
        return cart_view(cart)

    @handle(RemoveLoyaltyPoints)
    def remove_loyalty_points(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = load_cart(command.cart_id)
        cart.remove_loyalty_points()
        repo.add(cart)
        return cart_view(cart)
