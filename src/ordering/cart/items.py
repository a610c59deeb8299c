"""Cart line management: commands and handler.

New lines are priced from the catalog at the moment they are added.
"""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.cart.management import cart_view, load_cart
from ordering.catalog.lookup import resolve_price
from ordering.domain import ordering
from shared.errors import ItemNotFoundError


@ordering.command(part_of="ShoppingCart")
class AddToCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(default=1)


@ordering.command(part_of="ShoppingCart")
class UpdateCartItem:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True)


@ordering.command(part_of="ShoppingCart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()


@ordering.command(part_of="ShoppingCart")
class ClearCart:
    cart_id = Identifier(required=True)


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = load_cart(command.cart_id)

        existing = cart.find_item(command.product_id, command.variant_id)
        wanted = command.quantity + (existing.quantity if existing else 0)
        resolved = resolve_price(command.product_id, command.variant_id, wanted)

        cart.add_item(
            product_id=command.product_id,
            variant_id=command.variant_id,
            quantity=command.quantity,
            price=resolved.unit_price,
        )
        repo.add(cart)
        return cart_view(cart)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = load_cart(command.cart_id)

        if command.quantity > 0:
            if cart.find_item(command.product_id, command.variant_id) is None:
                raise ItemNotFoundError({"item": ["Item not found in cart"]})
            resolve_price(command.product_id, command.variant_id, command.quantity)

        cart.update_item_quantity(
            product_id=command.product_id,
            variant_id=command.variant_id,
            quantity=command.quantity,
        )
        repo.add(cart)
        return cart_view(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = load_cart(command.cart_id)
        cart.remove_item(product_id=command.product_id, variant_id=command.variant_id)
        repo.add(cart)
        return cart_view(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = load_cart(command.cart_id)
        cart.clear()
        repo.add(cart)
        return cart_view(cart)
