"""Cart management: resolving the owner's cart and merging guest carts."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import CartStatus, ShoppingCart
from ordering.domain import ordering
from ordering.identity import CartOwner
from shared.errors import NotFoundError

logger = structlog.get_logger(__name__)


def load_cart(cart_id) -> ShoppingCart:
    try:
        return current_domain.repository_for(ShoppingCart).get(str(cart_id))
    except ObjectNotFoundError as exc:
        raise NotFoundError({"cart_id": [f"Cart {cart_id} not found"]}) from exc


def find_active_cart(owner_key: str) -> ShoppingCart | None:
    """The owner's single active cart, if there is one."""
    repo = current_domain.repository_for(ShoppingCart)
    carts = repo._dao.query.filter(owner_key=owner_key, status=CartStatus.ACTIVE.value).all().items
    if not carts:
        return None
    return repo.get(carts[0].id)


def cart_view(cart: ShoppingCart) -> dict:
    return {"cart_id": str(cart.id), "owner_key": cart.owner_key, **cart.summary()}


@ordering.command(part_of="ShoppingCart")
class ResolveCart:
    """Get the owner's active cart, creating it on first use."""

    customer_id = Identifier()
    session_id = String(max_length=255)


@ordering.command(part_of="ShoppingCart")
class MergeGuestCart:
    """Fold a guest session's cart into a registered customer's cart."""

    customer_id = Identifier(required=True)
    session_id = String(required=True, max_length=255)


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(ResolveCart)
    def resolve_cart(self, command):
        owner = CartOwner.of(customer_id=command.customer_id, session_id=command.session_id)

        cart = find_active_cart(owner.key)
        if cart is None:
            cart = ShoppingCart.create(owner)
            current_domain.repository_for(ShoppingCart).add(cart)
            logger.info("cart_created", cart_id=str(cart.id), owner=owner.key)

        return cart_view(cart)

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        guest_owner = CartOwner.guest(command.session_id)
        customer_owner = CartOwner.registered(command.customer_id)

        guest_cart = find_active_cart(guest_owner.key)
        if guest_cart is None:
            raise NotFoundError({"session_id": ["No active guest cart for this session"]})

        cart = find_active_cart(customer_owner.key)
        if cart is None:
            cart = ShoppingCart.create(customer_owner)

        cart.merge_from(guest_cart)

        repo.add(guest_cart)
        repo.add(cart)

        logger.info(
            "guest_cart_merged",
            cart_id=str(cart.id),
            guest_cart_id=str(guest_cart.id),
            items=len(guest_cart.items),
        )
        return cart_view(cart)
