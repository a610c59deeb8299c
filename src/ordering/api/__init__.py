"""Ordering domain API package."""

from ordering.api.routes import cart_router, discount_router, loyalty_router, order_router

__all__ = ["cart_router", "order_router", "discount_router", "loyalty_router"]
