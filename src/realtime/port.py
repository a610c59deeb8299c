"""Notification fan-out port.

Every broadcast is fire-and-forget: the caller never waits on delivery and
never learns whether anyone was listening. Payloads are plain dicts.
"""

from abc import ABC, abstractmethod


class Notifier(ABC):
    """Abstract real-time notifier interface."""

    @abstractmethod
    def cart_updated(self, identity: str, totals: dict) -> None:
        """Push refreshed cart totals to the cart owner's sessions."""
        ...

    @abstractmethod
    def order_created(self, order: dict) -> None:
        """Announce a newly placed order (customer and admin listeners)."""
        ...

    @abstractmethod
    def order_status_changed(self, identity: str, order: dict) -> None:
        """Tell the customer, and the admin room, that an order moved."""
        ...

    @abstractmethod
    def review_posted(self, product_id: str, review: dict) -> None:
        """Push a new review to the product's subscribers."""
        ...

    @abstractmethod
    def rating_updated(self, product_id: str, rating: dict) -> None:
        """Push a product's recalculated rating to its subscribers."""
        ...
