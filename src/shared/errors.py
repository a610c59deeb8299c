"""Typed error kinds shared by the Ordering and Reviews contexts.

Every kind is a Protean ``ValidationError`` so it carries the same
``{field: [message, ...]}`` payload the framework uses everywhere, and so
code that already catches ``ValidationError`` keeps working. The HTTP layer
maps each kind to its own status code (see ``shared.api``).
"""

from protean.exceptions import ValidationError


class NotFoundError(ValidationError):
    """A cart, item, order, discount code or review does not exist."""


class ItemNotFoundError(NotFoundError):
    """No line for the given (product, variant) pair exists in the cart."""


class ConflictError(ValidationError):
    """The resource already exists (duplicate discount code, duplicate review)."""


class IneligibleError(ValidationError):
    """A discount code cannot be used by this identity for this amount."""

    @property
    def reason(self) -> str:
        for messages in self.messages.values():
            if messages:
                return messages[0]
        return ""


class InsufficientResourceError(ValidationError):
    """Not enough stock or loyalty points to satisfy the request."""


class StateError(ValidationError):
    """The target is in a state that does not allow the operation."""


class EmptyCartError(ValidationError):
    """Checkout was attempted on a cart without line items."""
