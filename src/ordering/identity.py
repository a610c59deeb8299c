"""Who owns a cart and who placed an order.

Both are exclusive choices: a registered customer, or a guest. A guest cart
is identified by its session, a guest order by the contact details given at
checkout.
"""

from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from ordering.domain import ordering


class IdentityKind(Enum):
    REGISTERED = "Registered"
    GUEST = "Guest"


@ordering.value_object
class CartOwner:
    kind = String(required=True, choices=IdentityKind)
    customer_id = String(max_length=255)
    session_id = String(max_length=255)

    @invariant.post
    def exactly_one_identity(self):
        if self.kind == IdentityKind.REGISTERED.value:
            if not self.customer_id or self.session_id:
                raise ValidationError({"owner": ["A registered cart owner carries only a customer id"]})
        elif not self.session_id or self.customer_id:
            raise ValidationError({"owner": ["A guest cart owner carries only a session id"]})

    @classmethod
    def registered(cls, customer_id):
        return cls(kind=IdentityKind.REGISTERED.value, customer_id=str(customer_id))

    @classmethod
    def guest(cls, session_id):
        return cls(kind=IdentityKind.GUEST.value, session_id=str(session_id))

    @classmethod
    def of(cls, customer_id=None, session_id=None):
        """Build an owner from optional request values; the customer wins when both are given."""
        if customer_id:
            return cls.registered(customer_id)
        if session_id:
            return cls.guest(session_id)
        raise ValidationError({"owner": ["Either a customer id or a session id is required"]})

    @property
    def is_registered(self) -> bool:
        return self.kind == IdentityKind.REGISTERED.value

    @property
    def key(self) -> str:
        if self.is_registered:
            return f"customer:{self.customer_id}"
        return f"session:{self.session_id}"


@ordering.value_object
class OrderCustomer:
    kind = String(required=True, choices=IdentityKind)
    customer_id = String(max_length=255)
    email = String(max_length=254)
    full_name = String(max_length=255)
    phone = String(max_length=30)

    @invariant.post
    def exactly_one_identity(self):
        if self.kind == IdentityKind.REGISTERED.value:
            if not self.customer_id or self.email:
                raise ValidationError({"customer": ["A registered customer carries only a customer id"]})
        else:
            if self.customer_id:
                raise ValidationError({"customer": ["A guest customer cannot carry a customer id"]})
            if not self.email or not self.full_name:
                raise ValidationError({"customer": ["A guest customer needs an email and a full name"]})

    @classmethod
    def registered(cls, customer_id):
        return cls(kind=IdentityKind.REGISTERED.value, customer_id=str(customer_id))

    @classmethod
    def guest(cls, email, full_name, phone=None):
        return cls(
            kind=IdentityKind.GUEST.value,
            email=email.strip().lower(),
            full_name=full_name,
            phone=phone,
        )

    @property
    def is_registered(self) -> bool:
        return self.kind == IdentityKind.REGISTERED.value

    @property
    def key(self) -> str:
        if self.is_registered:
            return f"customer:{self.customer_id}"
        return f"guest:{self.email}"
