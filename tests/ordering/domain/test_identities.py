"""Tests for the cart owner and order customer value objects."""

import pytest
from ordering.identity import CartOwner, IdentityKind, OrderCustomer
from protean.exceptions import ValidationError


class TestCartOwner:
    def test_registered_owner_key(self):
        owner = CartOwner.registered("cust-001")
        assert owner.is_registered
        assert owner.key == "customer:cust-001"

    def test_guest_owner_key(self):
        owner = CartOwner.guest("sess-001")
        assert not owner.is_registered
        assert owner.key == "session:sess-001"

    def test_of_prefers_customer(self):
        owner = CartOwner.of(customer_id="cust-001", session_id="sess-001")
        assert owner.kind == IdentityKind.REGISTERED.value

    def test_of_requires_one_identity(self):
        with pytest.raises(ValidationError):
            CartOwner.of()

    def test_registered_owner_cannot_carry_session(self):
        with pytest.raises(ValidationError):
            CartOwner(kind=IdentityKind.REGISTERED.value, customer_id="cust-001", session_id="sess-001")

    def test_guest_owner_needs_session(self):
        with pytest.raises(ValidationError):
            CartOwner(kind=IdentityKind.GUEST.value)


class TestOrderCustomer:
    def test_registered_customer_key(self):
        assert OrderCustomer.registered("cust-001").key == "customer:cust-001"

    def test_guest_email_is_normalised(self):
        customer = OrderCustomer.guest(email="  Jane@Example.COM ", full_name="Jane Doe")
        assert customer.email == "jane@example.com"
        assert customer.key == "guest:jane@example.com"

    def test_guest_needs_a_name(self):
        with pytest.raises(ValidationError):
            OrderCustomer(kind=IdentityKind.GUEST.value, email="jane@example.com")

    def test_guest_cannot_carry_customer_id(self):
        with pytest.raises(ValidationError):
            OrderCustomer(
                kind=IdentityKind.GUEST.value,
                customer_id="cust-001",
                email="jane@example.com",
                full_name="Jane Doe",
            )
