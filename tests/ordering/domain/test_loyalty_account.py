"""Tests for the LoyaltyAccount aggregate."""

import pytest
from ordering.loyalty.account import EntryKind, LoyaltyAccount
from protean.exceptions import ValidationError
from shared.errors import InsufficientResourceError


class TestLoyaltyAccount:
    def test_opens_with_zero_balance(self):
        account = LoyaltyAccount.open("cust-001")
        assert account.balance == 0
        assert len(account.entries) == 0

    def test_credit(self):
        account = LoyaltyAccount.open("cust-001")
        account.credit(110, reason="Order delivered", order_number="ORD-1")

        assert account.balance == 110
        assert account.has_entry_for("ORD-1", EntryKind.EARNED)
        assert not account.has_entry_for("ORD-1", EntryKind.REDEEMED)

    def test_debit(self):
        account = LoyaltyAccount.open("cust-001")
        account.credit(50, reason="Welcome", kind=EntryKind.GRANTED)
        account.debit(20, reason="Checkout", order_number="ORD-2")

        assert account.balance == 30
        assert account.has_entry_for("ORD-2", EntryKind.REDEEMED)

    def test_cannot_overdraw(self):
        account = LoyaltyAccount.open("cust-001")
        account.credit(10, reason="Welcome")
        with pytest.raises(InsufficientResourceError):
            account.debit(11, reason="Checkout")
        assert account.balance == 10

    def test_credit_must_be_positive(self):
        with pytest.raises(ValidationError):
            LoyaltyAccount.open("cust-001").credit(0, reason="Nothing")
