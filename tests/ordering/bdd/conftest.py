"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from pytest_bdd import then


@pytest.fixture()
def error():
    """Container for a captured validation error."""
    return {"exc": None}


@then("the cart change is rejected")
def cart_change_rejected(error):
    assert error["exc"] is not None
