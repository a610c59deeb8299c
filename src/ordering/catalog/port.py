"""Catalog store port.

Carts and checkout read product, variant, price and stock data through this
interface. The ordering context never writes to the catalog.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class VariantRecord:
    """A sellable variant of a product."""

    variant_id: str
    name: str
    price: int
    stock: int = 0
    active: bool = True


@dataclass(frozen=True)
class ProductRecord:
    """A product as the catalog reports it."""

    product_id: str
    name: str
    base_price: int
    total_stock: int = 0
    active: bool = True
    category_id: str | None = None


class CatalogStore(ABC):
    """Abstract read-only catalog interface."""

    @abstractmethod
    def get_product(self, product_id: str) -> ProductRecord | None:
        """Return the product, or None when it does not exist."""
        ...

    @abstractmethod
    def get_variant(self, product_id: str, variant_id: str) -> VariantRecord | None:
        """Return the product's variant, or None when it does not exist."""
        ...
