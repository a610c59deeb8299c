"""Price and stock resolution against the catalog store."""

from dataclasses import dataclass

import structlog

from ordering.catalog import get_catalog
from shared.errors import InsufficientResourceError, NotFoundError

logger = structlog.get_logger(__name__)

DEFAULT_VARIANT_NAME = "Default"


@dataclass(frozen=True)
class ResolvedPrice:
    unit_price: int
    product_name: str
    variant_name: str = DEFAULT_VARIANT_NAME


def resolve_price(product_id, variant_id=None, quantity: int = 1) -> ResolvedPrice:
    """Current unit price for a (product, variant) pair with enough stock for ``quantity``.

    Raises:
        NotFoundError: the product or variant is unknown or inactive.
        InsufficientResourceError: fewer than ``quantity`` units are in stock.
    """
    catalog = get_catalog()

    product = catalog.get_product(str(product_id))
    if product is None or not product.active:
        raise NotFoundError({"product_id": ["Product not found or inactive"]})

    if variant_id:
        variant = catalog.get_variant(str(product_id), str(variant_id))
        if variant is None or not variant.active:
            raise NotFoundError({"variant_id": ["Product variant not found or inactive"]})
        stock, price, variant_name = variant.stock, variant.price, variant.name
    else:
        stock, price, variant_name = product.total_stock, product.base_price, DEFAULT_VARIANT_NAME

    if stock < quantity:
        logger.info(
            "insufficient_stock",
            product_id=str(product_id),
            variant_id=str(variant_id) if variant_id else None,
            requested=quantity,
            available=stock,
        )
        raise InsufficientResourceError({"quantity": [f"Insufficient stock. Available: {stock}"]})

    return ResolvedPrice(unit_price=price, product_name=product.name, variant_name=variant_name)
