"""In-memory catalog for development and testing.

Products and variants are seeded at runtime; lookups are recorded so tests
can assert the ordering context only ever reads.
"""

from ordering.catalog.port import CatalogStore, ProductRecord, VariantRecord


class InMemoryCatalog(CatalogStore):
    def __init__(self) -> None:
        self.products: dict[str, ProductRecord] = {}
        self.variants: dict[tuple[str, str], VariantRecord] = {}
        self.calls: list[dict] = []

    def add_product(
        self,
        product_id: str,
        name: str,
        base_price: int,
        total_stock: int = 100,
        active: bool = True,
        category_id: str | None = None,
    ) -> ProductRecord:
        product = ProductRecord(
            product_id=str(product_id),
            name=name,
            base_price=base_price,
            total_stock=total_stock,
            active=active,
            category_id=category_id,
        )
        self.products[product.product_id] = product
        return product

    def add_variant(
        self,
        product_id: str,
        variant_id: str,
        name: str,
        price: int,
        stock: int = 100,
        active: bool = True,
    ) -> VariantRecord:
        variant = VariantRecord(
            variant_id=str(variant_id),
            name=name,
            price=price,
            stock=stock,
            active=active,
        )
        self.variants[(str(product_id), variant.variant_id)] = variant
        return variant

    def reset(self) -> None:
        self.products.clear()
        self.variants.clear()
        self.calls.clear()

    def get_product(self, product_id: str) -> ProductRecord | None:
        self.calls.append({"method": "get_product", "product_id": str(product_id)})
        return self.products.get(str(product_id))

    def get_variant(self, product_id: str, variant_id: str) -> VariantRecord | None:
        self.calls.append(
            {
                "method": "get_variant",
                "product_id": str(product_id),
                "variant_id": str(variant_id),
            }
        )
        return self.variants.get((str(product_id), str(variant_id)))
