"""Catalog store factory.

Provides get_catalog() / set_catalog() to swap implementations. The
in-memory catalog is the default.
"""

from ordering.catalog.fake_adapter import InMemoryCatalog
from ordering.catalog.port import CatalogStore

_current_catalog: CatalogStore | None = None


def get_catalog() -> CatalogStore:
    """Return the current catalog store. Defaults to InMemoryCatalog."""
    global _current_catalog
    if _current_catalog is None:
        _current_catalog = InMemoryCatalog()
    return _current_catalog


def set_catalog(catalog: CatalogStore) -> None:
    """Override the active catalog store (useful for tests)."""
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    """Reset to default catalog store."""
    global _current_catalog
    _current_catalog = None
