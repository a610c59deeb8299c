import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering
    from shared.db import drop_db, setup_db

    bed = DomainFixture(ordering)
    bed.setup()
    setup_db(ordering)
    yield bed
    drop_db(ordering)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        for _, broker in current_domain.brokers.items():
            broker._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def catalog():
    """An in-memory catalog seeded with a phone (two variants) and a case."""
    from ordering.catalog import set_catalog
    from ordering.catalog.fake_adapter import InMemoryCatalog

    store = InMemoryCatalog()
    store.add_product("prod-phone", "Phone X", base_price=500_000, total_stock=50)
    store.add_variant("prod-phone", "var-black", "Black", price=500_000, stock=10)
    store.add_variant("prod-phone", "var-gold", "Gold", price=550_000, stock=2)
    store.add_product("prod-case", "Phone Case", base_price=80_000, total_stock=100)
    set_catalog(store)
    return store
