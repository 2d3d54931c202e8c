"""Tests for app.services.catalog.SqliteCatalog."""

import pytest

from app.models.product import ProductRecord
from app.services.catalog import SqliteCatalog


def _record(external_id="1", **overrides) -> ProductRecord:
    fields = dict(
        external_id=external_id,
        title=f"Item {external_id}",
        description="",
        product_url=f"/item/{external_id}",
        image_asset_key=external_id,
        image_source_url=f"/img/{external_id}.jpg",
        category="small_appliance",
        price_amount=1000,
        price_currency="EUR",
    )
    fields.update(overrides)
    return ProductRecord(**fields)


@pytest.fixture
def catalog():
    store = SqliteCatalog(":memory:")
    yield store
    store.close()


class TestUpdateOrCreate:
    def test_creates_new_entry(self, catalog):
        entry = catalog.update_or_create("1", _record("1"))
        assert entry.id == 1
        assert entry.created_at == entry.updated_at
        assert catalog.count() == 1

    def test_identical_calls_are_idempotent(self, catalog):
        first = catalog.update_or_create("1", _record("1"))
        second = catalog.update_or_create("1", _record("1"))
        assert first.id == second.id
        assert catalog.count() == 1

    def test_update_keeps_created_at(self, catalog):
        first = catalog.update_or_create("1", _record("1"))
        second = catalog.update_or_create("1", _record("1", price_amount=500))
        assert second.created_at == first.created_at
        assert second.price_amount == 500

    def test_distinct_ids_get_distinct_rows(self, catalog):
        catalog.update_or_create("1", _record("1"))
        catalog.update_or_create("2", _record("2"))
        assert [e.external_id for e in catalog.all()] == ["1", "2"]

    def test_null_key_matches_existing_null_row(self, catalog):
        catalog.update_or_create(None, _record(None, title="first"))
        entry = catalog.update_or_create(None, _record(None, title="second"))
        assert catalog.count() == 1
        assert entry.title == "second"


class TestLookups:
    def test_find_missing_returns_none(self, catalog):
        assert catalog.find_by_external_id("404") is None

    def test_get_unknown_id_raises(self, catalog):
        with pytest.raises(KeyError):
            catalog.get(99)

    def test_file_backed_catalog_persists(self, tmp_path):
        path = tmp_path / "db" / "catalog.db"
        store = SqliteCatalog(path)
        store.update_or_create("1", _record("1"))
        store.close()

        reopened = SqliteCatalog(path)
        assert reopened.find_by_external_id("1").title == "Item 1"
        reopened.close()
