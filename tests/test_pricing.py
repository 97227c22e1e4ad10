from decimal import Decimal

import pytest

from app.database import FileBackedDB
from app.services.pricing import CatalogPriceStore, PriceLookupError


def test_fetch_prices_returns_only_known_ids(tmp_path):
    db = FileBackedDB(tmp_path)
    db.create_record("products", {"id": "p1", "title": "A", "price": "19.99"})
    db.create_record("products", {"id": "p2", "title": "B", "price": "5"})
    db.create_record("products", {"id": "p3", "title": "C", "price": "n/a"})
    store = CatalogPriceStore(db)

    prices = store.fetch_prices({"p1", "p3", "missing"})
    assert prices == {"p1": Decimal("19.99")}


def test_fetch_prices_without_ids_does_not_read(tmp_path):
    db = FileBackedDB(tmp_path / "nowhere")
    assert CatalogPriceStore(db).fetch_prices([]) == {}
    assert not (tmp_path / "nowhere").exists()


def test_fetch_prices_wraps_store_errors(tmp_path):
    class BrokenDB(FileBackedDB):
        def get_records(self, table, key, values):
            raise OSError("disk gone")

    with pytest.raises(PriceLookupError):
        CatalogPriceStore(BrokenDB(tmp_path)).fetch_prices({"p1"})


def test_get_records_bulk_lookup(tmp_path):
    db = FileBackedDB(tmp_path)
    for pid in ("a", "b", "c"):
        db.create_record("products", {"id": pid, "price": "1"})
    rows = db.get_records("products", "id", ["a", "c", "zzz"])
    assert sorted(r["id"] for r in rows) == ["a", "c"]
    assert db.get_records("products", "id", []) == []
    assert db.get_records("empty_table", "id", ["a"]) == []
