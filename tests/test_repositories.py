import json

import pytest

from migrate_json_to_db import migrate
from repositories.errors import StorageConfigError, StorageError
from repositories.json_store import JsonFileRepository
from repositories.store import build_store
from schemas.catalog import Product


@pytest.fixture(params=["json", "db"])
def any_store(request, store, sql_store, session_factory, data_dir):
    if request.param == "json":
        return store
    migrate(data_dir, session_factory, bind=session_factory.kw["bind"])
    return sql_store


def test_get_all_and_lookups(any_store):
    assert {p.id for p in any_store.products.get_all()} == {"P1", "P2", "P3"}
    assert any_store.products.get_by_id("P2").slug == "wardrobe-milan"
    assert any_store.products.get_by_slug("chair-soho").id == "P3"
    assert any_store.products.get_by_id("missing") is None
    assert any_store.sets.get_by_slug("bedroom-milan").category_ids == ["CAT1"]


def test_save_is_upsert(any_store):
    repo = any_store.products
    updated = repo.get_by_id("P1").model_copy(update={"price": 1200})
    repo.save(updated)
    assert repo.get_by_id("P1").price == 1200
    assert len(repo.get_all()) == 3

    repo.save(Product(id="P4", name="Комод", slug="komod", price=300))
    assert len(repo.get_all()) == 4


def test_delete_missing_is_noop(any_store):
    any_store.categories.delete("nope")
    assert len(any_store.categories.get_all()) == 3
    any_store.categories.delete("CAT3")
    assert any_store.categories.get_by_id("CAT3") is None


def test_unknown_fields_survive_round_trip(any_store):
    repo = any_store.products
    repo.save(Product.model_validate({"id": "P9", "name": "X", "slug": "x", "price": 1, "badge": "new"}))
    assert repo.get_by_id("P9").model_dump(by_alias=True)["badge"] == "new"


def test_missing_json_file_is_config_error(tmp_path):
    repo = JsonFileRepository(tmp_path / "products.json", Product)
    with pytest.raises(StorageConfigError):
        repo.get_all()


def test_corrupt_json_file_is_storage_error(tmp_path):
    path = tmp_path / "products.json"
    path.write_text("{broken", encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileRepository(path, Product).get_all()


def test_json_writes_keep_file_readable(data_dir, store):
    store.products.save(Product(id="P5", name="Пуф", slug="puf", price=150))
    documents = json.loads((data_dir / "products.json").read_text(encoding="utf-8"))
    assert documents[-1] == {
        "id": "P5", "name": "Пуф", "slug": "puf", "price": 150.0,
        "inStock": True, "images": [], "type": "product",
    }
    assert not list(data_dir.glob(".*.tmp"))


def test_migration_skips_missing_files(tmp_path, session_factory, data_dir):
    (data_dir / "product-sets.json").unlink()
    counts = migrate(data_dir, session_factory, bind=session_factory.kw["bind"])
    assert counts == {"products.json": 3, "categories.json": 3}


def test_build_store_rejects_unknown_backend():
    with pytest.raises(ValueError):
        build_store("mongo")
