import json
import os
import tempfile

# Settings and the engine are read at import time
_TMP = tempfile.mkdtemp(prefix="mebelsklad-tests-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DATA_DIR"] = os.path.join(_TMP, "data")
os.environ["ORDERS_DIR"] = os.path.join(_TMP, "orders")
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "uploads")
os.environ["STORAGE_BACKEND"] = "json"
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ["TELEGRAM_CHAT_ID"] = ""
os.environ.pop("ADMIN_STORAGE_BACKEND", None)

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from database import get_db, init_db, make_engine
from main import app
from repositories.orders import OrderStore, get_order_store
from repositories.store import db_store, get_admin_store, get_store, json_store
from utils.telegram_client import get_notifier


CATEGORIES = [
    {"id": "CAT1", "name": "Спальни", "slug": "bedroom"},
    {"id": "CAT2", "name": "Кровати", "slug": "beds", "parentId": "CAT1"},
    {"id": "CAT3", "name": "Стулья", "slug": "chairs"},
]

PRODUCTS = [
    {
        "id": "P1", "name": "Кровать Милан", "slug": "bed-milan", "categoryId": "CAT2",
        "price": 1000, "discount": 100, "inStock": True, "images": [],
        "description": "Двуспальная кровать", "collection": "Милан", "type": "product",
    },
    {
        "id": "P2", "name": "Шкаф Милан", "slug": "wardrobe-milan", "categoryId": "CAT2",
        "price": 2000, "inStock": True, "images": [],
        "description": "Трёхдверный шкаф", "collection": "Милан", "type": "product",
    },
    {
        "id": "P3", "name": "Стул Сохо", "slug": "chair-soho", "categoryId": "CAT3",
        "price": 500, "inStock": True, "images": [],
        "description": "Мягкий стул", "collection": "Сохо", "type": "product",
    },
]

SETS = [
    {
        "id": "S1", "name": "Спальня Милан", "slug": "bedroom-milan", "categoryIds": ["CAT1"],
        "inStock": True, "images": [], "description": "Спальный гарнитур", "collection": "Милан",
        "items": [
            {"productId": "P1", "defaultQuantity": 1, "minQuantity": 1, "maxQuantity": 1, "required": True},
            {"productId": "P2", "defaultQuantity": 1, "minQuantity": 0, "maxQuantity": 2, "required": False},
        ],
        "type": "set",
    },
]


class FakeNotifier:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    async def send_order(self, order):
        self.sent.append(order)
        if self.fail:
            raise httpx.ConnectError("telegram unreachable")
        return True


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    (path / "categories.json").write_text(json.dumps(CATEGORIES, ensure_ascii=False), encoding="utf-8")
    (path / "products.json").write_text(json.dumps(PRODUCTS, ensure_ascii=False), encoding="utf-8")
    (path / "product-sets.json").write_text(json.dumps(SETS, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def store(data_dir):
    return json_store(data_dir)


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def sql_store(session_factory):
    return db_store(session_factory)


@pytest.fixture
def orders_dir(tmp_path):
    return tmp_path / "orders"


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def client(store, session_factory, orders_dir, notifier):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_admin_store] = lambda: store
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_order_store] = lambda: OrderStore(orders_dir)
    app.dependency_overrides[get_notifier] = lambda: notifier

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    response = client.post("/api/admin/auth/login", json={"username": "admin", "password": "password123"})
    assert response.status_code == 200
    return client
