# backend/repositories/store.py
"""Single place where the catalog storage backend is chosen.

Public routes depend on ``get_store`` and admin routes on
``get_admin_store``; both read ``settings`` so switching a deployment from
JSON files to the database is one environment variable.
"""
import logging
from pathlib import Path

from config import settings
from database import SessionLocal
from models.catalog import CategoryDocument, ProductDocument, ProductSetDocument
from repositories.base import CatalogStore
from repositories.db_store import SqlDocumentRepository
from repositories.json_store import CATEGORIES_FILE, PRODUCTS_FILE, SETS_FILE, JsonFileRepository
from schemas.catalog import Category, Product, ProductSet

logger = logging.getLogger(__name__)

BACKENDS = ("json", "db")


def json_store(data_dir) -> CatalogStore:
    data_dir = Path(data_dir)
    return CatalogStore(
        backend="json",
        products=JsonFileRepository(data_dir / PRODUCTS_FILE, Product),
        categories=JsonFileRepository(data_dir / CATEGORIES_FILE, Category),
        sets=JsonFileRepository(data_dir / SETS_FILE, ProductSet),
    )


def db_store(session_factory=None) -> CatalogStore:
    session_factory = session_factory or SessionLocal
    return CatalogStore(
        backend="db",
        products=SqlDocumentRepository(session_factory, ProductDocument, Product),
        categories=SqlDocumentRepository(session_factory, CategoryDocument, Category),
        sets=SqlDocumentRepository(session_factory, ProductSetDocument, ProductSet),
    )


def build_store(backend: str) -> CatalogStore:
    backend = (backend or "json").lower()
    if backend == "json":
        return json_store(settings.DATA_DIR)
    if backend == "db":
        return db_store()
    raise ValueError(f"Unknown storage backend: {backend!r} (expected one of {BACKENDS})")


def get_store() -> CatalogStore:
    return build_store(settings.STORAGE_BACKEND)


def get_admin_store() -> CatalogStore:
    return build_store(settings.admin_backend)


def warn_on_split_backends() -> None:
    if settings.admin_backend != settings.STORAGE_BACKEND:
        logger.warning(
            "Admin routes use the %r backend while the storefront uses %r; edits will not show up in the shop",
            settings.admin_backend, settings.STORAGE_BACKEND,
        )
