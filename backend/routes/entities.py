# backend/routes/entities.py
"""CRUD endpoints for the three catalog entity kinds.

The same handlers are mounted twice per kind: once under ``/api`` for the
storefront and once under ``/api/admin`` behind the admin session, where
every write is also recorded in the audit log.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Type

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from repositories.base import CatalogStore
from repositories.errors import StorageError
from repositories.store import get_admin_store, get_store
from schemas.catalog import Category, Product, ProductSet
from services.pricing import discount_exceeds_price
from utils.audit import Auditor, get_auditor, get_no_auditor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityKind:
    key: str            # repository name and URL segment
    schema: Type[BaseModel]
    singular: str       # used in error messages
    plural: str
    audit_resource: str


PRODUCTS = EntityKind("products", Product, "product", "products", "product")
CATEGORIES = EntityKind("categories", Category, "category", "categories", "category")
SETS = EntityKind("sets", ProductSet, "product set", "product sets", "set")

KINDS = (PRODUCTS, CATEGORIES, SETS)


def storage_failure(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


def check_writable(kind: EntityKind, repo, entity) -> None:
    """Reject writes that would break catalog invariants."""
    if kind is PRODUCTS and discount_exceeds_price(entity):
        raise HTTPException(status_code=400, detail="Discount must not exceed price")

    clash = repo.get_by_slug(entity.slug)
    if clash is not None and clash.id != entity.id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Slug '{entity.slug}' is already used by {kind.singular} {clash.id}",
        )


def build_entity_router(kind: EntityKind, admin: bool = False) -> APIRouter:
    prefix = f"/api/admin/{kind.key}" if admin else f"/api/{kind.key}"
    store_dependency = get_admin_store if admin else get_store
    auditor_dependency = get_auditor if admin else get_no_auditor
    schema = kind.schema

    router = APIRouter(prefix=prefix, tags=["Admin" if admin else "Catalog"])

    def audit(auditor: Optional[Auditor], action: str, entity_id: str, status_: str = "SUCCESS", **meta):
        if auditor is not None:
            auditor.record(action, kind.audit_resource, status=status_, meta={"id": entity_id, **meta})

    @router.get("", response_model=List[schema], response_model_by_alias=True, response_model_exclude_none=True)
    def list_entities(
        store: CatalogStore = Depends(store_dependency),
        auditor: Optional[Auditor] = Depends(auditor_dependency),
    ):
        try:
            return store.repository(kind.key).get_all()
        except StorageError:
            logger.exception("Listing %s failed", kind.plural)
            raise storage_failure(f"Failed to fetch {kind.plural}")

    @router.post(
        "",
        response_model=schema,
        status_code=status.HTTP_201_CREATED,
        response_model_by_alias=True,
        response_model_exclude_none=True,
    )
    def create_entity(
        entity: schema,
        store: CatalogStore = Depends(store_dependency),
        auditor: Optional[Auditor] = Depends(auditor_dependency),
    ):
        repo = store.repository(kind.key)
        try:
            check_writable(kind, repo, entity)
            saved = repo.save(entity)
        except StorageError:
            logger.exception("Saving %s %s failed", kind.singular, entity.id)
            audit(auditor, "CREATE", entity.id, "FAIL")
            raise storage_failure(f"Failed to save {kind.singular}")

        audit(auditor, "CREATE", saved.id, slug=saved.slug)
        return saved

    @router.get("/{entity_id}", response_model=schema, response_model_by_alias=True, response_model_exclude_none=True)
    def get_entity(
        entity_id: str,
        store: CatalogStore = Depends(store_dependency),
        auditor: Optional[Auditor] = Depends(auditor_dependency),
    ):
        try:
            entity = store.repository(kind.key).get_by_id(entity_id)
        except StorageError:
            logger.exception("Reading %s %s failed", kind.singular, entity_id)
            raise storage_failure(f"Failed to fetch {kind.singular}")

        if entity is None:
            raise HTTPException(status_code=404, detail=f"{kind.singular.capitalize()} not found")
        return entity

    @router.put("/{entity_id}", response_model=schema, response_model_by_alias=True, response_model_exclude_none=True)
    def update_entity(
        entity_id: str,
        entity: schema,
        store: CatalogStore = Depends(store_dependency),
        auditor: Optional[Auditor] = Depends(auditor_dependency),
    ):
        # The body must describe the entity named in the URL
        if entity.id != entity_id:
            raise HTTPException(status_code=400, detail=f"{kind.singular.capitalize()} ID mismatch")

        repo = store.repository(kind.key)
        try:
            if repo.get_by_id(entity_id) is None:
                raise HTTPException(status_code=404, detail=f"{kind.singular.capitalize()} not found")
            check_writable(kind, repo, entity)
            saved = repo.save(entity)
        except StorageError:
            logger.exception("Updating %s %s failed", kind.singular, entity_id)
            audit(auditor, "UPDATE", entity_id, "FAIL")
            raise storage_failure(f"Failed to update {kind.singular}")

        audit(auditor, "UPDATE", entity_id, slug=saved.slug)
        return saved

    @router.delete("/{entity_id}")
    def delete_entity(
        entity_id: str,
        store: CatalogStore = Depends(store_dependency),
        auditor: Optional[Auditor] = Depends(auditor_dependency),
    ):
        try:
            store.repository(kind.key).delete(entity_id)
        except StorageError:
            logger.exception("Deleting %s %s failed", kind.singular, entity_id)
            audit(auditor, "DELETE", entity_id, "FAIL")
            raise storage_failure(f"Failed to delete {kind.singular}")

        audit(auditor, "DELETE", entity_id)
        return {"success": True}

    return router


public_routers = [build_entity_router(kind) for kind in KINDS]
admin_routers = [build_entity_router(kind, admin=True) for kind in KINDS]
