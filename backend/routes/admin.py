# backend/routes/admin.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from repositories.base import CatalogStore
from repositories.errors import StorageError
from repositories.store import get_admin_store
from schemas.catalog import Product, ProductSet, SetValidation
from services.pricing import products_by_id, set_item_problems
from utils.audit import Auditor, get_auditor
from utils.format import generate_id
from utils.tokenJWT import get_current_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(get_current_admin)])


class DashboardCounts(BaseModel):
    products: int
    categories: int
    sets: int
    backend: str


def copy_slug(repo, slug: str) -> str:
    # "<slug>-copy", then "<slug>-copy-2" and so on while taken
    candidate = f"{slug}-copy"
    n = 1
    while repo.get_by_slug(candidate) is not None:
        n += 1
        candidate = f"{slug}-copy-{n}"
    return candidate


def _duplicate(store: CatalogStore, kind: str, resource: str, entity_id: str, prefix: str, not_found: str, auditor: Auditor):
    repo = store.repository(kind)
    try:
        original = repo.get_by_id(entity_id)
        if original is None:
            raise HTTPException(status_code=404, detail=not_found)

        data = original.model_dump(by_alias=True, exclude_none=True)
        data.update({
            "id": generate_id(prefix),
            "name": f"{original.name} (Copy)",
            "slug": copy_slug(repo, original.slug),
        })
        copy = repo.save(type(original).model_validate(data))
    except StorageError:
        logger.exception("Duplicating %s %s failed", kind, entity_id)
        auditor.record("DUPLICATE", resource, status="FAIL", meta={"id": entity_id})
        raise HTTPException(status_code=500, detail="Failed to duplicate item")

    auditor.record("DUPLICATE", resource, meta={"id": entity_id, "copyId": copy.id})
    return copy


# Copy a product under a fresh id and slug
@router.post(
    "/products/{product_id}/duplicate",
    response_model=Product,
    status_code=status.HTTP_201_CREATED,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
def duplicate_product(
    product_id: str,
    store: CatalogStore = Depends(get_admin_store),
    auditor: Auditor = Depends(get_auditor),
):
    return _duplicate(store, "products", "product", product_id, "PROD", "Product not found", auditor)


# Copy a set; its items still point at the same products
@router.post(
    "/sets/{set_id}/duplicate",
    response_model=ProductSet,
    status_code=status.HTTP_201_CREATED,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
def duplicate_set(
    set_id: str,
    store: CatalogStore = Depends(get_admin_store),
    auditor: Auditor = Depends(get_auditor),
):
    return _duplicate(store, "sets", "set", set_id, "SET", "Product set not found", auditor)


@router.get("/sets/{set_id}/validation", response_model=SetValidation)
def validate_set(
    set_id: str,
    store: CatalogStore = Depends(get_admin_store),
):
    """Report quantity bound problems and dangling product references."""
    try:
        product_set = store.sets.get_by_id(set_id)
        if product_set is None:
            raise HTTPException(status_code=404, detail="Product set not found")
        lookup = products_by_id(store.products.get_all())
    except StorageError:
        logger.exception("Validating set %s failed", set_id)
        raise HTTPException(status_code=500, detail="Failed to fetch product set")

    problems = {}
    missing = []
    for item in product_set.items:
        item_problems = set_item_problems(item)
        if item_problems:
            problems[item.product_id] = item_problems
        if item.product_id not in lookup:
            missing.append(item.product_id)

    return SetValidation(
        set_id=set_id,
        problems=problems,
        missing_product_ids=missing,
        valid=not problems and not missing,
    )


@router.get("/dashboard", response_model=DashboardCounts)
def dashboard(
    store: CatalogStore = Depends(get_admin_store),
):
    try:
        return DashboardCounts(
            products=len(store.products.get_all()),
            categories=len(store.categories.get_all()),
            sets=len(store.sets.get_all()),
            backend=store.backend,
        )
    except StorageError:
        logger.exception("Loading dashboard counts failed")
        raise HTTPException(status_code=500, detail="Failed to load dashboard")
