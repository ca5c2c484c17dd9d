# backend/routes/catalog.py
"""Read-side storefront endpoints: catalog listing, search, category tree,
collections and the product / set detail pages."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from repositories.base import CatalogStore
from repositories.errors import StorageError
from repositories.store import get_store
from schemas.catalog import (
    CatalogPage, Category, CategoryNode, Collection, CollectionItems, ConfigurationEntry,
    ProductDetail, ResolvedSetItem, SearchResults, SetDetail, SetQuote, SetQuoteRequest,
)
from services.catalog import (
    CONTENT_TYPES, SORT_OPTIONS, build_catalog_view, build_category_tree, filter_by_collection,
    related_products, search_catalog, set_categories,
)
from services.pricing import (
    configuration_for, effective_price, products_by_id, selected_quantity, quantity_bounds, set_total,
)
from utils.format import format_price

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Catalog"])


def _load(store: CatalogStore, *kinds: str):
    try:
        return [store.repository(kind).get_all() for kind in kinds]
    except StorageError:
        logger.exception("Loading %s failed", ", ".join(kinds))
        raise HTTPException(status_code=500, detail="Failed to fetch catalog")


# =========================
# CATALOG PAGE
# =========================
@router.get("/catalog", response_model=CatalogPage, response_model_exclude_none=True)
def catalog_page(
    category: Optional[str] = Query(None, description="Category slug"),
    sort: str = Query("name-asc"),
    type: str = Query("all", description="all, products or sets"),
    store: CatalogStore = Depends(get_store),
):
    if sort not in SORT_OPTIONS:
        raise HTTPException(status_code=400, detail=f"Unknown sort option: {sort}")
    if type not in CONTENT_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown content type: {type}")

    products, sets, categories = _load(store, "products", "sets", "categories")
    view = build_catalog_view(products, sets, categories, category_slug=category, sort=sort, content_type=type)
    return CatalogPage(
        category=view.category,
        products=view.products,
        sets=view.sets,
        total=view.total,
        sort=view.sort,
        content_type=view.content_type,
        show_products_heading=view.show_products_heading,
        show_sets_heading=view.show_sets_heading,
        show_type_filter=view.show_type_filter,
        set_prices=view.set_prices,
    )


@router.get("/search", response_model=SearchResults, response_model_exclude_none=True)
def search(q: str = Query("", description="Free text"), store: CatalogStore = Depends(get_store)):
    products, sets = _load(store, "products", "sets")
    found_products, found_sets = search_catalog(products, sets, q)
    return SearchResults(
        query=q,
        products=found_products,
        sets=found_sets,
        total=len(found_products) + len(found_sets),
    )


# =========================
# CATEGORIES
# =========================
@router.get("/categories/tree", response_model=List[CategoryNode], response_model_exclude_none=True)
def category_tree(store: CatalogStore = Depends(get_store)):
    (categories,) = _load(store, "categories")
    return build_category_tree(categories)


# Categories that have at least one set, for the sets landing page
@router.get("/categories/with-sets", response_model=List[Category], response_model_exclude_none=True)
def categories_with_sets(store: CatalogStore = Depends(get_store)):
    categories, sets = _load(store, "categories", "sets")
    return set_categories(categories, sets)


@router.get("/collections/{collection}", response_model=CollectionItems, response_model_exclude_none=True)
def collection_items(collection: str, store: CatalogStore = Depends(get_store)):
    try:
        chosen = Collection(collection)
    except ValueError:
        raise HTTPException(status_code=404, detail="Collection not found")

    products, sets = _load(store, "products", "sets")
    return CollectionItems(
        collection=chosen,
        products=filter_by_collection(products, chosen),
        sets=filter_by_collection(sets, chosen),
    )


# =========================
# DETAIL PAGES
# =========================
@router.get("/products/slug/{slug}", response_model=ProductDetail, response_model_exclude_none=True)
def product_by_slug(slug: str, store: CatalogStore = Depends(get_store)):
    try:
        product = store.products.get_by_slug(slug)
    except StorageError:
        logger.exception("Reading product %s failed", slug)
        raise HTTPException(status_code=500, detail="Failed to fetch product")
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")

    (products,) = _load(store, "products")
    return ProductDetail(product=product, related_products=related_products(product, products))


def resolve_set(product_set, lookup, overrides=None):
    """Pair each set item with its product; unresolved ids are returned separately."""
    items, missing = [], []
    for set_item in product_set.items:
        product = lookup.get(set_item.product_id)
        if product is None:
            missing.append(set_item.product_id)
            continue
        low, high = quantity_bounds(set_item)
        quantity = selected_quantity(set_item, overrides)
        items.append(ResolvedSetItem(
            product=product,
            default_quantity=set_item.default_quantity,
            min_quantity=low,
            max_quantity=high,
            required=set_item.required,
            quantity=quantity,
            line_total=effective_price(product) * quantity,
        ))
    return items, missing


@router.get("/sets/slug/{slug}", response_model=SetDetail, response_model_exclude_none=True)
def set_by_slug(slug: str, store: CatalogStore = Depends(get_store)):
    try:
        product_set = store.sets.get_by_slug(slug)
    except StorageError:
        logger.exception("Reading set %s failed", slug)
        raise HTTPException(status_code=500, detail="Failed to fetch product set")
    if product_set is None:
        raise HTTPException(status_code=404, detail="Product set not found")

    products, sets = _load(store, "products", "sets")
    lookup = products_by_id(products)
    items, missing = resolve_set(product_set, lookup)
    total = set_total(product_set, lookup)

    related_sets = []
    if product_set.collection is not None:
        related_sets = [s for s in filter_by_collection(sets, product_set.collection) if s.id != product_set.id]
    in_set = {item.product.id for item in items}
    related = [p for p in filter_by_collection(products, product_set.collection) if p.id not in in_set]

    return SetDetail(
        set=product_set,
        items=items,
        missing_product_ids=missing,
        total=total,
        formatted_total=format_price(total),
        related_products=related[:8],
        related_sets=related_sets,
    )


# Price a set for the quantities picked in the configurator
@router.post("/sets/{set_id}/quote", response_model=SetQuote)
def quote_set(set_id: str, payload: SetQuoteRequest, store: CatalogStore = Depends(get_store)):
    try:
        product_set = store.sets.get_by_id(set_id)
    except StorageError:
        logger.exception("Reading set %s failed", set_id)
        raise HTTPException(status_code=500, detail="Failed to fetch product set")
    if product_set is None:
        raise HTTPException(status_code=404, detail="Product set not found")

    (products,) = _load(store, "products")
    lookup = products_by_id(products)
    total = set_total(product_set, lookup, payload.quantities)
    configuration = [
        ConfigurationEntry(product_id=entry["productId"], quantity=entry["quantity"])
        for entry in configuration_for(product_set, payload.quantities)
    ]
    return SetQuote(set_id=set_id, configuration=configuration, total=total, formatted_total=format_price(total))
