# backend/services/catalog.py
import logging
import unicodedata
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from schemas.catalog import Category, CategoryNode, Collection, Product, ProductSet
from services.pricing import effective_price, products_by_id, set_default_total

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("name-asc", "name-desc", "price-asc", "price-desc")
CONTENT_TYPES = ("all", "products", "sets")
DEFAULT_SORT = "name-asc"


@dataclass
class CatalogView:
    category: Optional[Category]
    products: List[Product]
    sets: List[ProductSet]
    sort: str
    content_type: str
    show_type_filter: bool = False
    set_prices: Dict[str, float] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.products) + len(self.sets)

    @property
    def show_products_heading(self) -> bool:
        return bool(self.products)

    @property
    def show_sets_heading(self) -> bool:
        return bool(self.sets)


def collation_key(text: Optional[str]) -> str:
    # Case-insensitive, accent-normalised ordering for mixed Cyrillic/Latin names.
    # Approximates locale collation: punctuation and spaces still count.
    return unicodedata.normalize("NFKD", text or "").casefold()


def sort_products(products: List[Product], sort: str) -> List[Product]:
    if sort == "name-asc":
        return sorted(products, key=lambda p: collation_key(p.name))
    if sort == "name-desc":
        return sorted(products, key=lambda p: collation_key(p.name), reverse=True)
    if sort == "price-asc":
        return sorted(products, key=effective_price)
    if sort == "price-desc":
        return sorted(products, key=effective_price, reverse=True)
    return list(products)


def sort_sets(sets: List[ProductSet], sort: str, products: List[Product]) -> List[ProductSet]:
    lookup = products_by_id(products)
    if sort == "name-asc":
        return sorted(sets, key=lambda s: collation_key(s.name))
    if sort == "name-desc":
        return sorted(sets, key=lambda s: collation_key(s.name), reverse=True)
    if sort == "price-asc":
        return sorted(sets, key=lambda s: set_default_total(s, lookup))
    if sort == "price-desc":
        return sorted(sets, key=lambda s: set_default_total(s, lookup), reverse=True)
    return list(sets)


def build_catalog_view(
    products: List[Product],
    sets: List[ProductSet],
    categories: List[Category],
    category_slug: Optional[str] = None,
    sort: Optional[str] = None,
    content_type: Optional[str] = None,
) -> CatalogView:
    """Filter the catalog by category and content type, then sort it.

    An unknown category slug falls back to the whole catalog. A category
    that holds sets but no standalone products shows only its sets when the
    caller asked for everything.
    """
    sort = sort or DEFAULT_SORT
    content_type = content_type or "all"

    active = None
    if category_slug:
        active = next((c for c in categories if c.slug == category_slug), None)

    show_type_filter = False
    if active is not None:
        category_products = [p for p in products if p.category_id == active.id]
        category_sets = [s for s in sets if active.id in s.category_ids]
        show_type_filter = bool(category_products) and bool(category_sets)

        chosen_products, chosen_sets = [], []
        if content_type == "products" or (content_type == "all" and category_products):
            chosen_products = category_products
        if content_type == "sets" or (content_type == "all" and category_sets):
            chosen_sets = category_sets
        if content_type == "all" and category_sets and not category_products:
            # Sets-only category
            chosen_products = []
    else:
        chosen_products = products if content_type in ("all", "products") else []
        chosen_sets = sets if content_type in ("all", "sets") else []

    lookup = products_by_id(products)
    sorted_sets = sort_sets(chosen_sets, sort, products)
    return CatalogView(
        category=active,
        products=sort_products(chosen_products, sort),
        sets=sorted_sets,
        sort=sort,
        content_type=content_type,
        show_type_filter=show_type_filter,
        set_prices={s.id: set_default_total(s, lookup) for s in sorted_sets},
    )


def search_catalog(products: List[Product], sets: List[ProductSet], query: Optional[str]):
    """Case-insensitive substring match on name and description."""
    needle = (query or "").strip().casefold()
    if not needle:
        return [], []

    def matches(item) -> bool:
        return needle in (item.name or "").casefold() or needle in (item.description or "").casefold()

    return [p for p in products if matches(p)], [s for s in sets if matches(s)]


def filter_by_collection(items, collection: Optional[Collection]):
    if collection is None:
        return []
    return [item for item in items if item.collection == collection]


def related_products(product: Product, products: List[Product], limit: int = 8) -> List[Product]:
    """Explicitly linked products first, then the rest of the same collection."""
    lookup = products_by_id(products)
    related, seen = [], {product.id}

    for pid in product.related_product_ids or []:
        candidate = lookup.get(pid)
        if candidate is not None and pid not in seen:
            related.append(candidate)
            seen.add(pid)

    if product.collection is not None:
        for candidate in filter_by_collection(products, product.collection):
            if candidate.id not in seen:
                related.append(candidate)
                seen.add(candidate.id)

    return related[:limit]


def build_category_tree(categories: List[Category]) -> List[CategoryNode]:
    """Nest categories under their parents.

    Categories with a missing parent become roots. A parent chain that
    loops back on itself is cut: the category that closes the loop is
    promoted to a root.
    """
    nodes = {c.id: CategoryNode(**c.model_dump(exclude={"children"})) for c in categories}
    parents = {c.id: c.parent_id for c in categories}

    def closes_cycle(category_id: str) -> bool:
        # True only when the parent chain leads back to category_id itself;
        # a descendant of a loop is not part of it
        seen = set()
        current = parents.get(category_id)
        while current is not None and current in nodes:
            if current == category_id:
                return True
            if current in seen:
                return False
            seen.add(current)
            current = parents.get(current)
        return False

    roots = []
    for category in categories:
        node = nodes[category.id]
        parent_id = category.parent_id
        if parent_id and parent_id in nodes and parent_id != category.id and not closes_cycle(category.id):
            nodes[parent_id].children.append(node)
        else:
            if parent_id and parent_id in nodes:
                logger.warning("Category %s is part of a parent cycle, shown as a root", category.id)
                parents[category.id] = None
            roots.append(node)
    return roots


def set_categories(categories: List[Category], sets: List[ProductSet]) -> List[Category]:
    """Categories referenced by at least one set, in first-seen order."""
    by_id = {c.id: c for c in categories}
    found: Dict[str, Category] = {}
    for product_set in sets:
        for category_id in product_set.category_ids:
            if category_id in by_id and category_id not in found:
                found[category_id] = by_id[category_id]
    return list(found.values())
