# backend/services/pricing.py
"""Price and set-composition rules.

Every place that shows or stores a price goes through these functions:
catalog cards and sorting, set pages, cart and checkout totals, and the
admin set editor. They take plain data, either the pydantic catalog
models or dicts shaped like the JSON documents (camelCase keys), and
never touch storage.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

# snake_case attribute -> camelCase document key
_ALIASES = {
    "product_id": "productId",
    "default_quantity": "defaultQuantity",
    "min_quantity": "minQuantity",
    "max_quantity": "maxQuantity",
}


def _field(obj: Any, name: str, default=None):
    if isinstance(obj, Mapping):
        if name in obj:
            return obj[name]
        return obj.get(_ALIASES.get(name, name), default)
    return getattr(obj, name, default)


def effective_price(item: Any) -> float:
    """List price minus a flat discount, never below zero.

    A missing, zero or negative discount leaves the list price unchanged.
    """
    price = float(_field(item, "price", 0) or 0)
    discount = max(0.0, float(_field(item, "discount", 0) or 0))
    return max(0.0, price - discount)


def products_by_id(products: Iterable[Any]) -> Dict[str, Any]:
    return {_field(p, "id"): p for p in products}


def quantity_bounds(set_item: Any) -> Tuple[int, int]:
    low = int(_field(set_item, "min_quantity", 0) or 0)
    high = int(_field(set_item, "max_quantity", 0) or 0)
    if _field(set_item, "required", False):
        # A required item can not be configured away
        low = max(1, low)
    return low, max(low, high)


def clamp_quantity(set_item: Any, quantity: int) -> int:
    low, high = quantity_bounds(set_item)
    return min(max(int(quantity), low), high)


def selected_quantity(set_item: Any, overrides: Optional[Mapping[str, int]] = None) -> int:
    product_id = _field(set_item, "product_id")
    if overrides and product_id in overrides:
        return clamp_quantity(set_item, overrides[product_id])
    return int(_field(set_item, "default_quantity", 0) or 0)


def set_total(product_set: Any, products: Any, overrides: Optional[Mapping[str, int]] = None) -> float:
    """Sum of effective price x selected quantity over the set's items.

    ``products`` is either an id -> product mapping or an iterable of
    products. Items whose product can not be resolved add nothing.
    """
    lookup = products if isinstance(products, Mapping) else products_by_id(products)
    total = 0.0
    for set_item in _field(product_set, "items", None) or []:
        product = lookup.get(_field(set_item, "product_id"))
        if product is None:
            logger.debug(
                "Set %s references unknown product %s",
                _field(product_set, "id"), _field(set_item, "product_id"),
            )
            continue
        total += effective_price(product) * selected_quantity(set_item, overrides)
    return total


def set_default_total(product_set: Any, products: Any) -> float:
    """Price shown on set cards and used when sorting sets by price."""
    return set_total(product_set, products)


def configuration_for(product_set: Any, overrides: Optional[Mapping[str, int]] = None) -> List[Dict[str, Any]]:
    """(productId, quantity) pairs for every item with a positive quantity."""
    configuration = []
    for set_item in _field(product_set, "items", None) or []:
        quantity = selected_quantity(set_item, overrides)
        if quantity > 0:
            configuration.append({"productId": _field(set_item, "product_id"), "quantity": quantity})
    return configuration


def default_configuration(product_set: Any) -> List[Dict[str, Any]]:
    return configuration_for(product_set)


def configuration_total(configuration: Iterable[Any], products: Any) -> float:
    lookup = products if isinstance(products, Mapping) else products_by_id(products)
    total = 0.0
    for entry in configuration or []:
        product = lookup.get(_field(entry, "product_id"))
        if product is None:
            continue
        total += effective_price(product) * int(_field(entry, "quantity", 0) or 0)
    return total


def set_item_problems(set_item: Any) -> List[str]:
    """Human readable violations of min <= default <= max for one item."""
    problems = []
    low = int(_field(set_item, "min_quantity", 0) or 0)
    default = int(_field(set_item, "default_quantity", 0) or 0)
    high = int(_field(set_item, "max_quantity", 0) or 0)

    if low < 0:
        problems.append("minQuantity must not be negative")
    if low > high:
        problems.append("minQuantity is greater than maxQuantity")
    if default < low:
        problems.append("defaultQuantity is below minQuantity")
    if default > high:
        problems.append("defaultQuantity is above maxQuantity")
    if _field(set_item, "required", False):
        if high < 1:
            problems.append("required item must allow at least one unit")
        elif default < 1:
            problems.append("required item must default to at least one unit")
    return problems


def discount_exceeds_price(item: Any) -> bool:
    price = float(_field(item, "price", 0) or 0)
    discount = float(_field(item, "discount", 0) or 0)
    return discount > price