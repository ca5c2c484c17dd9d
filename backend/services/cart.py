# backend/services/cart.py
"""Cart state held by the shopper.

``CartStore`` owns the list of cart lines and its lifecycle: restore from
storage on construction, mutate through the operations below, persist the
whole list after every mutation. Storage is pluggable so the same store
runs against a file on disk or purely in memory.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from services.pricing import configuration_total, effective_price, products_by_id

logger = logging.getLogger(__name__)


class MemoryCartStorage:
    def __init__(self, initial: Optional[List[Dict[str, Any]]] = None):
        self._data = json.dumps(initial) if initial is not None else None

    def load(self) -> Optional[str]:
        return self._data

    def save(self, raw: str) -> None:
        self._data = raw


class JsonFileCartStorage:
    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def save(self, raw: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".cart-", suffix=".json")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(raw)
        os.replace(tmp, self.path)


def _restore(raw: Optional[str]) -> List[Dict[str, Any]]:
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except ValueError:
        logger.error("Stored cart is not valid JSON, starting with an empty cart")
        return []
    if not isinstance(data, list):
        logger.error("Stored cart is not a list, starting with an empty cart")
        return []

    lines = []
    for entry in data:
        if not isinstance(entry, dict) or "id" not in entry:
            logger.warning("Dropping malformed cart line: %r", entry)
            continue
        try:
            entry["quantity"] = int(entry.get("quantity", 1))
        except (TypeError, ValueError):
            logger.warning("Dropping cart line with bad quantity: %r", entry)
            continue
        entry.setdefault("type", "product")
        lines.append(entry)
    return lines


class CartStore:
    def __init__(self, storage=None):
        self.storage = storage if storage is not None else MemoryCartStorage()
        try:
            raw = self.storage.load()
        except (OSError, ValueError):
            logger.exception("Could not read stored cart")
            raw = None
        self._lines: List[Dict[str, Any]] = _restore(raw)
        self.total_items = self._count()

    # ---- read side ----

    @property
    def items(self) -> List[Dict[str, Any]]:
        return [dict(line) for line in self._lines]

    def _count(self) -> int:
        return sum(line["quantity"] for line in self._lines)

    def _find(self, product_id: str) -> Optional[Dict[str, Any]]:
        for line in self._lines:
            if line["id"] == product_id and line.get("type", "product") == "product":
                return line
        return None

    # ---- mutations ----

    def _commit(self) -> None:
        self.total_items = self._count()
        self.storage.save(json.dumps(self._lines, ensure_ascii=False))

    def _merge(self, product_id: str, quantity: int, set_id: Optional[str] = None) -> None:
        line = self._find(product_id)
        if line is not None:
            line["quantity"] += quantity
            if set_id and not line.get("setId"):
                line["setId"] = set_id
        else:
            line = {"id": product_id, "quantity": quantity, "type": "product"}
            if set_id:
                line["setId"] = set_id
            self._lines.append(line)

    def add_to_cart(self, product_id: str, quantity: int = 1) -> None:
        self._merge(product_id, quantity)
        self._commit()

    def add_products_from_set(self, set_id: str, items: Iterable[Any]) -> None:
        """Add each (productId, quantity) of a configured set as its own line."""
        for product_id, quantity in _pairs(items):
            if quantity > 0:
                self._merge(product_id, quantity, set_id=set_id)
        self._commit()

    def add_set_to_cart(self, set_id: str, configuration: Iterable[Any]) -> None:
        """Add a configured set as one bundle line."""
        pairs = [{"productId": pid, "quantity": qty} for pid, qty in _pairs(configuration) if qty > 0]
        self._lines.append({"id": set_id, "quantity": 1, "type": "set", "configuration": pairs})
        self._commit()

    def remove_from_cart(self, product_id: str) -> None:
        before = len(self._lines)
        self._lines = [line for line in self._lines if line["id"] != product_id]
        if len(self._lines) != before:
            self._commit()

    def update_quantity(self, product_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_from_cart(product_id)
            return
        changed = False
        for line in self._lines:
            if line["id"] == product_id:
                line["quantity"] = quantity
                changed = True
        if changed:
            self._commit()

    def clear_cart(self) -> None:
        self._lines = []
        self._commit()

    # ---- aggregation ----

    def quote(self, products: Iterable[Any], sets: Iterable[Any] = ()) -> Dict[str, Any]:
        return quote_lines(self._lines, products, sets)

    def subtotal(self, products: Iterable[Any], sets: Iterable[Any] = ()) -> float:
        return self.quote(products, sets)["subtotal"]


def _pairs(items: Iterable[Any]) -> List[Tuple[str, int]]:
    pairs = []
    for entry in items or []:
        if isinstance(entry, Mapping):
            product_id = entry.get("productId", entry.get("product_id"))
            quantity = entry.get("quantity", 0)
        elif isinstance(entry, (tuple, list)):
            product_id, quantity = entry
        else:
            product_id, quantity = entry.product_id, entry.quantity
        pairs.append((product_id, int(quantity)))
    return pairs


def _attr(obj: Any, name: str, default=None):
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def quote_lines(lines: Iterable[Any], products: Iterable[Any], sets: Iterable[Any] = ()) -> Dict[str, Any]:
    """Price cart lines against the catalog.

    Product lines cost effective price x quantity. Set bundle lines cost the
    sum of their configuration x quantity. Lines whose id is unknown are
    reported in ``missing_ids`` and add nothing.
    """
    product_lookup = products_by_id(products)
    set_lookup = {_attr(s, "id"): s for s in sets}

    priced, missing = [], []
    subtotal, total_items = 0.0, 0
    for line in lines:
        line_id = _attr(line, "id")
        quantity = int(_attr(line, "quantity", 0) or 0)
        line_type = _attr(line, "type", "product") or "product"
        set_id = _attr(line, "setId", None) if isinstance(line, Mapping) else _attr(line, "set_id")
        total_items += quantity

        if line_type == "set":
            product_set = set_lookup.get(line_id)
            if product_set is None:
                missing.append(line_id)
                continue
            name = _attr(product_set, "name")
            unit_price = configuration_total(_attr(line, "configuration") or [], product_lookup)
        else:
            product = product_lookup.get(line_id)
            if product is None:
                missing.append(line_id)
                continue
            name = _attr(product, "name")
            unit_price = effective_price(product)

        line_total = unit_price * quantity
        subtotal += line_total
        priced.append({
            "id": line_id,
            "type": line_type,
            "name": name,
            "quantity": quantity,
            "unit_price": round(unit_price, 2),
            "line_total": round(line_total, 2),
            "set_id": set_id,
        })

    return {
        "items": priced,
        "subtotal": round(subtotal, 2),
        "total_items": total_items,
        "missing_ids": missing,
    }
