# backend/repositories/orders.py
import json
import logging
import secrets
import string
from datetime import datetime, timezone
from pathlib import Path

from config import settings

logger = logging.getLogger(__name__)

_ALPHABET = string.ascii_lowercase + string.digits


class OrderStore:
    """Write-only order archive: one pretty-printed JSON file per order."""

    def __init__(self, orders_dir):
        self.orders_dir = Path(orders_dir)

    def _filename(self) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")
        suffix = "".join(secrets.choice(_ALPHABET) for _ in range(6))
        return f"order-{timestamp}-{suffix}.json"

    def save(self, order: dict) -> Path:
        self.orders_dir.mkdir(parents=True, exist_ok=True)
        path = self.orders_dir / self._filename()
        while path.exists():
            path = self.orders_dir / self._filename()
        with open(path, "x", encoding="utf-8") as fh:
            json.dump(order, fh, ensure_ascii=False, indent=2)
        logger.info("Order saved to %s", path.name)
        return path


def get_order_store() -> OrderStore:
    return OrderStore(settings.ORDERS_DIR)
