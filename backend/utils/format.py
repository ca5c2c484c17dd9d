# backend/utils/format.py
import random
import re
import string
import time

from config import settings

_BASE36 = string.digits + string.ascii_uppercase


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def format_price(amount: float, currency: str = None) -> str:
    """Whole-number price with space-grouped thousands, e.g. ``12 500 сум``."""
    label = currency if currency is not None else settings.CURRENCY_LABEL
    grouped = f"{int(round(amount)):,}".replace(",", " ")
    return f"{grouped} {label}".strip()


def generate_slug(text: str) -> str:
    slug = text.lower()
    slug = re.sub(r"[^\w\s-]", "", slug)   # drop punctuation
    slug = re.sub(r"\s+", "-", slug)       # spaces to hyphens
    slug = re.sub(r"-+", "-", slug)        # collapse runs of hyphens
    return slug.strip().strip("-")


def generate_id(prefix: str) -> str:
    """Prefix + base36 millisecond timestamp + five random characters."""
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(random.choices(_BASE36, k=5))
    return f"{prefix}{timestamp}{suffix}"
