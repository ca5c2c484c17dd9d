# backend/routes/cart.py
import logging

from fastapi import APIRouter, Depends, HTTPException

from repositories.base import CatalogStore
from repositories.errors import StorageError
from repositories.store import get_store
from schemas.cart import CartQuote, CartQuoteRequest
from services.cart import quote_lines
from utils.format import format_price

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cart", tags=["Cart"])


# Price the shopper's cart against the current catalog
@router.post("/quote", response_model=CartQuote)
def quote_cart(payload: CartQuoteRequest, store: CatalogStore = Depends(get_store)):
    try:
        products = store.products.get_all()
        sets = store.sets.get_all() if any(item.type == "set" for item in payload.items) else []
    except StorageError:
        logger.exception("Loading catalog for cart quote failed")
        raise HTTPException(status_code=500, detail="Failed to fetch catalog")

    quote = quote_lines(payload.items, products, sets)
    return CartQuote(
        items=quote["items"],
        subtotal=quote["subtotal"],
        total_items=quote["total_items"],
        formatted_subtotal=format_price(quote["subtotal"]),
        missing_ids=quote["missing_ids"],
    )
