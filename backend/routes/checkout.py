# backend/routes/checkout.py
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from repositories.orders import OrderStore, get_order_store
from schemas.order import CheckoutResponse, OrderCreatePayload
from utils.telegram_client import TelegramClient, get_notifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Checkout"])


# Persist the order and notify the shop
@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    payload: OrderCreatePayload,
    orders: OrderStore = Depends(get_order_store),
    notifier: TelegramClient = Depends(get_notifier),
):
    if payload.customer is None or not payload.items:
        raise HTTPException(status_code=400, detail="Invalid order data")

    order = payload.model_dump(mode="json", by_alias=True, exclude_none=True)
    order.setdefault("createdAt", datetime.now(timezone.utc).isoformat())

    try:
        path = orders.save(order)
    except OSError:
        logger.exception("Writing order file failed")
        raise HTTPException(status_code=500, detail="Failed to process order")

    # The order is already stored; a failed notification does not undo it
    try:
        await notifier.send_order(order)
    except Exception:
        logger.exception("Order %s saved but Telegram notification failed", path.name)

    return {"success": True}
