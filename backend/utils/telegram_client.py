# backend/utils/telegram_client.py
import html
import logging
from datetime import datetime

import httpx

from config import settings
from utils.format import format_price

logger = logging.getLogger(__name__)


def format_order_message(order: dict) -> str:
    """HTML message body for a new order notification."""
    customer = order.get("customer") or {}
    lines = ["<b>🛒 NEW ORDER</b>", "", "<b>📋 Customer Information:</b>"]
    lines.append(f"Name: {html.escape(str(customer.get('name', '')))}")
    lines.append(f"Phone: {html.escape(str(customer.get('phone', '')))}")
    lines.append(f"Address: {html.escape(str(customer.get('address') or ''))}")
    lines += ["", "<b>🛍️ Order Items:</b>"]

    for index, item in enumerate(order.get("items") or [], start=1):
        name = html.escape(str(item.get("name") or item.get("id")))
        lines.append(f"{index}. {name} ({item.get('type', 'product')}) × {item.get('quantity')}")

    lines += ["", f"<b>💰 Total Amount:</b> {format_price(order.get('subtotal') or 0)}"]

    notes = order.get("notes")
    if notes:
        lines += ["", f"<b>📝 Notes:</b> {html.escape(str(notes))}"]

    created_at = order.get("createdAt")
    if created_at:
        try:
            created_at = datetime.fromisoformat(str(created_at).replace("Z", "+00:00")).strftime("%d.%m.%Y %H:%M")
        except ValueError:
            pass  # shown as sent by the client
        lines += ["", f"<b>📅 Order Date:</b> {html.escape(str(created_at))}"]

    return "\n".join(lines)


class TelegramClient:
    def __init__(self, token=None, chat_id=None, api_url=None):
        self.token = token if token is not None else settings.TELEGRAM_BOT_TOKEN
        self.chat_id = chat_id if chat_id is not None else settings.TELEGRAM_CHAT_ID
        self.api_url = (api_url or settings.TELEGRAM_API_URL).rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self.token and self.chat_id)

    async def send_order(self, order: dict, transport: httpx.AsyncBaseTransport = None) -> bool:
        # Post the order summary to the shop's chat; False when not configured
        if not self.configured:
            logger.info("Telegram notification skipped: bot token or chat id not configured")
            return False

        url = f"{self.api_url}/bot{self.token}/sendMessage"
        payload = {"chat_id": self.chat_id, "text": format_order_message(order), "parse_mode": "HTML"}
        async with httpx.AsyncClient(transport=transport, timeout=10.0) as client:
            try:
                response = await client.post(url, json=payload)
                response.raise_for_status()
            except (httpx.RequestError, httpx.HTTPStatusError) as e:
                try:
                    resp_text = e.response.text if hasattr(e, "response") and e.response is not None else str(e)
                except Exception:
                    resp_text = str(e)
                logger.error(f"Telegram send error: {resp_text}")
                raise
        return True


def get_notifier() -> TelegramClient:
    return TelegramClient()
