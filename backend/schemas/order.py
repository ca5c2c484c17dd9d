from typing import List, Optional

from pydantic import Field

from schemas.catalog import CamelModel, ConfigurationEntry


# Contact and delivery details entered at checkout
class Customer(CamelModel):
    name: str
    phone: str
    address: Optional[str] = None


# Order line; set-derived lines carry no unit price
class OrderItem(CamelModel):
    id: str
    name: Optional[str] = None
    type: str = "product"
    quantity: int = Field(ge=1)
    price: Optional[float] = None
    configuration: Optional[List[ConfigurationEntry]] = None


# Input schema for checkout. Presence of customer and items is checked
# by the handler so that an incomplete order is a 400, not a 422.
class OrderCreatePayload(CamelModel):
    customer: Optional[Customer] = None
    items: List[OrderItem] = Field(default_factory=list)
    subtotal: float = 0
    notes: Optional[str] = None
    created_at: Optional[str] = None


class CheckoutResponse(CamelModel):
    success: bool = True
