from typing import List, Literal, Optional

from pydantic import Field

from schemas.catalog import CamelModel, ConfigurationEntry


# A single cart line as the storefront keeps it
class CartItem(CamelModel):
    id: str
    quantity: int = Field(default=1, ge=0)
    type: Literal["product", "set"] = "product"
    set_id: Optional[str] = None
    configuration: Optional[List[ConfigurationEntry]] = None


# Request schema for pricing a cart
class CartQuoteRequest(CamelModel):
    items: List[CartItem] = Field(default_factory=list)


# Priced cart line
class CartLineOut(CamelModel):
    id: str
    type: str
    name: str
    quantity: int
    unit_price: float
    line_total: float
    set_id: Optional[str] = None


# Response schema for the entire cart summary
class CartQuote(CamelModel):
    items: List[CartLineOut]
    subtotal: float
    total_items: int
    formatted_subtotal: str
    missing_ids: List[str] = Field(default_factory=list)
