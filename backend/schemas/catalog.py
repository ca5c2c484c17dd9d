# backend/schemas/catalog.py
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


# Base configuration: camelCase on the wire, snake_case in Python.
# Unknown fields are kept so older documents round-trip untouched.
class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="allow",
    )


# Named furniture lines used for cross-selling
class Collection(str, Enum):
    ALEXANDRIA = "Александрия"
    DENVER = "Денвер"
    GABRIELLA = "Габриэлла"
    GAMMA = "Гамма"
    CAMELLIA = "Камелия"
    LUCIA = "Лючия"
    MILAN = "Милан"
    NICOLE = "Николь"
    OLIVER = "Оливер"
    RIVIERA = "Ривьера"
    SOHO = "Сохо"
    FANTASIA = "Фантазия"


class BedSize(str, Enum):
    KING = "180x200"
    QUEEN = "160x200"
    DOUBLE = "140x200"
    SMALL_DOUBLE = "120x200"
    SINGLE = "90x200"
    NONE = ""


class ProductImage(CamelModel):
    url: str
    alt: Optional[str] = None
    is_main: Optional[bool] = None


# ---- Specifications ----

class MaterialParts(CamelModel):
    karkas: Optional[str] = None
    fasad: Optional[str] = None
    ruchki: Optional[str] = None
    obivka: Optional[str] = None
    spinka: Optional[str] = None


class StyleSpec(CamelModel):
    style: Optional[str] = None
    color: Optional[MaterialParts] = None


class Dimensions(CamelModel):
    width: Optional[float] = Field(default=None, ge=0)
    height: Optional[float] = Field(default=None, ge=0)
    depth: Optional[float] = Field(default=None, ge=0)
    length: Optional[float] = Field(default=None, ge=0)


class ContentSpec(CamelModel):
    yashiki: Optional[int] = None
    polki: Optional[int] = None
    shtanga: Optional[int] = None


class WarrantySpec(CamelModel):
    duration: Optional[float] = None
    lifetime: Optional[float] = None
    production: Optional[str] = None


class Specifications(CamelModel):
    material: Optional[MaterialParts] = None
    style: Optional[StyleSpec] = None
    dimensions: Optional[Dimensions] = None
    bed_size: Optional[BedSize] = None
    content: Optional[ContentSpec] = None
    warranty: Optional[WarrantySpec] = None


def _blank_to_none(value: Any) -> Any:
    # Admin forms send "" for an unselected collection
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ---- Catalog entities ----

class Product(CamelModel):
    id: str = Field(min_length=1)
    name: str
    slug: str = Field(min_length=1)
    category_id: Optional[str] = None
    price: float = Field(ge=0)
    discount: Optional[float] = Field(default=None, ge=0)
    in_stock: bool = True
    images: List[ProductImage] = Field(default_factory=list)
    description: Optional[str] = None
    features: Optional[List[str]] = None
    specifications: Optional[Specifications] = None
    collection: Optional[Collection] = None
    related_product_ids: Optional[List[str]] = None
    type: Literal["product"] = "product"

    @field_validator("collection", mode="before")
    @classmethod
    def normalize_collection(cls, value):
        return _blank_to_none(value)


class Category(CamelModel):
    id: str = Field(min_length=1)
    name: str
    slug: str = Field(min_length=1)
    parent_id: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    images: Optional[List[ProductImage]] = None

    @field_validator("parent_id", mode="before")
    @classmethod
    def normalize_parent(cls, value):
        return _blank_to_none(value)


class CategoryNode(Category):
    children: List["CategoryNode"] = Field(default_factory=list)


CategoryNode.model_rebuild()


class SetItem(CamelModel):
    product_id: str
    default_quantity: int = 1
    min_quantity: int = 0
    max_quantity: int = 10
    required: bool = False


class ProductSet(CamelModel):
    id: str = Field(min_length=1)
    name: str
    slug: str = Field(min_length=1)
    category_ids: List[str] = Field(default_factory=list)
    in_stock: bool = True
    images: List[ProductImage] = Field(default_factory=list)
    description: Optional[str] = None
    specifications: Optional[Specifications] = None
    collection: Optional[Collection] = None
    items: List[SetItem] = Field(default_factory=list)
    type: Literal["set"] = "set"

    @field_validator("collection", mode="before")
    @classmethod
    def normalize_collection(cls, value):
        return _blank_to_none(value)

    @model_validator(mode="before")
    @classmethod
    def fold_single_category(cls, data: Any) -> Any:
        # Older set documents carry a single "categoryId"
        if isinstance(data, dict) and "categoryId" in data:
            data = dict(data)
            legacy = data.pop("categoryId")
            ids = list(data.get("categoryIds") or data.get("category_ids") or [])
            if legacy and legacy not in ids:
                ids.insert(0, legacy)
            data["categoryIds"] = ids
            data.pop("category_ids", None)
        return data


# ---- Read-side views ----

class ProductDetail(CamelModel):
    product: Product
    related_products: List[Product] = Field(default_factory=list)


class ResolvedSetItem(CamelModel):
    product: Product
    default_quantity: int
    min_quantity: int
    max_quantity: int
    required: bool
    quantity: int
    line_total: float


class SetDetail(CamelModel):
    set: ProductSet
    items: List[ResolvedSetItem]
    missing_product_ids: List[str] = Field(default_factory=list)
    total: float
    formatted_total: str
    related_products: List[Product] = Field(default_factory=list)
    related_sets: List[ProductSet] = Field(default_factory=list)


class SetQuoteRequest(CamelModel):
    quantities: Dict[str, int] = Field(default_factory=dict)


class ConfigurationEntry(CamelModel):
    product_id: str
    quantity: int


class SetQuote(CamelModel):
    set_id: str
    configuration: List[ConfigurationEntry]
    total: float
    formatted_total: str


class SetValidation(CamelModel):
    set_id: str
    problems: Dict[str, List[str]] = Field(default_factory=dict)
    missing_product_ids: List[str] = Field(default_factory=list)
    valid: bool


class CatalogPage(CamelModel):
    category: Optional[Category] = None
    products: List[Product]
    sets: List[ProductSet]
    total: int
    sort: str
    content_type: str
    show_products_heading: bool
    show_sets_heading: bool
    show_type_filter: bool
    set_prices: Dict[str, float] = Field(default_factory=dict)


class SearchResults(CamelModel):
    query: str
    products: List[Product]
    sets: List[ProductSet]
    total: int


class CollectionItems(CamelModel):
    collection: Collection
    products: List[Product]
    sets: List[ProductSet]
