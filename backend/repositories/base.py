# backend/repositories/base.py
from dataclasses import dataclass
from typing import List, Optional, Protocol, TypeVar

from schemas.catalog import Category, Product, ProductSet

T = TypeVar("T")


# Contract shared by every storage adapter and entity kind
class Repository(Protocol[T]):
    def get_all(self) -> List[T]: ...

    def get_by_id(self, entity_id: str) -> Optional[T]: ...

    def get_by_slug(self, slug: str) -> Optional[T]: ...

    def save(self, entity: T) -> T: ...

    def delete(self, entity_id: str) -> None: ...


@dataclass
class CatalogStore:
    backend: str
    products: Repository[Product]
    categories: Repository[Category]
    sets: Repository[ProductSet]

    def repository(self, kind: str) -> Repository:
        return {"products": self.products, "categories": self.categories, "sets": self.sets}[kind]
