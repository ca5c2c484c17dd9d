# backend/models/catalog.py
from sqlalchemy import Column, String, JSON
from database import Base

# Catalog entities are stored as whole JSON documents.
# Only the fields used for lookups (id, slug, collection) are lifted into
# their own indexed columns; everything else lives in `data`.


class ProductDocument(Base):
    __tablename__ = "product_documents"

    id = Column(String, primary_key=True, index=True)
    slug = Column(String, unique=True, nullable=False, index=True)
    collection = Column(String, nullable=True, index=True)
    data = Column(JSON, nullable=False)


class CategoryDocument(Base):
    __tablename__ = "category_documents"

    id = Column(String, primary_key=True, index=True)
    slug = Column(String, unique=True, nullable=False, index=True)
    data = Column(JSON, nullable=False)


class ProductSetDocument(Base):
    __tablename__ = "set_documents"

    id = Column(String, primary_key=True, index=True)
    slug = Column(String, unique=True, nullable=False, index=True)
    collection = Column(String, nullable=True, index=True)
    data = Column(JSON, nullable=False)
