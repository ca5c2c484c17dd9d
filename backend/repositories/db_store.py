# backend/repositories/db_store.py
import logging
from contextlib import contextmanager
from typing import Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from repositories.errors import StorageError, StorageUnavailableError
from repositories.json_store import to_document

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class SqlDocumentRepository(Generic[M]):
    """Repository keeping each entity as a JSON document row.

    ``model_cls`` is the SQLAlchemy table class (id, slug, data and an
    optional collection column), ``schema`` the pydantic entity model.
    """

    def __init__(self, session_factory: sessionmaker, model_cls, schema: Type[M]):
        self.session_factory = session_factory
        self.model_cls = model_cls
        self.schema = schema

    @contextmanager
    def _session(self, action: str):
        db: Session = self.session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Database error during %s on %s", action, self.model_cls.__tablename__)
            raise StorageUnavailableError(f"Failed to {action} {self.model_cls.__tablename__}") from e
        finally:
            db.close()

    def _parse(self, row) -> M:
        try:
            return self.schema.model_validate(row.data)
        except ValidationError as e:
            logger.error("Invalid document %s in %s: %s", row.id, self.model_cls.__tablename__, e)
            raise StorageError(f"Invalid document in {self.model_cls.__tablename__}") from e

    def get_all(self) -> List[M]:
        with self._session("fetch") as db:
            rows = db.query(self.model_cls).order_by(self.model_cls.id).all()
            return [self._parse(row) for row in rows]

    def get_by_id(self, entity_id: str) -> Optional[M]:
        with self._session("fetch") as db:
            row = db.query(self.model_cls).filter(self.model_cls.id == entity_id).first()
            return self._parse(row) if row else None

    def get_by_slug(self, slug: str) -> Optional[M]:
        with self._session("fetch") as db:
            row = db.query(self.model_cls).filter(self.model_cls.slug == slug).first()
            return self._parse(row) if row else None

    def save(self, entity: M) -> M:
        document = to_document(entity)
        values = {"id": document["id"], "slug": document["slug"], "data": document}
        if hasattr(self.model_cls, "collection"):
            values["collection"] = document.get("collection")

        with self._session("save") as db:
            db.merge(self.model_cls(**values))
            db.commit()
        return entity

    def delete(self, entity_id: str) -> None:
        with self._session("delete") as db:
            db.query(self.model_cls).filter(self.model_cls.id == entity_id).delete()
            db.commit()
