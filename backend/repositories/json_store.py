# backend/repositories/json_store.py
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from repositories.errors import StorageConfigError, StorageError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

PRODUCTS_FILE = "products.json"
CATEGORIES_FILE = "categories.json"
SETS_FILE = "product-sets.json"

# One lock per data file, shared by every repository instance in the process
_locks: Dict[str, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = str(path.resolve())
    with _locks_guard:
        if key not in _locks:
            _locks[key] = threading.RLock()
        return _locks[key]


def to_document(entity: BaseModel) -> dict:
    return entity.model_dump(mode="json", by_alias=True, exclude_none=True)


class JsonFileRepository(Generic[M]):
    """Repository over a JSON file holding one top-level array.

    Writes are read-modify-write of the whole file, serialised per file and
    replaced atomically so a concurrent reader never sees half a file.
    """

    def __init__(self, path, model: Type[M]):
        self.path = Path(path)
        self.model = model
        self._lock = _lock_for(self.path)

    # ---- raw file access ----

    def _load(self) -> List[dict]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError as e:
            logger.error("Data file %s is missing", self.path)
            raise StorageConfigError(f"Data file not found: {self.path}") from e
        except ValueError as e:
            logger.error("Data file %s is not valid JSON: %s", self.path, e)
            raise StorageError(f"Data file is corrupt: {self.path}") from e
        if not isinstance(data, list):
            raise StorageError(f"Data file must hold a JSON array: {self.path}")
        return data

    def _write(self, documents: List[dict]) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(documents, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Could not write %s: %s", self.path, e)
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StorageError(f"Could not write {self.path}") from e

    def _parse(self, document: dict) -> M:
        try:
            return self.model.model_validate(document)
        except ValidationError as e:
            logger.error("Invalid document %r in %s: %s", document.get("id"), self.path, e)
            raise StorageError(f"Invalid document in {self.path}") from e

    # ---- repository contract ----

    def get_all(self) -> List[M]:
        return [self._parse(doc) for doc in self._load()]

    def get_by_id(self, entity_id: str) -> Optional[M]:
        for doc in self._load():
            if doc.get("id") == entity_id:
                return self._parse(doc)
        return None

    def get_by_slug(self, slug: str) -> Optional[M]:
        for doc in self._load():
            if doc.get("slug") == slug:
                return self._parse(doc)
        return None

    def save(self, entity: M) -> M:
        document = to_document(entity)
        with self._lock:
            documents = self._load()
            for index, existing in enumerate(documents):
                if existing.get("id") == document["id"]:
                    documents[index] = document
                    break
            else:
                documents.append(document)
            self._write(documents)
        return entity

    def delete(self, entity_id: str) -> None:
        with self._lock:
            documents = self._load()
            remaining = [doc for doc in documents if doc.get("id") != entity_id]
            if len(remaining) != len(documents):
                self._write(remaining)
