"""Copy the JSON catalog files into the database document tables.

Run once when switching a deployment from STORAGE_BACKEND=json to db:

    python migrate_json_to_db.py [DATA_DIR]

Each table is cleared and refilled from its file; a missing file is
reported and its table left untouched.
"""
import logging
import sys
from pathlib import Path

from config import settings
from database import SessionLocal, init_db
from models.catalog import CategoryDocument, ProductDocument, ProductSetDocument
from repositories.errors import StorageConfigError
from repositories.json_store import CATEGORIES_FILE, PRODUCTS_FILE, SETS_FILE, JsonFileRepository, to_document
from schemas.catalog import Category, Product, ProductSet

logger = logging.getLogger(__name__)

# Source file, pydantic schema, target table
SOURCES = [
    (PRODUCTS_FILE, Product, ProductDocument),
    (CATEGORIES_FILE, Category, CategoryDocument),
    (SETS_FILE, ProductSet, ProductSetDocument),
]


def migrate(data_dir=None, session_factory=None, bind=None) -> dict:
    """Returns the number of documents written per file."""
    data_dir = Path(data_dir or settings.DATA_DIR)
    session_factory = session_factory or SessionLocal
    init_db(bind)

    counts = {}
    session = session_factory()
    try:
        for filename, schema, table in SOURCES:
            try:
                entities = JsonFileRepository(data_dir / filename, schema).get_all()
            except StorageConfigError:
                logger.warning("Skipping %s: file not found in %s", filename, data_dir)
                continue

            session.query(table).delete()
            for entity in entities:
                document = to_document(entity)
                values = {"id": document["id"], "slug": document["slug"], "data": document}
                if hasattr(table, "collection"):
                    values["collection"] = document.get("collection")
                session.add(table(**values))
            session.commit()

            counts[filename] = len(entities)
            logger.info("Migrated %d document(s) from %s", len(entities), filename)
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
    return counts


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(levelname)s %(message)s")
    result = migrate(sys.argv[1] if len(sys.argv) > 1 else None)
    print(f"Done: {result}")
