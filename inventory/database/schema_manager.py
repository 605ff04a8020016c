# inventory/database/schema_manager.py
# Creates the products table when it does not exist yet.

from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .base import metadata, products_table
from inventory.utils.logger import logger
from inventory.api.errors import DatabaseError


class SchemaManager:
    def __init__(self, engine: Engine, schema: Optional[str] = None):
        self.engine = engine
        self.schema = schema
        logger.debug("SchemaManager initialized with SQLAlchemy engine.")

    def initialize_schema(self):
        """Creates missing tables. Existing tables are left untouched."""
        table = products_table(self.schema)
        try:
            logger.info(f"Ensuring table '{table.fullname}' exists...")
            metadata.create_all(bind=self.engine, tables=[table], checkfirst=True)
            logger.info("Database schema initialized successfully.")
        except SQLAlchemyError as e:
            logger.critical(f"Database schema initialization failed: {e}", exc_info=True)
            raise DatabaseError(f"Schema initialization failed: {e}") from e
