# inventory/database/__init__.py
# Initializes the SQLAlchemy engine and exposes the repository building blocks.
# Uses local imports for logger/errors to keep this module importable on its own.

import threading
from typing import Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from .base import metadata, products_table, PRODUCT_COLUMNS

# --- SQLAlchemy Engine Global ---
_sqla_engine: Optional[Engine] = None
_engine_lock = threading.Lock()


def init_sqlalchemy(database_uri: str, schema: Optional[str] = None,
                    pool_size: int = 10, max_overflow: int = 20) -> Engine:
    """
    Initializes the SQLAlchemy engine and the database schema.
    Should be called once during application startup.
    """
    from inventory.utils.logger import logger
    from inventory.api.errors import DatabaseError, ConfigurationError

    global _sqla_engine
    with _engine_lock:
        if _sqla_engine:
            logger.warning("SQLAlchemy engine already initialized.")
            return _sqla_engine

        if not database_uri:
            raise ConfigurationError("Database URI is missing in configuration.")

        logger.info("Initializing SQLAlchemy engine...")
        engine = None
        try:
            engine_kwargs = dict(pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600, echo=False)
            if make_url(database_uri).get_backend_name() == "sqlite":
                # Connections are handed between request threads and gateway workers.
                engine_kwargs["connect_args"] = {"check_same_thread": False}
            engine = create_engine(database_uri, **engine_kwargs)

            # Test Connection
            try:
                with engine.connect():
                    logger.info("Database connection successful.")
            except SQLAlchemyError as conn_err:
                logger.critical(f"Database connection failed: {conn_err}", exc_info=True)
                raise DatabaseError(f"Failed to connect to the database: {conn_err}") from conn_err

            from .schema_manager import SchemaManager
            SchemaManager(engine, schema).initialize_schema()

            _sqla_engine = engine
            logger.info("SQLAlchemy initialization complete.")
            return _sqla_engine

        except (DatabaseError, ConfigurationError):
            if engine is not None:
                engine.dispose()
            raise
        except SQLAlchemyError as e:
            logger.critical(f"SQLAlchemy engine initialization failed: {e}", exc_info=True)
            if engine is not None:
                engine.dispose()
            raise DatabaseError(f"SQLAlchemy initialization failed: {e}") from e


def get_engine() -> Engine:
    """Returns the initialized engine. Raises RuntimeError before init_sqlalchemy()."""
    if _sqla_engine is None:
        raise RuntimeError("Database engine has not been initialized.")
    return _sqla_engine


def dispose_sqlalchemy_engine():
    """Closes all connections in the engine's pool. Call during application shutdown."""
    from inventory.utils.logger import logger

    global _sqla_engine
    with _engine_lock:
        if _sqla_engine:
            logger.info("Disposing SQLAlchemy engine connection pool...")
            try:
                _sqla_engine.dispose()
                logger.info("SQLAlchemy engine connection pool disposed.")
            except SQLAlchemyError as e:
                logger.error(f"Error disposing SQLAlchemy engine pool: {e}", exc_info=True)
            finally:
                _sqla_engine = None
        else:
            logger.debug("SQLAlchemy engine shutdown called, but engine already disposed or not initialized.")


__all__ = [
    "init_sqlalchemy",
    "get_engine",
    "dispose_sqlalchemy_engine",
    "metadata",
    "products_table",
    "PRODUCT_COLUMNS",
]
