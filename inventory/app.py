# inventory/app.py
# Flask application factory: wires configuration, database, repository and services.

import atexit
import sys
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from inventory.config import Config
from inventory.api import register_blueprints
from inventory.api.errors import register_error_handlers, ConfigurationError, DatabaseError
from inventory.database import init_sqlalchemy, dispose_sqlalchemy_engine
from inventory.database.gateway import DatabaseGateway
from inventory.database.product_repository import ProductRepository
from inventory.services import ProductService
from inventory.utils.logger import logger, configure_logger


def create_app(config_object: Config, engine: Optional[Engine] = None) -> Flask:
    """
    Factory function to create and configure the Flask application.

    Args:
        config_object: The configuration object for the application.
        engine: An already initialized engine (tests); when omitted one is built
                from config_object.SQLALCHEMY_DATABASE_URI.

    Returns:
        The configured Flask application instance.
    """
    app = Flask("Inventory-Backend")
    app.config.from_object(config_object)

    # --- Logging ---
    configure_logger(config_object.LOG_LEVEL)
    logger.info("Starting Flask application for Inventory-Backend.")
    logger.info(f"Debug mode: {app.config.get('APP_DEBUG')}")

    # --- Secret Key Check ---
    if not app.config.get('SECRET_KEY') or app.config.get('SECRET_KEY') == 'default_secret_key_change_me_in_env':
        logger.critical("SECURITY ALERT: SECRET_KEY is not set or still uses the default value!")
        if not app.config.get('APP_DEBUG', False):
            raise ConfigurationError("SECRET_KEY must be set to a unique, secure value in production.")
        logger.warning("Using the default/insecure SECRET_KEY.")

    # --- CORS Configuration ---
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    # --- Database Initialization ---
    db_engine = engine
    if db_engine is None:
        try:
            db_uri = app.config.get('SQLALCHEMY_DATABASE_URI')
            if not db_uri:
                raise ConfigurationError("SQLALCHEMY_DATABASE_URI is not configured.")
            db_engine = init_sqlalchemy(db_uri, schema=config_object.DB_SCHEMA,
                                        pool_size=config_object.DB_POOL_SIZE,
                                        max_overflow=config_object.DB_MAX_OVERFLOW)
            atexit.register(dispose_sqlalchemy_engine)
            logger.debug("Registered SQLAlchemy engine disposal at application exit.")
        except (DatabaseError, ConfigurationError, SQLAlchemyError) as db_init_err:
            logger.critical(f"Failed to initialize the database: {db_init_err}", exc_info=True)
            sys.exit(1)

    # --- Dependency Injection ---
    gateway = DatabaseGateway(db_engine, max_workers=config_object.DB_POOL_SIZE + config_object.DB_MAX_OVERFLOW)
    product_repo = ProductRepository(
        db_engine,
        gateway=gateway,
        schema=config_object.DB_SCHEMA,
        query_timeout=config_object.PRODUCT_QUERY_TIMEOUT_SECONDS,
        report_timeout=config_object.PRODUCT_REPORT_TIMEOUT_SECONDS,
    )
    atexit.register(product_repo.gateway.shutdown)
    app.config['product_repository'] = product_repo
    app.config['product_service'] = ProductService(product_repo)
    logger.info("Repositories and services instantiated.")

    # --- Register Blueprints (API Routes) ---
    register_blueprints(app)

    # --- Register Error Handlers ---
    register_error_handlers(app)

    # --- Simple Health Check Endpoint ---
    @app.route('/health', methods=['GET'])
    def health_check():
        db_status = "ok"
        db_error = None
        try:
            with db_engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            db_status = "error"
            db_error = str(e)

        return jsonify({
            "status": "ok",
            "database": db_status,
            "database_error": db_error,
            "cached_products": len(product_repo.cache),
        }), 200 if db_status == "ok" else 503

    logger.info("Inventory-Backend application configured successfully.")
    return app
