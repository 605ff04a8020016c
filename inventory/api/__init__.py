# inventory/api/__init__.py
# Initializes the API layer and registers blueprints.

from flask import Flask

from inventory.utils.logger import logger


def register_blueprints(app: Flask):
    """
    Registers all defined blueprints with the Flask application.

    Route modules are imported here rather than at module level: they pull in the
    service and database layers, which themselves import inventory.api.errors.

    Args:
        app: The Flask application instance.
    """
    from .routes.products import products_bp

    blueprints = [
        (products_bp, '/api/products'),
    ]

    logger.info("Registering API blueprints...")
    for bp, prefix in blueprints:
        app.register_blueprint(bp, url_prefix=prefix)
        logger.debug(f"Blueprint '{bp.name}' registered with prefix '{prefix}'.")
    logger.info("All API blueprints registered.")

__all__ = ["register_blueprints"]
