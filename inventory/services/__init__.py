# inventory/services/__init__.py
# Makes 'services' a package. Exports service classes.

from .product_service import ProductService

__all__ = [
    "ProductService",
]
