# inventory/domain/__init__.py
# Makes 'domain' a package. Exports domain models.

from .product import Product, ProductFilter

__all__ = [
    "Product",
    "ProductFilter",
]
