# inventory/services/product_service.py
# Business logic on top of the product repository: input validation and not-found handling.

from typing import List

from inventory.database.product_repository import ProductRepository, TOP_PRODUCTS_LIMIT
from inventory.domain.product import Product, ProductFilter
from inventory.utils.logger import logger
from inventory.api.errors import NotFoundError, ValidationError


class ProductService:
    """
    Service layer for inventory products.

    Repository errors (DatabaseError, QueryTimeoutError) pass through unchanged so
    callers can tell a slow database from a broken one.
    """

    def __init__(self, product_repository: ProductRepository):
        self.product_repository = product_repository
        logger.info("ProductService initialized.")

    @staticmethod
    def _check_id(product_id: int) -> None:
        if isinstance(product_id, bool) or not isinstance(product_id, int) or product_id <= 0:
            raise ValidationError(f"Invalid product ID: {product_id!r}.")

    def get_product(self, product_id: int) -> Product:
        """
        Retrieves a single product.

        Raises:
            ValidationError: product_id is not a positive integer.
            NotFoundError: No product has this ID.
        """
        self._check_id(product_id)
        product = self.product_repository.get_by_id(product_id)
        if product is None:
            logger.info(f"Product ID {product_id} not found.")
            raise NotFoundError(f"Product with ID {product_id} not found.")
        return product

    def list_products(self) -> List[Product]:
        return self.product_repository.list_all()

    def get_top_products(self, limit: int = TOP_PRODUCTS_LIMIT) -> List[Product]:
        """Top products by quantity on hand; limit must be between 1 and 10."""
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= TOP_PRODUCTS_LIMIT:
            raise ValidationError(f"limit must be between 1 and {TOP_PRODUCTS_LIMIT}.")
        return self.product_repository.top_n(limit)

    def search_products(self, criteria: ProductFilter) -> List[Product]:
        logger.info(f"Product search requested: {criteria}")
        return self.product_repository.search(criteria)

    def create_product(self, product: Product) -> int:
        """Inserts the product and returns its new ID. Any productId on the input is ignored."""
        new_id = self.product_repository.insert(product)
        logger.info(f"Product '{product.product_name}' created with ID {new_id}.")
        return new_id

    def update_product(self, product_id: int, product: Product) -> Product:
        """
        Overwrites the product stored under product_id.

        The body's productId must match the path ID; a body without one takes the path ID.
        """
        self._check_id(product_id)
        if product.product_id and product.product_id != product_id:
            raise ValidationError(
                f"productId in body ({product.product_id}) does not match the requested ID ({product_id})."
            )
        product = product.with_id(product_id)
        self.product_repository.update(product)
        return product

    def delete_product(self, product_id: int) -> None:
        self._check_id(product_id)
        self.product_repository.delete(product_id)
        logger.info(f"Product ID {product_id} deleted (if it existed).")
