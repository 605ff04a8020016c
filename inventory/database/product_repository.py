# inventory/database/product_repository.py
# Handles database operations for inventory products, with a per-instance product cache.

from dataclasses import replace
from functools import partial
from typing import List, Optional

from sqlalchemy import Numeric, bindparam, text
from sqlalchemy.engine import Engine, Row

from .base import PRODUCT_COLUMNS, qualified_table_name
from .base_repository import BaseRepository
from .gateway import DatabaseGateway, Deadline
from .product_cache import ProductCache
from .product_query_builder import ProductQueryBuilder
from inventory.domain.product import Product, ProductFilter, to_price
from inventory.utils.logger import logger
from inventory.api.errors import ApiError, DatabaseError, QueryTimeoutError, ValidationError

DEFAULT_QUERY_TIMEOUT_SECONDS = 15.0
DEFAULT_REPORT_TIMEOUT_SECONDS = 3.0
TOP_PRODUCTS_LIMIT = 10

_SELECT_COLUMNS = ", ".join(PRODUCT_COLUMNS)

# Search lower-cases the text columns in the projection as well as in the predicate.
_SEARCH_COLUMNS = """productId,
    LOWER(manufacturer),
    LOWER(sku),
    upc,
    pricePerUnit,
    quantityOnHand,
    LOWER(productName)"""


def _price_param():
    return bindparam("price_per_unit", type_=Numeric(13, 2))


class ProductRepository(BaseRepository):
    """
    Repository for the products table.

    Point lookups go through a ProductCache owned by this instance: get_by_id is
    served from it when possible and every successful insert, update, lookup or
    delete keeps it in step with what this repository last read or wrote.
    Full-table and search reads always hit the database.

    Each call runs under a fixed deadline: query_timeout for lookups, listings and
    writes, report_timeout for the lightweight top-N and search reads.
    """

    def __init__(self, engine: Engine, schema: Optional[str] = None,
                 query_timeout: float = DEFAULT_QUERY_TIMEOUT_SECONDS,
                 report_timeout: float = DEFAULT_REPORT_TIMEOUT_SECONDS,
                 gateway: Optional[DatabaseGateway] = None,
                 cache: Optional[ProductCache] = None):
        super().__init__(engine, gateway)
        self.table = qualified_table_name(schema)
        self.query_timeout = query_timeout
        self.report_timeout = report_timeout
        self.cache = cache if cache is not None else ProductCache()

        self._select_by_id = text(f"SELECT {_SELECT_COLUMNS} FROM {self.table} WHERE productId = :product_id")
        self._select_all = text(f"SELECT {_SELECT_COLUMNS} FROM {self.table}")
        self._select_top = text(
            f"SELECT {_SELECT_COLUMNS} FROM {self.table} ORDER BY quantityOnHand DESC LIMIT :limit"
        )
        self._insert = text(
            f"INSERT INTO {self.table} "
            "(manufacturer, sku, upc, pricePerUnit, quantityOnHand, productName) "
            "VALUES (:manufacturer, :sku, :upc, :price_per_unit, :quantity_on_hand, :product_name)"
        ).bindparams(_price_param())
        self._update = text(
            f"UPDATE {self.table} SET "
            "manufacturer = :manufacturer, "
            "sku = :sku, "
            "upc = :upc, "
            "pricePerUnit = CAST(:price_per_unit AS DECIMAL(13,2)), "
            "quantityOnHand = :quantity_on_hand, "
            "productName = :product_name "
            "WHERE productId = :product_id"
        ).bindparams(_price_param())
        self._delete = text(f"DELETE FROM {self.table} WHERE productId = :product_id")

        logger.info(f"ProductRepository initialized for table '{self.table}' "
                    f"(timeouts: {self.query_timeout}s / {self.report_timeout}s).")

    # --- Helpers ---

    @staticmethod
    def _row_to_product(row: Row) -> Product:
        """Maps a row in projection order to a Product."""
        return Product(
            product_id=int(row[0]),
            manufacturer=row[1] or "",
            sku=row[2] or "",
            upc=row[3] or "",
            price_per_unit=to_price(row[4] if row[4] is not None else 0),
            quantity_on_hand=int(row[5] or 0),
            product_name=row[6] or "",
        )

    @staticmethod
    def _write_params(product: Product) -> dict:
        return {
            "manufacturer": product.manufacturer,
            "sku": product.sku,
            "upc": product.upc,
            "price_per_unit": product.price_per_unit,
            "quantity_on_hand": product.quantity_on_hand,
            "product_name": product.product_name,
        }

    def _query_deadline(self) -> Deadline:
        return Deadline(self.query_timeout)

    def _report_deadline(self) -> Deadline:
        return Deadline(self.report_timeout)

    # --- Reads ---

    def get_by_id(self, product_id: int) -> Optional[Product]:
        """
        Finds a product by its ID.

        Returns:
            The Product, or None when no row matches.

        Raises:
            QueryTimeoutError: The database did not answer within query_timeout.
            DatabaseError: Any other database failure.
        """
        cached = self.cache.get(product_id)
        if cached is not None:
            logger.debug(f"Product {product_id} served from cache.")
            return cached

        generation = self.cache.generation(product_id)
        logger.debug(f"Finding product by ID {product_id}")
        try:
            row = self.gateway.query_one(self._select_by_id, {"product_id": product_id},
                                         self._query_deadline(), operation="get product")
            if row is None:
                logger.debug(f"Product not found by ID {product_id}.")
                return None
            product = self._row_to_product(row)
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error finding product by ID {product_id}: {e}", exc_info=True)
            raise DatabaseError(f"Unexpected error finding product by ID: {e}") from e

        # A write that finished while the row was in flight wins over this read.
        self.cache.put_if_unchanged(product.product_id, product, generation)
        return product

    def list_all(self) -> List[Product]:
        """Returns every product in the database's natural row order (empty list for an empty table)."""
        logger.debug("Listing all products")
        try:
            rows = self.gateway.query(self._select_all, None, self._query_deadline(), operation="list products")
            products = [self._row_to_product(row) for row in rows]
            logger.debug(f"Found {len(products)} products.")
            return products
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error listing products: {e}", exc_info=True)
            raise DatabaseError(f"Unexpected error listing products: {e}") from e

    def top_n(self, limit: int = TOP_PRODUCTS_LIMIT) -> List[Product]:
        """
        Returns up to `limit` products with the highest quantityOnHand, highest first.
        Ties keep whatever order the database returns.
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise ValidationError(f"limit must be a non-negative integer, got {limit!r}.")
        logger.debug(f"Fetching top {limit} products by quantity on hand")
        try:
            rows = self.gateway.query(self._select_top, {"limit": limit}, self._report_deadline(),
                                      operation="top products")
            return [self._row_to_product(row) for row in rows]
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error fetching top products: {e}", exc_info=True)
            raise DatabaseError(f"Unexpected error fetching top products: {e}") from e

    def search(self, criteria: ProductFilter) -> List[Product]:
        """
        Returns products whose name, manufacturer and sku contain the given fragments
        (case-insensitive). Text columns come back lower-cased. With no filters every
        product matches.
        """
        builder = ProductQueryBuilder.from_filter(criteria)
        statement = text(f"SELECT {_SEARCH_COLUMNS} FROM {self.table} WHERE {builder.where_clause()}")
        logger.debug(f"Searching products with {len(builder)} predicate(s): {criteria}")
        try:
            rows = self.gateway.query(statement, builder.params(), self._report_deadline(),
                                      operation="search products")
            products = [self._row_to_product(row) for row in rows]
            logger.debug(f"Search matched {len(products)} products.")
            return products
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error searching products: {e}", exc_info=True)
            raise DatabaseError(f"Unexpected error searching products: {e}") from e

    # --- Writes ---

    def insert(self, product: Product) -> int:
        """
        Inserts a product and returns the identifier the database assigned to it.
        The product_id of the argument is ignored.

        Raises:
            ValidationError: Negative price or quantity.
            QueryTimeoutError: The database did not answer within query_timeout.
            DatabaseError: The insert failed or no identifier was generated.
        """
        product = replace(product, price_per_unit=to_price(product.price_per_unit))
        product.validate()

        logger.debug(f"Inserting product '{product.product_name}' (sku '{product.sku}')")
        try:
            result = self.gateway.execute(self._insert, self._write_params(product), self._query_deadline(),
                                          operation="insert product")
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error inserting product: {e}", exc_info=True)
            raise DatabaseError(f"Unexpected error inserting product: {e}") from e

        new_id = result.last_insert_id
        if not new_id or new_id <= 0:
            logger.error(f"Insert of product '{product.product_name}' returned no generated ID ({new_id!r}).")
            raise DatabaseError("Product insert did not return a generated ID.")

        self.cache.put(new_id, product.with_id(new_id))
        logger.info(f"Product inserted with ID {new_id}.")
        return new_id

    def update(self, product: Product) -> None:
        """
        Overwrites every mutable field of the row with product.product_id.
        An ID with no row is not an error: nothing is written and the call succeeds.
        """
        product = replace(product, price_per_unit=to_price(product.price_per_unit))
        product.validate()

        logger.debug(f"Updating product ID {product.product_id}")
        params = self._write_params(product)
        params["product_id"] = product.product_id
        evict = partial(self.cache.remove, product.product_id)
        try:
            result = self.gateway.execute(self._update, params, self._query_deadline(),
                                          operation="update product", on_abandoned=evict)
        except QueryTimeoutError:
            # The statement may still commit: drop the entry now and again once it finishes.
            evict()
            raise
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error updating product ID {product.product_id}: {e}", exc_info=True)
            raise DatabaseError(f"Unexpected error updating product: {e}") from e

        if result.rowcount > 0:
            self.cache.put(product.product_id, product)
            logger.info(f"Product ID {product.product_id} updated.")
        else:
            # No row: make sure a stale cache entry does not outlive it.
            self.cache.remove(product.product_id)
            logger.warning(f"Update of product ID {product.product_id} matched no rows.")

    def delete(self, product_id: int) -> None:
        """Deletes the product row. Deleting a missing ID succeeds without effect."""
        logger.debug(f"Deleting product ID {product_id}")
        evict = partial(self.cache.remove, product_id)
        try:
            result = self.gateway.execute(self._delete, {"product_id": product_id}, self._query_deadline(),
                                          operation="delete product", on_abandoned=evict)
        except QueryTimeoutError:
            evict()
            raise
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error deleting product ID {product_id}: {e}", exc_info=True)
            raise DatabaseError(f"Unexpected error deleting product: {e}") from e

        self.cache.remove(product_id)
        if result.rowcount > 0:
            logger.info(f"Product ID {product_id} deleted.")
        else:
            logger.debug(f"Delete of product ID {product_id} matched no rows.")
