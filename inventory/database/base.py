# inventory/database/base.py
# Table metadata for the inventory database.

from typing import Optional

from sqlalchemy import Column, Integer, MetaData, Numeric, String, Table

# Naming convention for constraints so generated names stay stable across backends.
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=convention)

PRODUCTS_TABLE_NAME = "products"

# Projection order used by every product SELECT.
PRODUCT_COLUMNS = (
    "productId",
    "manufacturer",
    "sku",
    "upc",
    "pricePerUnit",
    "quantityOnHand",
    "productName",
)


def qualified_table_name(schema: Optional[str] = None) -> str:
    """'schema.products' when a schema is given, else 'products'."""
    return f"{schema}.{PRODUCTS_TABLE_NAME}" if schema else PRODUCTS_TABLE_NAME


def products_table(schema: Optional[str] = None) -> Table:
    """Returns the products Table for the given schema, defining it on first use."""
    key = qualified_table_name(schema)
    if key in metadata.tables:
        return metadata.tables[key]
    return Table(
        PRODUCTS_TABLE_NAME,
        metadata,
        Column("productId", Integer, primary_key=True, autoincrement=True),
        Column("manufacturer", String(255), nullable=False, default=""),
        Column("sku", String(255), nullable=False, default=""),
        Column("upc", String(255), nullable=False, default=""),
        Column("pricePerUnit", Numeric(13, 2), nullable=False, default=0),
        Column("quantityOnHand", Integer, nullable=False, default=0),
        Column("productName", String(255), nullable=False, default=""),
        schema=schema,
    )
