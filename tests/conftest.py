"""Shared fixtures: a temporary SQLite database with the products table."""

import os
import tempfile
from decimal import Decimal
from typing import Optional

import pytest
from sqlalchemy import create_engine

from inventory.database.product_repository import ProductRepository
from inventory.database.schema_manager import SchemaManager
from inventory.domain.product import Product


@pytest.fixture
def temp_db_path():
    """Create a temporary database file for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    # Cleanup
    if os.path.exists(path):
        os.remove(path)


@pytest.fixture
def engine(temp_db_path):
    """SQLite engine with the products table created."""
    engine = create_engine(f"sqlite:///{temp_db_path}", connect_args={"check_same_thread": False})
    SchemaManager(engine).initialize_schema()
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine):
    """ProductRepository over the temporary database."""
    repo = ProductRepository(engine)
    yield repo
    repo.gateway.shutdown()


@pytest.fixture
def widget():
    """The Acme widget used throughout the tests (productId unassigned)."""
    return Product(
        product_id=0,
        manufacturer="Acme",
        sku="A1",
        upc="000",
        price_per_unit=Decimal("9.99"),
        quantity_on_hand=5,
        product_name="Widget",
    )


@pytest.fixture
def make_product():
    """Factory building a distinct product whose fields are all derived from index."""
    def _make(index: int, quantity: Optional[int] = None) -> Product:
        return Product(
            product_id=0,
            manufacturer=f"Maker{index}",
            sku=f"SKU-{index}",
            upc=f"{index:012d}",
            price_per_unit=Decimal(index) + Decimal("0.25"),
            quantity_on_hand=index if quantity is None else quantity,
            product_name=f"Item {index}",
        )
    return _make
