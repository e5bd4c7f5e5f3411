"""Shared test fixtures for the autodash test suite.

Provides:

* ``taxonomy``    -- the built-in type taxonomy
* ``shop_store``  -- in-memory metadata for a small shop: Orders -> Users, Products
* ``orders``      -- the Orders table from ``shop_store``
* ``shop_db``     -- the same shop as a DuckDB file with real PK/FK constraints
* ``allow_all``   -- a permission set granting everything
"""

from __future__ import annotations

from pathlib import Path

import duckdb
import pytest

from autodash.metadata.models import FieldMetadata, TableMetadata
from autodash.metadata.store import InMemoryMetadataStore
from autodash.safety.permissions import PermissionSet
from autodash.taxonomy import default_taxonomy

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ORDERS, USERS, PRODUCTS = 1, 2, 3


def make_field(
    field_id: int,
    table_id: int,
    name: str,
    base_type: str,
    special_type: str | None = None,
    fk_target_field_id: int | None = None,
) -> FieldMetadata:
    return FieldMetadata(
        id=field_id,
        table_id=table_id,
        name=name,
        base_type=base_type,
        special_type=special_type,
        fk_target_field_id=fk_target_field_id,
    )


SHOP_TABLES = [
    TableMetadata(id=ORDERS, name="Orders", db_id=1, entity_type="entity/TransactionTable"),
    TableMetadata(id=USERS, name="Users", db_id=1, entity_type="entity/UserTable"),
    TableMetadata(id=PRODUCTS, name="Products", db_id=1, entity_type="entity/ProductTable"),
]

SHOP_FIELDS = [
    # Orders
    make_field(10, ORDERS, "id", "type/Integer", "type/PK"),
    make_field(11, ORDERS, "created_at", "type/DateTime", "type/CreationTimestamp"),
    make_field(12, ORDERS, "shipped_at", "type/DateTime"),
    make_field(13, ORDERS, "total", "type/Decimal", "type/Income"),
    make_field(14, ORDERS, "user_id", "type/Integer", "type/FK", fk_target_field_id=20),
    make_field(15, ORDERS, "product_id", "type/Integer", "type/FK", fk_target_field_id=30),
    make_field(16, ORDERS, "discount", "type/Float", "type/Discount"),
    # Users
    make_field(20, USERS, "id", "type/Integer", "type/PK"),
    make_field(21, USERS, "country", "type/Text", "type/Country"),
    make_field(22, USERS, "source", "type/Text", "type/Source"),
    make_field(23, USERS, "joined_at", "type/DateTime", "type/JoinTimestamp"),
    # Products
    make_field(30, PRODUCTS, "id", "type/Integer", "type/PK"),
    make_field(31, PRODUCTS, "category", "type/Text", "type/Category"),
    make_field(32, PRODUCTS, "price", "type/Decimal", "type/Price"),
]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def taxonomy():
    return default_taxonomy()


@pytest.fixture()
def shop_store():
    return InMemoryMetadataStore(SHOP_TABLES, SHOP_FIELDS)


@pytest.fixture()
def orders(shop_store):
    return shop_store.get_table(ORDERS)


@pytest.fixture()
def allow_all():
    return PermissionSet.full()


@pytest.fixture()
def shop_db(tmp_path: Path) -> Path:
    """A DuckDB file with users, products and orders linked by foreign keys."""
    db_path = tmp_path / "shop.duckdb"
    conn = duckdb.connect(str(db_path))
    conn.execute("""
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            email VARCHAR,
            country VARCHAR,
            source VARCHAR,
            created_at TIMESTAMP
        )
    """)
    conn.execute("""
        CREATE TABLE products (
            id INTEGER PRIMARY KEY,
            title VARCHAR,
            category VARCHAR,
            price DECIMAL(12, 2)
        )
    """)
    conn.execute("""
        CREATE TABLE orders (
            id INTEGER PRIMARY KEY,
            user_id INTEGER REFERENCES users(id),
            product_id INTEGER REFERENCES products(id),
            created_at TIMESTAMP,
            total DECIMAL(12, 2),
            discount DECIMAL(12, 2),
            quantity INTEGER
        )
    """)
    conn.close()
    return db_path
