"""SQLite implementation of product catalog storage."""

from datetime import date, datetime
from decimal import Decimal

import aiosqlite

from pharmstock.config import get_logger
from pharmstock.core.entities.inventory import Product, ProductStatus, utc_now
from pharmstock.core.exceptions import ProductNotFoundError
from pharmstock.core.interfaces.product_store import IProductStore
from pharmstock.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except (ValueError, TypeError):
        return None


def _parse_datetime(value: str | None) -> datetime:
    if value:
        try:
            return datetime.fromisoformat(value)
        except (ValueError, TypeError):
            pass
    return utc_now()


def row_to_product(row: aiosqlite.Row) -> Product:
    """Convert a database row to a Product entity."""
    return Product(
        id=row["id"],
        organization_id=row["organization_id"],
        name=row["name"],
        description=row["description"] or "",
        price=Decimal(row["price"]),
        category=row["category"],
        stock_quantity=int(row["stock_quantity"]),
        min_stock_level=int(row["min_stock_level"]),
        location=row["location"],
        supplier=row["supplier"],
        barcode=row["barcode"],
        sku=row["sku"],
        manufacturer_code=row["manufacturer_code"],
        expiry_date=_parse_date(row["expiry_date"]),
        status=ProductStatus(row["status"]),
        created_at=_parse_datetime(row["created_at"]),
        updated_at=_parse_datetime(row["updated_at"]),
    )


async def fetch_product(
    conn: aiosqlite.Connection, organization_id: int, product_id: int
) -> Product | None:
    """Load a product on an existing connection (inside a transaction if any)."""
    cursor = await conn.execute(
        "SELECT * FROM products WHERE id = ? AND organization_id = ?",
        (product_id, organization_id),
    )
    row = await cursor.fetchone()
    return row_to_product(row) if row else None


async def insert_product(conn: aiosqlite.Connection, product: Product) -> Product:
    """Insert a product at zero stock on an existing connection."""
    now = utc_now()
    cursor = await conn.execute(
        """
        INSERT INTO products (
            organization_id, name, description, price, category,
            stock_quantity, min_stock_level, location, supplier,
            barcode, sku, manufacturer_code, expiry_date, status,
            created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, 0, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            product.organization_id,
            product.name,
            product.description,
            str(product.price),
            product.category,
            product.min_stock_level,
            product.location,
            product.supplier,
            product.barcode,
            product.sku,
            product.manufacturer_code,
            product.expiry_date.isoformat() if product.expiry_date else None,
            product.status.value,
            now.isoformat(),
            now.isoformat(),
        ),
    )
    created = product.model_copy(
        update={
            "id": cursor.lastrowid,
            "stock_quantity": 0,
            "created_at": now,
            "updated_at": now,
        }
    )
    logger.info(
        "product_created",
        product_id=created.id,
        organization_id=created.organization_id,
    )
    return created


class SQLiteProductStore(IProductStore):
    """SQLite implementation of the product catalog."""

    async def create_product(self, product: Product) -> Product:
        """Create a product. Stock always starts at zero."""
        async with get_transaction() as conn:
            return await insert_product(conn, product)

    async def get_product(self, organization_id: int, product_id: int) -> Product | None:
        """Get product by ID within an organization."""
        async with get_connection() as conn:
            return await fetch_product(conn, organization_id, product_id)

    async def list_products(self, organization_id: int) -> list[Product]:
        """List all products of an organization."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM products WHERE organization_id = ? ORDER BY id",
                (organization_id,),
            )
            rows = await cursor.fetchall()
            return [row_to_product(row) for row in rows]

    async def update_product(self, product: Product) -> Product:
        """Update descriptive fields. stock_quantity is left untouched."""
        now = utc_now()
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE products SET
                    name = ?, description = ?, price = ?, category = ?,
                    min_stock_level = ?, location = ?, supplier = ?,
                    barcode = ?, sku = ?, manufacturer_code = ?,
                    expiry_date = ?, status = ?, updated_at = ?
                WHERE id = ? AND organization_id = ?
                """,
                (
                    product.name,
                    product.description,
                    str(product.price),
                    product.category,
                    product.min_stock_level,
                    product.location,
                    product.supplier,
                    product.barcode,
                    product.sku,
                    product.manufacturer_code,
                    product.expiry_date.isoformat() if product.expiry_date else None,
                    product.status.value,
                    now.isoformat(),
                    product.id,
                    product.organization_id,
                ),
            )
            if cursor.rowcount == 0:
                raise ProductNotFoundError(product.id or 0, product.organization_id)

            updated = await fetch_product(conn, product.organization_id, product.id or 0)
            logger.info("product_updated", product_id=product.id)
            return updated  # type: ignore[return-value]

    async def list_categories(self, organization_id: int) -> list[str]:
        """List distinct non-empty category labels."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT DISTINCT category FROM products
                WHERE organization_id = ? AND category IS NOT NULL AND TRIM(category) != ''
                ORDER BY category
                """,
                (organization_id,),
            )
            rows = await cursor.fetchall()
            return [row["category"] for row in rows]
