"""SQLite implementation of the append-only stock ledger."""

from collections.abc import AsyncIterator
from datetime import date, datetime
from typing import Any

import aiosqlite

from pharmstock.config import get_logger
from pharmstock.core.entities.inventory import MovementType, Product, StockMovement, utc_now
from pharmstock.core.exceptions import (
    InsufficientStockError,
    InvalidArgumentError,
    ProductNotFoundError,
)
from pharmstock.core.interfaces.ledger_store import IStockLedgerStore, LedgerPosting
from pharmstock.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from pharmstock.infrastructure.storage.sqlite.locks import (
    KeyedLock,
    get_lock_registry,
    product_key,
)
from pharmstock.infrastructure.storage.sqlite.product_store import (
    fetch_product,
    insert_product,
)

logger = get_logger(__name__)


def row_to_movement(row: aiosqlite.Row) -> StockMovement:
    """Convert a database row to a StockMovement entity."""
    movement_date = date.today()
    if row["movement_date"]:
        try:
            movement_date = date.fromisoformat(row["movement_date"])
        except (ValueError, TypeError):
            pass

    created_at = utc_now()
    if row["created_at"]:
        try:
            created_at = datetime.fromisoformat(row["created_at"])
        except (ValueError, TypeError):
            pass

    return StockMovement(
        id=row["id"],
        organization_id=row["organization_id"],
        product_id=row["product_id"],
        movement_type=MovementType(row["movement_type"]),
        quantity=int(row["quantity"]),
        movement_date=movement_date,
        notes=row["notes"],
        restock_order_id=row["restock_order_id"],
        idempotency_key=row["idempotency_key"],
        created_at=created_at,
    )


async def fetch_movement_by_key(
    conn: aiosqlite.Connection, organization_id: int, idempotency_key: str
) -> StockMovement | None:
    cursor = await conn.execute(
        "SELECT * FROM stock_movements WHERE organization_id = ? AND idempotency_key = ?",
        (organization_id, idempotency_key),
    )
    row = await cursor.fetchone()
    return row_to_movement(row) if row else None


async def post_movement(
    conn: aiosqlite.Connection, movement: StockMovement
) -> tuple[StockMovement, Product]:
    """
    Apply a movement to its product and append it, on a connection that is
    already inside a write transaction.

    The stock update is conditional on the result staying non-negative, so
    the check and the write cannot be separated by another writer.
    """
    product = await fetch_product(conn, movement.organization_id, movement.product_id)
    if product is None:
        raise ProductNotFoundError(movement.product_id, movement.organization_id)

    new_quantity = product.stock_quantity + movement.quantity
    if new_quantity < 0:
        raise InsufficientStockError(
            product_id=movement.product_id,
            requested=-movement.quantity,
            available=product.stock_quantity,
        )

    now = utc_now()
    cursor = await conn.execute(
        """
        UPDATE products
        SET stock_quantity = stock_quantity + ?, updated_at = ?
        WHERE id = ? AND organization_id = ? AND stock_quantity + ? >= 0
        """,
        (
            movement.quantity,
            now.isoformat(),
            movement.product_id,
            movement.organization_id,
            movement.quantity,
        ),
    )
    if cursor.rowcount != 1:
        raise InsufficientStockError(
            product_id=movement.product_id,
            requested=-movement.quantity,
            available=product.stock_quantity,
        )

    cursor = await conn.execute(
        """
        INSERT INTO stock_movements (
            organization_id, product_id, movement_type, quantity,
            movement_date, notes, restock_order_id, idempotency_key, created_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            movement.organization_id,
            movement.product_id,
            movement.movement_type.value,
            movement.quantity,
            movement.movement_date.isoformat(),
            movement.notes,
            movement.restock_order_id,
            movement.idempotency_key,
            movement.created_at.isoformat(),
        ),
    )
    posted = movement.model_copy(update={"id": cursor.lastrowid})
    updated_product = product.model_copy(
        update={"stock_quantity": new_quantity, "updated_at": now}
    )

    logger.info(
        "stock_movement_recorded",
        movement_id=posted.id,
        product_id=posted.product_id,
        type=posted.movement_type.value,
        qty=posted.quantity,
        stock_quantity=new_quantity,
    )
    return posted, updated_product


def check_replay(existing: StockMovement, requested: StockMovement) -> None:
    """Reject an idempotency key reused for a different movement."""
    mismatched = [
        field
        for field in ("product_id", "movement_type", "quantity", "restock_order_id")
        if getattr(existing, field) != getattr(requested, field)
    ]
    if mismatched:
        raise InvalidArgumentError(
            "idempotency_key",
            f"key already used for a different movement ({', '.join(mismatched)} differ)",
            requested.idempotency_key,
        )


class SQLiteStockLedgerStore(IStockLedgerStore):
    """SQLite implementation of the stock movement ledger."""

    def __init__(self, locks: KeyedLock | None = None):
        self._locks = locks or get_lock_registry()

    async def record_movement(self, movement: StockMovement) -> LedgerPosting:
        """Append a movement and apply it to the product atomically."""
        key = product_key(movement.organization_id, movement.product_id)
        async with self._locks.hold(key):
            async with get_transaction(immediate=True) as conn:
                if movement.idempotency_key:
                    existing = await fetch_movement_by_key(
                        conn, movement.organization_id, movement.idempotency_key
                    )
                    if existing is not None:
                        check_replay(existing, movement)
                        product = await fetch_product(
                            conn, existing.organization_id, existing.product_id
                        )
                        logger.info(
                            "stock_movement_replayed",
                            movement_id=existing.id,
                            idempotency_key=existing.idempotency_key,
                        )
                        return LedgerPosting(
                            movement=existing,
                            product=product,  # type: ignore[arg-type]
                            replayed=True,
                        )

                posted, product = await post_movement(conn, movement)
                return LedgerPosting(movement=posted, product=product)

    async def open_product(
        self, product: Product, quantity: int, notes: str | None = None
    ) -> LedgerPosting:
        """Insert a product and post its opening adjustment in one transaction."""
        async with get_transaction(immediate=True) as conn:
            created = await insert_product(conn, product)
            posted, stocked = await post_movement(
                conn,
                StockMovement(
                    organization_id=created.organization_id,
                    product_id=created.id,  # type: ignore[arg-type]
                    movement_type=MovementType.ADJUSTMENT,
                    quantity=quantity,
                    notes=notes,
                ),
            )
            return LedgerPosting(movement=posted, product=stocked)

    @staticmethod
    def _filters(
        organization_id: int,
        product_id: int | None,
        start: date | None,
        end: date | None,
    ) -> tuple[list[str], list[Any]]:
        clauses = ["organization_id = ?"]
        params: list[Any] = [organization_id]
        if product_id is not None:
            clauses.append("product_id = ?")
            params.append(product_id)
        if start is not None:
            clauses.append("movement_date >= ?")
            params.append(start.isoformat())
        if end is not None:
            clauses.append("movement_date <= ?")
            params.append(end.isoformat())
        return clauses, params

    async def iter_movements(
        self,
        organization_id: int,
        product_id: int | None = None,
        start: date | None = None,
        end: date | None = None,
        page_size: int = 200,
    ) -> AsyncIterator[StockMovement]:
        """Iterate movements newest first using keyset pagination."""
        cursor_key: tuple[str, int] | None = None
        while True:
            clauses, params = self._filters(organization_id, product_id, start, end)
            if cursor_key is not None:
                clauses.append("(movement_date < ? OR (movement_date = ? AND id < ?))")
                params.extend([cursor_key[0], cursor_key[0], cursor_key[1]])

            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"""
                    SELECT * FROM stock_movements
                    WHERE {" AND ".join(clauses)}
                    ORDER BY movement_date DESC, id DESC
                    LIMIT ?
                    """,
                    (*params, page_size),
                )
                rows = await cursor.fetchall()

            for row in rows:
                yield row_to_movement(row)

            if len(rows) < page_size:
                return
            last = rows[-1]
            cursor_key = (last["movement_date"], last["id"])

    async def list_movements(
        self,
        organization_id: int,
        product_id: int | None = None,
        start: date | None = None,
        end: date | None = None,
        limit: int = 100,
    ) -> list[StockMovement]:
        """List movements newest first."""
        clauses, params = self._filters(organization_id, product_id, start, end)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM stock_movements
                WHERE {" AND ".join(clauses)}
                ORDER BY movement_date DESC, id DESC
                LIMIT ?
                """,
                (*params, limit),
            )
            rows = await cursor.fetchall()
            return [row_to_movement(row) for row in rows]

    async def movement_totals(self, organization_id: int) -> dict[int, int]:
        """Sum of deltas per product."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT product_id, SUM(quantity) AS total
                FROM stock_movements
                WHERE organization_id = ?
                GROUP BY product_id
                """,
                (organization_id,),
            )
            rows = await cursor.fetchall()
            return {row["product_id"]: int(row["total"]) for row in rows}

    async def posted_for_order(self, organization_id: int, order_id: int) -> int:
        """Sum of purchase deltas tagged with a restock order."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT COALESCE(SUM(quantity), 0) AS total
                FROM stock_movements
                WHERE organization_id = ? AND restock_order_id = ?
                  AND movement_type = 'purchase'
                """,
                (organization_id, order_id),
            )
            row = await cursor.fetchone()
            return int(row["total"])
