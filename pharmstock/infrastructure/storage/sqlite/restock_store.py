"""SQLite implementation of restock order storage."""

from datetime import date, datetime
from decimal import Decimal

import aiosqlite

from pharmstock.config import get_logger
from pharmstock.core.entities.inventory import MovementType, StockMovement, utc_now
from pharmstock.core.entities.restock import RestockOrder, RestockStatus
from pharmstock.core.exceptions import (
    ConcurrentModificationError,
    RestockOrderNotFoundError,
)
from pharmstock.core.interfaces.restock_store import IRestockOrderStore, RestockReceipt
from pharmstock.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from pharmstock.infrastructure.storage.sqlite.ledger_store import (
    check_replay,
    fetch_movement_by_key,
    post_movement,
)
from pharmstock.infrastructure.storage.sqlite.locks import (
    KeyedLock,
    get_lock_registry,
    order_key,
    product_key,
)
from pharmstock.infrastructure.storage.sqlite.product_store import fetch_product

logger = get_logger(__name__)


def row_to_order(row: aiosqlite.Row) -> RestockOrder:
    """Convert a database row to a RestockOrder entity."""
    expected = None
    if row["expected_delivery_date"]:
        try:
            expected = date.fromisoformat(row["expected_delivery_date"])
        except (ValueError, TypeError):
            pass

    created_at = utc_now()
    if row["created_at"]:
        try:
            created_at = datetime.fromisoformat(row["created_at"])
        except (ValueError, TypeError):
            pass

    updated_at = utc_now()
    if row["updated_at"]:
        try:
            updated_at = datetime.fromisoformat(row["updated_at"])
        except (ValueError, TypeError):
            pass

    return RestockOrder(
        id=row["id"],
        organization_id=row["organization_id"],
        product_id=row["product_id"],
        quantity=int(row["quantity"]),
        price=Decimal(row["price"]),
        supplier=row["supplier"],
        purchase_date=date.fromisoformat(row["purchase_date"]),
        expected_delivery_date=expected,
        status=RestockStatus(row["status"]),
        notes=row["notes"],
        received_quantity=int(row["received_quantity"]),
        created_at=created_at,
        updated_at=updated_at,
    )


async def fetch_order(
    conn: aiosqlite.Connection, organization_id: int, order_id: int
) -> RestockOrder | None:
    cursor = await conn.execute(
        "SELECT * FROM restock_orders WHERE id = ? AND organization_id = ?",
        (order_id, organization_id),
    )
    row = await cursor.fetchone()
    return row_to_order(row) if row else None


async def write_transition(
    conn: aiosqlite.Connection, previous: RestockOrder, updated: RestockOrder
) -> None:
    """Persist a transition only if the row still holds the previous state."""
    cursor = await conn.execute(
        """
        UPDATE restock_orders
        SET status = ?, received_quantity = ?, updated_at = ?
        WHERE id = ? AND organization_id = ? AND status = ? AND received_quantity = ?
        """,
        (
            updated.status.value,
            updated.received_quantity,
            updated.updated_at.isoformat(),
            previous.id,
            previous.organization_id,
            previous.status.value,
            previous.received_quantity,
        ),
    )
    if cursor.rowcount != 1:
        raise ConcurrentModificationError("restock order", previous.id or 0)


class SQLiteRestockOrderStore(IRestockOrderStore):
    """SQLite implementation of restock orders and their transitions."""

    def __init__(self, locks: KeyedLock | None = None):
        self._locks = locks or get_lock_registry()

    async def create_order(self, order: RestockOrder) -> RestockOrder:
        """Persist a new pending order."""
        now = utc_now()
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO restock_orders (
                    organization_id, product_id, quantity, price, supplier,
                    purchase_date, expected_delivery_date, status, notes,
                    received_quantity, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 0, ?, ?)
                """,
                (
                    order.organization_id,
                    order.product_id,
                    order.quantity,
                    str(order.price),
                    order.supplier,
                    order.purchase_date.isoformat(),
                    (
                        order.expected_delivery_date.isoformat()
                        if order.expected_delivery_date
                        else None
                    ),
                    RestockStatus.PENDING.value,
                    order.notes,
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
            created = order.model_copy(
                update={
                    "id": cursor.lastrowid,
                    "status": RestockStatus.PENDING,
                    "received_quantity": 0,
                    "created_at": now,
                    "updated_at": now,
                }
            )
            logger.info(
                "restock_order_created",
                order_id=created.id,
                product_id=created.product_id,
                quantity=created.quantity,
            )
            return created

    async def get_order(self, organization_id: int, order_id: int) -> RestockOrder | None:
        """Get order by ID within an organization."""
        async with get_connection() as conn:
            return await fetch_order(conn, organization_id, order_id)

    async def list_orders(
        self,
        organization_id: int,
        status: RestockStatus | None = None,
    ) -> list[RestockOrder]:
        """List orders, newest purchase date first."""
        query = "SELECT * FROM restock_orders WHERE organization_id = ?"
        params: list = [organization_id]
        if status is not None:
            query += " AND status = ?"
            params.append(status.value)
        query += " ORDER BY purchase_date DESC, id DESC"

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return [row_to_order(row) for row in rows]

    async def receive_order(
        self,
        organization_id: int,
        order_id: int,
        quantity: int,
        movement_date: date,
        notes: str | None = None,
        idempotency_key: str | None = None,
    ) -> RestockReceipt:
        """Register a receipt and post its purchase movement atomically."""
        # product_id never changes, so it is safe to read before locking
        order = await self.get_order(organization_id, order_id)
        if order is None:
            raise RestockOrderNotFoundError(order_id, organization_id)

        async with self._locks.hold(
            order_key(organization_id, order_id),
            product_key(organization_id, order.product_id),
        ):
            async with get_transaction(immediate=True) as conn:
                order = await fetch_order(conn, organization_id, order_id)
                if order is None:
                    raise RestockOrderNotFoundError(order_id, organization_id)

                movement = StockMovement(
                    organization_id=organization_id,
                    product_id=order.product_id,
                    movement_type=MovementType.PURCHASE,
                    quantity=quantity,
                    movement_date=movement_date,
                    notes=notes,
                    restock_order_id=order_id,
                    idempotency_key=idempotency_key,
                )
                if idempotency_key:
                    existing = await fetch_movement_by_key(conn, organization_id, idempotency_key)
                    if existing is not None:
                        check_replay(existing, movement)
                        product = await fetch_product(conn, organization_id, order.product_id)
                        logger.info(
                            "restock_receipt_replayed",
                            order_id=order_id,
                            movement_id=existing.id,
                        )
                        return RestockReceipt(
                            order=order,
                            movement=existing,
                            product=product,  # type: ignore[arg-type]
                            replayed=True,
                        )

                updated = order.register_receipt(quantity)
                posted, product = await post_movement(conn, movement)
                await write_transition(conn, order, updated)

                logger.info(
                    "restock_order_received",
                    order_id=order_id,
                    received=quantity,
                    received_total=updated.received_quantity,
                    ordered=updated.quantity,
                    status=updated.status.value,
                )
                return RestockReceipt(order=updated, movement=posted, product=product)

    async def cancel_order(self, organization_id: int, order_id: int) -> RestockOrder:
        """Cancel an order. Posts nothing to the ledger."""
        async with self._locks.hold(order_key(organization_id, order_id)):
            async with get_transaction(immediate=True) as conn:
                order = await fetch_order(conn, organization_id, order_id)
                if order is None:
                    raise RestockOrderNotFoundError(order_id, organization_id)

                cancelled = order.cancel()
                await write_transition(conn, order, cancelled)

                logger.info(
                    "restock_order_cancelled",
                    order_id=order_id,
                    previous_status=order.status.value,
                    received_quantity=order.received_quantity,
                )
                return cancelled
