"""
Tests for SQLiteStockLedgerStore.

Covers the ledger invariants: stored quantity equals the sum of posted
deltas, stock never goes negative, entries are immutable and
idempotency keys post at most once.
"""

import asyncio
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import aiosqlite
import pytest

from pharmstock.core.entities.inventory import (
    MovementType,
    Product,
    StockMovement,
    StockStatus,
)
from pharmstock.core.entities.restock import RestockOrder
from pharmstock.core.exceptions import (
    InsufficientStockError,
    InvalidArgumentError,
    ProductNotFoundError,
    StorageUnavailableError,
)
from pharmstock.infrastructure.storage.sqlite import ledger_store as ledger_module
from pharmstock.infrastructure.storage.sqlite.ledger_store import SQLiteStockLedgerStore
from pharmstock.infrastructure.storage.sqlite.product_store import SQLiteProductStore
from pharmstock.infrastructure.storage.sqlite.restock_store import SQLiteRestockOrderStore


def movement(product_id, movement_type, quantity, day=None, key=None) -> StockMovement:
    return StockMovement(
        organization_id=1,
        product_id=product_id,
        movement_type=movement_type,
        quantity=quantity,
        movement_date=day or date.today(),
        idempotency_key=key,
    )


@pytest.fixture
def ledger(migrated_db) -> SQLiteStockLedgerStore:
    return SQLiteStockLedgerStore()


@pytest.fixture
async def product(migrated_db) -> Product:
    return await SQLiteProductStore().create_product(
        Product(organization_id=1, name="Paracetamol 500mg", min_stock_level=20)
    )


async def stock_of(product_id: int) -> int:
    fetched = await SQLiteProductStore().get_product(1, product_id)
    return fetched.stock_quantity


class TestRecordMovement:
    async def test_sale_moves_product_to_low_stock(self, ledger, product):
        await ledger.record_movement(movement(product.id, MovementType.PURCHASE, 45))
        posting = await ledger.record_movement(movement(product.id, MovementType.SALE, -30))

        assert posting.product.stock_quantity == 15
        assert posting.product.stock_status == StockStatus.LOW_STOCK
        assert posting.movement.id is not None
        assert await stock_of(product.id) == 15

    async def test_overdraw_rejected_without_side_effects(self, ledger, product):
        await ledger.record_movement(movement(product.id, MovementType.PURCHASE, 10))

        with pytest.raises(InsufficientStockError) as exc_info:
            await ledger.record_movement(movement(product.id, MovementType.LOSS, -15))

        assert exc_info.value.details["available"] == 10
        assert await stock_of(product.id) == 10
        assert len(await ledger.list_movements(1, product_id=product.id)) == 1

    async def test_unknown_product(self, ledger, migrated_db):
        with pytest.raises(ProductNotFoundError):
            await ledger.record_movement(movement(999, MovementType.PURCHASE, 1))

    async def test_other_organization_cannot_post(self, ledger, product):
        foreign = StockMovement(
            organization_id=2,
            product_id=product.id,
            movement_type=MovementType.PURCHASE,
            quantity=5,
        )
        with pytest.raises(ProductNotFoundError):
            await ledger.record_movement(foreign)

    async def test_quantity_equals_sum_of_movements(self, ledger, product):
        deltas = [
            (MovementType.PURCHASE, 40),
            (MovementType.SALE, -12),
            (MovementType.RETURN, 2),
            (MovementType.LOSS, -3),
            (MovementType.ADJUSTMENT, -7),
        ]
        for movement_type, quantity in deltas:
            await ledger.record_movement(movement(product.id, movement_type, quantity))

        totals = await ledger.movement_totals(1)
        assert totals == {product.id: 20}
        assert await stock_of(product.id) == 20


class TestIdempotency:
    async def test_replay_returns_original(self, ledger, product):
        await ledger.record_movement(movement(product.id, MovementType.PURCHASE, 10))

        first = await ledger.record_movement(
            movement(product.id, MovementType.SALE, -4, key="sale-1")
        )
        second = await ledger.record_movement(
            movement(product.id, MovementType.SALE, -4, key="sale-1")
        )

        assert first.replayed is False
        assert second.replayed is True
        assert second.movement.id == first.movement.id
        assert await stock_of(product.id) == 6

    async def test_key_reused_for_other_product(self, ledger, product):
        other = await SQLiteProductStore().create_product(
            Product(organization_id=1, name="Ibuprofen")
        )
        await ledger.record_movement(
            movement(product.id, MovementType.ADJUSTMENT, 5, key="k-1")
        )

        with pytest.raises(InvalidArgumentError):
            await ledger.record_movement(
                movement(other.id, MovementType.ADJUSTMENT, 5, key="k-1")
            )
        assert await stock_of(other.id) == 0

    async def test_key_from_a_receipt_does_not_replay_as_sale(self, ledger, product):
        store = SQLiteRestockOrderStore()
        order = await store.create_order(
            RestockOrder(
                organization_id=1,
                product_id=product.id,
                quantity=50,
                price=Decimal("0.45"),
                supplier="Cofares",
                purchase_date=date.today(),
            )
        )
        await store.receive_order(
            1, order.id, 50, movement_date=date.today(), idempotency_key="k1"
        )

        with pytest.raises(InvalidArgumentError) as exc_info:
            await ledger.record_movement(movement(product.id, MovementType.SALE, -5, key="k1"))

        assert "movement_type" in exc_info.value.message
        assert await stock_of(product.id) == 50

    async def test_same_key_different_quantity(self, ledger, product):
        await ledger.record_movement(
            movement(product.id, MovementType.ADJUSTMENT, 5, key="count-1")
        )

        with pytest.raises(InvalidArgumentError):
            await ledger.record_movement(
                movement(product.id, MovementType.ADJUSTMENT, 7, key="count-1")
            )
        assert await stock_of(product.id) == 5


class TestOpenProduct:
    async def test_opening_stock_posted_with_product(self, ledger, migrated_db):
        posting = await ledger.open_product(
            Product(organization_id=1, name="Dipirona 500mg", min_stock_level=5),
            12,
            notes="opening stock",
        )

        assert posting.product.stock_quantity == 12
        assert posting.movement.movement_type == MovementType.ADJUSTMENT
        assert posting.movement.product_id == posting.product.id
        assert await stock_of(posting.product.id) == 12
        assert await ledger.movement_totals(1) == {posting.product.id: 12}

    async def test_failed_posting_leaves_no_product(self, ledger, migrated_db):
        failure = StorageUnavailableError("post_movement", "database is locked")

        with patch.object(ledger_module, "post_movement", AsyncMock(side_effect=failure)):
            with pytest.raises(StorageUnavailableError):
                await ledger.open_product(Product(organization_id=1, name="Dipirona"), 10)

        assert await SQLiteProductStore().list_products(1) == []


class TestConcurrency:
    async def test_concurrent_sales_never_oversell(self, ledger, product):
        await ledger.record_movement(movement(product.id, MovementType.PURCHASE, 10))

        results = await asyncio.gather(
            *(
                ledger.record_movement(movement(product.id, MovementType.SALE, -3))
                for _ in range(5)
            ),
            return_exceptions=True,
        )

        succeeded = [r for r in results if not isinstance(r, Exception)]
        rejected = [r for r in results if isinstance(r, InsufficientStockError)]
        assert len(succeeded) == 3
        assert len(rejected) == 2
        assert await stock_of(product.id) == 1
        assert (await ledger.movement_totals(1))[product.id] == 1


class TestHistory:
    async def test_newest_first_with_date_filter(self, ledger, product):
        await ledger.record_movement(
            movement(product.id, MovementType.PURCHASE, 10, day=date(2024, 1, 1))
        )
        await ledger.record_movement(
            movement(product.id, MovementType.SALE, -1, day=date(2024, 1, 5))
        )
        await ledger.record_movement(
            movement(product.id, MovementType.SALE, -2, day=date(2024, 1, 5))
        )

        listed = await ledger.list_movements(1, product_id=product.id)
        assert [m.quantity for m in listed] == [-2, -1, 10]

        ranged = await ledger.list_movements(
            1, product_id=product.id, start=date(2024, 1, 2), end=date(2024, 1, 31)
        )
        assert [m.quantity for m in ranged] == [-2, -1]

    async def test_keyset_iteration_is_restartable(self, ledger, product):
        await ledger.record_movement(movement(product.id, MovementType.PURCHASE, 50))
        for _ in range(4):
            await ledger.record_movement(movement(product.id, MovementType.SALE, -1))

        first = [m.id async for m in ledger.iter_movements(1, product_id=product.id, page_size=2)]
        assert len(first) == 5
        assert first == sorted(first, reverse=True)

        await ledger.record_movement(movement(product.id, MovementType.SALE, -1))
        second = [m.id async for m in ledger.iter_movements(1, product_id=product.id, page_size=2)]
        assert len(second) == 6
        assert second[1:] == first


class TestAppendOnly:
    async def test_movements_cannot_be_updated_or_deleted(self, ledger, product, migrated_db):
        posting = await ledger.record_movement(movement(product.id, MovementType.PURCHASE, 5))

        async with aiosqlite.connect(migrated_db) as conn:
            with pytest.raises(aiosqlite.Error, match="append-only"):
                await conn.execute(
                    "UPDATE stock_movements SET quantity = 500 WHERE id = ?",
                    (posting.movement.id,),
                )
            with pytest.raises(aiosqlite.Error, match="append-only"):
                await conn.execute(
                    "DELETE FROM stock_movements WHERE id = ?",
                    (posting.movement.id,),
                )
