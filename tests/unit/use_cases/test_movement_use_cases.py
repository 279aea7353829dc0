"""
Unit tests for the ledger use cases.

Stores are mocked; these tests cover validation and request shaping
before anything reaches the ledger.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from pharmstock.application.dto.requests import (
    RecordMovementRequest,
    RecordSaleRequest,
    StockAdjustmentRequest,
)
from pharmstock.application.use_cases.adjust_stock import AdjustStockUseCase
from pharmstock.application.use_cases.list_movements import (
    ListMovementsUseCase,
    ListOrganizationMovementsUseCase,
)
from pharmstock.application.use_cases.record_movement import RecordMovementUseCase
from pharmstock.application.use_cases.record_sale import RecordSaleUseCase
from pharmstock.core.entities.inventory import MovementType, StockMovement
from pharmstock.core.entities.restock import RestockOrder
from pharmstock.core.exceptions import (
    InvalidArgumentError,
    ProductNotFoundError,
    RestockOrderNotFoundError,
)
from pharmstock.core.interfaces.ledger_store import LedgerPosting
from pharmstock.core.interfaces.restock_store import RestockReceipt


def make_movement(movement_id, quantity, movement_type=MovementType.SALE, day=None):
    return StockMovement(
        id=movement_id,
        organization_id=1,
        product_id=1,
        movement_type=movement_type,
        quantity=quantity,
        movement_date=day or date(2024, 5, 1),
    )


@pytest.fixture
def ledger_store(make_product):
    """Ledger store that echoes the posted movement."""
    store = AsyncMock()

    async def record(movement):
        product = make_product(stock_quantity=10 + movement.quantity)
        return LedgerPosting(movement=movement.model_copy(update={"id": 1}), product=product)

    store.record_movement.side_effect = record
    return store


@pytest.fixture
def restock_store(make_product):
    """Restock store holding pending order 3 for 10 units of product 1."""
    order = RestockOrder(
        id=3,
        organization_id=1,
        product_id=1,
        quantity=10,
        price=Decimal("0.45"),
        supplier="Cofares",
        purchase_date=date(2024, 6, 1),
    )
    store = AsyncMock()
    store.get_order.return_value = order

    async def receive(organization_id, order_id, quantity, **kwargs):
        movement = StockMovement(
            id=1,
            organization_id=organization_id,
            product_id=order.product_id,
            movement_type=MovementType.PURCHASE,
            quantity=quantity,
            movement_date=kwargs["movement_date"],
            restock_order_id=order_id,
            idempotency_key=kwargs["idempotency_key"],
        )
        return RestockReceipt(
            order=order.register_receipt(quantity),
            movement=movement,
            product=make_product(stock_quantity=quantity),
        )

    store.receive_order.side_effect = receive
    return store


class TestRecordMovementUseCase:
    async def test_posts_movement(self, ledger_store):
        use_case = RecordMovementUseCase(ledger_store=ledger_store)
        request = RecordMovementRequest(
            product_id=1, movement_type=MovementType.SALE, quantity=-3
        )

        posting = await use_case.execute(1, request, idempotency_key="abc")

        movement = ledger_store.record_movement.call_args.args[0]
        assert movement.organization_id == 1
        assert movement.quantity == -3
        assert movement.idempotency_key == "abc"
        assert movement.movement_date == date.today()
        assert posting.product.stock_quantity == 7

    async def test_wrong_sign_never_reaches_store(self, ledger_store):
        use_case = RecordMovementUseCase(ledger_store=ledger_store)
        request = RecordMovementRequest(
            product_id=1, movement_type=MovementType.PURCHASE, quantity=-3
        )

        with pytest.raises(InvalidArgumentError):
            await use_case.execute(1, request)
        ledger_store.record_movement.assert_not_called()

    async def test_zero_quantity_rejected(self, ledger_store):
        use_case = RecordMovementUseCase(ledger_store=ledger_store)
        request = RecordMovementRequest(
            product_id=1, movement_type=MovementType.ADJUSTMENT, quantity=0
        )

        with pytest.raises(InvalidArgumentError):
            await use_case.execute(1, request)

    async def test_order_tagged_purchase_received_on_order(self, ledger_store, restock_store):
        use_case = RecordMovementUseCase(ledger_store=ledger_store, restock_store=restock_store)
        request = RecordMovementRequest(
            product_id=1,
            movement_type=MovementType.PURCHASE,
            quantity=5,
            restock_order_id=3,
            movement_date=date(2024, 6, 3),
        )

        posting = await use_case.execute(1, request, idempotency_key="grn-7")

        args = restock_store.receive_order.call_args
        assert args.args == (1, 3, 5)
        assert args.kwargs["movement_date"] == date(2024, 6, 3)
        assert args.kwargs["idempotency_key"] == "grn-7"
        assert posting.movement.restock_order_id == 3
        assert posting.product.stock_quantity == 5
        assert posting.replayed is False
        ledger_store.record_movement.assert_not_called()

    async def test_order_tag_on_non_purchase_rejected(self, ledger_store, restock_store):
        use_case = RecordMovementUseCase(ledger_store=ledger_store, restock_store=restock_store)
        request = RecordMovementRequest(
            product_id=1,
            movement_type=MovementType.RETURN,
            quantity=5,
            restock_order_id=3,
        )

        with pytest.raises(InvalidArgumentError) as exc_info:
            await use_case.execute(1, request)
        assert exc_info.value.details["field"] == "restock_order_id"
        restock_store.receive_order.assert_not_called()

    async def test_order_for_another_product_rejected(self, ledger_store, restock_store):
        use_case = RecordMovementUseCase(ledger_store=ledger_store, restock_store=restock_store)
        request = RecordMovementRequest(
            product_id=2,
            movement_type=MovementType.PURCHASE,
            quantity=5,
            restock_order_id=3,
        )

        with pytest.raises(InvalidArgumentError):
            await use_case.execute(1, request)
        restock_store.receive_order.assert_not_called()

    async def test_missing_order(self, ledger_store, restock_store):
        restock_store.get_order.return_value = None
        use_case = RecordMovementUseCase(ledger_store=ledger_store, restock_store=restock_store)
        request = RecordMovementRequest(
            product_id=1,
            movement_type=MovementType.PURCHASE,
            quantity=5,
            restock_order_id=99,
        )

        with pytest.raises(RestockOrderNotFoundError):
            await use_case.execute(1, request)
        ledger_store.record_movement.assert_not_called()

    async def test_to_response(self, ledger_store):
        use_case = RecordMovementUseCase(ledger_store=ledger_store)
        request = RecordMovementRequest(
            product_id=1, movement_type=MovementType.RETURN, quantity=2
        )
        response = use_case.to_response(await use_case.execute(1, request))

        assert response.movement.movement_type == "return"
        assert response.product.stock_quantity == 12
        assert response.replayed is False


class TestRecordSaleUseCase:
    async def test_sale_is_negative_delta(self, ledger_store):
        use_case = RecordSaleUseCase(ledger_store=ledger_store)

        await use_case.execute(1, RecordSaleRequest(product_id=1, quantity=4))

        movement = ledger_store.record_movement.call_args.args[0]
        assert movement.movement_type == MovementType.SALE
        assert movement.quantity == -4


class TestAdjustStockUseCase:
    @pytest.mark.parametrize(
        ("movement_type", "quantity"),
        [
            (MovementType.ADJUSTMENT, -2),
            (MovementType.ADJUSTMENT, 6),
            (MovementType.LOSS, -1),
            (MovementType.RETURN, 1),
        ],
    )
    async def test_allowed_types(self, ledger_store, movement_type, quantity):
        use_case = AdjustStockUseCase(ledger_store=ledger_store)
        request = StockAdjustmentRequest(
            product_id=1, movement_type=movement_type, quantity=quantity
        )

        await use_case.execute(1, request)

        movement = ledger_store.record_movement.call_args.args[0]
        assert movement.movement_type == movement_type
        assert movement.quantity == quantity

    @pytest.mark.parametrize("movement_type", [MovementType.SALE, MovementType.PURCHASE])
    async def test_sale_and_purchase_rejected(self, ledger_store, movement_type):
        use_case = AdjustStockUseCase(ledger_store=ledger_store)
        request = StockAdjustmentRequest(
            product_id=1, movement_type=movement_type, quantity=-1
        )

        with pytest.raises(InvalidArgumentError) as exc_info:
            await use_case.execute(1, request)
        assert exc_info.value.details["field"] == "movement_type"

    async def test_loss_with_positive_quantity_rejected(self, ledger_store):
        use_case = AdjustStockUseCase(ledger_store=ledger_store)
        request = StockAdjustmentRequest(
            product_id=1, movement_type=MovementType.LOSS, quantity=3
        )

        with pytest.raises(InvalidArgumentError):
            await use_case.execute(1, request)


class TestListMovementsUseCase:
    @pytest.fixture
    def product_store(self, make_product):
        store = AsyncMock()
        store.get_product.return_value = make_product()
        return store

    @pytest.fixture
    def history_store(self):
        """Ledger whose iteration records each call."""
        store = AsyncMock()
        store.calls = []
        movements = [make_movement(2, -1), make_movement(1, 5, MovementType.PURCHASE)]

        def iter_movements(organization_id, **kwargs):
            store.calls.append(kwargs)

            async def generate():
                for movement in movements:
                    yield movement

            return generate()

        store.iter_movements = iter_movements
        return store

    async def test_history_is_restartable(self, history_store, product_store):
        use_case = ListMovementsUseCase(
            ledger_store=history_store, product_store=product_store
        )
        history = await use_case.execute(1, 1)

        first = [m.id async for m in history]
        second = [m.id async for m in history]

        assert first == second == [2, 1]
        assert len(history_store.calls) == 2
        assert history_store.calls[0]["product_id"] == 1

    async def test_collect_with_limit(self, history_store, product_store):
        use_case = ListMovementsUseCase(
            ledger_store=history_store, product_store=product_store
        )
        history = await use_case.execute(1, 1)

        collected = await history.collect(limit=1)
        assert [m.id for m in collected] == [2]

    async def test_unknown_product(self, history_store):
        product_store = AsyncMock()
        product_store.get_product.return_value = None
        use_case = ListMovementsUseCase(
            ledger_store=history_store, product_store=product_store
        )

        with pytest.raises(ProductNotFoundError):
            await use_case.execute(1, 99)

    async def test_inverted_range_rejected(self, history_store, product_store):
        use_case = ListMovementsUseCase(
            ledger_store=history_store, product_store=product_store
        )
        with pytest.raises(InvalidArgumentError):
            await use_case.execute(1, 1, start=date(2024, 2, 1), end=date(2024, 1, 1))


class TestListOrganizationMovementsUseCase:
    async def test_lists_with_limit(self):
        ledger = AsyncMock()
        ledger.list_movements.return_value = [make_movement(1, -2)]
        use_case = ListOrganizationMovementsUseCase(ledger_store=ledger)

        result = await use_case.execute(1, limit=10)

        assert len(result) == 1
        assert ledger.list_movements.call_args.kwargs["limit"] == 10
        response = use_case.to_response(result)
        assert response.total == 1
        assert response.items[0].quantity == -2

    @pytest.mark.parametrize("limit", [0, 100_000])
    async def test_limit_bounds(self, limit):
        use_case = ListOrganizationMovementsUseCase(ledger_store=AsyncMock())
        with pytest.raises(InvalidArgumentError) as exc_info:
            await use_case.execute(1, limit=limit)
        assert exc_info.value.details["field"] == "limit"
