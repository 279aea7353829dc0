"""Record Movement Use Case: append one entry to the stock ledger."""

from datetime import date

from pharmstock.application.dto.requests import RecordMovementRequest
from pharmstock.application.dto.responses import (
    MovementPostingResponse,
    ProductResponse,
    StockMovementResponse,
)
from pharmstock.application.services import get_report_service
from pharmstock.config import get_logger
from pharmstock.core.entities.inventory import (
    MovementType,
    StockMovement,
    check_movement_delta,
)
from pharmstock.core.exceptions import InvalidArgumentError, RestockOrderNotFoundError
from pharmstock.core.interfaces.ledger_store import IStockLedgerStore, LedgerPosting
from pharmstock.core.interfaces.restock_store import IRestockOrderStore

logger = get_logger(__name__)


def posting_to_response(posting: LedgerPosting) -> MovementPostingResponse:
    """Convert a ledger posting to its API response."""
    percentage = get_report_service().stock_level_percentage(posting.product)
    return MovementPostingResponse(
        movement=StockMovementResponse.from_entity(posting.movement),
        product=ProductResponse.from_entity(posting.product, percentage),
        replayed=posting.replayed,
    )


class RecordMovementUseCase:
    """
    Record a signed stock movement.

    Validates the delta against the movement type, then hands the movement
    to the ledger store, which applies it atomically or not at all.

    A purchase tagged with a restock order is a receipt on that order: it is
    posted by the restock store under the order lock, so it advances the
    order and cannot exceed what remains to be received.
    """

    def __init__(
        self,
        ledger_store: IStockLedgerStore | None = None,
        restock_store: IRestockOrderStore | None = None,
    ):
        self._ledger_store = ledger_store
        self._restock_store = restock_store

    async def _get_ledger_store(self) -> IStockLedgerStore:
        if self._ledger_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def _get_restock_store(self) -> IRestockOrderStore:
        if self._restock_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_restock_store

            self._restock_store = await get_restock_store()
        return self._restock_store

    async def execute(
        self,
        organization_id: int,
        request: RecordMovementRequest,
        idempotency_key: str | None = None,
    ) -> LedgerPosting:
        """Execute record movement use case."""
        check_movement_delta(request.movement_type, request.quantity)

        logger.info(
            "record_movement_started",
            organization_id=organization_id,
            product_id=request.product_id,
            type=request.movement_type.value,
            qty=request.quantity,
            restock_order_id=request.restock_order_id,
        )

        if request.restock_order_id is not None:
            return await self._receive(organization_id, request, idempotency_key)

        movement = StockMovement(
            organization_id=organization_id,
            product_id=request.product_id,
            movement_type=request.movement_type,
            quantity=request.quantity,
            movement_date=request.movement_date or date.today(),
            notes=request.notes,
            idempotency_key=idempotency_key,
        )

        store = await self._get_ledger_store()
        return await store.record_movement(movement)

    async def _receive(
        self,
        organization_id: int,
        request: RecordMovementRequest,
        idempotency_key: str | None,
    ) -> LedgerPosting:
        order_id = request.restock_order_id
        if request.movement_type != MovementType.PURCHASE:
            raise InvalidArgumentError(
                "restock_order_id", "only purchases can reference a restock order", order_id
            )

        store = await self._get_restock_store()
        order = await store.get_order(organization_id, order_id)
        if order is None:
            raise RestockOrderNotFoundError(order_id, organization_id)
        if order.product_id != request.product_id:
            raise InvalidArgumentError(
                "restock_order_id",
                f"order is for product {order.product_id}, not {request.product_id}",
                order_id,
            )

        receipt = await store.receive_order(
            organization_id,
            order_id,
            request.quantity,
            movement_date=request.movement_date or date.today(),
            notes=request.notes,
            idempotency_key=idempotency_key,
        )
        return LedgerPosting(
            movement=receipt.movement, product=receipt.product, replayed=receipt.replayed
        )

    def to_response(self, result: LedgerPosting) -> MovementPostingResponse:
        """Convert result to API response."""
        return posting_to_response(result)
