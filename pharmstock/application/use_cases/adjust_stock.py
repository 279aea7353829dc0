"""Adjust Stock Use Case: manual corrections, losses and returns."""

from pharmstock.application.dto.requests import RecordMovementRequest, StockAdjustmentRequest
from pharmstock.application.dto.responses import MovementPostingResponse
from pharmstock.application.use_cases.record_movement import (
    RecordMovementUseCase,
    posting_to_response,
)
from pharmstock.core.entities.inventory import MovementType
from pharmstock.core.exceptions import InvalidArgumentError
from pharmstock.core.interfaces.ledger_store import IStockLedgerStore, LedgerPosting

# Sales and purchases have their own flows
ADJUSTMENT_TYPES = frozenset({MovementType.ADJUSTMENT, MovementType.LOSS, MovementType.RETURN})


class AdjustStockUseCase:
    """Pass a manual stock change through to the ledger."""

    def __init__(self, ledger_store: IStockLedgerStore | None = None):
        self._record = RecordMovementUseCase(ledger_store)

    async def execute(
        self,
        organization_id: int,
        request: StockAdjustmentRequest,
        idempotency_key: str | None = None,
    ) -> LedgerPosting:
        """Execute adjust stock use case."""
        if request.movement_type not in ADJUSTMENT_TYPES:
            raise InvalidArgumentError(
                "movement_type",
                "stock adjustments must be adjustment, loss or return",
                request.movement_type.value,
            )

        movement = RecordMovementRequest(
            product_id=request.product_id,
            movement_type=request.movement_type,
            quantity=request.quantity,
            movement_date=request.movement_date,
            notes=request.notes,
        )
        return await self._record.execute(organization_id, movement, idempotency_key)

    def to_response(self, result: LedgerPosting) -> MovementPostingResponse:
        return posting_to_response(result)
