"""Record Sale Use Case: outbound sale movement."""

from pharmstock.application.dto.requests import RecordMovementRequest, RecordSaleRequest
from pharmstock.application.dto.responses import MovementPostingResponse
from pharmstock.application.use_cases.record_movement import (
    RecordMovementUseCase,
    posting_to_response,
)
from pharmstock.core.entities.inventory import MovementType
from pharmstock.core.interfaces.ledger_store import IStockLedgerStore, LedgerPosting


class RecordSaleUseCase:
    """Record a sale of ``quantity`` units as a negative ``sale`` delta."""

    def __init__(self, ledger_store: IStockLedgerStore | None = None):
        self._record = RecordMovementUseCase(ledger_store)

    async def execute(
        self,
        organization_id: int,
        request: RecordSaleRequest,
        idempotency_key: str | None = None,
    ) -> LedgerPosting:
        movement = RecordMovementRequest(
            product_id=request.product_id,
            movement_type=MovementType.SALE,
            quantity=-request.quantity,
            movement_date=request.movement_date,
            notes=request.notes,
        )
        return await self._record.execute(organization_id, movement, idempotency_key)

    def to_response(self, result: LedgerPosting) -> MovementPostingResponse:
        return posting_to_response(result)
