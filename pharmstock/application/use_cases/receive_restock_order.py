"""Receive Restock Order Use Case: delivery posted as a purchase movement."""

from datetime import date

from pharmstock.application.dto.requests import ReceiveRestockRequest
from pharmstock.application.dto.responses import (
    ProductResponse,
    ReceiptResponse,
    RestockOrderResponse,
    StockMovementResponse,
)
from pharmstock.application.services import get_report_service
from pharmstock.config import get_logger
from pharmstock.core.interfaces.restock_store import IRestockOrderStore, RestockReceipt

logger = get_logger(__name__)


class ReceiveRestockOrderUseCase:
    """
    Register a full or partial delivery against a restock order.

    The store advances the order and posts a ``purchase`` movement for
    exactly the received quantity in one transaction.
    """

    def __init__(self, restock_store: IRestockOrderStore | None = None):
        self._restock_store = restock_store

    async def _get_restock_store(self) -> IRestockOrderStore:
        if self._restock_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_restock_store

            self._restock_store = await get_restock_store()
        return self._restock_store

    async def execute(
        self,
        organization_id: int,
        order_id: int,
        request: ReceiveRestockRequest,
        idempotency_key: str | None = None,
    ) -> RestockReceipt:
        """
        Execute receive restock order use case.

        Checks run in the store: order existence, then order state, then
        the quantity against what remains.
        """
        logger.info(
            "receive_restock_started",
            organization_id=organization_id,
            order_id=order_id,
            quantity=request.quantity,
        )

        store = await self._get_restock_store()
        return await store.receive_order(
            organization_id,
            order_id,
            request.quantity,
            movement_date=request.movement_date or date.today(),
            notes=request.notes,
            idempotency_key=idempotency_key,
        )

    def to_response(self, result: RestockReceipt) -> ReceiptResponse:
        """Convert result to API response."""
        percentage = get_report_service().stock_level_percentage(result.product)
        return ReceiptResponse(
            order=RestockOrderResponse.from_entity(result.order),
            movement=StockMovementResponse.from_entity(result.movement),
            product=ProductResponse.from_entity(result.product, percentage),
            replayed=result.replayed,
        )
