"""Cancel Restock Order Use Case."""

from pharmstock.application.dto.responses import RestockOrderResponse
from pharmstock.core.entities.restock import RestockOrder
from pharmstock.core.interfaces.restock_store import IRestockOrderStore


class CancelRestockOrderUseCase:
    """Cancel an open order. Units already received stay in stock."""

    def __init__(self, restock_store: IRestockOrderStore | None = None):
        self._restock_store = restock_store

    async def _get_restock_store(self) -> IRestockOrderStore:
        if self._restock_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_restock_store

            self._restock_store = await get_restock_store()
        return self._restock_store

    async def execute(self, organization_id: int, order_id: int) -> RestockOrder:
        store = await self._get_restock_store()
        return await store.cancel_order(organization_id, order_id)

    def to_response(self, result: RestockOrder) -> RestockOrderResponse:
        return RestockOrderResponse.from_entity(result)
