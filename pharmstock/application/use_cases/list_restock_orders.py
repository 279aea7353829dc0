"""Restock order read use cases."""

from pharmstock.application.dto.responses import RestockOrderListResponse, RestockOrderResponse
from pharmstock.core.entities.restock import RestockOrder, RestockStatus
from pharmstock.core.exceptions import RestockOrderNotFoundError
from pharmstock.core.interfaces.restock_store import IRestockOrderStore


class _RestockReader:
    def __init__(self, restock_store: IRestockOrderStore | None = None):
        self._restock_store = restock_store

    async def _get_restock_store(self) -> IRestockOrderStore:
        if self._restock_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_restock_store

            self._restock_store = await get_restock_store()
        return self._restock_store


class ListRestockOrdersUseCase(_RestockReader):
    """List an organization's orders, optionally by status."""

    async def execute(
        self, organization_id: int, status: RestockStatus | None = None
    ) -> list[RestockOrder]:
        store = await self._get_restock_store()
        return await store.list_orders(organization_id, status=status)

    def to_response(self, result: list[RestockOrder]) -> RestockOrderListResponse:
        return RestockOrderListResponse(
            items=[RestockOrderResponse.from_entity(o) for o in result],
            total=len(result),
        )


class GetRestockOrderUseCase(_RestockReader):
    async def execute(self, organization_id: int, order_id: int) -> RestockOrder:
        store = await self._get_restock_store()
        order = await store.get_order(organization_id, order_id)
        if order is None:
            raise RestockOrderNotFoundError(order_id, organization_id)
        return order

    def to_response(self, result: RestockOrder) -> RestockOrderResponse:
        return RestockOrderResponse.from_entity(result)
