"""Get Product Use Case."""

from pharmstock.application.dto.responses import ProductResponse
from pharmstock.application.services import get_report_service
from pharmstock.core.entities.inventory import Product
from pharmstock.core.exceptions import ProductNotFoundError
from pharmstock.core.interfaces.product_store import IProductStore


class GetProductUseCase:
    """Fetch one product of an organization."""

    def __init__(self, product_store: IProductStore | None = None):
        self._product_store = product_store

    async def _get_product_store(self) -> IProductStore:
        if self._product_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def execute(self, organization_id: int, product_id: int) -> Product:
        store = await self._get_product_store()
        product = await store.get_product(organization_id, product_id)
        if product is None:
            raise ProductNotFoundError(product_id, organization_id)
        return product

    def to_response(self, result: Product) -> ProductResponse:
        percentage = get_report_service().stock_level_percentage(result)
        return ProductResponse.from_entity(result, percentage)
