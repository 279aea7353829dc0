"""List Products Use Case: filtered, sorted catalog listing."""

from pharmstock.application.dto.responses import (
    CategoryListResponse,
    ProductListResponse,
    ProductResponse,
)
from pharmstock.application.services import get_report_service
from pharmstock.config import get_logger
from pharmstock.core.entities.inventory import Product
from pharmstock.core.interfaces.product_store import IProductStore
from pharmstock.core.services.catalog_query import ProductFilter, ProductSort, query_products

logger = get_logger(__name__)


class ListProductsUseCase:
    """List an organization's products through the catalog query rules."""

    def __init__(self, product_store: IProductStore | None = None):
        self._product_store = product_store

    async def _get_product_store(self) -> IProductStore:
        if self._product_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def execute(
        self,
        organization_id: int,
        product_filter: ProductFilter | None = None,
        sort: ProductSort | None = None,
    ) -> list[Product]:
        """Execute list products use case."""
        store = await self._get_product_store()
        products = await store.list_products(organization_id)
        selected = query_products(products, product_filter, sort)

        logger.debug(
            "products_listed",
            organization_id=organization_id,
            total=len(products),
            selected=len(selected),
        )
        return selected

    def to_response(self, result: list[Product]) -> ProductListResponse:
        """Convert result to API response."""
        reports = get_report_service()
        return ProductListResponse(
            items=[
                ProductResponse.from_entity(p, reports.stock_level_percentage(p))
                for p in result
            ],
            total=len(result),
        )


class ListCategoriesUseCase:
    """Distinct category labels in use by an organization."""

    def __init__(self, product_store: IProductStore | None = None):
        self._product_store = product_store

    async def _get_product_store(self) -> IProductStore:
        if self._product_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def execute(self, organization_id: int) -> list[str]:
        store = await self._get_product_store()
        return await store.list_categories(organization_id)

    def to_response(self, result: list[str]) -> CategoryListResponse:
        return CategoryListResponse(categories=result)
