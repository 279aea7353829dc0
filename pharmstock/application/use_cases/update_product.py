"""Update Product Use Case: descriptive fields only."""

from pharmstock.application.dto.requests import UpdateProductRequest
from pharmstock.application.dto.responses import ProductResponse
from pharmstock.application.services import get_report_service
from pharmstock.application.use_cases.create_product import validate_product_fields
from pharmstock.config import get_logger
from pharmstock.core.entities.inventory import Product
from pharmstock.core.exceptions import InvalidArgumentError, ProductNotFoundError
from pharmstock.core.interfaces.product_store import IProductStore

logger = get_logger(__name__)

# Fields that may not be cleared with an explicit null
REQUIRED_FIELDS = ("name", "description", "price", "min_stock_level", "status")


class UpdateProductUseCase:
    """Edit a product. Stock quantity is never part of the change set."""

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
        product_id: int,
        request: UpdateProductRequest,
    ) -> Product:
        """Execute update product use case."""
        changes = request.model_dump(exclude_unset=True)
        for field in REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                raise InvalidArgumentError(field, "field cannot be cleared")
        validate_product_fields(changes.get("price"), changes.get("min_stock_level"))

        store = await self._get_product_store()
        product = await store.get_product(organization_id, product_id)
        if product is None:
            raise ProductNotFoundError(product_id, organization_id)

        if not changes:
            return product

        updated = await store.update_product(product.model_copy(update=changes))
        logger.info(
            "product_fields_updated",
            product_id=product_id,
            fields=sorted(changes),
        )
        return updated

    def to_response(self, result: Product) -> ProductResponse:
        percentage = get_report_service().stock_level_percentage(result)
        return ProductResponse.from_entity(result, percentage)
