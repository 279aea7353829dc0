"""Create Product Use Case: catalog entry with optional opening stock."""

from dataclasses import dataclass

from pharmstock.application.dto.requests import CreateProductRequest
from pharmstock.application.dto.responses import ProductResponse
from pharmstock.application.services import get_report_service
from pharmstock.config import get_logger
from pharmstock.core.entities.inventory import Product, StockMovement
from pharmstock.core.exceptions import InvalidArgumentError
from pharmstock.core.interfaces.ledger_store import IStockLedgerStore
from pharmstock.core.interfaces.product_store import IProductStore

logger = get_logger(__name__)

OPENING_STOCK_NOTE = "opening stock"


@dataclass
class CreateProductResult:
    """Result of creating a product."""

    product: Product
    opening_movement: StockMovement | None = None


def validate_product_fields(price, min_stock_level) -> None:
    """Reject negative prices and thresholds."""
    if price is not None and price < 0:
        raise InvalidArgumentError("price", "price must not be negative", price)
    if min_stock_level is not None and min_stock_level < 0:
        raise InvalidArgumentError(
            "min_stock_level", "minimum stock level must not be negative", min_stock_level
        )


class CreateProductUseCase:
    """
    Add a product to the catalog.

    Products always start at zero stock. An opening quantity is posted as an
    ``adjustment`` movement in the same transaction as the insert, so the
    stored quantity still equals the ledger sum and a failed posting leaves
    no product behind.
    """

    def __init__(
        self,
        product_store: IProductStore | None = None,
        ledger_store: IStockLedgerStore | None = None,
    ):
        self._product_store = product_store
        self._ledger_store = ledger_store

    async def _get_product_store(self) -> IProductStore:
        if self._product_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def _get_ledger_store(self) -> IStockLedgerStore:
        if self._ledger_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def execute(
        self, organization_id: int, request: CreateProductRequest
    ) -> CreateProductResult:
        """Execute create product use case."""
        validate_product_fields(request.price, request.min_stock_level)

        logger.info(
            "create_product_started",
            organization_id=organization_id,
            name=request.name,
            initial_quantity=request.initial_quantity,
        )

        product = Product(
            organization_id=organization_id,
            **request.model_dump(exclude={"initial_quantity"}),
        )

        if request.initial_quantity <= 0:
            store = await self._get_product_store()
            return CreateProductResult(product=await store.create_product(product))

        ledger = await self._get_ledger_store()
        posting = await ledger.open_product(
            product, request.initial_quantity, notes=OPENING_STOCK_NOTE
        )

        logger.info(
            "create_product_complete",
            product_id=posting.product.id,
            stock_quantity=posting.product.stock_quantity,
        )
        return CreateProductResult(product=posting.product, opening_movement=posting.movement)

    def to_response(self, result: CreateProductResult) -> ProductResponse:
        """Convert result to API response."""
        percentage = get_report_service().stock_level_percentage(result.product)
        return ProductResponse.from_entity(result.product, percentage)
