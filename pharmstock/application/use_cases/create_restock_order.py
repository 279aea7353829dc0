"""Create Restock Order Use Case."""

from datetime import date

from pharmstock.application.dto.requests import CreateRestockOrderRequest
from pharmstock.application.dto.responses import RestockOrderResponse
from pharmstock.config import get_logger
from pharmstock.core.entities.restock import RestockOrder
from pharmstock.core.exceptions import InvalidArgumentError, ProductNotFoundError
from pharmstock.core.interfaces.product_store import IProductStore
from pharmstock.core.interfaces.restock_store import IRestockOrderStore

logger = get_logger(__name__)


class CreateRestockOrderUseCase:
    """Place a pending restock order. Nothing is posted to the ledger."""

    def __init__(
        self,
        restock_store: IRestockOrderStore | None = None,
        product_store: IProductStore | None = None,
    ):
        self._restock_store = restock_store
        self._product_store = product_store

    async def _get_restock_store(self) -> IRestockOrderStore:
        if self._restock_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_restock_store

            self._restock_store = await get_restock_store()
        return self._restock_store

    async def _get_product_store(self) -> IProductStore:
        if self._product_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def execute(
        self, organization_id: int, request: CreateRestockOrderRequest
    ) -> RestockOrder:
        """Execute create restock order use case."""
        if request.quantity <= 0:
            raise InvalidArgumentError(
                "quantity", "ordered quantity must be positive", request.quantity
            )
        if request.price <= 0:
            raise InvalidArgumentError("price", "unit price must be positive", request.price)

        purchase_date = request.purchase_date or date.today()
        if request.expected_delivery_date and request.expected_delivery_date < purchase_date:
            raise InvalidArgumentError(
                "expected_delivery_date",
                "expected delivery precedes the purchase date",
                request.expected_delivery_date,
            )

        products = await self._get_product_store()
        if await products.get_product(organization_id, request.product_id) is None:
            raise ProductNotFoundError(request.product_id, organization_id)

        order = RestockOrder(
            organization_id=organization_id,
            product_id=request.product_id,
            quantity=request.quantity,
            price=request.price,
            supplier=request.supplier,
            purchase_date=purchase_date,
            expected_delivery_date=request.expected_delivery_date,
            notes=request.notes,
        )
        store = await self._get_restock_store()
        return await store.create_order(order)

    def to_response(self, result: RestockOrder) -> RestockOrderResponse:
        return RestockOrderResponse.from_entity(result)
