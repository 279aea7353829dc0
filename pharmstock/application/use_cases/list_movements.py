"""List Movements Use Case: ledger history reads."""

from collections.abc import AsyncIterator
from datetime import date

from pharmstock.application.dto.responses import MovementListResponse, StockMovementResponse
from pharmstock.config import get_logger, get_settings
from pharmstock.core.entities.inventory import StockMovement
from pharmstock.core.exceptions import InvalidArgumentError, ProductNotFoundError
from pharmstock.core.interfaces.ledger_store import IStockLedgerStore
from pharmstock.core.interfaces.product_store import IProductStore

logger = get_logger(__name__)


def check_date_range(start: date | None, end: date | None) -> None:
    if start is not None and end is not None and end < start:
        raise InvalidArgumentError("end", "end date precedes start date", end)


class MovementHistory:
    """
    Lazy, restartable view over a product's ledger history.

    Each ``async for`` starts a fresh paged read, newest first, so the
    history reflects movements committed since the previous iteration.
    """

    def __init__(
        self,
        store: IStockLedgerStore,
        organization_id: int,
        product_id: int | None = None,
        start: date | None = None,
        end: date | None = None,
        page_size: int = 200,
    ):
        self._store = store
        self.organization_id = organization_id
        self.product_id = product_id
        self.start = start
        self.end = end
        self.page_size = page_size

    def __aiter__(self) -> AsyncIterator[StockMovement]:
        return self._store.iter_movements(
            self.organization_id,
            product_id=self.product_id,
            start=self.start,
            end=self.end,
            page_size=self.page_size,
        )

    async def collect(self, limit: int | None = None) -> list[StockMovement]:
        """Materialize the history, stopping after ``limit`` entries."""
        movements: list[StockMovement] = []
        async for movement in self:
            movements.append(movement)
            if limit is not None and len(movements) >= limit:
                break
        return movements


class _LedgerReader:
    def __init__(
        self,
        ledger_store: IStockLedgerStore | None = None,
        product_store: IProductStore | None = None,
    ):
        self._ledger_store = ledger_store
        self._product_store = product_store

    async def _get_ledger_store(self) -> IStockLedgerStore:
        if self._ledger_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def _get_product_store(self) -> IProductStore:
        if self._product_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def _require_product(self, organization_id: int, product_id: int) -> None:
        store = await self._get_product_store()
        if await store.get_product(organization_id, product_id) is None:
            raise ProductNotFoundError(product_id, organization_id)


class ListMovementsUseCase(_LedgerReader):
    """Movement history of one product as a lazy iterable."""

    async def execute(
        self,
        organization_id: int,
        product_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> MovementHistory:
        check_date_range(start, end)
        await self._require_product(organization_id, product_id)

        return MovementHistory(
            await self._get_ledger_store(),
            organization_id,
            product_id=product_id,
            start=start,
            end=end,
            page_size=get_settings().ledger.history_page_size,
        )


class ListOrganizationMovementsUseCase(_LedgerReader):
    """Bounded movement listing for an organization, optionally per product."""

    async def execute(
        self,
        organization_id: int,
        product_id: int | None = None,
        start: date | None = None,
        end: date | None = None,
        limit: int = 100,
    ) -> list[StockMovement]:
        """Execute list movements use case."""
        max_limit = get_settings().ledger.max_history_limit
        if limit < 1 or limit > max_limit:
            raise InvalidArgumentError("limit", f"limit must be between 1 and {max_limit}", limit)
        check_date_range(start, end)
        if product_id is not None:
            await self._require_product(organization_id, product_id)

        store = await self._get_ledger_store()
        movements = await store.list_movements(
            organization_id,
            product_id=product_id,
            start=start,
            end=end,
            limit=limit,
        )
        logger.debug(
            "movements_listed",
            organization_id=organization_id,
            product_id=product_id,
            count=len(movements),
        )
        return movements

    def to_response(self, result: list[StockMovement]) -> MovementListResponse:
        return MovementListResponse(
            items=[StockMovementResponse.from_entity(m) for m in result],
            total=len(result),
        )
