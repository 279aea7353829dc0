"""Abstract interface for the stock movement ledger."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import date

from pharmstock.core.entities.inventory import Product, StockMovement


@dataclass
class LedgerPosting:
    """Outcome of appending a movement: the entry and the product after it."""

    movement: StockMovement
    product: Product
    replayed: bool = False  # True when an idempotency key matched a prior entry


class IStockLedgerStore(ABC):
    """
    Interface for the append-only stock ledger.

    Implementations must append the movement and apply its delta to the
    product's stock quantity atomically, and serialize postings per product.
    """

    @abstractmethod
    async def record_movement(self, movement: StockMovement) -> LedgerPosting:
        """
        Append a movement and apply it to the product.

        Raises:
            ProductNotFoundError: product does not exist in the organization
            InsufficientStockError: stock would become negative
            InvalidArgumentError: idempotency key reused for a different movement
        """
        pass

    @abstractmethod
    async def open_product(
        self, product: Product, quantity: int, notes: str | None = None
    ) -> LedgerPosting:
        """
        Create a product and post its opening stock as an ``adjustment``.

        Both writes commit together or not at all.
        """
        pass

    @abstractmethod
    def iter_movements(
        self,
        organization_id: int,
        product_id: int | None = None,
        start: date | None = None,
        end: date | None = None,
        page_size: int = 200,
    ) -> AsyncIterator[StockMovement]:
        """Iterate movements by date DESC then insertion DESC, page by page."""
        pass

    @abstractmethod
    async def list_movements(
        self,
        organization_id: int,
        product_id: int | None = None,
        start: date | None = None,
        end: date | None = None,
        limit: int = 100,
    ) -> list[StockMovement]:
        """List movements by date DESC then insertion DESC."""
        pass

    @abstractmethod
    async def movement_totals(self, organization_id: int) -> dict[int, int]:
        """Sum of movement deltas per product ID."""
        pass

    @abstractmethod
    async def posted_for_order(self, organization_id: int, order_id: int) -> int:
        """Sum of purchase deltas tagged with a restock order."""
        pass
