"""Abstract interface for restock order storage."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date

from pharmstock.core.entities.inventory import Product, StockMovement
from pharmstock.core.entities.restock import RestockOrder, RestockStatus


@dataclass
class RestockReceipt:
    """Outcome of a receipt event on a restock order."""

    order: RestockOrder
    movement: StockMovement
    product: Product
    replayed: bool = False


class IRestockOrderStore(ABC):
    """Interface for restock order persistence and transitions."""

    @abstractmethod
    async def create_order(self, order: RestockOrder) -> RestockOrder:
        """Persist a new pending order."""
        pass

    @abstractmethod
    async def get_order(self, organization_id: int, order_id: int) -> RestockOrder | None:
        """Get an order by ID within an organization."""
        pass

    @abstractmethod
    async def list_orders(
        self,
        organization_id: int,
        status: RestockStatus | None = None,
    ) -> list[RestockOrder]:
        """List orders, newest purchase date first."""
        pass

    @abstractmethod
    async def receive_order(
        self,
        organization_id: int,
        order_id: int,
        quantity: int,
        movement_date: date,
        notes: str | None = None,
        idempotency_key: str | None = None,
    ) -> RestockReceipt:
        """
        Register a receipt and post its purchase movement in one transaction.

        Raises:
            RestockOrderNotFoundError: order does not exist
            InvalidStateError: order is received or cancelled
            InvalidQuantityError: quantity not positive or exceeds remainder
        """
        pass

    @abstractmethod
    async def cancel_order(self, organization_id: int, order_id: int) -> RestockOrder:
        """
        Cancel an order without any ledger effect.

        Raises:
            RestockOrderNotFoundError: order does not exist
            InvalidStateError: order is received or already cancelled
        """
        pass
