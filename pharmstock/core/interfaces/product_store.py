"""Abstract interface for product catalog storage."""

from abc import ABC, abstractmethod

from pharmstock.core.entities.inventory import Product


class IProductStore(ABC):
    """
    Interface for product catalog persistence.

    Stock quantity is never written through this interface; it changes only
    through the stock ledger.
    """

    @abstractmethod
    async def create_product(self, product: Product) -> Product:
        """Create a product with zero stock."""
        pass

    @abstractmethod
    async def get_product(self, organization_id: int, product_id: int) -> Product | None:
        """Get a product by ID within an organization."""
        pass

    @abstractmethod
    async def list_products(self, organization_id: int) -> list[Product]:
        """List all products of an organization."""
        pass

    @abstractmethod
    async def update_product(self, product: Product) -> Product:
        """Update descriptive fields (everything except stock quantity)."""
        pass

    @abstractmethod
    async def list_categories(self, organization_id: int) -> list[str]:
        """List distinct non-empty category labels, sorted."""
        pass
