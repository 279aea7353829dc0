"""Core domain entities."""

from pharmstock.core.entities.inventory import (
    MovementType,
    Product,
    ProductStatus,
    StockMovement,
    StockStatus,
    check_movement_delta,
    classify_stock,
)
from pharmstock.core.entities.restock import RestockOrder, RestockStatus

__all__ = [
    # Inventory entities
    "Product",
    "ProductStatus",
    "StockMovement",
    "MovementType",
    "StockStatus",
    "classify_stock",
    "check_movement_delta",
    # Restock entities
    "RestockOrder",
    "RestockStatus",
]
