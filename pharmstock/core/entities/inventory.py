"""Inventory domain entities: products, stock movements and stock status."""

from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from pharmstock.core.exceptions import InvalidArgumentError


def utc_now() -> datetime:
    return datetime.now(UTC)


class MovementType(str, Enum):
    """Cause of a stock movement."""

    SALE = "sale"
    PURCHASE = "purchase"
    ADJUSTMENT = "adjustment"
    RETURN = "return"
    LOSS = "loss"


class StockStatus(str, Enum):
    """Derived stock classification of a product."""

    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class ProductStatus(str, Enum):
    """Catalog status. Products are deactivated, never deleted."""

    ACTIVE = "active"
    INACTIVE = "inactive"


# Movement types whose delta must be negative / positive.
OUTBOUND_TYPES = frozenset({MovementType.SALE, MovementType.LOSS})
INBOUND_TYPES = frozenset({MovementType.PURCHASE, MovementType.RETURN})


def classify_stock(quantity: int, minimum: int) -> StockStatus:
    """
    Classify a stock level against its reorder threshold.

    The threshold is inclusive: a quantity equal to the minimum is low stock.
    Every filter, badge and aggregate goes through this function.
    """
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= minimum:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def check_movement_delta(movement_type: MovementType, quantity: int) -> None:
    """Reject zero deltas and deltas whose sign contradicts the movement type."""
    if quantity == 0:
        raise InvalidArgumentError("quantity", "movement quantity must be non-zero", quantity)
    if movement_type in OUTBOUND_TYPES and quantity > 0:
        raise InvalidArgumentError(
            "quantity",
            f"'{movement_type.value}' movements must have a negative quantity",
            quantity,
        )
    if movement_type in INBOUND_TYPES and quantity < 0:
        raise InvalidArgumentError(
            "quantity",
            f"'{movement_type.value}' movements must have a positive quantity",
            quantity,
        )


class Product(BaseModel):
    """A stock-keeping unit in an organization's catalog."""

    id: int | None = None
    organization_id: int
    name: str
    description: str = ""
    price: Decimal = Decimal("0")
    category: str | None = None
    stock_quantity: int = Field(default=0, ge=0)
    min_stock_level: int = Field(default=0, ge=0)
    location: str | None = None
    supplier: str | None = None
    barcode: str | None = None
    sku: str | None = None
    manufacturer_code: str | None = None
    expiry_date: date | None = None
    status: ProductStatus = ProductStatus.ACTIVE
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def stock_status(self) -> StockStatus:
        return classify_stock(self.stock_quantity, self.min_stock_level)

    @property
    def stock_value(self) -> Decimal:
        """Stock value at catalog price."""
        return self.price * self.stock_quantity

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE


class StockMovement(BaseModel):
    """One immutable ledger entry. Quantity is a signed delta."""

    id: int | None = None
    organization_id: int
    product_id: int
    movement_type: MovementType
    quantity: int
    movement_date: date = Field(default_factory=date.today)
    notes: str | None = None
    restock_order_id: int | None = None
    idempotency_key: str | None = None
    created_at: datetime = Field(default_factory=utc_now)

    model_config = {"frozen": True}
