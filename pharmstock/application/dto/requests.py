"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.

Semantic checks that map to domain errors (sign rules, positive order
quantities, receipt caps) are left to the use cases and entities so they
surface with their own error codes instead of a generic validation error.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from pharmstock.core.entities.inventory import MovementType, ProductStatus

# --- Catalog ---


class CreateProductRequest(BaseModel):
    """Request to add a product to the catalog."""

    name: str = Field(..., min_length=1, max_length=200, description="Product name")
    description: str = Field(default="", description="Free-text description")
    price: Decimal = Field(default=Decimal("0"), description="Unit price")
    category: str | None = Field(
        default=None,
        description="Category label",
        examples=["analgesics", "flowers"],
    )
    min_stock_level: int = Field(default=0, description="Reorder threshold")
    location: str | None = Field(default=None, description="Storage location")
    supplier: str | None = Field(default=None, description="Default supplier")
    barcode: str | None = Field(default=None, description="Barcode")
    sku: str | None = Field(default=None, description="Stock-keeping unit code")
    manufacturer_code: str | None = Field(default=None, description="Manufacturer code")
    expiry_date: date | None = Field(default=None, description="Expiry date")
    status: ProductStatus = Field(default=ProductStatus.ACTIVE)
    initial_quantity: int = Field(
        default=0,
        ge=0,
        description="Opening stock, posted to the ledger as an adjustment",
    )


class UpdateProductRequest(BaseModel):
    """Partial update of descriptive product fields.

    Stock quantity is not editable; it only changes through movements.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    price: Decimal | None = None
    category: str | None = None
    min_stock_level: int | None = None
    location: str | None = None
    supplier: str | None = None
    barcode: str | None = None
    sku: str | None = None
    manufacturer_code: str | None = None
    expiry_date: date | None = None
    status: ProductStatus | None = None


# --- Stock movements ---


class RecordMovementRequest(BaseModel):
    """Request to append a movement to the stock ledger."""

    product_id: int = Field(..., description="Product ID")
    movement_type: MovementType = Field(..., description="Cause of the movement")
    quantity: int = Field(..., description="Signed quantity delta")
    movement_date: date | None = Field(
        default=None,
        description="Effective date (defaults to today)",
    )
    notes: str | None = Field(default=None, description="Free-text notes")
    restock_order_id: int | None = Field(default=None, description="Originating order")


class RecordSaleRequest(BaseModel):
    """Request to record a sale. Quantity is the number of units sold."""

    product_id: int = Field(..., description="Product ID")
    quantity: int = Field(..., gt=0, description="Units sold")
    movement_date: date | None = Field(default=None, description="Sale date")
    notes: str | None = Field(default=None, description="Free-text notes")


class StockAdjustmentRequest(BaseModel):
    """Request for a manual stock correction, loss or customer return."""

    product_id: int = Field(..., description="Product ID")
    quantity: int = Field(..., description="Signed quantity delta")
    movement_type: MovementType = Field(
        default=MovementType.ADJUSTMENT,
        description="adjustment, loss or return",
    )
    movement_date: date | None = Field(default=None, description="Effective date")
    notes: str | None = Field(default=None, description="Reason for the adjustment")


# --- Restock orders ---


class CreateRestockOrderRequest(BaseModel):
    """Request to place a restock order."""

    product_id: int = Field(..., description="Product to replenish")
    quantity: int = Field(..., description="Units ordered")
    price: Decimal = Field(..., description="Unit purchase price")
    supplier: str = Field(..., min_length=1, description="Supplier name")
    purchase_date: date | None = Field(
        default=None,
        description="Purchase date (defaults to today)",
    )
    expected_delivery_date: date | None = Field(default=None)
    notes: str | None = Field(default=None)


class ReceiveRestockRequest(BaseModel):
    """Request to register a (possibly partial) delivery."""

    quantity: int = Field(..., description="Units received in this delivery")
    movement_date: date | None = Field(
        default=None,
        description="Delivery date (defaults to today)",
    )
    notes: str | None = Field(default=None)
