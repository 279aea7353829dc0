"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
Decimal amounts serialize as strings in JSON.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from pharmstock.core.entities.inventory import Product, StockMovement
from pharmstock.core.entities.restock import RestockOrder

# --- Catalog ---


class ProductResponse(BaseModel):
    """Product with its derived stock classification."""

    id: int
    organization_id: int
    name: str
    description: str
    price: Decimal
    category: str | None = None
    stock_quantity: int
    min_stock_level: int
    stock_status: str = Field(..., description="in_stock, low_stock or out_of_stock")
    stock_level_percentage: float = Field(
        ..., ge=0.0, le=100.0, description="Stock relative to the healthy level"
    )
    stock_value: Decimal
    location: str | None = None
    supplier: str | None = None
    barcode: str | None = None
    sku: str | None = None
    manufacturer_code: str | None = None
    expiry_date: date | None = None
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, product: Product, stock_level_percentage: float) -> "ProductResponse":
        return cls(
            id=product.id,  # type: ignore[arg-type]
            organization_id=product.organization_id,
            name=product.name,
            description=product.description,
            price=product.price,
            category=product.category,
            stock_quantity=product.stock_quantity,
            min_stock_level=product.min_stock_level,
            stock_status=product.stock_status.value,
            stock_level_percentage=stock_level_percentage,
            stock_value=product.stock_value,
            location=product.location,
            supplier=product.supplier,
            barcode=product.barcode,
            sku=product.sku,
            manufacturer_code=product.manufacturer_code,
            expiry_date=product.expiry_date,
            status=product.status.value,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductListResponse(BaseModel):
    """Filtered and sorted catalog listing."""

    items: list[ProductResponse] = Field(default=[])
    total: int = Field(..., ge=0)


class CategoryListResponse(BaseModel):
    categories: list[str] = Field(default=[])


# --- Stock movements ---


class StockMovementResponse(BaseModel):
    """One ledger entry."""

    id: int
    product_id: int
    movement_type: str
    quantity: int = Field(..., description="Signed quantity delta")
    movement_date: date
    notes: str | None = None
    restock_order_id: int | None = None
    idempotency_key: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, movement: StockMovement) -> "StockMovementResponse":
        return cls(
            id=movement.id,  # type: ignore[arg-type]
            product_id=movement.product_id,
            movement_type=movement.movement_type.value,
            quantity=movement.quantity,
            movement_date=movement.movement_date,
            notes=movement.notes,
            restock_order_id=movement.restock_order_id,
            idempotency_key=movement.idempotency_key,
            created_at=movement.created_at,
        )


class MovementListResponse(BaseModel):
    items: list[StockMovementResponse] = Field(default=[])
    total: int = Field(..., ge=0)


class MovementPostingResponse(BaseModel):
    """Response for a movement-producing request."""

    movement: StockMovementResponse
    product: ProductResponse
    replayed: bool = Field(
        default=False,
        description="True when the idempotency key matched an earlier request",
    )


# --- Restock orders ---


class RestockOrderResponse(BaseModel):
    """Restock order with derived totals."""

    id: int
    organization_id: int
    product_id: int
    quantity: int
    received_quantity: int
    remaining_quantity: int
    price: Decimal
    total_cost: Decimal
    supplier: str
    purchase_date: date
    expected_delivery_date: date | None = None
    status: str
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, order: RestockOrder) -> "RestockOrderResponse":
        return cls(
            id=order.id,  # type: ignore[arg-type]
            organization_id=order.organization_id,
            product_id=order.product_id,
            quantity=order.quantity,
            received_quantity=order.received_quantity,
            remaining_quantity=order.remaining_quantity,
            price=order.price,
            total_cost=order.total_cost,
            supplier=order.supplier,
            purchase_date=order.purchase_date,
            expected_delivery_date=order.expected_delivery_date,
            status=order.status.value,
            notes=order.notes,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class RestockOrderListResponse(BaseModel):
    items: list[RestockOrderResponse] = Field(default=[])
    total: int = Field(..., ge=0)


class ReceiptResponse(BaseModel):
    """Response for a restock receipt."""

    order: RestockOrderResponse
    movement: StockMovementResponse
    product: ProductResponse
    replayed: bool = False


# --- Reports ---


class StockSummaryResponse(BaseModel):
    """Headline stock counters."""

    total_products: int
    in_stock: int
    low_stock: int
    out_of_stock: int
    total_units: int
    inventory_value: Decimal


class CategoryStockResponse(BaseModel):
    category: str
    quantity: int


class StockByCategoryResponse(BaseModel):
    categories: list[CategoryStockResponse] = Field(default=[])


class StatusDistributionResponse(BaseModel):
    """Product counts per stock status. Every bucket is always present."""

    in_stock: int = 0
    low_stock: int = 0
    out_of_stock: int = 0


class ProductRotationResponse(BaseModel):
    product_id: int
    product_name: str
    units_sold: int
    units_received: int
    opening_quantity: int
    closing_quantity: int
    average_quantity: float
    turnover_ratio: float | None = None
    days_of_cover: float | None = None


class RotationReportResponse(BaseModel):
    """Sales rotation over an inclusive date range."""

    start: date
    end: date
    days: int
    products: list[ProductRotationResponse] = Field(default=[])


class ReconciliationEntryResponse(BaseModel):
    product_id: int
    stock_quantity: int
    ledger_quantity: int
    drift: int


class ReconciliationResponse(BaseModel):
    """Stored stock quantities checked against the ledger."""

    balanced: bool
    checked: int
    drifted: list[ReconciliationEntryResponse] = Field(default=[])


# --- Common ---


class ProviderHealthResponse(BaseModel):
    """Health status of a backing service."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ProviderHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. PRODUCT_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
