"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from pharmstock.application.dto.requests import (
    CreateProductRequest,
    CreateRestockOrderRequest,
    ReceiveRestockRequest,
    RecordMovementRequest,
    RecordSaleRequest,
    StockAdjustmentRequest,
    UpdateProductRequest,
)
from pharmstock.application.dto.responses import (
    CategoryListResponse,
    CategoryStockResponse,
    ErrorResponse,
    HealthResponse,
    MovementListResponse,
    MovementPostingResponse,
    ProductListResponse,
    ProductResponse,
    ProductRotationResponse,
    ProviderHealthResponse,
    ReceiptResponse,
    ReconciliationEntryResponse,
    ReconciliationResponse,
    RestockOrderListResponse,
    RestockOrderResponse,
    RotationReportResponse,
    StatusDistributionResponse,
    StockByCategoryResponse,
    StockMovementResponse,
    StockSummaryResponse,
)

__all__ = [
    # Requests
    "CreateProductRequest",
    "UpdateProductRequest",
    "RecordMovementRequest",
    "RecordSaleRequest",
    "StockAdjustmentRequest",
    "CreateRestockOrderRequest",
    "ReceiveRestockRequest",
    # Responses
    "ProductResponse",
    "ProductListResponse",
    "CategoryListResponse",
    "StockMovementResponse",
    "MovementListResponse",
    "MovementPostingResponse",
    "RestockOrderResponse",
    "RestockOrderListResponse",
    "ReceiptResponse",
    "StockSummaryResponse",
    "CategoryStockResponse",
    "StockByCategoryResponse",
    "StatusDistributionResponse",
    "ProductRotationResponse",
    "RotationReportResponse",
    "ReconciliationEntryResponse",
    "ReconciliationResponse",
    "ProviderHealthResponse",
    "HealthResponse",
    "ErrorResponse",
]
