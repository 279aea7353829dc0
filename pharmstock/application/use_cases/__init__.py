"""Application use cases."""

from pharmstock.application.use_cases.adjust_stock import AdjustStockUseCase
from pharmstock.application.use_cases.cancel_restock_order import CancelRestockOrderUseCase
from pharmstock.application.use_cases.create_product import (
    CreateProductResult,
    CreateProductUseCase,
)
from pharmstock.application.use_cases.create_restock_order import CreateRestockOrderUseCase
from pharmstock.application.use_cases.get_product import GetProductUseCase
from pharmstock.application.use_cases.list_movements import (
    ListMovementsUseCase,
    ListOrganizationMovementsUseCase,
    MovementHistory,
)
from pharmstock.application.use_cases.list_products import (
    ListCategoriesUseCase,
    ListProductsUseCase,
)
from pharmstock.application.use_cases.list_restock_orders import (
    GetRestockOrderUseCase,
    ListRestockOrdersUseCase,
)
from pharmstock.application.use_cases.receive_restock_order import ReceiveRestockOrderUseCase
from pharmstock.application.use_cases.record_movement import RecordMovementUseCase
from pharmstock.application.use_cases.record_sale import RecordSaleUseCase
from pharmstock.application.use_cases.stock_reports import StockReportsUseCase
from pharmstock.application.use_cases.update_product import UpdateProductUseCase

__all__ = [
    # Catalog
    "ListProductsUseCase",
    "ListCategoriesUseCase",
    "GetProductUseCase",
    "CreateProductUseCase",
    "CreateProductResult",
    "UpdateProductUseCase",
    # Ledger
    "RecordMovementUseCase",
    "RecordSaleUseCase",
    "AdjustStockUseCase",
    "ListMovementsUseCase",
    "ListOrganizationMovementsUseCase",
    "MovementHistory",
    # Restock orders
    "CreateRestockOrderUseCase",
    "ReceiveRestockOrderUseCase",
    "CancelRestockOrderUseCase",
    "ListRestockOrdersUseCase",
    "GetRestockOrderUseCase",
    # Reports
    "StockReportsUseCase",
]
