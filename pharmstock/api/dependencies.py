"""
Dependency injection container for FastAPI.

Provides use case instances to route handlers. Tests replace these with
``app.dependency_overrides``.
"""

from pharmstock.application.use_cases import (
    AdjustStockUseCase,
    CancelRestockOrderUseCase,
    CreateProductUseCase,
    CreateRestockOrderUseCase,
    GetProductUseCase,
    GetRestockOrderUseCase,
    ListCategoriesUseCase,
    ListOrganizationMovementsUseCase,
    ListProductsUseCase,
    ListRestockOrdersUseCase,
    ReceiveRestockOrderUseCase,
    RecordSaleUseCase,
    StockReportsUseCase,
    UpdateProductUseCase,
)


# Catalog use cases
def get_list_products_use_case() -> ListProductsUseCase:
    return ListProductsUseCase()


def get_list_categories_use_case() -> ListCategoriesUseCase:
    return ListCategoriesUseCase()


def get_get_product_use_case() -> GetProductUseCase:
    return GetProductUseCase()


def get_create_product_use_case() -> CreateProductUseCase:
    return CreateProductUseCase()


def get_update_product_use_case() -> UpdateProductUseCase:
    return UpdateProductUseCase()


# Ledger use cases
def get_list_movements_use_case() -> ListOrganizationMovementsUseCase:
    return ListOrganizationMovementsUseCase()


def get_record_sale_use_case() -> RecordSaleUseCase:
    return RecordSaleUseCase()


def get_adjust_stock_use_case() -> AdjustStockUseCase:
    return AdjustStockUseCase()


# Restock order use cases
def get_create_restock_order_use_case() -> CreateRestockOrderUseCase:
    return CreateRestockOrderUseCase()


def get_receive_restock_order_use_case() -> ReceiveRestockOrderUseCase:
    return ReceiveRestockOrderUseCase()


def get_cancel_restock_order_use_case() -> CancelRestockOrderUseCase:
    return CancelRestockOrderUseCase()


def get_list_restock_orders_use_case() -> ListRestockOrdersUseCase:
    return ListRestockOrdersUseCase()


def get_get_restock_order_use_case() -> GetRestockOrderUseCase:
    return GetRestockOrderUseCase()


# Reports
def get_stock_reports_use_case() -> StockReportsUseCase:
    return StockReportsUseCase()
