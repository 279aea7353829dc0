"""
Core business logic services.

Layer-pure services that depend only on:
- pharmstock/core/entities/*
- pharmstock/core/exceptions.py

NO infrastructure imports.
"""

from pharmstock.core.services.catalog_query import (
    ProductFilter,
    ProductSort,
    SortDirection,
    StockFilter,
    query_products,
    sort_products,
)
from pharmstock.core.services.stock_reporting import (
    ProductRotation,
    ReconciliationEntry,
    ReconciliationReport,
    RotationReport,
    StockReportService,
    StockSummary,
)

__all__ = [
    # Catalog query
    "ProductFilter",
    "ProductSort",
    "SortDirection",
    "StockFilter",
    "query_products",
    "sort_products",
    # Reporting
    "StockReportService",
    "StockSummary",
    "RotationReport",
    "ProductRotation",
    "ReconciliationReport",
    "ReconciliationEntry",
]
