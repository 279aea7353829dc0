"""
Catalog query service.

Filters and sorts product snapshots for display. Pure functions over
entities; stock-status filtering goes through ``classify_stock`` so the
thresholds match badges and reports exactly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pharmstock.core.entities.inventory import Product, ProductStatus, StockStatus
from pharmstock.core.exceptions import InvalidArgumentError


class StockFilter(str, Enum):
    """Stock-status filter values accepted by catalog queries."""

    ALL = "all"
    LOW = "low"
    OUT = "out"
    IN = "in"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


_STOCK_FILTER_STATUS: dict[StockFilter, StockStatus] = {
    StockFilter.LOW: StockStatus.LOW_STOCK,
    StockFilter.OUT: StockStatus.OUT_OF_STOCK,
    StockFilter.IN: StockStatus.IN_STOCK,
}

# Sortable product fields; stock_status is a derived column
SORTABLE_FIELDS = frozenset(
    {
        "id",
        "name",
        "description",
        "price",
        "category",
        "stock_quantity",
        "min_stock_level",
        "location",
        "supplier",
        "barcode",
        "sku",
        "manufacturer_code",
        "expiry_date",
        "status",
        "stock_status",
        "created_at",
        "updated_at",
    }
)

# Fields scanned by free-text search
SEARCH_FIELDS = ("name", "description", "category", "sku", "barcode")


@dataclass
class ProductFilter:
    """Conjunction of catalog filters. Empty values match everything."""

    search: str | None = None
    category: str | None = None
    stock: StockFilter = StockFilter.ALL
    status: ProductStatus | None = None


@dataclass
class ProductSort:
    """Single-field sort order."""

    field: str = "name"
    direction: SortDirection = SortDirection.ASC


def matches_search(product: Product, term: str) -> bool:
    """Case-insensitive substring match over the searchable fields."""
    needle = term.lower()
    for field in SEARCH_FIELDS:
        value = getattr(product, field)
        if value and needle in str(value).lower():
            return True
    return False


def matches_filter(product: Product, product_filter: ProductFilter) -> bool:
    """Check a product against every filter in the conjunction."""
    if product_filter.search and product_filter.search.strip():
        if not matches_search(product, product_filter.search.strip()):
            return False

    if product_filter.category and product.category != product_filter.category:
        return False

    if product_filter.stock != StockFilter.ALL:
        if product.stock_status != _STOCK_FILTER_STATUS[product_filter.stock]:
            return False

    if product_filter.status is not None and product.status != product_filter.status:
        return False

    return True


def _sort_value(product: Product, field: str) -> Any:
    value = getattr(product, field)
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str):
        value = value.lower()
    return value


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def sort_products(products: list[Product], sort: ProductSort) -> list[Product]:
    """
    Sort products by one field.

    Missing values sort last ascending and first descending; the descending
    order is the exact reverse of the ascending one.
    """
    if sort.field not in SORTABLE_FIELDS:
        raise InvalidArgumentError(
            "sort_by",
            f"unknown sort field, expected one of {sorted(SORTABLE_FIELDS)}",
            sort.field,
        )

    present = [p for p in products if not _is_missing(_sort_value(p, sort.field))]
    missing = [p for p in products if _is_missing(_sort_value(p, sort.field))]

    # Tie-break on id so the order is total and reversible
    present.sort(key=lambda p: (_sort_value(p, sort.field), p.id or 0))
    missing.sort(key=lambda p: p.id or 0)

    ordered = present + missing
    if sort.direction == SortDirection.DESC:
        ordered.reverse()
    return ordered


def query_products(
    products: list[Product],
    product_filter: ProductFilter | None = None,
    sort: ProductSort | None = None,
) -> list[Product]:
    """Filter then sort a catalog snapshot. No side effects."""
    product_filter = product_filter or ProductFilter()
    sort = sort or ProductSort()
    selected = [p for p in products if matches_filter(p, product_filter)]
    return sort_products(selected, sort)
