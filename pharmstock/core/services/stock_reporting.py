"""
Stock reporting aggregator.

Read-only projections over catalog and ledger snapshots. Nothing here is
cached or persisted: every report is recomputed from the products and
movements passed in, so it cannot drift from the catalog.

Pure service -- no infrastructure imports.
"""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from pharmstock.core.entities.inventory import (
    MovementType,
    Product,
    StockMovement,
    StockStatus,
)
from pharmstock.core.exceptions import InvalidArgumentError

UNCATEGORIZED = "uncategorized"
HEALTHY_STOCK_MULTIPLIER = 3


@dataclass
class StockSummary:
    """Headline counters for the stock dashboard."""

    total_products: int
    in_stock: int
    low_stock: int
    out_of_stock: int
    total_units: int
    inventory_value: Decimal


@dataclass
class ProductRotation:
    """Rotation metrics for one product over a date range."""

    product_id: int
    product_name: str
    units_sold: int
    units_received: int
    opening_quantity: int
    closing_quantity: int
    average_quantity: float
    turnover_ratio: float | None
    days_of_cover: float | None


@dataclass
class RotationReport:
    start: date
    end: date
    days: int
    products: list[ProductRotation] = field(default_factory=list)


@dataclass
class ReconciliationEntry:
    product_id: int
    stock_quantity: int
    ledger_quantity: int

    @property
    def drift(self) -> int:
        return self.stock_quantity - self.ledger_quantity


@dataclass
class ReconciliationReport:
    entries: list[ReconciliationEntry]

    @property
    def drifted(self) -> list[ReconciliationEntry]:
        return [e for e in self.entries if e.drift != 0]

    @property
    def balanced(self) -> bool:
        return not self.drifted


class StockReportService:
    """Stateless report builder over product and movement snapshots."""

    def __init__(
        self,
        uncategorized_label: str = UNCATEGORIZED,
        healthy_stock_multiplier: int = HEALTHY_STOCK_MULTIPLIER,
    ) -> None:
        self._uncategorized = uncategorized_label
        self._multiplier = healthy_stock_multiplier

    def category_of(self, product: Product) -> str:
        """Category label, or the uncategorized bucket when missing or blank."""
        if product.category is None or not product.category.strip():
            return self._uncategorized
        return product.category

    def stock_by_category(self, products: Iterable[Product]) -> dict[str, int]:
        """Total stock quantity per category label."""
        totals: dict[str, int] = defaultdict(int)
        for product in products:
            totals[self.category_of(product)] += product.stock_quantity
        return dict(totals)

    def stock_status_distribution(self, products: Iterable[Product]) -> dict[StockStatus, int]:
        """Number of products in each stock status; all buckets present."""
        counts = {status: 0 for status in StockStatus}
        for product in products:
            counts[product.stock_status] += 1
        return counts

    def inventory_value(self, products: Iterable[Product]) -> Decimal:
        """Sum of price x quantity at catalog prices."""
        return sum((p.stock_value for p in products), Decimal("0"))

    def stock_level_percentage(self, product: Product) -> float:
        """
        Stock as a percentage of the healthy level (multiplier x minimum).

        Clamped to 0..100; a product without a minimum is always at 100.
        """
        if product.min_stock_level == 0:
            return 100.0
        target = product.min_stock_level * self._multiplier
        percentage = product.stock_quantity / target * 100
        return min(max(percentage, 0.0), 100.0)

    def summary(self, products: list[Product]) -> StockSummary:
        distribution = self.stock_status_distribution(products)
        return StockSummary(
            total_products=len(products),
            in_stock=distribution[StockStatus.IN_STOCK],
            low_stock=distribution[StockStatus.LOW_STOCK],
            out_of_stock=distribution[StockStatus.OUT_OF_STOCK],
            total_units=sum(p.stock_quantity for p in products),
            inventory_value=self.inventory_value(products),
        )

    def rotation_metrics(
        self,
        products: list[Product],
        movements: Iterable[StockMovement],
        start: date,
        end: date,
    ) -> RotationReport:
        """
        Sales rotation per product between ``start`` and ``end`` inclusive.

        ``movements`` must contain every movement dated on or after ``start``;
        balances are folded backwards from the current stock quantity.
        """
        if end < start:
            raise InvalidArgumentError("end", "end date precedes start date", end)

        days = (end - start).days + 1
        in_range: dict[int, int] = defaultdict(int)
        after_end: dict[int, int] = defaultdict(int)
        sold: dict[int, int] = defaultdict(int)
        received: dict[int, int] = defaultdict(int)

        for movement in movements:
            if movement.movement_date < start:
                continue
            if movement.movement_date > end:
                after_end[movement.product_id] += movement.quantity
                continue
            in_range[movement.product_id] += movement.quantity
            if movement.movement_type == MovementType.SALE:
                sold[movement.product_id] += -movement.quantity
            elif movement.movement_type == MovementType.PURCHASE:
                received[movement.product_id] += movement.quantity

        report = RotationReport(start=start, end=end, days=days)
        for product in products:
            pid = product.id or 0
            closing = product.stock_quantity - after_end[pid]
            opening = closing - in_range[pid]
            average = (opening + closing) / 2
            units_sold = sold[pid]

            turnover = round(units_sold / average, 4) if average > 0 else None
            days_of_cover = (
                round(closing / (units_sold / days), 2) if units_sold > 0 else None
            )

            report.products.append(
                ProductRotation(
                    product_id=pid,
                    product_name=product.name,
                    units_sold=units_sold,
                    units_received=received[pid],
                    opening_quantity=opening,
                    closing_quantity=closing,
                    average_quantity=average,
                    turnover_ratio=turnover,
                    days_of_cover=days_of_cover,
                )
            )

        report.products.sort(key=lambda r: (-r.units_sold, r.product_id))
        return report

    def reconcile(
        self,
        products: Iterable[Product],
        ledger_totals: dict[int, int],
    ) -> ReconciliationReport:
        """Compare stored stock quantities with the ledger fold per product."""
        entries = [
            ReconciliationEntry(
                product_id=p.id or 0,
                stock_quantity=p.stock_quantity,
                ledger_quantity=ledger_totals.get(p.id or 0, 0),
            )
            for p in products
        ]
        return ReconciliationReport(entries=entries)
