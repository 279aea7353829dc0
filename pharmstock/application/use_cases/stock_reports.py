"""Stock Reports Use Case: on-demand projections over catalog and ledger."""

from datetime import date

from pharmstock.application.dto.responses import (
    CategoryStockResponse,
    ProductRotationResponse,
    ReconciliationEntryResponse,
    ReconciliationResponse,
    RotationReportResponse,
    StatusDistributionResponse,
    StockByCategoryResponse,
    StockSummaryResponse,
)
from pharmstock.application.services import get_report_service
from pharmstock.config import get_logger, get_settings
from pharmstock.core.entities.inventory import StockStatus
from pharmstock.core.exceptions import InvalidArgumentError
from pharmstock.core.interfaces.ledger_store import IStockLedgerStore
from pharmstock.core.interfaces.product_store import IProductStore
from pharmstock.core.services.stock_reporting import (
    ReconciliationReport,
    RotationReport,
    StockReportService,
    StockSummary,
)

logger = get_logger(__name__)


class StockReportsUseCase:
    """
    Build stock reports for an organization.

    Every report reads a fresh catalog snapshot; inactive products are
    included because their stock is still on the shelf.
    """

    def __init__(
        self,
        product_store: IProductStore | None = None,
        ledger_store: IStockLedgerStore | None = None,
        report_service: StockReportService | None = None,
    ):
        self._product_store = product_store
        self._ledger_store = ledger_store
        self._reports = report_service or get_report_service()

    async def _get_product_store(self) -> IProductStore:
        if self._product_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def _get_ledger_store(self) -> IStockLedgerStore:
        if self._ledger_store is None:
            from pharmstock.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def _products(self, organization_id: int):
        store = await self._get_product_store()
        return await store.list_products(organization_id)

    async def summary(self, organization_id: int) -> StockSummary:
        return self._reports.summary(await self._products(organization_id))

    async def stock_by_category(self, organization_id: int) -> dict[str, int]:
        return self._reports.stock_by_category(await self._products(organization_id))

    async def status_distribution(self, organization_id: int) -> dict[StockStatus, int]:
        return self._reports.stock_status_distribution(await self._products(organization_id))

    async def rotation(self, organization_id: int, start: date, end: date) -> RotationReport:
        """Rotation metrics between two dates, both inclusive."""
        if end < start:
            raise InvalidArgumentError("end", "end date precedes start date", end)

        products = await self._products(organization_id)
        ledger = await self._get_ledger_store()
        # Movements after ``end`` are needed to fold balances back from today
        movements = [
            m
            async for m in ledger.iter_movements(
                organization_id,
                start=start,
                page_size=get_settings().ledger.history_page_size,
            )
        ]
        report = self._reports.rotation_metrics(products, movements, start, end)

        logger.info(
            "rotation_report_built",
            organization_id=organization_id,
            start=start.isoformat(),
            end=end.isoformat(),
            products=len(report.products),
            movements=len(movements),
        )
        return report

    async def reconciliation(self, organization_id: int) -> ReconciliationReport:
        products = await self._products(organization_id)
        ledger = await self._get_ledger_store()
        totals = await ledger.movement_totals(organization_id)
        report = self._reports.reconcile(products, totals)

        if not report.balanced:
            logger.warning(
                "ledger_drift_detected",
                organization_id=organization_id,
                drifted=[e.product_id for e in report.drifted],
            )
        return report

    # Response conversion

    @staticmethod
    def summary_response(result: StockSummary) -> StockSummaryResponse:
        return StockSummaryResponse(
            total_products=result.total_products,
            in_stock=result.in_stock,
            low_stock=result.low_stock,
            out_of_stock=result.out_of_stock,
            total_units=result.total_units,
            inventory_value=result.inventory_value,
        )

    @staticmethod
    def category_response(result: dict[str, int]) -> StockByCategoryResponse:
        return StockByCategoryResponse(
            categories=[
                CategoryStockResponse(category=category, quantity=quantity)
                for category, quantity in sorted(result.items())
            ]
        )

    @staticmethod
    def distribution_response(result: dict[StockStatus, int]) -> StatusDistributionResponse:
        return StatusDistributionResponse(
            in_stock=result[StockStatus.IN_STOCK],
            low_stock=result[StockStatus.LOW_STOCK],
            out_of_stock=result[StockStatus.OUT_OF_STOCK],
        )

    @staticmethod
    def rotation_response(result: RotationReport) -> RotationReportResponse:
        return RotationReportResponse(
            start=result.start,
            end=result.end,
            days=result.days,
            products=[
                ProductRotationResponse(
                    product_id=r.product_id,
                    product_name=r.product_name,
                    units_sold=r.units_sold,
                    units_received=r.units_received,
                    opening_quantity=r.opening_quantity,
                    closing_quantity=r.closing_quantity,
                    average_quantity=r.average_quantity,
                    turnover_ratio=r.turnover_ratio,
                    days_of_cover=r.days_of_cover,
                )
                for r in result.products
            ],
        )

    @staticmethod
    def reconciliation_response(result: ReconciliationReport) -> ReconciliationResponse:
        return ReconciliationResponse(
            balanced=result.balanced,
            checked=len(result.entries),
            drifted=[
                ReconciliationEntryResponse(
                    product_id=e.product_id,
                    stock_quantity=e.stock_quantity,
                    ledger_quantity=e.ledger_quantity,
                    drift=e.drift,
                )
                for e in result.drifted
            ],
        )
