"""Stock report endpoints. Every report is recomputed on request."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from pharmstock.api.dependencies import get_stock_reports_use_case
from pharmstock.application.dto.responses import (
    ErrorResponse,
    ReconciliationResponse,
    RotationReportResponse,
    StatusDistributionResponse,
    StockByCategoryResponse,
    StockSummaryResponse,
)
from pharmstock.application.use_cases import StockReportsUseCase

router = APIRouter(prefix="/api/organizations/{organization_id}/reports", tags=["reports"])


@router.get("/summary", response_model=StockSummaryResponse)
async def stock_summary(
    organization_id: int,
    use_case: StockReportsUseCase = Depends(get_stock_reports_use_case),
) -> StockSummaryResponse:
    result = await use_case.summary(organization_id)
    return use_case.summary_response(result)


@router.get("/stock-by-category", response_model=StockByCategoryResponse)
async def stock_by_category(
    organization_id: int,
    use_case: StockReportsUseCase = Depends(get_stock_reports_use_case),
) -> StockByCategoryResponse:
    result = await use_case.stock_by_category(organization_id)
    return use_case.category_response(result)


@router.get("/status-distribution", response_model=StatusDistributionResponse)
async def status_distribution(
    organization_id: int,
    use_case: StockReportsUseCase = Depends(get_stock_reports_use_case),
) -> StatusDistributionResponse:
    result = await use_case.status_distribution(organization_id)
    return use_case.distribution_response(result)


@router.get(
    "/rotation",
    response_model=RotationReportResponse,
    responses={400: {"model": ErrorResponse}},
)
async def rotation(
    organization_id: int,
    start: date = Query(..., description="Inclusive start date"),
    end: date = Query(..., description="Inclusive end date"),
    use_case: StockReportsUseCase = Depends(get_stock_reports_use_case),
) -> RotationReportResponse:
    """Units sold, turnover and days of cover per product."""
    result = await use_case.rotation(organization_id, start, end)
    return use_case.rotation_response(result)


@router.get("/reconciliation", response_model=ReconciliationResponse)
async def reconciliation(
    organization_id: int,
    use_case: StockReportsUseCase = Depends(get_stock_reports_use_case),
) -> ReconciliationResponse:
    """Compare stored stock quantities with the ledger sum."""
    result = await use_case.reconciliation(organization_id)
    return use_case.reconciliation_response(result)
