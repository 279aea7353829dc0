"""Stock movement endpoints: ledger history, sales and adjustments."""

from datetime import date

from fastapi import APIRouter, Depends, Header, Query, Response, status

from pharmstock.api.dependencies import (
    get_adjust_stock_use_case,
    get_list_movements_use_case,
    get_record_sale_use_case,
)
from pharmstock.application.dto.requests import RecordSaleRequest, StockAdjustmentRequest
from pharmstock.application.dto.responses import (
    ErrorResponse,
    MovementListResponse,
    MovementPostingResponse,
)
from pharmstock.application.use_cases import (
    AdjustStockUseCase,
    ListOrganizationMovementsUseCase,
    RecordSaleUseCase,
)

router = APIRouter(prefix="/api/organizations/{organization_id}", tags=["movements"])

POSTING_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.get(
    "/movements",
    response_model=MovementListResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def list_movements(
    organization_id: int,
    product_id: int | None = Query(default=None),
    start: date | None = Query(default=None, description="Inclusive start date"),
    end: date | None = Query(default=None, description="Inclusive end date"),
    limit: int = Query(default=100),
    use_case: ListOrganizationMovementsUseCase = Depends(get_list_movements_use_case),
) -> MovementListResponse:
    """Ledger entries, newest first."""
    result = await use_case.execute(
        organization_id,
        product_id=product_id,
        start=start,
        end=end,
        limit=limit,
    )
    return use_case.to_response(result)


@router.post(
    "/sales",
    response_model=MovementPostingResponse,
    status_code=status.HTTP_201_CREATED,
    responses=POSTING_ERRORS,
)
async def record_sale(
    organization_id: int,
    request: RecordSaleRequest,
    response: Response,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    use_case: RecordSaleUseCase = Depends(get_record_sale_use_case),
) -> MovementPostingResponse:
    """Record a sale. Fails with 422 when stock is insufficient."""
    result = await use_case.execute(organization_id, request, idempotency_key)
    if result.replayed:
        response.status_code = status.HTTP_200_OK
    return use_case.to_response(result)


@router.post(
    "/stock-adjustments",
    response_model=MovementPostingResponse,
    status_code=status.HTTP_201_CREATED,
    responses=POSTING_ERRORS,
)
async def adjust_stock(
    organization_id: int,
    request: StockAdjustmentRequest,
    response: Response,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    use_case: AdjustStockUseCase = Depends(get_adjust_stock_use_case),
) -> MovementPostingResponse:
    """Post a manual adjustment, loss or return."""
    result = await use_case.execute(organization_id, request, idempotency_key)
    if result.replayed:
        response.status_code = status.HTTP_200_OK
    return use_case.to_response(result)
