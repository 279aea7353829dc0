"""Restock order endpoints."""

from fastapi import APIRouter, Depends, Header, Query, Response, status

from pharmstock.api.dependencies import (
    get_cancel_restock_order_use_case,
    get_create_restock_order_use_case,
    get_get_restock_order_use_case,
    get_list_restock_orders_use_case,
    get_receive_restock_order_use_case,
)
from pharmstock.application.dto.requests import CreateRestockOrderRequest, ReceiveRestockRequest
from pharmstock.application.dto.responses import (
    ErrorResponse,
    ReceiptResponse,
    RestockOrderListResponse,
    RestockOrderResponse,
)
from pharmstock.application.use_cases import (
    CancelRestockOrderUseCase,
    CreateRestockOrderUseCase,
    GetRestockOrderUseCase,
    ListRestockOrdersUseCase,
    ReceiveRestockOrderUseCase,
)
from pharmstock.core.entities.restock import RestockStatus

router = APIRouter(
    prefix="/api/organizations/{organization_id}/restock-orders",
    tags=["restock-orders"],
)


@router.get("", response_model=RestockOrderListResponse)
async def list_restock_orders(
    organization_id: int,
    order_status: RestockStatus | None = Query(default=None, alias="status"),
    use_case: ListRestockOrdersUseCase = Depends(get_list_restock_orders_use_case),
) -> RestockOrderListResponse:
    result = await use_case.execute(organization_id, order_status)
    return use_case.to_response(result)


@router.post(
    "",
    response_model=RestockOrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_restock_order(
    organization_id: int,
    request: CreateRestockOrderRequest,
    use_case: CreateRestockOrderUseCase = Depends(get_create_restock_order_use_case),
) -> RestockOrderResponse:
    """Place a pending order. Stock is unchanged until delivery."""
    result = await use_case.execute(organization_id, request)
    return use_case.to_response(result)


@router.get(
    "/{order_id}",
    response_model=RestockOrderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_restock_order(
    organization_id: int,
    order_id: int,
    use_case: GetRestockOrderUseCase = Depends(get_get_restock_order_use_case),
) -> RestockOrderResponse:
    result = await use_case.execute(organization_id, order_id)
    return use_case.to_response(result)


@router.post(
    "/{order_id}/receipts",
    response_model=ReceiptResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def receive_restock_order(
    organization_id: int,
    order_id: int,
    request: ReceiveRestockRequest,
    response: Response,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    use_case: ReceiveRestockOrderUseCase = Depends(get_receive_restock_order_use_case),
) -> ReceiptResponse:
    """Register a full or partial delivery and post it to the ledger."""
    result = await use_case.execute(organization_id, order_id, request, idempotency_key)
    if result.replayed:
        response.status_code = status.HTTP_200_OK
    return use_case.to_response(result)


@router.post(
    "/{order_id}/cancel",
    response_model=RestockOrderResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def cancel_restock_order(
    organization_id: int,
    order_id: int,
    use_case: CancelRestockOrderUseCase = Depends(get_cancel_restock_order_use_case),
) -> RestockOrderResponse:
    """Cancel an open order. Received units stay in stock."""
    result = await use_case.execute(organization_id, order_id)
    return use_case.to_response(result)
