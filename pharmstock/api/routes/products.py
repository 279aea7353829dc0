"""Product catalog endpoints."""

from fastapi import APIRouter, Depends, Query, status

from pharmstock.api.dependencies import (
    get_create_product_use_case,
    get_get_product_use_case,
    get_list_categories_use_case,
    get_list_products_use_case,
    get_update_product_use_case,
)
from pharmstock.application.dto.requests import CreateProductRequest, UpdateProductRequest
from pharmstock.application.dto.responses import (
    CategoryListResponse,
    ErrorResponse,
    ProductListResponse,
    ProductResponse,
)
from pharmstock.application.use_cases import (
    CreateProductUseCase,
    GetProductUseCase,
    ListCategoriesUseCase,
    ListProductsUseCase,
    UpdateProductUseCase,
)
from pharmstock.core.entities.inventory import ProductStatus
from pharmstock.core.services.catalog_query import (
    ProductFilter,
    ProductSort,
    SortDirection,
    StockFilter,
)

router = APIRouter(prefix="/api/organizations/{organization_id}/products", tags=["products"])


@router.get(
    "",
    response_model=ProductListResponse,
    responses={400: {"model": ErrorResponse}},
)
async def list_products(
    organization_id: int,
    search: str | None = Query(default=None, description="Substring of name, SKU, barcode..."),
    category: str | None = Query(default=None),
    stock_status: StockFilter = Query(default=StockFilter.ALL),
    product_status: ProductStatus | None = Query(default=None, alias="status"),
    sort_by: str = Query(default="name"),
    sort_dir: SortDirection = Query(default=SortDirection.ASC),
    use_case: ListProductsUseCase = Depends(get_list_products_use_case),
) -> ProductListResponse:
    """List products matching every filter, sorted by one field."""
    result = await use_case.execute(
        organization_id,
        ProductFilter(
            search=search,
            category=category,
            stock=stock_status,
            status=product_status,
        ),
        ProductSort(field=sort_by, direction=sort_dir),
    )
    return use_case.to_response(result)


@router.get("/categories", response_model=CategoryListResponse)
async def list_categories(
    organization_id: int,
    use_case: ListCategoriesUseCase = Depends(get_list_categories_use_case),
) -> CategoryListResponse:
    """Distinct category labels in use."""
    result = await use_case.execute(organization_id)
    return use_case.to_response(result)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_product(
    organization_id: int,
    request: CreateProductRequest,
    use_case: CreateProductUseCase = Depends(get_create_product_use_case),
) -> ProductResponse:
    """Add a product; an initial quantity is posted as opening stock."""
    result = await use_case.execute(organization_id, request)
    return use_case.to_response(result)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_product(
    organization_id: int,
    product_id: int,
    use_case: GetProductUseCase = Depends(get_get_product_use_case),
) -> ProductResponse:
    result = await use_case.execute(organization_id, product_id)
    return use_case.to_response(result)


@router.patch(
    "/{product_id}",
    response_model=ProductResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_product(
    organization_id: int,
    product_id: int,
    request: UpdateProductRequest,
    use_case: UpdateProductUseCase = Depends(get_update_product_use_case),
) -> ProductResponse:
    """Edit descriptive fields. Stock only changes through movements."""
    result = await use_case.execute(organization_id, product_id, request)
    return use_case.to_response(result)
