"""API tests for catalog endpoints."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from pharmstock.api.dependencies import (
    get_create_product_use_case,
    get_get_product_use_case,
    get_list_categories_use_case,
    get_list_products_use_case,
    get_update_product_use_case,
)
from pharmstock.api.main import app
from pharmstock.application.use_cases import (
    CreateProductUseCase,
    GetProductUseCase,
    ListCategoriesUseCase,
    ListProductsUseCase,
    UpdateProductUseCase,
)

BASE = "/api/organizations/1/products"


@pytest.fixture
def product_store(make_product):
    store = AsyncMock()
    catalog = [
        make_product(1, "Paracetamol 500mg", stock_quantity=45, min_stock_level=20,
                     category="Analgesics"),
        make_product(2, "Ibuprofen 400mg", stock_quantity=15, min_stock_level=20,
                     category="Analgesics"),
        make_product(3, "Amoxicillin 250mg", stock_quantity=0, min_stock_level=10,
                     category="Antibiotics"),
    ]
    store.list_products.return_value = catalog
    store.list_categories.return_value = ["Analgesics", "Antibiotics"]
    store.get_product.side_effect = lambda org, pid: next(
        (p for p in catalog if p.id == pid), None
    )

    async def create(product):
        return product.model_copy(update={"id": 10})

    store.create_product.side_effect = create
    store.update_product.side_effect = lambda product: product
    return store


@pytest.fixture
async def client(product_store):
    overrides = {
        get_list_products_use_case: lambda: ListProductsUseCase(product_store),
        get_list_categories_use_case: lambda: ListCategoriesUseCase(product_store),
        get_get_product_use_case: lambda: GetProductUseCase(product_store),
        get_create_product_use_case: lambda: CreateProductUseCase(product_store, AsyncMock()),
        get_update_product_use_case: lambda: UpdateProductUseCase(product_store),
    }
    app.dependency_overrides.update(overrides)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    for dependency in overrides:
        app.dependency_overrides.pop(dependency, None)


class TestListProducts:
    async def test_lists_sorted_by_name(self, client: AsyncClient):
        response = await client.get(BASE)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert [p["id"] for p in data["items"]] == [3, 2, 1]

    async def test_low_stock_filter(self, client: AsyncClient):
        response = await client.get(BASE, params={"stock_status": "low"})

        items = response.json()["items"]
        assert [p["id"] for p in items] == [2]
        assert items[0]["stock_status"] == "low_stock"

    async def test_sort_descending(self, client: AsyncClient):
        response = await client.get(
            BASE, params={"sort_by": "stock_quantity", "sort_dir": "desc"}
        )
        assert [p["id"] for p in response.json()["items"]] == [1, 2, 3]

    async def test_unknown_sort_field_is_400(self, client: AsyncClient):
        response = await client.get(BASE, params={"sort_by": "colour"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_ARGUMENT"

    async def test_invalid_stock_filter_is_validation_error(self, client: AsyncClient):
        response = await client.get(BASE, params={"stock_status": "plenty"})

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    async def test_categories(self, client: AsyncClient):
        response = await client.get(f"{BASE}/categories")

        assert response.status_code == 200
        assert response.json() == {"categories": ["Analgesics", "Antibiotics"]}


class TestSingleProduct:
    async def test_get_product(self, client: AsyncClient):
        response = await client.get(f"{BASE}/2")

        assert response.status_code == 200
        data = response.json()
        assert data["stock_status"] == "low_stock"
        assert data["stock_level_percentage"] == 25.0
        assert Decimal(data["stock_value"]) == Decimal("37.50")

    async def test_missing_product_is_404(self, client: AsyncClient):
        response = await client.get(f"{BASE}/99")

        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "PRODUCT_NOT_FOUND"
        assert body["hint"]
        assert body["path"] == f"{BASE}/99"

    async def test_create_product(self, client: AsyncClient):
        response = await client.post(
            BASE,
            json={"name": "Loratadine 10mg", "price": "4.20", "min_stock_level": 5},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 10
        assert data["stock_quantity"] == 0
        assert data["stock_status"] == "out_of_stock"

    async def test_create_requires_name(self, client: AsyncClient):
        response = await client.post(BASE, json={"price": "4.20"})
        assert response.status_code == 422

    async def test_update_product(self, client: AsyncClient):
        response = await client.patch(f"{BASE}/1", json={"min_stock_level": 50})

        assert response.status_code == 200
        data = response.json()
        assert data["min_stock_level"] == 50
        assert data["stock_status"] == "low_stock"

    async def test_stock_quantity_cannot_be_patched(self, client: AsyncClient):
        response = await client.patch(f"{BASE}/1", json={"stock_quantity": 500})

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"
