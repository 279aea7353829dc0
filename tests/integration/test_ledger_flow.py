"""Integration test: catalog and ledger through the HTTP API on a real database."""

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from pharmstock.api.main import app

ORG = "/api/organizations/1"


@pytest.fixture
async def client(migrated_db):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def create_product(client: AsyncClient, **fields) -> dict:
    payload = {"name": "Paracetamol 500mg", "price": "2.00", "min_stock_level": 20}
    payload.update(fields)
    response = await client.post(f"{ORG}/products", json=payload)
    assert response.status_code == 201
    return response.json()


class TestLedgerFlow:
    """Opening stock -> sale -> rejected loss -> reports stay consistent."""

    async def test_sale_and_rejected_loss(self, client: AsyncClient):
        product = await create_product(client, initial_quantity=45)
        assert product["stock_quantity"] == 45
        assert product["stock_status"] == "in_stock"

        sale = await client.post(
            f"{ORG}/sales", json={"product_id": product["id"], "quantity": 30}
        )
        assert sale.status_code == 201
        assert sale.json()["product"]["stock_quantity"] == 15
        assert sale.json()["product"]["stock_status"] == "low_stock"

        loss = await client.post(
            f"{ORG}/stock-adjustments",
            json={"product_id": product["id"], "quantity": -16, "movement_type": "loss"},
        )
        assert loss.status_code == 422
        assert loss.json()["error_code"] == "INSUFFICIENT_STOCK"

        fetched = (await client.get(f"{ORG}/products/{product['id']}")).json()
        assert fetched["stock_quantity"] == 15

        history = (
            await client.get(f"{ORG}/movements", params={"product_id": product["id"]})
        ).json()
        assert [m["quantity"] for m in history["items"]] == [-30, 45]
        assert history["items"][1]["movement_type"] == "adjustment"

        reconciliation = (await client.get(f"{ORG}/reports/reconciliation")).json()
        assert reconciliation["balanced"] is True

    async def test_idempotent_sale(self, client: AsyncClient):
        product = await create_product(client, initial_quantity=10)
        headers = {"Idempotency-Key": "till-7-0001"}
        body = {"product_id": product["id"], "quantity": 4}

        first = await client.post(f"{ORG}/sales", json=body, headers=headers)
        second = await client.post(f"{ORG}/sales", json=body, headers=headers)

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["movement"]["id"] == first.json()["movement"]["id"]
        fetched = (await client.get(f"{ORG}/products/{product['id']}")).json()
        assert fetched["stock_quantity"] == 6

    async def test_concurrent_sales(self, client: AsyncClient):
        product = await create_product(client, initial_quantity=10)
        body = {"product_id": product["id"], "quantity": 4}

        responses = await asyncio.gather(
            *(client.post(f"{ORG}/sales", json=body) for _ in range(4))
        )

        codes = sorted(r.status_code for r in responses)
        assert codes == [201, 201, 422, 422]
        fetched = (await client.get(f"{ORG}/products/{product['id']}")).json()
        assert fetched["stock_quantity"] == 2

    async def test_stock_quantity_not_editable(self, client: AsyncClient):
        product = await create_product(client)

        response = await client.patch(
            f"{ORG}/products/{product['id']}", json={"stock_quantity": 100}
        )
        assert response.status_code == 422

        renamed = await client.patch(
            f"{ORG}/products/{product['id']}", json={"name": "Paracetamol 1g"}
        )
        assert renamed.status_code == 200
        assert renamed.json()["stock_quantity"] == 0

    async def test_reports_by_category(self, client: AsyncClient):
        await create_product(client, name="A1", category="A", initial_quantity=10)
        await create_product(client, name="A2", category="A", initial_quantity=5)
        await create_product(client, name="N1", initial_quantity=3)

        data = (await client.get(f"{ORG}/reports/stock-by-category")).json()
        assert {c["category"]: c["quantity"] for c in data["categories"]} == {
            "A": 15,
            "uncategorized": 3,
        }

    async def test_organizations_are_isolated(self, client: AsyncClient):
        product = await create_product(client, initial_quantity=5)

        other = await client.get(f"/api/organizations/2/products/{product['id']}")
        assert other.status_code == 404

        sale = await client.post(
            "/api/organizations/2/sales", json={"product_id": product["id"], "quantity": 1}
        )
        assert sale.status_code == 404
