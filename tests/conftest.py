"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from decimal import Decimal
from pathlib import Path

import pytest

from pharmstock.application.services import reset_services
from pharmstock.config import reset_settings
from pharmstock.core.entities.inventory import Product


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point storage at a per-test directory and drop cached singletons."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("STORAGE_POOL_SIZE", "2")
    monkeypatch.setenv("STORAGE_BUSY_TIMEOUT", "5000")
    reset_settings()
    reset_services()
    yield
    reset_settings()
    reset_services()


@pytest.fixture
async def migrated_db() -> AsyncGenerator[Path, None]:
    """Temporary database with every migration applied and a fresh pool."""
    import pharmstock.infrastructure.storage.sqlite.connection as conn_module
    from pharmstock.config import get_settings
    from pharmstock.infrastructure.storage.sqlite.migrations.migrator import (
        initialize_database,
    )

    conn_module._pool = None
    results = await initialize_database(create_backup_before=False)
    assert all(r.success for r in results)

    yield get_settings().storage.db_path

    await conn_module.close_pool()


@pytest.fixture
def make_product():
    """Factory for in-memory products."""

    def _make(
        product_id: int = 1,
        name: str = "Paracetamol 500mg",
        stock_quantity: int = 0,
        min_stock_level: int = 0,
        organization_id: int = 1,
        **fields,
    ) -> Product:
        fields.setdefault("price", Decimal("2.50"))
        return Product(
            id=product_id,
            organization_id=organization_id,
            name=name,
            stock_quantity=stock_quantity,
            min_stock_level=min_stock_level,
            **fields,
        )

    return _make
