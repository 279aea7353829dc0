"""Unit tests for database migrator."""

from pathlib import Path

import aiosqlite
import pytest

from pharmstock.infrastructure.storage.sqlite.migrations.migrator import (
    SCHEMA_OBJECTS,
    Migration,
    backup_database,
    discover_migrations,
    get_migration_status,
    initialize_database,
    verify_database,
)


@pytest.fixture
async def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "ledger.db"
    results = await initialize_database(path, create_backup_before=False)
    assert all(r.success for r in results)
    return path


async def checks_by_name(path: Path) -> dict:
    return {c.check: c for c in await verify_database(path)}


class TestMigration:
    def test_from_file_parses_filename(self, tmp_path: Path):
        migration_file = tmp_path / "v007_add_lots.sql"
        migration_file.write_text("SELECT 1;")

        info = Migration.from_file(migration_file)

        assert info.version == "007"
        assert info.name == "add_lots"
        assert len(info.checksum) == 16

    def test_bad_filename(self, tmp_path: Path):
        bad = tmp_path / "add_lots.sql"
        bad.write_text("SELECT 1;")
        with pytest.raises(ValueError):
            Migration.from_file(bad)

    def test_bundled_migrations_discovered(self):
        versions = [m.version for m in discover_migrations()]
        assert versions[0] == "001"


class TestInitializeDatabase:
    async def test_fresh_database(self, db_path: Path):
        async with aiosqlite.connect(db_path) as conn:
            cursor = await conn.execute("SELECT type, name FROM sqlite_master")
            present = {(row[0], row[1]) for row in await cursor.fetchall()}

        assert set(SCHEMA_OBJECTS) <= present
        assert ("table", "schema_migrations") in present

    async def test_rerun_is_a_no_op(self, db_path: Path):
        assert await initialize_database(db_path) == []
        assert not list(db_path.parent.glob("*.backup_*"))

    async def test_changed_checksum_stops(self, db_path: Path):
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute(
                "UPDATE schema_migrations SET checksum = 'edited' WHERE version = '001'"
            )
            await conn.commit()

        results = await initialize_database(db_path, create_backup_before=False)

        assert len(results) == 1
        assert results[0].success is False
        assert "checksum" in results[0].error

    async def test_status(self, tmp_path: Path, db_path: Path):
        missing = await get_migration_status(tmp_path / "absent.db")
        assert missing["exists"] is False
        assert "001" in missing["pending_migrations"]

        status = await get_migration_status(db_path)
        assert status["applied_migrations"] == ["001"]
        assert status["pending_migrations"] == []

    async def test_backup_is_a_readable_copy(self, db_path: Path):
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("INSERT INTO products (organization_id, name) VALUES (1, 'Gauze')")
            await conn.commit()
            backup_path = await backup_database(conn, db_path)

        async with aiosqlite.connect(backup_path) as copy:
            cursor = await copy.execute("SELECT name FROM products")
            assert [row[0] for row in await cursor.fetchall()] == ["Gauze"]


class TestLedgerChecks:
    async def test_clean_database_passes(self, db_path: Path):
        checks = await checks_by_name(db_path)

        assert set(checks) == {
            "schema_objects",
            "foreign_keys",
            "ledger_balance",
            "restock_receipts",
        }
        assert all(c.passed for c in checks.values())

    async def test_missing_append_only_trigger(self, db_path: Path):
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("DROP TRIGGER trg_stock_movements_no_delete")
            await conn.commit()

        checks = await checks_by_name(db_path)

        assert checks["schema_objects"].failures == ["trg_stock_movements_no_delete"]

    async def test_stock_written_outside_ledger(self, db_path: Path):
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute(
                "INSERT INTO products (organization_id, name, stock_quantity) VALUES (1, 'X', 5)"
            )
            await conn.commit()

        checks = await checks_by_name(db_path)

        assert checks["ledger_balance"].failures == [1]

    async def test_receipt_not_reflected_on_order(self, db_path: Path):
        async with aiosqlite.connect(db_path) as conn:
            await conn.executescript(
                """
                INSERT INTO products (id, organization_id, name, stock_quantity)
                VALUES (1, 1, 'Amoxicillin', 5);
                INSERT INTO restock_orders
                    (id, organization_id, product_id, quantity, price, supplier, purchase_date)
                VALUES (7, 1, 1, 10, '0.45', 'Cofares', '2024-06-03');
                INSERT INTO stock_movements
                    (organization_id, product_id, movement_type, quantity,
                     movement_date, restock_order_id)
                VALUES (1, 1, 'purchase', 5, '2024-06-03', 7);
                """
            )

        checks = await checks_by_name(db_path)

        assert checks["ledger_balance"].passed
        assert checks["restock_receipts"].failures == [7]
