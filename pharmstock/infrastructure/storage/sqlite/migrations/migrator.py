"""
Versioned schema migrations for the inventory database.

Migrations are ``vNNN_name.sql`` files next to this module. Each one runs
in its own transaction and is recorded with its checksum in
``schema_migrations``. After every migration, and on ``--verify``, the
ledger checks below must pass: schema objects present (including the
append-only triggers), no foreign key violations, every product's stock
equal to its ledger sum and no order received past its quantity.
"""

import asyncio
import hashlib
import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import aiosqlite

from pharmstock.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

TRACKING_DDL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    checksum TEXT NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (datetime('now')),
    execution_time_ms INTEGER
)
"""

# (sqlite_master type, name) the services rely on
SCHEMA_OBJECTS = (
    ("table", "products"),
    ("table", "stock_movements"),
    ("table", "restock_orders"),
    ("index", "idx_movements_idempotency"),
    ("trigger", "trg_stock_movements_no_update"),
    ("trigger", "trg_stock_movements_no_delete"),
)

DRIFT_SQL = """
SELECT p.id, p.stock_quantity, COALESCE(SUM(m.quantity), 0) AS ledger
FROM products p
LEFT JOIN stock_movements m ON m.product_id = p.id
GROUP BY p.id
HAVING p.stock_quantity != ledger
"""

OVER_RECEIVED_SQL = """
SELECT o.id, o.quantity, o.received_quantity, COALESCE(SUM(m.quantity), 0) AS posted
FROM restock_orders o
LEFT JOIN stock_movements m
    ON m.restock_order_id = o.id AND m.movement_type = 'purchase'
GROUP BY o.id
HAVING posted > o.quantity OR posted != o.received_quantity
"""


@dataclass
class Migration:
    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "Migration":
        match = re.fullmatch(r"v(\d+)_(\w+)\.sql", path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        checksum = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(match.group(1), match.group(2), path, checksum)


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


@dataclass
class LedgerCheck:
    """One verification outcome; ``failures`` lists offending objects or rows."""

    check: str
    failures: list = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failures


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[Migration]:
    migrations = []
    for path in sorted(directory.glob("v*.sql")):
        try:
            migrations.append(Migration.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return migrations


async def applied_checksums(conn: aiosqlite.Connection) -> dict[str, str]:
    await conn.execute(TRACKING_DDL)
    await conn.commit()
    cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def run_ledger_checks(conn: aiosqlite.Connection) -> list[LedgerCheck]:
    cursor = await conn.execute("SELECT type, name FROM sqlite_master")
    present = {(row[0], row[1]) for row in await cursor.fetchall()}
    missing = [name for kind, name in SCHEMA_OBJECTS if (kind, name) not in present]
    checks = [LedgerCheck("schema_objects", missing)]
    if missing:
        return checks

    cursor = await conn.execute("PRAGMA foreign_key_check")
    checks.append(LedgerCheck("foreign_keys", [tuple(r) for r in await cursor.fetchall()]))

    cursor = await conn.execute(DRIFT_SQL)
    checks.append(LedgerCheck("ledger_balance", [row[0] for row in await cursor.fetchall()]))

    cursor = await conn.execute(OVER_RECEIVED_SQL)
    checks.append(LedgerCheck("restock_receipts", [row[0] for row in await cursor.fetchall()]))
    return checks


async def apply_migration(conn: aiosqlite.Connection, migration: Migration) -> MigrationResult:
    """Run one migration script and record it, all in one transaction."""
    start = time.perf_counter()
    try:
        await conn.executescript(
            "BEGIN IMMEDIATE;\n" + migration.path.read_text(encoding="utf-8")
        )
        elapsed = int((time.perf_counter() - start) * 1000)
        await conn.execute(
            "INSERT INTO schema_migrations (version, name, checksum, execution_time_ms) "
            "VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, elapsed),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(
            migration.version,
            migration.name,
            success=False,
            execution_time_ms=int((time.perf_counter() - start) * 1000),
            error=str(e),
        )

    logger.info("migration_applied", version=migration.version, execution_time_ms=elapsed)
    return MigrationResult(migration.version, migration.name, True, elapsed)


async def backup_database(conn: aiosqlite.Connection, db_path: Path) -> Path:
    """Online copy of the database, consistent even with a WAL in use."""
    backup_path = db_path.with_suffix(f".backup_{datetime.now():%Y%m%d_%H%M%S}.db")
    async with aiosqlite.connect(backup_path) as target:
        await conn.backup(target)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Apply pending migrations and return one result per attempted migration.

    Stops at the first failure: a script error, a checksum that no longer
    matches an applied migration or a ledger check that fails afterwards.
    A backup taken before migrating is removed only when everything
    succeeded.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    results: list[MigrationResult] = []
    backup_path = None

    async with aiosqlite.connect(db_path) as conn:
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")

        applied = await applied_checksums(conn)
        pending = []
        for migration in discover_migrations():
            if migration.version not in applied:
                pending.append(migration)
            elif applied[migration.version] != migration.checksum:
                logger.error("migration_checksum_changed", version=migration.version)
                results.append(
                    MigrationResult(
                        migration.version,
                        migration.name,
                        success=False,
                        execution_time_ms=0,
                        error="checksum differs from the applied migration",
                    )
                )
                return results

        if not pending:
            logger.info(
                "schema_up_to_date", db_path=str(db_path), version=max(applied, default=None)
            )
            return results

        if create_backup_before and applied:
            backup_path = await backup_database(conn, db_path)

        for migration in pending:
            result = await apply_migration(conn, migration)
            results.append(result)
            if not result.success:
                break

            failed = [c for c in await run_ledger_checks(conn) if not c.passed]
            if failed:
                logger.error(
                    "post_migration_checks_failed",
                    version=migration.version,
                    checks={c.check: c.failures for c in failed},
                )
                result.success = False
                result.error = ", ".join(c.check for c in failed)
                break

    if backup_path is not None and all(r.success for r in results):
        backup_path.unlink()
    elif backup_path is not None:
        logger.warning("database_backup_kept", backup_path=str(backup_path))
    return results


# Alias used by the application lifespan
run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict:
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()
    if not db_path.exists():
        return {
            "exists": False,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await applied_checksums(conn)
    return {
        "exists": True,
        "applied_migrations": sorted(applied),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
    }


async def verify_database(db_path: Path | None = None) -> list[LedgerCheck]:
    db_path = db_path or get_settings().storage.db_path
    async with aiosqlite.connect(db_path) as conn:
        return await run_ledger_checks(conn)


def main() -> None:
    """CLI entry point: apply migrations, or report with --status / --verify."""
    import argparse

    parser = argparse.ArgumentParser(description="PharmStock database migrations")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--status", action="store_true", help="Show applied and pending versions")
    group.add_argument("--verify", action="store_true", help="Run the ledger checks")
    parser.add_argument("--no-backup", action="store_true", help="Skip the pre-migration backup")
    args = parser.parse_args()

    if args.status:
        status = asyncio.run(get_migration_status(args.db_path))
        print(f"Applied: {', '.join(status['applied_migrations']) or '-'}")
        print(f"Pending: {', '.join(status['pending_migrations']) or '-'}")
        return

    if args.verify:
        checks = asyncio.run(verify_database(args.db_path))
        for check in checks:
            print(f"[{'PASS' if check.passed else 'FAIL'}] {check.check} {check.failures or ''}")
        raise SystemExit(0 if all(c.passed for c in checks) else 1)

    results = asyncio.run(initialize_database(args.db_path, not args.no_backup))
    for result in results:
        suffix = f": {result.error}" if result.error else ""
        print(f"[{'OK' if result.success else 'FAILED'}] v{result.version} {result.name}{suffix}")
    raise SystemExit(0 if all(r.success for r in results) else 1)


if __name__ == "__main__":
    main()
