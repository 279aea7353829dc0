"""SQLite storage implementations."""

from pharmstock.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from pharmstock.infrastructure.storage.sqlite.ledger_store import SQLiteStockLedgerStore
from pharmstock.infrastructure.storage.sqlite.locks import KeyedLock, get_lock_registry
from pharmstock.infrastructure.storage.sqlite.product_store import SQLiteProductStore
from pharmstock.infrastructure.storage.sqlite.restock_store import SQLiteRestockOrderStore

# Aliases used by the application lifespan and health checks
get_connection_pool = get_pool
close_connection_pool = close_pool

# Singleton instances
_product_store: SQLiteProductStore | None = None
_ledger_store: SQLiteStockLedgerStore | None = None
_restock_store: SQLiteRestockOrderStore | None = None


async def get_product_store() -> SQLiteProductStore:
    """Get singleton product store instance."""
    global _product_store
    if _product_store is None:
        _product_store = SQLiteProductStore()
    return _product_store


async def get_ledger_store() -> SQLiteStockLedgerStore:
    """Get singleton stock ledger store instance."""
    global _ledger_store
    if _ledger_store is None:
        _ledger_store = SQLiteStockLedgerStore()
    return _ledger_store


async def get_restock_store() -> SQLiteRestockOrderStore:
    """Get singleton restock order store instance."""
    global _restock_store
    if _restock_store is None:
        _restock_store = SQLiteRestockOrderStore()
    return _restock_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    "get_connection_pool",
    "close_connection_pool",
    # Locks
    "KeyedLock",
    "get_lock_registry",
    # Store classes
    "SQLiteProductStore",
    "SQLiteStockLedgerStore",
    "SQLiteRestockOrderStore",
    # Factory functions
    "get_product_store",
    "get_ledger_store",
    "get_restock_store",
]
