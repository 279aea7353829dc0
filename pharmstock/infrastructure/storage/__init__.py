"""Storage infrastructure implementations."""

from pharmstock.infrastructure.storage.sqlite import (
    SQLiteProductStore,
    SQLiteRestockOrderStore,
    SQLiteStockLedgerStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteProductStore",
    "SQLiteStockLedgerStore",
    "SQLiteRestockOrderStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
