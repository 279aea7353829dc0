"""Core interfaces (ports) for dependency injection."""

from pharmstock.core.interfaces.ledger_store import IStockLedgerStore, LedgerPosting
from pharmstock.core.interfaces.product_store import IProductStore
from pharmstock.core.interfaces.restock_store import IRestockOrderStore, RestockReceipt

__all__ = [
    # Storage interfaces
    "IProductStore",
    "IStockLedgerStore",
    "IRestockOrderStore",
    # Results
    "LedgerPosting",
    "RestockReceipt",
]
