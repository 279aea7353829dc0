"""PharmStock - pharmacy inventory and stock-movement ledger service."""

__version__ = "1.0.0"
