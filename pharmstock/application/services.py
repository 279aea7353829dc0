"""
Service factory functions for dependency injection.

Wires configuration into core services. Use cases should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from pharmstock.config import get_settings
from pharmstock.core.services import StockReportService

# Singleton service instances
_report_service: StockReportService | None = None


def get_report_service() -> StockReportService:
    """
    Get or create the StockReportService instance.

    Category bucket label and healthy stock multiplier come from
    ``LedgerSettings``.
    """
    global _report_service
    if _report_service is None:
        ledger = get_settings().ledger
        _report_service = StockReportService(
            uncategorized_label=ledger.uncategorized_label,
            healthy_stock_multiplier=ledger.healthy_stock_multiplier,
        )
    return _report_service


def reset_services() -> None:
    """Reset all service singletons (for testing)."""
    global _report_service
    _report_service = None
