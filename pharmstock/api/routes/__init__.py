"""API route modules."""

from pharmstock.api.routes.health import router as health_router
from pharmstock.api.routes.movements import router as movements_router
from pharmstock.api.routes.products import router as products_router
from pharmstock.api.routes.reports import router as reports_router
from pharmstock.api.routes.restock_orders import router as restock_orders_router

__all__ = [
    "health_router",
    "products_router",
    "movements_router",
    "restock_orders_router",
    "reports_router",
]
