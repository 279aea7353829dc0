"""API middleware."""

from pharmstock.api.middleware.error_handler import ErrorHandlerMiddleware
from pharmstock.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
