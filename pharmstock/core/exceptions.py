"""
Domain exceptions for the PharmStock service.

Every rejection of a semantically invalid request maps to one of four
kinds: not found, invalid argument, invalid quantity, invalid state.
Transient storage failures are a separate, retryable kind.
"""

from typing import Any


class PharmStockError(Exception):
    """Base exception for all PharmStock errors."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Not found
class NotFoundError(PharmStockError):
    """Referenced entity does not exist for the organization."""

    pass


class ProductNotFoundError(NotFoundError):
    """Product not found in the organization's catalog."""

    def __init__(self, product_id: int, organization_id: int | None = None):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id, "organization_id": organization_id},
        )


class RestockOrderNotFoundError(NotFoundError):
    """Restock order not found."""

    def __init__(self, order_id: int, organization_id: int | None = None):
        super().__init__(
            f"Restock order not found: {order_id}",
            code="RESTOCK_ORDER_NOT_FOUND",
            details={"order_id": order_id, "organization_id": organization_id},
        )


# Invalid argument
class InvalidArgumentError(PharmStockError):
    """Malformed or out-of-range input."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Invalid value for '{field}': {message}",
            code="INVALID_ARGUMENT",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


# Invalid quantity
class InvalidQuantityError(PharmStockError):
    """Operation would drive stock negative or over-receive an order."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, code="INVALID_QUANTITY", details=details)


class InsufficientStockError(InvalidQuantityError):
    """Movement would leave the product with negative stock."""

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, available {available}",
            details={
                "product_id": product_id,
                "requested": requested,
                "available": available,
            },
        )
        self.code = "INSUFFICIENT_STOCK"


class ReceiptExceedsOrderError(InvalidQuantityError):
    """Receipt would push the received total over the ordered quantity."""

    def __init__(self, order_id: int | None, received: int, ordered: int, attempted: int):
        super().__init__(
            f"Receipt of {attempted} exceeds order {order_id}: "
            f"{received} of {ordered} already received",
            details={
                "order_id": order_id,
                "received_quantity": received,
                "ordered_quantity": ordered,
                "attempted": attempted,
            },
        )
        self.code = "RECEIPT_EXCEEDS_ORDER"


# Invalid state
class InvalidStateError(PharmStockError):
    """Operation not permitted from the entity's current status."""

    def __init__(self, entity: str, entity_id: int | None, status: str, operation: str):
        super().__init__(
            f"Cannot {operation} {entity} {entity_id} in status '{status}'",
            code="INVALID_STATE",
            details={
                "entity": entity,
                "entity_id": entity_id,
                "status": status,
                "operation": operation,
            },
        )


# Storage
class StorageError(PharmStockError):
    """Base exception for storage operations."""

    pass


class StorageUnavailableError(StorageError):
    """Storage could not be reached or was locked; safe to retry."""

    retryable = True

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Storage unavailable during {operation}: {error}",
            code="STORAGE_UNAVAILABLE",
            details={"operation": operation, "error": error},
        )


class ConcurrentModificationError(StorageError):
    """Row changed between read and write inside a transition."""

    retryable = True

    def __init__(self, entity: str, entity_id: int):
        super().__init__(
            f"{entity} {entity_id} was modified concurrently",
            code="CONCURRENT_MODIFICATION",
            details={"entity": entity, "entity_id": entity_id},
        )
