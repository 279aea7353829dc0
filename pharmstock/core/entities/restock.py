"""Restock order entity and its state machine."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from pharmstock.core.entities.inventory import utc_now
from pharmstock.core.exceptions import (
    InvalidQuantityError,
    InvalidStateError,
    ReceiptExceedsOrderError,
)


class RestockStatus(str, Enum):
    """Lifecycle status of a restock order."""

    PENDING = "pending"
    PARTIAL = "partial"
    RECEIVED = "received"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (RestockStatus.RECEIVED, RestockStatus.CANCELLED)


class RestockOrder(BaseModel):
    """
    Purchase order for replenishing one product.

    pending -> partial | received | cancelled
    partial -> partial | received | cancelled
    received and cancelled are terminal.

    Transition methods never mutate in place; they return the next state so
    the store can persist it conditionally on the previous one.
    """

    id: int | None = None
    organization_id: int
    product_id: int
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., gt=0)
    supplier: str
    purchase_date: date
    expected_delivery_date: date | None = None
    status: RestockStatus = RestockStatus.PENDING
    notes: str | None = None
    received_quantity: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def remaining_quantity(self) -> int:
        return self.quantity - self.received_quantity

    @property
    def total_cost(self) -> Decimal:
        return self.price * self.quantity

    def register_receipt(self, quantity: int) -> "RestockOrder":
        """Return the order after receiving ``quantity`` more units."""
        if self.status.is_terminal:
            raise InvalidStateError("restock order", self.id, self.status.value, "receive")
        if quantity <= 0:
            raise InvalidQuantityError(
                f"Received quantity must be positive, got {quantity}",
                details={"order_id": self.id, "attempted": quantity},
            )
        cumulative = self.received_quantity + quantity
        if cumulative > self.quantity:
            raise ReceiptExceedsOrderError(
                self.id, self.received_quantity, self.quantity, quantity
            )

        status = (
            RestockStatus.RECEIVED if cumulative == self.quantity else RestockStatus.PARTIAL
        )
        return self.model_copy(
            update={
                "received_quantity": cumulative,
                "status": status,
                "updated_at": utc_now(),
            }
        )

    def cancel(self) -> "RestockOrder":
        """Return the cancelled order. Already received units stay posted."""
        if self.status.is_terminal:
            raise InvalidStateError("restock order", self.id, self.status.value, "cancel")
        return self.model_copy(
            update={"status": RestockStatus.CANCELLED, "updated_at": utc_now()}
        )
