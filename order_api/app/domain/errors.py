"""Exceptions raised by the order core.

Each error knows the HTTP status and short label it is reported with, so
the API layer can render every failure through a single handler.
"""

from __future__ import annotations

from typing import List, Optional


class OrderError(Exception):
    """Base class for failures surfaced to API clients."""

    status_code = 400
    error = "Bad Request"

    def __init__(self, message: str, details: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(OrderError):
    """Malformed input such as a blank name or an empty item list."""

    error = "Validation Failed"


class OrderNotFoundError(OrderError):
    """The referenced order does not exist."""

    status_code = 404
    error = "Not Found"

    def __init__(self, order_id: int) -> None:
        super().__init__(f"Order not found with id: {order_id}")
        self.order_id = order_id


class InvalidOrderOperationError(OrderError):
    """A status change or cancellation violates the order lifecycle."""


class ConcurrentUpdateError(OrderError):
    """Another writer changed the order between our read and our write."""

    status_code = 409
    error = "Conflict"

    def __init__(self, order_id: int | None = None) -> None:
        subject = "Order" if order_id is None else f"Order {order_id}"
        super().__init__(f"{subject} was modified concurrently; reload and retry")
        self.order_id = order_id


class StoreError(OrderError):
    """The persistence layer failed."""

    status_code = 500
    error = "Internal Server Error"
