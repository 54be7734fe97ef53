"""Domain models and helpers."""

from .errors import (
    ConcurrentUpdateError,
    InvalidOrderOperationError,
    OrderError,
    OrderNotFoundError,
    StoreError,
    ValidationError,
)
from .order_status import (
    TERMINAL,
    TRANSITIONS,
    Ok,
    OrderStatus,
    Rejected,
    TransitionDecision,
    can_transition,
    check_transition,
)

__all__ = [
    "OrderStatus",
    "TERMINAL",
    "TRANSITIONS",
    "Ok",
    "Rejected",
    "TransitionDecision",
    "can_transition",
    "check_transition",
    "OrderError",
    "ValidationError",
    "OrderNotFoundError",
    "InvalidOrderOperationError",
    "ConcurrentUpdateError",
    "StoreError",
]
