"""Order status enumeration and the transition decision table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class OrderStatus(str, Enum):
    """Enumerate the lifecycle states for an order."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


TERMINAL: frozenset[OrderStatus] = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
)


@dataclass(frozen=True)
class Ok:
    """The requested transition is allowed."""


@dataclass(frozen=True)
class Rejected:
    """The requested transition is not allowed, with the reason why."""

    reason: str


TransitionDecision = Union[Ok, Rejected]


@dataclass(frozen=True)
class _Rule:
    allowed: frozenset[OrderStatus]
    reason: str


# One entry per current status. Terminal states allow nothing.
TRANSITIONS: dict[OrderStatus, _Rule] = {
    OrderStatus.PENDING: _Rule(
        frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
        "PENDING orders can only move to PROCESSING or be CANCELLED",
    ),
    OrderStatus.PROCESSING: _Rule(
        frozenset({OrderStatus.SHIPPED}),
        "PROCESSING orders can only move to SHIPPED",
    ),
    OrderStatus.SHIPPED: _Rule(
        frozenset({OrderStatus.DELIVERED}),
        "SHIPPED orders can only move to DELIVERED",
    ),
    OrderStatus.DELIVERED: _Rule(
        frozenset(), "Cannot update status of a delivered order"
    ),
    OrderStatus.CANCELLED: _Rule(
        frozenset(), "Cannot update status of a cancelled order"
    ),
}


def check_transition(src: OrderStatus, dst: OrderStatus) -> TransitionDecision:
    """Decide whether an order in ``src`` may move to ``dst``.

    Requests for the current status are rejected like any other
    transition missing from the table.
    """

    rule = TRANSITIONS[OrderStatus(src)]
    if OrderStatus(dst) in rule.allowed:
        return Ok()
    return Rejected(rule.reason)


def can_transition(src: OrderStatus, dst: OrderStatus) -> bool:
    """Return ``True`` if an order can move from ``src`` to ``dst``."""

    return isinstance(check_transition(src, dst), Ok)
