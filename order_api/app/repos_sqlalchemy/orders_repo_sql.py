"""SQLAlchemy-backed repository helpers for orders.

These helpers only touch the database; they never commit. Callers run them
inside :func:`order_api.app.db.transaction` so that a read, a mutation and
the write-back happen in one atomic scope.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain import OrderStatus
from ..models import Order


async def create_order(session: AsyncSession, order: Order) -> Order:
    """Insert ``order`` with its items and return it with ids assigned."""

    session.add(order)
    await session.flush()  # obtain order.id and item ids
    return order


async def get_order(
    session: AsyncSession, order_id: int, for_update: bool = False
) -> Optional[Order]:
    """Return the order with ``order_id`` or ``None``.

    ``for_update`` takes a row lock on backends that support
    ``SELECT ... FOR UPDATE``; the row version check covers the rest.
    """

    stmt = select(Order).where(Order.id == order_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_orders(session: AsyncSession) -> List[Order]:
    """Return every order in insertion order."""

    result = await session.execute(select(Order).order_by(Order.id))
    return list(result.scalars())


async def list_by_status(session: AsyncSession, status: OrderStatus) -> List[Order]:
    """Return orders currently in ``status``."""

    result = await session.execute(
        select(Order).where(Order.status == status).order_by(Order.id)
    )
    return list(result.scalars())


async def list_by_email(
    session: AsyncSession, email: str, status: Optional[OrderStatus] = None
) -> List[Order]:
    """Return orders placed with ``email`` (case-insensitive).

    With ``status`` only orders currently in that status are returned.
    """

    stmt = select(Order).where(func.lower(Order.customer_email) == email.strip().lower())
    if status is not None:
        stmt = stmt.where(Order.status == status)
    result = await session.execute(stmt.order_by(Order.id))
    return list(result.scalars())


async def save(session: AsyncSession, order: Order) -> Order:
    """Flush pending changes to ``order``.

    The UPDATE is guarded by the row version, so a write based on a stale
    read raises ``StaleDataError`` here.
    """

    session.add(order)
    await session.flush()
    return order
