"""Order workflows: creation, lookups and status changes.

Every mutating workflow runs its fetch, validation, mutation and write-back
inside one :func:`~order_api.app.db.transaction`, so two writers racing on
the same order cannot both commit a change computed from the same read.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db import transaction
from ..domain import (
    InvalidOrderOperationError,
    OrderError,
    OrderNotFoundError,
    OrderStatus,
    Rejected,
    ValidationError,
    check_transition,
)
from ..models import CENT, Order, OrderItem, utcnow
from ..repos_sqlalchemy import orders_repo_sql
from ..routes_metrics import (
    order_status_changes_total,
    orders_created_total,
    orders_promoted_total,
)

logger = logging.getLogger(__name__)


def validate_new_order(
    customer_name: str, customer_email: str, items: List[OrderItem]
) -> None:
    """Raise :class:`ValidationError` listing every invalid field."""

    details: list[str] = []
    if not customer_name or not customer_name.strip():
        details.append("customerName: Customer name is required")
    if not customer_email or not customer_email.strip():
        details.append("customerEmail: Customer email is required")
    else:
        try:
            validate_email(customer_email.strip(), check_deliverability=False)
        except EmailNotValidError as exc:
            details.append(f"customerEmail: {exc}")
    if not items:
        details.append("items: Order must contain at least one item")
    for idx, item in enumerate(items):
        if not item.product_name or not item.product_name.strip():
            details.append(f"items[{idx}].productName: Product name is required")
        if item.quantity is None or item.quantity < 1:
            details.append(f"items[{idx}].quantity: Quantity must be at least 1")
        if item.price is None or item.price < 0:
            details.append(f"items[{idx}].price: Price must be greater than or equal to 0")
        elif Decimal(str(item.price)) != Decimal(str(item.price)).quantize(CENT):
            details.append(
                f"items[{idx}].price: Price must have at most 2 decimal places"
            )
    if details:
        raise ValidationError("Invalid order request", details=details)


class OrderService:
    """Coordinate the order store and the status transition rules."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def _fetch(
        self, session: AsyncSession, order_id: int, for_update: bool = False
    ) -> Order:
        order = await orders_repo_sql.get_order(session, order_id, for_update=for_update)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def create_order(
        self,
        customer_name: str,
        customer_email: str,
        items: Iterable[OrderItem],
    ) -> Order:
        """Persist a new PENDING order holding ``items``."""

        items = list(items)
        validate_new_order(customer_name, customer_email, items)
        logger.info("Creating new order for customer: %s", customer_name)

        now = utcnow()
        order = Order(
            customer_name=customer_name.strip(),
            customer_email=customer_email.strip(),
            status=OrderStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        for item in items:
            order.add_item(item)
        order.calculate_total_amount()

        async with transaction(self.session_factory) as session:
            await orders_repo_sql.create_order(session, order)

        orders_created_total.inc()
        logger.info("Order created successfully with ID: %s", order.id)
        return order

    async def get_order_by_id(self, order_id: int) -> Order:
        logger.info("Fetching order with ID: %s", order_id)
        async with transaction(self.session_factory) as session:
            return await self._fetch(session, order_id)

    async def get_all_orders(self, status: Optional[OrderStatus] = None) -> List[Order]:
        """Return all orders, or only those in ``status`` when given."""

        logger.info("Fetching all orders with status: %s", status)
        async with transaction(self.session_factory) as session:
            if status is not None:
                return await orders_repo_sql.list_by_status(session, OrderStatus(status))
            return await orders_repo_sql.list_orders(session)

    async def get_orders_by_email(
        self, customer_email: str, status: Optional[OrderStatus] = None
    ) -> List[Order]:
        """Return orders placed with ``customer_email``, optionally in ``status``."""

        async with transaction(self.session_factory) as session:
            return await orders_repo_sql.list_by_email(
                session,
                customer_email,
                status=None if status is None else OrderStatus(status),
            )

    async def update_order_status(
        self, order_id: int, new_status: OrderStatus
    ) -> Order:
        """Move ``order_id`` to ``new_status`` if the lifecycle allows it."""

        new_status = OrderStatus(new_status)
        logger.info("Updating order %s status to: %s", order_id, new_status.value)
        async with transaction(self.session_factory, order_id) as session:
            order = await self._fetch(session, order_id, for_update=True)
            decision = check_transition(order.status, new_status)
            if isinstance(decision, Rejected):
                raise InvalidOrderOperationError(decision.reason)
            order.status = new_status
            order.updated_at = utcnow()
            await orders_repo_sql.save(session, order)

        order_status_changes_total.labels(status=new_status.value).inc()
        logger.info(
            "Order %s status updated successfully",
            order_id,
            extra={"order_id": order_id},
        )
        return order

    async def cancel_order(self, order_id: int) -> Order:
        """Cancel ``order_id``; only PENDING orders can be cancelled."""

        logger.info("Attempting to cancel order: %s", order_id)
        async with transaction(self.session_factory, order_id) as session:
            order = await self._fetch(session, order_id, for_update=True)
            if not order.can_be_cancelled():
                raise InvalidOrderOperationError(
                    f"Order cannot be cancelled. Current status: {order.status.value}"
                )
            order.status = OrderStatus.CANCELLED
            order.updated_at = utcnow()
            await orders_repo_sql.save(session, order)

        order_status_changes_total.labels(status=OrderStatus.CANCELLED.value).inc()
        logger.info(
            "Order %s cancelled successfully", order_id, extra={"order_id": order_id}
        )
        return order

    async def process_pending_orders(self) -> int:
        """Promote every PENDING order to PROCESSING.

        Each order is promoted in its own transaction. An order that fails,
        or is no longer PENDING by the time it is locked, is logged and
        skipped. Returns the number of orders actually promoted.
        """

        logger.info("Processing pending orders...")
        async with transaction(self.session_factory) as session:
            pending = await orders_repo_sql.list_by_status(session, OrderStatus.PENDING)
        pending_ids = [order.id for order in pending]

        processed = 0
        for order_id in pending_ids:
            try:
                if await self._promote(order_id):
                    processed += 1
            except OrderError as exc:
                logger.warning("Could not promote order %s: %s", order_id, exc.message)

        orders_promoted_total.inc(processed)
        logger.info("Processed %d pending orders", processed)
        return processed

    async def _promote(self, order_id: int) -> bool:
        async with transaction(self.session_factory, order_id) as session:
            order = await orders_repo_sql.get_order(session, order_id, for_update=True)
            if order is None or order.status != OrderStatus.PENDING:
                logger.debug("Order %s no longer PENDING; skipping", order_id)
                return False
            order.status = OrderStatus.PROCESSING
            order.updated_at = utcnow()
            await orders_repo_sql.save(session, order)
        order_status_changes_total.labels(status=OrderStatus.PROCESSING.value).inc()
        logger.debug("Order %s moved to PROCESSING", order_id)
        return True
