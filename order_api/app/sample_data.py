"""Seed a few demo orders for local development.

Enabled with the ``load_sample_data`` setting. Nothing is written when the
store already holds orders.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .db import transaction
from .domain import OrderStatus
from .mapper import to_entity
from .repos_sqlalchemy import orders_repo_sql
from .schemas import OrderRequest

logger = logging.getLogger(__name__)

SAMPLE_ORDERS: list[tuple[dict, OrderStatus]] = [
    (
        {
            "customerName": "Alice Johnson",
            "customerEmail": "alice@example.com",
            "items": [
                {"productName": "Laptop", "quantity": 1, "price": "1299.99"},
                {"productName": "Wireless Mouse", "quantity": 2, "price": "29.99"},
            ],
        },
        OrderStatus.PENDING,
    ),
    (
        {
            "customerName": "Bob Smith",
            "customerEmail": "bob@example.com",
            "items": [{"productName": "Smartphone", "quantity": 1, "price": "899.99"}],
        },
        OrderStatus.PROCESSING,
    ),
    (
        {
            "customerName": "Carol White",
            "customerEmail": "carol@example.com",
            "items": [{"productName": "Headphones", "quantity": 1, "price": "199.99"}],
        },
        OrderStatus.SHIPPED,
    ),
]


async def load_sample_data(session_factory: async_sessionmaker[AsyncSession]) -> int:
    """Insert the sample orders into an empty store; return how many were added."""

    async with transaction(session_factory) as session:
        if await orders_repo_sql.list_orders(session):
            logger.info("Orders already present; skipping sample data")
            return 0
        logger.info("Loading sample data...")
        for payload, status in SAMPLE_ORDERS:
            order = to_entity(OrderRequest.model_validate(payload))
            order.status = status
            await orders_repo_sql.create_order(session, order)
    logger.info("Sample data loaded successfully!")
    return len(SAMPLE_ORDERS)
