"""Translate between API schemas and database entities."""

from __future__ import annotations

from typing import Iterable, List

from .domain import OrderStatus
from .models import Order, OrderItem
from .schemas import OrderItemRequest, OrderItemResponse, OrderRequest, OrderResponse


def to_item_entity(request: OrderItemRequest) -> OrderItem:
    return OrderItem(
        product_name=request.product_name,
        quantity=request.quantity,
        price=request.price,
    )


def to_item_entities(requests: Iterable[OrderItemRequest]) -> List[OrderItem]:
    return [to_item_entity(item) for item in requests]


def to_entity(request: OrderRequest) -> Order:
    """Build a PENDING ``Order`` with its items and computed total."""

    order = Order(
        customer_name=request.customer_name,
        customer_email=str(request.customer_email),
        status=OrderStatus.PENDING,
    )
    for item in to_item_entities(request.items):
        order.add_item(item)
    order.calculate_total_amount()
    return order


def to_item_response(item: OrderItem) -> OrderItemResponse:
    return OrderItemResponse(
        id=item.id,
        product_name=item.product_name,
        quantity=item.quantity,
        price=item.price,
        subtotal=item.subtotal,
    )


def to_response(order: Order) -> OrderResponse:
    """Render ``order`` with every persisted field."""

    return OrderResponse(
        id=order.id,
        customer_name=order.customer_name,
        customer_email=order.customer_email,
        status=order.status,
        items=[to_item_response(item) for item in order.items],
        total_amount=order.total_amount,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )
