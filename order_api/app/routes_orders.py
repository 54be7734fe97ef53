"""Routes for creating, querying and transitioning orders."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from .domain import OrderStatus
from .mapper import to_item_entities, to_response
from .schemas import ErrorResponse, OrderRequest, OrderResponse
from .services import OrderService

router = APIRouter(prefix="/api/orders", tags=["Order Management"])

_errors = {
    400: {"model": ErrorResponse, "description": "Invalid input or transition"},
    404: {"model": ErrorResponse, "description": "Order not found"},
}


def get_order_service(request: Request) -> OrderService:
    """Return the service created at application startup."""
    return request.app.state.order_service


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: _errors[400]},
    summary="Create a new order",
)
async def create_order(
    payload: OrderRequest, service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    order = await service.create_order(
        payload.customer_name,
        str(payload.customer_email),
        to_item_entities(payload.items),
    )
    return to_response(order)


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={404: _errors[404]},
    summary="Get order by ID",
)
async def get_order(
    order_id: int, service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    return to_response(await service.get_order_by_id(order_id))


@router.get("", response_model=List[OrderResponse], summary="Get all orders")
async def list_orders(
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    customer_email: Optional[str] = Query(None, alias="customerEmail"),
    service: OrderService = Depends(get_order_service),
) -> List[OrderResponse]:
    """Return all orders, optionally filtered by status and/or customer email."""

    if customer_email:
        orders = await service.get_orders_by_email(customer_email, order_status)
    else:
        orders = await service.get_all_orders(order_status)
    return [to_response(order) for order in orders]


@router.put(
    "/{order_id}/status",
    response_model=OrderResponse,
    responses=_errors,
    summary="Update order status",
)
async def update_order_status(
    order_id: int,
    new_status: OrderStatus = Query(..., alias="status"),
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    return to_response(await service.update_order_status(order_id, new_status))


@router.post(
    "/{order_id}/cancel",
    response_model=OrderResponse,
    responses=_errors,
    summary="Cancel an order",
)
async def cancel_order(
    order_id: int, service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    """Cancel an order; only PENDING orders can be cancelled."""
    return to_response(await service.cancel_order(order_id))
