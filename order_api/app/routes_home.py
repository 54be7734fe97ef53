"""Service information and liveness routes."""

from __future__ import annotations

from fastapi import APIRouter

APP_NAME = "E-commerce Order Processing System"
APP_VERSION = "1.0.0"

router = APIRouter()


@router.get("/", include_in_schema=False)
async def home() -> dict:
    """Describe the service and its endpoints."""
    return {
        "application": APP_NAME,
        "version": APP_VERSION,
        "status": "Running",
        "apiEndpoints": {
            "orders": "/api/orders",
            "createOrder": "POST /api/orders",
            "getOrder": "GET /api/orders/{id}",
            "getAllOrders": "GET /api/orders",
            "updateStatus": "PUT /api/orders/{id}/status",
            "cancelOrder": "POST /api/orders/{id}/cancel",
        },
        "docs": "/docs",
        "apiDocs": "/openapi.json",
        "metrics": "/metrics",
    }


@router.get("/health", include_in_schema=False)
async def health() -> dict:
    return {"status": "ok"}
