# routes_metrics.py

"""Prometheus metrics and /metrics endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest

orders_created_total = Counter("orders_created_total", "Total orders created")
orders_created_total.inc(0)

order_status_changes_total = Counter(
    "order_status_changes_total", "Total order status changes", ["status"]
)

orders_promoted_total = Counter(
    "orders_promoted_total", "Total PENDING orders promoted to PROCESSING"
)
orders_promoted_total.inc(0)

promoter_runs_total = Counter(
    "promoter_runs_total", "Promoter ticks by outcome", ["outcome"]
)

http_errors_total = Counter(
    "http_errors_total",
    "HTTP error responses by status and route template",
    ["status", "route"],
)

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Expose Prometheus metrics."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
