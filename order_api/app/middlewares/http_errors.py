from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ..routes_metrics import http_errors_total

UNMATCHED_ROUTE = "unmatched"


def route_template(request: Request) -> str:
    """Return the matched path template, e.g. ``/api/orders/{order_id}``.

    Raw paths carry order ids and would give every order its own series.
    """
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


class HttpErrorCounterMiddleware(BaseHTTPMiddleware):
    """Count 4xx/5xx responses by status code and route template."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        if response.status_code >= 400:
            http_errors_total.labels(
                status=str(response.status_code), route=route_template(request)
            ).inc()
        return response
