# main.py

"""FastAPI application for order processing.

:func:`create_app` wires the store, the order service, the pending-order
promoter and the HTTP error envelope. The module-level ``app`` uses the
settings from :func:`config.get_settings` and is what uvicorn serves.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_400_BAD_REQUEST

from config import Settings, get_settings

from . import db as app_db
from .domain import OrderError
from .middlewares import (
    HttpErrorCounterMiddleware,
    LoggingMiddleware,
    RequestIdMiddleware,
)
from .obs import capture_exception, init_sentry
from .obs.logging import configure_logging
from .routes_home import APP_NAME, APP_VERSION
from .routes_home import router as home_router
from .routes_metrics import router as metrics_router
from .routes_orders import router as orders_router
from .sample_data import load_sample_data
from .services import OrderService, PendingOrderPromoter
from .utils.responses import error_response

logger = logging.getLogger("api")

_LOC_PREFIXES = {"body", "query", "path"}


def _format_validation_errors(exc: RequestValidationError) -> list[str]:
    details = []
    for error in exc.errors():
        loc = [str(p) for p in error.get("loc", ()) if p not in _LOC_PREFIXES]
        field = ".".join(loc) or "request"
        details.append(f"{field}: {error.get('msg', 'invalid value')}")
    return details


def _log_extra(request: Request, status: int) -> dict:
    return {"status": status, "route": request.url.path}


def _sentry_tags(request: Request) -> dict:
    return {
        "req_id": getattr(request.state, "request_id", None),
        "route": request.url.path,
        "order_id": request.path_params.get("order_id"),
    }


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(OrderError)
    async def order_error_handler(request: Request, exc: OrderError):
        message = exc.message
        if exc.status_code >= 500:
            logger.error(
                "order_store_error", exc_info=exc, extra=_log_extra(request, exc.status_code)
            )
            capture_exception(exc, **_sentry_tags(request))
            message = "Internal Server Error"
        else:
            logger.warning(message, extra=_log_extra(request, exc.status_code))
        return error_response(
            exc.status_code, exc.error, message, request.url.path, exc.details
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = _format_validation_errors(exc)
        logger.warning(
            "validation failed: %s", "; ".join(details),
            extra=_log_extra(request, HTTP_400_BAD_REQUEST),
        )
        return error_response(
            HTTP_400_BAD_REQUEST,
            "Validation Failed",
            "Invalid request parameters",
            request.url.path,
            details,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(str(exc.detail), extra=_log_extra(request, exc.status_code))
        try:
            phrase = HTTPStatus(exc.status_code).phrase
        except ValueError:
            phrase = "Error"
        return error_response(
            exc.status_code, phrase, str(exc.detail), request.url.path
        )

    @app.exception_handler(Exception)
    async def general_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error", extra=_log_extra(request, 500))
        capture_exception(exc, **_sentry_tags(request))
        return error_response(
            500, "Internal Server Error", "Internal Server Error", request.url.path
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application for ``settings`` (defaults to ``get_settings()``)."""

    settings = settings or get_settings()
    configure_logging(settings.log_level.upper())
    init_sentry(settings.error_dsn, env=settings.env, release=APP_VERSION)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        engine = app_db.create_engine(settings.database_url, settings.db_slow_query_ms)
        await app_db.create_schema(engine)
        session_factory = app_db.create_session_factory(engine)
        service = OrderService(session_factory)
        app.state.engine = engine
        app.state.order_service = service

        if settings.load_sample_data:
            await load_sample_data(session_factory)

        promoter = PendingOrderPromoter(service, settings.promoter_interval_secs)
        app.state.promoter = promoter
        if settings.promoter_enabled:
            promoter.start()
        try:
            yield
        finally:
            await promoter.stop()
            await engine.dispose()

    app = FastAPI(title=APP_NAME, version=APP_VERSION, lifespan=lifespan)
    app.add_middleware(HttpErrorCounterMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)
    _register_error_handlers(app)

    app.include_router(home_router)
    app.include_router(orders_router)
    app.include_router(metrics_router)
    return app


app = create_app()
