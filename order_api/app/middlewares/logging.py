import json
import logging
import time
import uuid
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ..obs import capture_exception
from ..utils.responses import error_response
from .request_id import REQUEST_ID_HEADER, request_id_ctx, resolve_request_id

# Fields in requests that should be redacted from logs
PII_KEYS = {"customeremail", "email"}


logger = logging.getLogger("api")


def _redact(obj):
    if isinstance(obj, dict):
        return {
            k: ("***" if k.lower() in PII_KEYS else _redact(v)) for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [_redact(v) for v in obj]
    return obj


class LoggingMiddleware(BaseHTTPMiddleware):
    """Emit structured inbound/outbound request logs with a request ID."""

    async def dispatch(self, request: Request, call_next):
        req_id = getattr(request.state, "request_id", None)
        token = None
        if not req_id:
            req_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
            request.state.request_id = req_id
            # Fallback for contexts where RequestIdMiddleware is absent
            token = request_id_ctx.set(req_id)

        body_bytes = await request.body()

        async def receive() -> dict:
            return {"type": "http.request", "body": body_bytes, "more_body": False}

        request._receive = receive

        body = None
        if body_bytes:
            try:
                body = json.loads(body_bytes)
            except ValueError:
                body = None

        inbound = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "req_id": req_id,
            "path": request.url.path,
            "method": request.method,
            "ip": request.client.host if request.client else None,
        }
        query = dict(request.query_params)
        if query:
            inbound["query"] = _redact(query)
        if body is not None:
            inbound["body"] = _redact(body)
        logger.info(json.dumps(inbound), extra={"route": request.url.path})

        start = time.perf_counter()
        error_id = None
        try:
            response = await call_next(request)
        except Exception as exc:
            error_id = uuid.uuid4().hex
            logger.exception(json.dumps({"req_id": req_id, "error_id": error_id}))
            capture_exception(exc, req_id=req_id, error_id=error_id)
            response = error_response(
                500, "Internal Server Error", "Internal Server Error", request.url.path
            )
        dur_ms = int((time.perf_counter() - start) * 1000)
        status = response.status_code
        outbound = {
            "req_id": req_id,
            "method": request.method,
            "route": request.url.path,
            "status": status,
            "latency_ms": dur_ms,
        }
        if error_id:
            outbound["error_id"] = error_id
        log_fn = logger.error if status >= 500 else logger.info
        log_fn(
            json.dumps(outbound),
            extra={"route": request.url.path, "status": status, "latency_ms": dur_ms},
        )

        response.headers[REQUEST_ID_HEADER] = req_id
        if token is not None:
            request_id_ctx.reset(token)
        return response
