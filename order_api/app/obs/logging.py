import json
import logging
import re
from datetime import datetime, timezone
from typing import Any

from ..middlewares.request_id import request_id_ctx

EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+", re.I)

# aiosqlite logs every call it forwards to its worker thread at DEBUG.
QUIET_LOGGERS = ("aiosqlite",)

# Optional attributes copied from ``extra=`` into the JSON line.
EXTRA_FIELDS = ("route", "status", "latency_ms", "order_id")


def _redact_pii(text: str) -> str:
    """Replace email addresses with ***."""
    return EMAIL_RE.sub("***", text)


class RequestIdFilter(logging.Filter):
    """Attach request id from context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "req_id", None) is None:
            record.req_id = request_id_ctx.get(None)
        return True


class JsonFormatter(logging.Formatter):
    """Render a record as one JSON object per line, emails masked."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "req_id": getattr(record, "req_id", None),
        }
        for field in EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                data[field] = value
        data["msg"] = _redact_pii(record.getMessage())
        if record.exc_info:
            data["exc"] = _redact_pii(self.formatException(record.exc_info))
        return json.dumps(data, default=str)


class _OrderApiHandler(logging.StreamHandler):
    """Marker type so repeated configuration replaces only our handler."""


def configure_logging(level: int | str = logging.INFO) -> None:
    """Send root logging to stderr as JSON at ``level``.

    Safe to call more than once; handlers installed by others are kept.
    """

    handler = _OrderApiHandler()
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, _OrderApiHandler)]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
