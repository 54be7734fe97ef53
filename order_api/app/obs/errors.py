"""Error reporting helpers.

Exceptions go to Sentry when ``error_dsn`` is configured; otherwise they are
written to the ``obs`` logger so nothing is lost in development.
"""

from __future__ import annotations

import logging
from typing import Optional

import sentry_sdk

logger = logging.getLogger("obs")


def init_sentry(
    dsn: Optional[str] = None,
    env: Optional[str] = None,
    release: Optional[str] = None,
) -> None:
    """Initialize Sentry if a DSN is provided."""
    if not dsn:
        logger.info("ERROR_DSN not set; error sink disabled")
        return
    # Request bodies carry customer emails.
    sentry_sdk.init(dsn=dsn, environment=env, release=release, send_default_pii=False)


def capture_exception(exc: BaseException, **tags: object) -> None:
    """Forward ``exc`` to Sentry with ``tags`` (e.g. ``req_id``), else log it."""
    if not sentry_sdk.get_client().is_active():
        detail = " ".join(f"{k}={v}" for k, v in tags.items() if v is not None)
        logger.error("Unhandled exception %s", detail, exc_info=exc)
        return
    with sentry_sdk.new_scope() as scope:
        for key, value in tags.items():
            if value is not None:
                scope.set_tag(key, str(value))
        scope.capture_exception(exc)
