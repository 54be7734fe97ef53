from __future__ import annotations

import hashlib
import logging
import time

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine

DEFAULT_SLOW_QUERY_MS = 200

logger = logging.getLogger("obs")


def add_query_logger(
    engine: Engine | AsyncEngine, slow_query_ms: int = DEFAULT_SLOW_QUERY_MS
) -> None:
    """Attach timing-based logging to ``engine``.

    Statements slower than ``slow_query_ms`` are logged at WARNING, the rest
    at DEBUG. Parameters are hashed so customer data never reaches the log.
    """
    target = engine.sync_engine if hasattr(engine, "sync_engine") else engine

    def before_cursor_execute(
        conn, cursor, statement, parameters, context, executemany
    ):  # type: ignore[no-untyped-def]
        context._query_start_time = time.perf_counter()

    def after_cursor_execute(
        conn, cursor, statement, parameters, context, executemany
    ):  # type: ignore[no-untyped-def]
        total_ms = (time.perf_counter() - context._query_start_time) * 1000
        sql = " ".join(statement.split())
        if len(sql) > 200:
            sql = sql[:197] + "..."
        params_hash = hashlib.sha256(repr(parameters).encode()).hexdigest()[:8]
        if total_ms > slow_query_ms:
            logger.warning(
                "slow query %dms sql=%s params=%s", int(total_ms), sql, params_hash
            )
        else:
            logger.debug("query %dms sql=%s params=%s", int(total_ms), sql, params_hash)

    event.listen(target, "before_cursor_execute", before_cursor_execute)
    event.listen(target, "after_cursor_execute", after_cursor_execute)
