"""Background task that promotes PENDING orders to PROCESSING."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..routes_metrics import promoter_runs_total
from .order_service import OrderService

DEFAULT_INTERVAL_SECS = 300

logger = logging.getLogger(__name__)


class PendingOrderPromoter:
    """Call :meth:`OrderService.process_pending_orders` on a fixed interval.

    The first tick fires as soon as the task starts. A tick that arrives
    while the previous one is still running is skipped, so two promotions
    never run at once. Failures are logged and the loop keeps going.
    """

    def __init__(
        self, service: OrderService, interval_secs: float = DEFAULT_INTERVAL_SECS
    ) -> None:
        if interval_secs <= 0:
            raise ValueError("interval_secs must be positive")
        self.service = service
        self.interval_secs = interval_secs
        self._running = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None
        self._ticks: set[asyncio.Task] = set()

    @property
    def started(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> Optional[int]:
        """Promote pending orders once.

        Returns the number promoted, or ``None`` when the tick was skipped
        because a previous run is still in progress or the run failed.
        """

        if self._running.locked():
            logger.warning("Previous pending-order run still active; skipping tick")
            promoter_runs_total.labels(outcome="skipped").inc()
            return None
        async with self._running:
            logger.info("Running scheduled task: Process pending orders")
            try:
                count = await self.service.process_pending_orders()
            except Exception as exc:
                logger.error(
                    "Error processing pending orders: %s", exc, exc_info=True
                )
                promoter_runs_total.labels(outcome="error").inc()
                return None
            logger.info("Scheduled task completed. Processed %d orders", count)
            promoter_runs_total.labels(outcome="ok").inc()
            return count

    async def _loop(self) -> None:
        while True:
            # Run detached so a slow tick does not delay the schedule.
            tick = asyncio.create_task(self.run_once())
            self._ticks.add(tick)
            tick.add_done_callback(self._ticks.discard)
            await asyncio.sleep(self.interval_secs)

    def start(self) -> None:
        """Start ticking on the running event loop."""
        if self.started:
            return
        self._task = asyncio.create_task(self._loop(), name="pending-order-promoter")
        logger.info("Pending order promoter started (every %ss)", self.interval_secs)

    async def stop(self) -> None:
        """Cancel the ticking task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        # Let in-flight runs finish before the engine is disposed.
        if self._ticks:
            await asyncio.gather(*self._ticks, return_exceptions=True)
        logger.info("Pending order promoter stopped")
