"""Order Sweep Job

Periodically removes expired orders from the in-memory order table.

Expired orders are already invisible to every request, so a delayed or
skipped sweep only costs memory. Orders that are in the middle of a request
are left for the next run.
"""

import asyncio
import logging

from services.order import OrderService

logger = logging.getLogger(__name__)


class OrderSweepJob:
    def __init__(self, order_service: OrderService, check_interval_seconds: int = 3600):
        self.order_service = order_service
        self.check_interval_seconds = check_interval_seconds
        self._task: asyncio.Task | None = None

    async def run_once(self) -> int:
        try:
            return await self.order_service.sweep_expired()
        except Exception as e:
            logger.error(f"[Order Sweep] ❌ Sweep failed: {e}", exc_info=True)
            return 0

    async def _run(self) -> None:
        logger.info(f"[Order Sweep] Started (interval: {self.check_interval_seconds}s)")
        while True:
            await asyncio.sleep(self.check_interval_seconds)
            await self.run_once()

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            logger.info("[Order Sweep] Stopped")
        self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
