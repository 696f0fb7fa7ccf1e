import asyncio
import logging
from typing import Optional

from supply_chain.config import QueueSettings
from supply_chain.application.purchase_order_queue import PurchaseOrderQueue
from supply_chain.application.reorder import ReorderMonitor

logger = logging.getLogger(__name__)


class DispatchLoop:
    """Background task that drains the purchase order queue on a fixed interval"""

    def __init__(
        self,
        queue: PurchaseOrderQueue,
        queue_settings: QueueSettings,
        reorder_monitor: Optional[ReorderMonitor] = None,
        run_reorder_on_tick: bool = False
    ):
        self._queue = queue
        self._settings = queue_settings
        self._reorder = reorder_monitor
        self._run_reorder_on_tick = run_reorder_on_tick and reorder_monitor is not None
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run(), name="purchase-order-dispatch")
        logger.info(
            f"Purchase order queue processor started, interval {self._settings.processing_interval_seconds}s"
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop_event.set()
        try:
            # Let an in-flight pass finish before cancelling
            await asyncio.wait_for(asyncio.shield(self._task), timeout=self._settings.shutdown_grace_seconds)
        except asyncio.TimeoutError:
            logger.warning("Queue processing did not finish within the grace period, cancelling")
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        finally:
            self._task = None
        logger.info("Purchase order queue processor stopped")

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._settings.processing_interval_seconds)
                break
            except asyncio.TimeoutError:
                pass

            await self.tick()

    async def tick(self) -> None:
        """One pass: optional reorder check, then the whole queue"""
        if self._run_reorder_on_tick:
            try:
                await self._reorder.check_and_reorder()
            except Exception as e:
                logger.error(f"Error in reorder check: {e}", exc_info=True)

        try:
            await self._queue.process_all()
        except Exception as e:
            logger.error(f"Error in purchase order queue processing: {e}", exc_info=True)
