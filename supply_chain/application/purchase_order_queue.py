import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List
from pydantic import BaseModel

from supply_chain.config import QueueSettings
from supply_chain.domain.models import QueueItem, OrderStatus, ACTIONABLE_STATUSES
from supply_chain.application.commands import CommandResult
from supply_chain.application.dispatch import CommandDispatchTable

logger = logging.getLogger(__name__)


class RetryExhaustionPolicy(str, Enum):
    # Stop after max_retries attempts and mark the order abandoned
    ABANDON = "abandon"
    # Keep retrying transient failures on every pass
    RETRY_FOREVER = "retry_forever"


class ProcessingSummary(BaseModel):
    processed: int = 0
    succeeded: int = 0
    retried: int = 0
    abandoned: int = 0


class PurchaseOrderQueue:
    """Process-wide set of purchase orders awaiting their next step.

    Items are keyed by purchase order id, so enqueueing an id that is already
    pending does nothing. process_all() runs under a single lock: a timer tick
    and a manual trigger never process the same order concurrently.
    """

    def __init__(self, unit_of_work, dispatch_table: CommandDispatchTable, queue_settings: QueueSettings):
        self._uow = unit_of_work
        self._dispatch = dispatch_table
        self._settings = queue_settings
        self._policy = RetryExhaustionPolicy(queue_settings.retry_exhaustion_policy)
        self._pending: Dict[int, QueueItem] = {}
        self._failed: Dict[int, QueueItem] = {}
        self._lock = asyncio.Lock()

    def enqueue(self, purchase_order_id: int) -> bool:
        """Returns False when the order is already pending"""
        if purchase_order_id in self._pending:
            logger.debug(f"Purchase order {purchase_order_id} already queued")
            return False
        self._failed.pop(purchase_order_id, None)
        self._pending[purchase_order_id] = QueueItem(purchase_order_id=purchase_order_id)
        logger.info(f"Enqueued purchase order {purchase_order_id} for processing")
        return True

    def count(self) -> int:
        return len(self._pending)

    def pending_items(self) -> List[QueueItem]:
        return [item.model_copy() for item in self._pending.values()]

    def failed_items(self) -> List[QueueItem]:
        return [item.model_copy() for item in self._failed.values()]

    @property
    def is_processing(self) -> bool:
        return self._lock.locked()

    async def populate_from_store(self) -> int:
        """Enqueues every active purchase order. Store errors are logged, not raised."""
        try:
            async with self._uow() as uow:
                active_orders = await uow.purchase_orders.list_active()
        except Exception as e:
            logger.error(f"Error populating queue from database: {e}", exc_info=True)
            return 0

        for order in active_orders:
            self.enqueue(order.id)
        logger.info(f"Populated queue with {len(active_orders)} active purchase orders from database")
        return len(active_orders)

    async def process_all(self) -> ProcessingSummary:
        async with self._lock:
            # Orders enqueued during this pass wait for the next one
            snapshot = list(self._pending.values())
            summary = ProcessingSummary()
            if not snapshot:
                return summary

            logger.info(f"Processing purchase order queue. Items in queue: {len(snapshot)}")
            for item in snapshot:
                outcome = await self._process_item(item)
                summary.processed += 1
                setattr(summary, outcome, getattr(summary, outcome) + 1)

            logger.info(
                f"Queue processing completed. Succeeded: {summary.succeeded}, retried: {summary.retried}, "
                f"abandoned: {summary.abandoned}. Remaining in queue: {self.count()}"
            )
            return summary

    async def _process_item(self, item: QueueItem) -> str:
        purchase_order_id = item.purchase_order_id
        try:
            async with self._uow() as uow:
                purchase_order = await uow.purchase_orders.get_by_id(purchase_order_id)

            if purchase_order is None:
                logger.warning(f"Purchase order {purchase_order_id} not found, removing from queue")
                item.last_error = "Purchase order not found"
                self._drop(item)
                return "abandoned"

            command = self._dispatch.resolve(purchase_order)
            result = await asyncio.wait_for(command.execute(), timeout=self._settings.command_timeout_seconds)

        except asyncio.TimeoutError:
            logger.warning(f"Purchase order {purchase_order_id} timed out after {self._settings.command_timeout_seconds}s")
            result = CommandResult.failed(f"Timed out after {self._settings.command_timeout_seconds}s")
        except Exception as e:
            logger.error(f"Error processing queue item for purchase order {purchase_order_id}: {e}", exc_info=True)
            result = CommandResult.failed(str(e) or type(e).__name__)
        else:
            if result.success:
                self._pending.pop(purchase_order_id, None)
                logger.info(f"Successfully processed purchase order {purchase_order_id} in status {purchase_order.status}")
                if self._settings.requeue_on_success and command.next_status in ACTIONABLE_STATUSES:
                    self.enqueue(purchase_order_id)
                return "succeeded"

        return await self._handle_failure(item, result)

    async def _handle_failure(self, item: QueueItem, result: CommandResult) -> str:
        item.retry_count += 1
        item.last_error = result.error_message or "Unknown error"
        item.last_processed = datetime.now(timezone.utc)

        if result.should_retry and not self._retries_exhausted(item):
            logger.info(
                f"Purchase order {item.purchase_order_id} failed processing, "
                f"retry {item.retry_count}/{self._max_retries_label()}: {item.last_error}"
            )
            return "retried"

        logger.warning(
            f"Purchase order {item.purchase_order_id} exceeded max retries or marked as no-retry, "
            f"abandoning: {item.last_error}"
        )
        self._drop(item)
        await self._mark_abandoned(item.purchase_order_id)
        return "abandoned"

    def _retries_exhausted(self, item: QueueItem) -> bool:
        if self._policy == RetryExhaustionPolicy.RETRY_FOREVER:
            return False
        return item.retry_count >= self._settings.max_retries

    def _max_retries_label(self) -> str:
        if self._policy == RetryExhaustionPolicy.RETRY_FOREVER:
            return "unbounded"
        return str(self._settings.max_retries)

    def _drop(self, item: QueueItem) -> None:
        self._pending.pop(item.purchase_order_id, None)
        self._failed[item.purchase_order_id] = item

    async def _mark_abandoned(self, purchase_order_id: int) -> None:
        try:
            async with self._uow() as uow:
                updated = await uow.purchase_orders.update_status(purchase_order_id, OrderStatus.ABANDONED.value)
                await uow.commit()
            if updated:
                logger.warning(f"Purchase order {purchase_order_id} has been abandoned")
        except Exception as e:
            logger.error(f"Error abandoning purchase order {purchase_order_id}: {e}")
