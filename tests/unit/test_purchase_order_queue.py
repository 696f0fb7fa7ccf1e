"""
Unit tests for the purchase order work queue.
"""
import asyncio

import pytest

from supply_chain.domain.models import OrderStatus
from supply_chain.application.commands import Command, CommandResult
from supply_chain.application.purchase_order_queue import PurchaseOrderQueue


class RaisingCommand(Command):
    async def execute(self) -> CommandResult:
        raise RuntimeError("store went away")


class SlowCommand(Command):
    async def execute(self) -> CommandResult:
        await asyncio.sleep(5)
        return CommandResult.succeeded()


class EnqueueingCommand(Command):
    """Enqueues another order while it runs."""

    def __init__(self, queue: PurchaseOrderQueue, other_id: int):
        self._queue = queue
        self._other_id = other_id

    async def execute(self) -> CommandResult:
        self._queue.enqueue(self._other_id)
        return CommandResult.succeeded()


def _queue_with(unit_of_work, dispatch_table, queue_settings, **overrides) -> PurchaseOrderQueue:
    return PurchaseOrderQueue(unit_of_work, dispatch_table, queue_settings.model_copy(update=overrides))


@pytest.mark.unit
class TestEnqueue:
    """Tests for enqueue and queue observability."""

    async def test_enqueue_is_idempotent(self, queue):
        assert queue.enqueue(1)
        assert not queue.enqueue(1)
        assert queue.count() == 1

    async def test_pending_items_are_copies(self, queue):
        queue.enqueue(1)
        queue.pending_items()[0].retry_count = 99
        assert queue.pending_items()[0].retry_count == 0

    async def test_populate_loads_active_orders_only(self, queue, order_factory):
        """Test startup loading skips delivered and abandoned orders."""
        active = [
            await order_factory(status=OrderStatus.REQUIRES_PAYMENT_TO_SUPPLIER.value),
            await order_factory(status=OrderStatus.REQUIRES_DELIVERY.value),
            await order_factory(status=OrderStatus.REQUIRES_PAYMENT_TO_LOGISTICS.value),
            await order_factory(status=OrderStatus.WAITING_FOR_DELIVERY.value),
        ]
        await order_factory(status=OrderStatus.DELIVERED.value)
        await order_factory(status=OrderStatus.ABANDONED.value)

        loaded = await queue.populate_from_store()

        assert loaded == 4
        assert sorted(item.purchase_order_id for item in queue.pending_items()) == [o.id for o in active]

    async def test_populate_does_not_duplicate_pending_orders(self, queue, order_factory):
        order = await order_factory()
        queue.enqueue(order.id)

        await queue.populate_from_store()

        assert queue.count() == 1


@pytest.mark.unit
class TestProcessAll:
    """Tests for a single processing pass."""

    async def test_success_removes_item_and_advances_order(self, queue, bank, order_factory, get_order):
        order = await order_factory()
        queue.enqueue(order.id)

        summary = await queue.process_all()

        assert summary.processed == 1
        assert summary.succeeded == 1
        assert queue.count() == 0
        assert len(bank.payments) == 1
        assert (await get_order(order.id)).status == OrderStatus.REQUIRES_DELIVERY.value

    async def test_requeue_on_success_keeps_pipeline_moving(
        self, unit_of_work, dispatch_table, queue_settings, order_factory, get_order, logistics
    ):
        """Test an order is re-enqueued after each step until it waits for delivery."""
        queue = _queue_with(unit_of_work, dispatch_table, queue_settings, requeue_on_success=True)
        order = await order_factory()
        queue.enqueue(order.id)

        await queue.process_all()
        assert queue.count() == 1
        await queue.process_all()
        assert (await get_order(order.id)).status == OrderStatus.REQUIRES_PAYMENT_TO_LOGISTICS.value
        await queue.process_all()

        assert (await get_order(order.id)).status == OrderStatus.WAITING_FOR_DELIVERY.value
        assert queue.count() == 0
        assert len(logistics.requests) == 1

    async def test_retryable_failure_stays_pending(self, queue, bank, order_factory, get_order):
        bank.succeed = False
        order = await order_factory()
        queue.enqueue(order.id)

        summary = await queue.process_all()

        assert summary.retried == 1
        item = queue.pending_items()[0]
        assert item.retry_count == 1
        assert item.last_error == "Supplier payment failed"
        assert (await get_order(order.id)).status == OrderStatus.REQUIRES_PAYMENT_TO_SUPPLIER.value

    async def test_exhausted_retries_abandon_order(self, queue, bank, order_factory, get_order):
        """Test the order is abandoned on the max_retries-th failed attempt."""
        bank.succeed = False
        order = await order_factory()
        queue.enqueue(order.id)

        await queue.process_all()
        await queue.process_all()
        summary = await queue.process_all()

        assert summary.abandoned == 1
        assert queue.count() == 0
        assert [item.purchase_order_id for item in queue.failed_items()] == [order.id]
        assert len(bank.payments) == 3
        assert (await get_order(order.id)).status == OrderStatus.ABANDONED.value

    async def test_retry_forever_policy_never_abandons(
        self, unit_of_work, dispatch_table, queue_settings, bank, order_factory, get_order
    ):
        queue = _queue_with(unit_of_work, dispatch_table, queue_settings, retry_exhaustion_policy="retry_forever")
        bank.succeed = False
        order = await order_factory()
        queue.enqueue(order.id)

        for _ in range(5):
            await queue.process_all()

        assert queue.pending_items()[0].retry_count == 5
        assert (await get_order(order.id)).status == OrderStatus.REQUIRES_PAYMENT_TO_SUPPLIER.value

    async def test_no_retry_failure_abandons_immediately(self, queue, order_factory, get_order):
        order = await order_factory(material=None, status=OrderStatus.REQUIRES_DELIVERY.value)
        queue.enqueue(order.id)

        summary = await queue.process_all()

        assert summary.abandoned == 1
        assert queue.count() == 0
        assert queue.failed_items()[0].last_error == "Invalid purchase order configuration"
        assert (await get_order(order.id)).status == OrderStatus.ABANDONED.value

    async def test_missing_order_is_dropped(self, queue):
        queue.enqueue(999)

        summary = await queue.process_all()

        assert summary.abandoned == 1
        assert queue.count() == 0
        assert queue.failed_items()[0].last_error == "Purchase order not found"

    async def test_waiting_delivery_is_completed_by_noop(self, queue, bank, order_factory, get_order):
        """Test orders waiting for delivery leave the queue without side effects."""
        order = await order_factory(status=OrderStatus.WAITING_FOR_DELIVERY.value)
        queue.enqueue(order.id)

        summary = await queue.process_all()

        assert summary.succeeded == 1
        assert queue.count() == 0
        assert bank.payments == []
        assert (await get_order(order.id)).status == OrderStatus.WAITING_FOR_DELIVERY.value

    async def test_command_exception_is_a_retryable_failure(
        self, queue, dispatch_table, order_factory, monkeypatch
    ):
        order = await order_factory()
        other = await order_factory(status=OrderStatus.WAITING_FOR_DELIVERY.value)
        original_resolve = dispatch_table.resolve

        def resolve(purchase_order):
            if purchase_order.id == order.id:
                return RaisingCommand()
            return original_resolve(purchase_order)

        monkeypatch.setattr(dispatch_table, "resolve", resolve)
        queue.enqueue(order.id)
        queue.enqueue(other.id)

        summary = await queue.process_all()

        assert summary.retried == 1
        assert summary.succeeded == 1
        assert queue.pending_items()[0].last_error == "store went away"

    async def test_slow_command_times_out(self, unit_of_work, dispatch_table, queue_settings, order_factory, monkeypatch):
        queue = _queue_with(unit_of_work, dispatch_table, queue_settings, command_timeout_seconds=0.05)
        order = await order_factory()
        monkeypatch.setattr(dispatch_table, "resolve", lambda purchase_order: SlowCommand())
        queue.enqueue(order.id)

        summary = await queue.process_all()

        assert summary.retried == 1
        assert queue.pending_items()[0].last_error.startswith("Timed out")

    async def test_items_enqueued_during_pass_wait_for_next_pass(
        self, queue, dispatch_table, order_factory, monkeypatch
    ):
        first = await order_factory()
        second = await order_factory()
        monkeypatch.setattr(dispatch_table, "resolve", lambda purchase_order: EnqueueingCommand(queue, second.id))
        queue.enqueue(first.id)

        summary = await queue.process_all()

        assert summary.processed == 1
        assert [item.purchase_order_id for item in queue.pending_items()] == [second.id]

    async def test_concurrent_passes_do_not_double_process(self, queue, bank, order_factory):
        """Test a manual trigger during a timer pass never pays twice."""
        order = await order_factory()
        queue.enqueue(order.id)

        await asyncio.gather(queue.process_all(), queue.process_all())

        assert len(bank.payments) == 1
        assert queue.count() == 0

    async def test_reenqueue_clears_failed_entry(self, queue):
        queue.enqueue(999)
        await queue.process_all()
        assert len(queue.failed_items()) == 1

        queue.enqueue(999)

        assert queue.failed_items() == []
        assert queue.count() == 1
