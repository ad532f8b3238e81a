import asyncio

import pytest

from wxbridge.msgqueue import (
    DelayedQueue,
    MessageQueue,
    PriorityQueue,
    QueueError,
    QueueFullError,
    QueueMessage,
)


def test_message_defaults():
    message = QueueMessage("m1", "payload")
    assert message.priority == 0
    assert message.max_retries == 3
    assert message.retry_count == 0
    assert message.can_retry()


def test_increment_retry_until_exhausted():
    message = QueueMessage("m1", None, max_retries=2)
    assert message.increment_retry() is True
    assert message.increment_retry() is True
    assert message.increment_retry() is False
    assert message.retry_count == 2
    assert not message.can_retry()


def test_priority_out_of_range_rejected():
    with pytest.raises(ValueError):
        QueueMessage("m1", None, priority=256)


def test_fifo_order_and_push_front():
    queue = MessageQueue(10, 1)
    queue.push(QueueMessage("a", 1))
    queue.push(QueueMessage("b", 2))
    queue.push_front(QueueMessage("c", 3))
    assert len(queue) == 3
    assert [queue.pop().id for _ in range(3)] == ["c", "a", "b"]
    assert queue.pop() is None


def test_full_queue_raises():
    queue = MessageQueue(1, 1)
    queue.push(QueueMessage("a", 1))
    with pytest.raises(QueueFullError) as info:
        queue.push(QueueMessage("b", 2))
    assert str(info.value) == "Queue is full"
    with pytest.raises(QueueError):
        queue.push_front(QueueMessage("c", 3))
    assert len(queue) == 1


def test_clear():
    queue = MessageQueue(10, 1)
    queue.push(QueueMessage("a", 1))
    queue.clear()
    assert len(queue) == 0
    assert queue.pop() is None


@pytest.mark.asyncio
async def test_wait_for_message_wakes_on_push():
    queue = MessageQueue(10, 1)
    waiter = asyncio.create_task(queue.wait_for_message())
    await asyncio.sleep(0)
    assert not waiter.done()
    queue.push(QueueMessage("a", "hello"))
    message = await asyncio.wait_for(waiter, timeout=1.0)
    assert message.data == "hello"
    assert len(queue) == 0


@pytest.mark.asyncio
async def test_acquire_concurrency_holds_slot():
    queue = MessageQueue(10, 1)
    async with queue.acquire_concurrency():
        assert queue.concurrency_semaphore.locked()
    assert not queue.concurrency_semaphore.locked()


def test_priority_queue_order():
    queue = PriorityQueue(10)
    queue.push(QueueMessage("low", 0, priority=0))
    queue.push(QueueMessage("normal", 0, priority=5))
    queue.push(QueueMessage("high", 0, priority=9))
    queue.push(QueueMessage("low2", 0, priority=3))
    assert len(queue) == 4
    assert [queue.pop().id for _ in range(4)] == ["high", "normal", "low", "low2"]
    assert queue.pop() is None


def test_priority_queue_capacity_spans_levels():
    queue = PriorityQueue(2)
    queue.push(QueueMessage("a", 0, priority=9))
    queue.push(QueueMessage("b", 0, priority=1))
    with pytest.raises(QueueFullError):
        queue.push(QueueMessage("c", 0, priority=5))
    assert len(queue) == 2


@pytest.mark.asyncio
async def test_priority_queue_wait_for_message():
    queue = PriorityQueue(10)
    waiter = asyncio.create_task(queue.wait_for_message())
    await asyncio.sleep(0)
    queue.push(QueueMessage("x", 42, priority=4))
    message = await asyncio.wait_for(waiter, timeout=1.0)
    assert message.id == "x"
    assert len(queue) == 0


def test_delayed_queue_pop_ready():
    queue = DelayedQueue()
    queue.push_after(60.0, QueueMessage("later", 1))
    assert queue.pop_ready() is None
    queue.push_after(0.0, QueueMessage("now", 2))
    assert len(queue) == 2
    assert queue.pop_ready().id == "now"
    assert queue.pop_ready() is None
    assert len(queue) == 1


@pytest.mark.asyncio
async def test_delayed_queue_wait_for_ready_in_time_order():
    queue = DelayedQueue()
    queue.push_after(0.05, QueueMessage("second", 2))
    queue.push_after(0.01, QueueMessage("first", 1))
    first = await asyncio.wait_for(queue.wait_for_ready(), timeout=1.0)
    second = await asyncio.wait_for(queue.wait_for_ready(), timeout=1.0)
    assert (first.id, second.id) == ("first", "second")
    assert len(queue) == 0


@pytest.mark.asyncio
async def test_delayed_queue_wakes_for_new_push():
    queue = DelayedQueue()
    waiter = asyncio.create_task(queue.wait_for_ready())
    await asyncio.sleep(0)
    queue.push_after(0.0, QueueMessage("a", 1))
    message = await asyncio.wait_for(waiter, timeout=1.0)
    assert message.id == "a"