"""
Unit tests for the bounded queue and the quiescence protocol it hosts.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from treescan.cancellation import CancellationToken
from treescan.models import EnqueueResult
from treescan.work_queue import BoundedWorkQueue


def _in_thread(fn):
    """Start ``fn`` on a thread; return (thread, result list, done event)."""
    result = []
    done = threading.Event()

    def target():
        result.append(fn())
        done.set()

    t = threading.Thread(target=target, daemon=True)
    t.start()
    return t, result, done


def test_rejects_zero_capacity():
    with pytest.raises(ValueError):
        BoundedWorkQueue(0, CancellationToken())
    with pytest.raises(ValueError):
        BoundedWorkQueue(1, CancellationToken(), workers=0)


def test_fifo_order_and_in_flight_accounting():
    q = BoundedWorkQueue(4, CancellationToken())
    for item in ("a", "b", "c"):
        assert q.enqueue(item) is EnqueueResult.QUEUED
    assert q.pending == 3

    assert [q.dequeue() for _ in range(3)] == ["a", "b", "c"]
    assert q.snapshot() == (0, 3)

    assert q.task_done() is False
    assert q.task_done() is False
    assert q.in_flight == 1
    assert q.task_done() is True
    assert q.in_flight == 0


def test_task_done_without_item_raises():
    q = BoundedWorkQueue(1, CancellationToken())
    with pytest.raises(ValueError):
        q.task_done()


def test_producer_blocks_while_full():
    q = BoundedWorkQueue(1, CancellationToken())
    q.enqueue("a")

    t, result, done = _in_thread(lambda: q.enqueue("b"))
    assert not done.wait(0.2)
    assert q.pending == 1

    assert q.dequeue() == "a"
    assert done.wait(5)
    assert result == [EnqueueResult.QUEUED]
    assert q.pending == 1
    assert q.high_water == 1


def test_cancel_releases_blocked_producer_without_inserting():
    token = CancellationToken()
    q = BoundedWorkQueue(1, token)
    q.enqueue("a")

    t, result, done = _in_thread(lambda: q.enqueue("b"))
    assert not done.wait(0.2)
    token.request("test")
    assert done.wait(5)
    assert result == [EnqueueResult.CANCELLED]
    assert q.pending == 1


def test_cancel_releases_blocked_consumer():
    token = CancellationToken()
    q = BoundedWorkQueue(2, token)
    q.enqueue("a")
    assert q.dequeue() == "a"  # keeps one task in flight so dequeue parks

    t, result, done = _in_thread(q.dequeue)
    assert not done.wait(0.2)
    token.request("test")
    assert done.wait(5)
    assert result == [None]


def test_cancelled_queue_drains_then_ends():
    token = CancellationToken()
    q = BoundedWorkQueue(4, token)
    q.enqueue("a")
    q.enqueue("b")
    token.request("test")

    assert q.enqueue("c") is EnqueueResult.CANCELLED
    assert q.dequeue() == "a"
    assert q.dequeue() == "b"
    assert q.dequeue() is None


def test_last_task_done_wakes_parked_consumer():
    token = CancellationToken()
    q = BoundedWorkQueue(2, token)
    q.enqueue("root")
    assert q.dequeue() == "root"

    t, result, done = _in_thread(q.dequeue)
    assert not done.wait(0.2)

    assert q.task_done() is True
    assert done.wait(5)
    assert result == [None]
    assert token.reason == "quiescence"


def test_enqueue_in_flight_keeps_walk_alive():
    token = CancellationToken()
    q = BoundedWorkQueue(2, token)
    q.enqueue("root")
    q.dequeue()
    q.enqueue("child")
    # the root finishing must not end the walk while "child" is pending
    assert q.task_done() is False
    assert not token.is_requested()
    assert q.dequeue() == "child"
    assert q.task_done() is True


def test_dequeue_on_idle_queue_declares_quiescence():
    token = CancellationToken()
    q = BoundedWorkQueue(1, token)
    assert q.dequeue() is None
    assert token.reason == "quiescence"


def test_detector_evaluate():
    token = CancellationToken()
    q = BoundedWorkQueue(1, token)
    q.enqueue("a")
    assert q.detector.evaluate() is False
    assert not token.is_requested()
    q.dequeue()
    assert q.detector.evaluate() is False
    assert q.task_done() is True
    assert q.detector.evaluate() is True


def test_overflow_when_every_worker_would_block():
    q = BoundedWorkQueue(1, CancellationToken(), workers=1)
    assert q.enqueue("a") is EnqueueResult.QUEUED
    assert q.enqueue("b") is EnqueueResult.OVERFLOW
    # the overflowed item is not queued but holds an in-flight slot
    assert q.snapshot() == (1, 1)
    assert q.task_done() is False
    assert q.dequeue() == "a"
    assert q.task_done() is True


def test_discard_pending():
    q = BoundedWorkQueue(3, CancellationToken())
    q.enqueue("a")
    q.enqueue("b")
    assert q.discard_pending() == 2
    assert q.pending == 0


def test_capacity_never_exceeded_under_contention():
    token = CancellationToken()
    q = BoundedWorkQueue(3, token)
    produced = 400
    consumed = []
    lock = threading.Lock()

    q.enqueue("seed")
    q.dequeue()  # hold the walk open until producers finish

    def producer(n):
        for i in range(n):
            assert q.enqueue(f"p{i}") is EnqueueResult.QUEUED

    def consumer():
        while True:
            item = q.dequeue()
            if item is None:
                return
            with lock:
                consumed.append(item)
            q.task_done()

    consumers = [threading.Thread(target=consumer) for _ in range(4)]
    for c in consumers:
        c.start()
    with ThreadPoolExecutor(max_workers=4) as ex:
        list(ex.map(producer, [produced // 4] * 4))
    q.task_done()  # release the seed
    for c in consumers:
        c.join(10)
        assert not c.is_alive()

    assert len(consumed) == produced
    assert q.high_water <= 3
    assert q.snapshot() == (0, 0)
