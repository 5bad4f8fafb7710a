from __future__ import annotations

import asyncio

from prometheus_client import REGISTRY

from ead_service.services.task_queue import InMemoryTaskQueue


def test_fifo_order_and_length() -> None:
    queue = InMemoryTaskQueue()

    async def _run():
        await queue.enqueue("q", {"n": 1})
        await queue.enqueue("q", {"n": 2})
        length = await queue.queue_length("q")
        first = await queue.dequeue("q")
        second = await queue.dequeue("q")
        empty = await queue.dequeue("q")
        return length, first, second, empty

    length, first, second, empty = asyncio.run(_run())
    assert length == 2
    assert first.payload == {"n": 1}
    assert second.payload == {"n": 2}
    assert empty is None


def test_depth_gauge_tracks_queue() -> None:
    queue = InMemoryTaskQueue()
    asyncio.run(queue.enqueue("depth-test", {}))
    assert REGISTRY.get_sample_value("task_queue_depth", {"queue_name": "depth-test"}) == 1
    asyncio.run(queue.dequeue("depth-test"))
    assert REGISTRY.get_sample_value("task_queue_depth", {"queue_name": "depth-test"}) == 0
