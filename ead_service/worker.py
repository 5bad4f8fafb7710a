"""Background worker: delivers grant notifications.

RUN:  python -m ead_service.worker

The API enqueues a GrantNotice on every grant and returns immediately;
this process drains the queue and talks to the mail server.  Same image
as the API, different command:

  api:    uvicorn ead_service.main:app --host 0.0.0.0 --port 8000
  worker: python -m ead_service.worker

A failed delivery is logged and dropped (at-most-once); the admin can
re-send by granting again.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from ead_service.core.config import SETTINGS
from ead_service.core.logging import setup_logging
from ead_service.services.mailer import Mailer, build_mailer, deliver_grant_notice
from ead_service.services.notifications import GrantNotice
from ead_service.services.task_queue import NOTIFICATION_QUEUE, TaskQueue, task_queue

TaskHandler = Callable[[dict], Coroutine[Any, Any, None]]

logger = logging.getLogger("ead_service.worker")

IDLE_SLEEP_SECONDS = 0.5

HANDLERS: dict[str, TaskHandler] = {}


def register_handler(queue: str):
    def decorator(func):
        HANDLERS[queue] = func
        return func

    return decorator


_mailer: Mailer = build_mailer(SETTINGS)


@register_handler(NOTIFICATION_QUEUE)
async def handle_grant_notification(payload: dict) -> None:
    notice = GrantNotice.from_payload(payload)
    await deliver_grant_notice(notice, _mailer)
    logger.info("Grant notification delivered new_account=%s", notice.newly_provisioned)


async def process_one(queue: TaskQueue, queue_name: str, timeout: int = 1) -> bool:
    """Handle at most one task.  Returns whether a task was taken."""
    task = await queue.dequeue(queue_name, timeout=timeout)
    if task is None:
        return False

    try:
        await HANDLERS[queue_name](task.payload)
        logger.info("Task %s on [%s] completed", task.id, queue_name)
    except Exception:
        logger.exception("Task %s on [%s] failed", task.id, queue_name)
    return True


async def run_worker(queue: TaskQueue = task_queue) -> None:
    queues = list(HANDLERS)
    logger.info("Worker started, listening on queues: %s", queues)
    while True:
        took_any = False
        for queue_name in queues:
            took_any = await process_one(queue, queue_name) or took_any
        if not took_any:
            # BRPOP already blocks on Redis; this only matters in-memory.
            await asyncio.sleep(IDLE_SLEEP_SECONDS)


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    asyncio.run(run_worker())
