"""Background worker process.

RUN:  python -m quiz_service.worker

Same image as the API, different command.  Polls every registered queue
round-robin and dispatches each task to its handler; a failing task is
logged and dropped (the queue is at-most-once).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Coroutine
from contextlib import asynccontextmanager
from typing import Any

from quiz_service.core.config import SETTINGS
from quiz_service.core.logging import setup_logging
from quiz_service.db.engine import async_session_factory, session_scope
from quiz_service.models.activity_completion import CompletionAttempt
from quiz_service.repos.activity_completion_repo import (
    ActivityCompletionRepo,
    completion_store,
)
from quiz_service.repos.pg_activity_completion_repo import PgActivityCompletionRepo
from quiz_service.services.task_queue import ACTIVITY_COMPLETION_QUEUE, task_queue

TaskHandler = Callable[[dict], Coroutine[Any, Any, None]]

logger = logging.getLogger("quiz_service.worker")

HANDLERS: dict[str, TaskHandler] = {}


def register_handler(queue: str):
    """Decorator: register a coroutine as the handler for a queue."""

    def decorator(func):
        HANDLERS[queue] = func
        return func

    return decorator


@asynccontextmanager
async def _completion_repo() -> AsyncIterator[ActivityCompletionRepo]:
    if async_session_factory is None:
        yield completion_store
        return
    async with session_scope() as session:
        yield PgActivityCompletionRepo(session)


@register_handler(ACTIVITY_COMPLETION_QUEUE)
async def handle_activity_completion(payload: dict) -> None:
    """Fold a graded attempt into the learner's activity completion.

    A passed attempt completes the activity; a failed one is recorded as
    failed unless an earlier attempt already completed it.
    """
    attempt = CompletionAttempt.from_payload(payload)
    async with _completion_repo() as repo:
        record = await repo.record_attempt(attempt)
    logger.info(
        "Activity completion enrollment=%s activity=%s status=%s score=%s attempts=%s",
        record.enrollment_id,
        record.activity_id,
        record.status,
        record.score,
        record.attempts,
        extra={
            "submission_id": payload.get("submission_id"),
            "quiz_content_id": record.activity_id,
        },
    )


async def run_worker() -> None:
    queues = list(HANDLERS.keys())
    logger.info("Worker started, listening on queues: %s", queues)

    while True:
        for queue_name in queues:
            task = await task_queue.dequeue(queue_name, timeout=1)
            if task is None:
                continue

            try:
                await HANDLERS[queue_name](task.payload)
                logger.info("Task %s on [%s] completed", task.id, queue_name)
            except Exception:
                logger.exception("Task %s on [%s] failed", task.id, queue_name)

        if not SETTINGS.redis_url:
            # In-memory dequeue never blocks; avoid a hot loop.
            await asyncio.sleep(1)


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    asyncio.run(run_worker())
