from __future__ import annotations

import threading
from typing import Protocol

from quiz_service.models.activity_completion import (
    ActivityCompletion,
    CompletionAttempt,
)


class ActivityCompletionRepo(Protocol):
    async def record_attempt(self, attempt: CompletionAttempt) -> ActivityCompletion:
        """Fold one attempt into the (enrollment, activity) record and return it.

        Creates the record on the first attempt.
        """
        ...

    async def get(
        self, enrollment_id: int, activity_id: int
    ) -> ActivityCompletion | None: ...


class InMemoryActivityCompletionRepo:
    def __init__(self) -> None:
        self._records: dict[tuple[int, int], ActivityCompletion] = {}
        self._lock = threading.Lock()

    async def record_attempt(self, attempt: CompletionAttempt) -> ActivityCompletion:
        key = (attempt.enrollment_id, attempt.activity_id)
        with self._lock:
            current = self._records.get(key)
            if current is None:
                updated = ActivityCompletion.first(attempt)
            else:
                updated = current.with_attempt(attempt)
            self._records[key] = updated
        return updated

    async def get(
        self, enrollment_id: int, activity_id: int
    ) -> ActivityCompletion | None:
        return self._records.get((enrollment_id, activity_id))

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


# Shared by the API and the worker when no DATABASE_URL is configured.
completion_store = InMemoryActivityCompletionRepo()
