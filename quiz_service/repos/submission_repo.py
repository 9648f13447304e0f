from __future__ import annotations

import threading
from typing import Protocol
from uuid import UUID

from quiz_service.models.submission import QuizSubmission
from quiz_service.services.errors import AttemptNumberConflictError


class SubmissionRepo(Protocol):
    async def max_attempt_number(
        self, quiz_content_id: int, user_id: str, enrollment_id: int
    ) -> int:
        """Highest stored attempt number, or 0 when there is none."""
        ...

    async def add(self, submission: QuizSubmission) -> None:
        """Store a submission and its responses atomically.

        Raises AttemptNumberConflictError if the attempt slot is taken.
        """
        ...

    async def get(self, submission_id: UUID) -> QuizSubmission | None: ...

    # Listings are newest first.
    async def list_by_quiz(self, quiz_content_id: int) -> list[QuizSubmission]: ...
    async def list_by_enrollment(self, enrollment_id: int) -> list[QuizSubmission]: ...
    async def list_by_user(
        self,
        quiz_content_id: int,
        user_id: str,
        enrollment_id: int | None = None,
    ) -> list[QuizSubmission]: ...


def _attempt_slot(submission: QuizSubmission) -> tuple[int, str, int, int]:
    return (
        submission.quiz_content_id,
        submission.user_id,
        submission.enrollment_id,
        submission.attempt_number,
    )


class InMemorySubmissionRepo:
    def __init__(self) -> None:
        self._submissions: dict[UUID, QuizSubmission] = {}
        self._slots: set[tuple[int, str, int, int]] = set()
        self._lock = threading.Lock()

    async def max_attempt_number(
        self, quiz_content_id: int, user_id: str, enrollment_id: int
    ) -> int:
        return max(
            (
                attempt
                for quiz_id, uid, eid, attempt in self._slots
                if (quiz_id, uid, eid) == (quiz_content_id, user_id, enrollment_id)
            ),
            default=0,
        )

    async def add(self, submission: QuizSubmission) -> None:
        slot = _attempt_slot(submission)
        with self._lock:
            if slot in self._slots:
                raise AttemptNumberConflictError(
                    f"attempt {submission.attempt_number} already recorded"
                )
            self._slots.add(slot)
            self._submissions[submission.id] = submission

    async def get(self, submission_id: UUID) -> QuizSubmission | None:
        return self._submissions.get(submission_id)

    async def list_by_quiz(self, quiz_content_id: int) -> list[QuizSubmission]:
        return self._newest_first(
            s for s in self._submissions.values() if s.quiz_content_id == quiz_content_id
        )

    async def list_by_enrollment(self, enrollment_id: int) -> list[QuizSubmission]:
        return self._newest_first(
            s for s in self._submissions.values() if s.enrollment_id == enrollment_id
        )

    async def list_by_user(
        self,
        quiz_content_id: int,
        user_id: str,
        enrollment_id: int | None = None,
    ) -> list[QuizSubmission]:
        return self._newest_first(
            s
            for s in self._submissions.values()
            if s.quiz_content_id == quiz_content_id
            and s.user_id == user_id
            and (enrollment_id is None or s.enrollment_id == enrollment_id)
        )

    def clear(self) -> None:
        with self._lock:
            self._submissions.clear()
            self._slots.clear()

    @staticmethod
    def _newest_first(submissions) -> list[QuizSubmission]:
        # dicts keep insertion order, so reversing it breaks completed_at ties
        ordered = list(submissions)[::-1]
        return sorted(ordered, key=lambda s: s.completed_at, reverse=True)
