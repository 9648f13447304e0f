from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

CompletionStatus = Literal["completed", "failed"]


@dataclass(frozen=True, slots=True)
class CompletionAttempt:
    """One stored quiz attempt, as reported to the activity tracker.

    activity_id is the quiz_content_id: each quiz is one learning
    activity within an enrollment.
    """

    enrollment_id: int
    activity_id: int
    user_id: str
    is_passed: bool
    score: float
    time_spent_seconds: int
    completed_at: int

    @staticmethod
    def from_payload(payload: Mapping[str, Any]) -> CompletionAttempt:
        """Build from an activity_completion task payload.

        Raises ValueError when a required key is missing.
        """
        missing = [
            key
            for key in (
                "enrollment_id",
                "quiz_content_id",
                "user_id",
                "is_passed",
                "percentage_score",
                "completed_at",
            )
            if key not in payload
        ]
        if missing:
            raise ValueError(f"activity completion payload missing {missing}")

        return CompletionAttempt(
            enrollment_id=int(payload["enrollment_id"]),
            activity_id=int(payload["quiz_content_id"]),
            user_id=str(payload["user_id"]),
            is_passed=bool(payload["is_passed"]),
            score=float(payload["percentage_score"]),
            time_spent_seconds=int(payload.get("time_spent_seconds") or 0),
            completed_at=int(payload["completed_at"]),
        )


@dataclass(frozen=True, slots=True)
class ActivityCompletion:
    """A learner's progress on one activity within an enrollment.

    score is the latest attempt's percentage.  Once an attempt passes,
    the activity stays completed: a later failing retake does not undo it.
    """

    enrollment_id: int
    activity_id: int
    user_id: str
    status: CompletionStatus
    score: float
    attempts: int
    time_spent_seconds: int
    # When the activity was first passed; None until then.
    completed_at: int | None = None

    @staticmethod
    def first(attempt: CompletionAttempt) -> ActivityCompletion:
        return ActivityCompletion(
            enrollment_id=attempt.enrollment_id,
            activity_id=attempt.activity_id,
            user_id=attempt.user_id,
            status="completed" if attempt.is_passed else "failed",
            score=attempt.score,
            attempts=1,
            time_spent_seconds=attempt.time_spent_seconds,
            completed_at=attempt.completed_at if attempt.is_passed else None,
        )

    def with_attempt(self, attempt: CompletionAttempt) -> ActivityCompletion:
        completed = self.status == "completed" or attempt.is_passed
        completed_at = self.completed_at
        if completed_at is None and attempt.is_passed:
            completed_at = attempt.completed_at
        return ActivityCompletion(
            enrollment_id=self.enrollment_id,
            activity_id=self.activity_id,
            user_id=self.user_id,
            status="completed" if completed else "failed",
            score=attempt.score,
            attempts=self.attempts + 1,
            time_spent_seconds=self.time_spent_seconds + attempt.time_spent_seconds,
            completed_at=completed_at,
        )
