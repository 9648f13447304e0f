from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class QuizQuestionResponse:
    """One graded answer inside a submission.  Immutable once stored."""

    id: UUID
    quiz_submission_id: UUID
    quiz_question_id: int
    user_response: Any
    is_correct: bool
    points_earned: float
    max_points: float

    @staticmethod
    def new(
        *,
        quiz_submission_id: UUID,
        quiz_question_id: int,
        user_response: Any,
        is_correct: bool,
        points_earned: float,
        max_points: float,
    ) -> QuizQuestionResponse:
        return QuizQuestionResponse(
            id=uuid4(),
            quiz_submission_id=quiz_submission_id,
            quiz_question_id=quiz_question_id,
            user_response=user_response,
            is_correct=is_correct,
            points_earned=points_earned,
            max_points=max_points,
        )


@dataclass(frozen=True, slots=True)
class QuizSubmission:
    """One learner attempt at a quiz within an enrollment.

    attempt_number is 1-based and unique per
    (quiz_content_id, user_id, enrollment_id).
    """

    id: UUID
    quiz_content_id: int
    user_id: str
    enrollment_id: int
    score: float
    max_score: float
    percentage_score: float
    is_passed: bool
    completed_at: int
    time_spent_seconds: int
    attempt_number: int
    created_by: str
    responses: tuple[QuizQuestionResponse, ...] = ()

    @staticmethod
    def new(
        *,
        quiz_content_id: int,
        user_id: str,
        enrollment_id: int,
        score: float,
        max_score: float,
        percentage_score: float,
        is_passed: bool,
        completed_at: int,
        time_spent_seconds: int,
        attempt_number: int = 1,
    ) -> QuizSubmission:
        return QuizSubmission(
            id=uuid4(),
            quiz_content_id=quiz_content_id,
            user_id=user_id,
            enrollment_id=enrollment_id,
            score=score,
            max_score=max_score,
            percentage_score=percentage_score,
            is_passed=is_passed,
            completed_at=completed_at,
            time_spent_seconds=time_spent_seconds,
            attempt_number=attempt_number,
            created_by=user_id,
        )


@dataclass(frozen=True, slots=True)
class GradingWarning:
    """A response whose client-claimed grade disagreed with the server's.

    Informational only: the server values have already replaced the
    client's by the time a warning is reported.
    """

    question_id: int
    client_is_correct: bool
    client_points: float
    server_is_correct: bool
    server_points: float
