"""Record quiz attempts, re-grading every answer on the server.

The client grades locally and submits its claim per response plus an
aggregate (score, percentage, pass flag).  The claim is trusted only as
far as the server agrees with it:

  - each response is re-graded; a disagreeing response is stored with
    the server's (is_correct, points) and reported as a GradingWarning;
  - max_points is always the question's own weight, and stored points
    are clamped into [0, max_points];
  - if any response disagreed, the aggregate is recomputed from the
    server's points, otherwise the client's aggregate is stored as sent.

Attempt numbers are 1-based per (quiz, user, enrollment).  The store
rejects a duplicate number; the service re-reads the counter and tries
again, so concurrent submits still end up numbered 1..n with no gaps.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any
from uuid import UUID

from quiz_service.core.metrics import (
    ATTEMPT_NUMBER_CONFLICTS,
    GRADING_DISCREPANCIES,
    GRADING_DURATION,
    SUBMISSIONS_TOTAL,
)
from quiz_service.grading.validator import POINTS_TOLERANCE, validate_answer
from quiz_service.models.quiz import QuizContent
from quiz_service.models.submission import (
    GradingWarning,
    QuizQuestionResponse,
    QuizSubmission,
)
from quiz_service.repos.quiz_repo import QuizRepo
from quiz_service.repos.submission_repo import SubmissionRepo
from quiz_service.services.errors import (
    AttemptLimitExceededError,
    AttemptNumberConflictError,
    QuestionNotFoundError,
    QuizNotFoundError,
    SubmissionNotFoundError,
)
from quiz_service.services.task_queue import ACTIVITY_COMPLETION_QUEUE, TaskQueue

logger = logging.getLogger(__name__)

DEFAULT_PASSING_SCORE = 70
DEFAULT_MAX_ATTEMPT_RETRIES = 5


@dataclass(frozen=True, slots=True)
class ResponseClaim:
    quiz_question_id: int
    user_response: Any
    is_correct: bool
    points_earned: float
    max_points: float


@dataclass(frozen=True, slots=True)
class SubmissionClaim:
    """What the client sends for one attempt."""

    enrollment_id: int
    score: float
    max_score: float
    percentage_score: float
    is_passed: bool
    time_spent_seconds: int
    responses: tuple[ResponseClaim, ...] = ()


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    submission: QuizSubmission
    warnings: tuple[GradingWarning, ...] = ()


def round_half_up(value: float) -> float:
    """Round to a whole number, halves away from zero (0.5 -> 1, 2.5 -> 3).

    Python's round() rounds halves to even; stored percentages must match
    what learners were shown by the web client.
    """
    return float(math.floor(value + 0.5))


class SubmissionService:
    def __init__(
        self,
        quiz_repo: QuizRepo,
        submission_repo: SubmissionRepo,
        *,
        queue: TaskQueue | None = None,
        default_passing_score: float = DEFAULT_PASSING_SCORE,
        max_attempt_retries: int = DEFAULT_MAX_ATTEMPT_RETRIES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_attempt_retries < 1:
            raise ValueError("max_attempt_retries must be >= 1")
        self._quizzes = quiz_repo
        self._submissions = submission_repo
        self._queue = queue
        self._default_passing_score = default_passing_score
        self._max_attempt_retries = max_attempt_retries
        self._clock = clock

    async def submit(
        self, quiz_content_id: int, user_id: str, claim: SubmissionClaim
    ) -> SubmissionResult:
        quiz = await self._quizzes.get_quiz(quiz_content_id)
        if quiz is None:
            logger.warning("Submission for unknown quiz_content_id=%s", quiz_content_id)
            raise QuizNotFoundError(quiz_content_id)

        questions = {q.id: q for q in await self._quizzes.list_questions(quiz.id)}
        for response in claim.responses:
            if response.quiz_question_id not in questions:
                logger.warning(
                    "Submission references question_id=%s outside quiz_content_id=%s",
                    response.quiz_question_id,
                    quiz.id,
                )
                raise QuestionNotFoundError(response.quiz_question_id)

        provisional = QuizSubmission.new(
            quiz_content_id=quiz.id,
            user_id=user_id,
            enrollment_id=claim.enrollment_id,
            score=claim.score,
            max_score=claim.max_score,
            percentage_score=claim.percentage_score,
            is_passed=claim.is_passed,
            completed_at=int(self._clock()),
            time_spent_seconds=claim.time_spent_seconds,
        )

        started = time.perf_counter()
        responses: list[QuizQuestionResponse] = []
        warnings: list[GradingWarning] = []
        server_total = 0.0
        max_total = 0.0
        for response in claim.responses:
            question = questions[response.quiz_question_id]
            verdict = validate_answer(
                question,
                response.user_response,
                response.is_correct,
                response.points_earned,
            )
            # The question's own weight is the ceiling, whatever the client sent.
            max_points = question.points
            server_points = min(max(verdict.server_points, 0.0), max_points)
            server_total += server_points
            max_total += max_points
            if abs(response.max_points - max_points) >= POINTS_TOLERANCE:
                logger.warning(
                    "Client max_points=%s for question_id=%s replaced by %s user=%s",
                    response.max_points,
                    question.id,
                    max_points,
                    user_id,
                    extra={"quiz_content_id": quiz.id, "question_id": question.id},
                )

            is_correct = response.is_correct
            points_earned = min(max(response.points_earned, 0.0), max_points)
            if not verdict.agrees:
                is_correct = verdict.server_is_correct
                points_earned = server_points
                warnings.append(
                    GradingWarning(
                        question_id=question.id,
                        client_is_correct=response.is_correct,
                        client_points=response.points_earned,
                        server_is_correct=verdict.server_is_correct,
                        server_points=server_points,
                    )
                )
                GRADING_DISCREPANCIES.labels(
                    question_type=verdict.question_type.value
                ).inc()
                logger.warning(
                    "Grading discrepancy question_id=%s type=%s "
                    "client=(%s, %s) server=(%s, %s) user=%s",
                    question.id,
                    verdict.question_type.value,
                    response.is_correct,
                    response.points_earned,
                    verdict.server_is_correct,
                    verdict.server_points,
                    user_id,
                    extra={"quiz_content_id": quiz.id, "question_id": question.id},
                )

            responses.append(
                QuizQuestionResponse.new(
                    quiz_submission_id=provisional.id,
                    quiz_question_id=question.id,
                    user_response=response.user_response,
                    is_correct=is_correct,
                    points_earned=points_earned,
                    max_points=max_points,
                )
            )
        GRADING_DURATION.observe(time.perf_counter() - started)

        submission = replace(provisional, responses=tuple(responses))
        if warnings and max_total > 0:
            percentage = round_half_up(server_total / max_total * 100)
            submission = replace(
                submission,
                score=server_total,
                max_score=max_total,
                percentage_score=percentage,
                is_passed=percentage >= self._passing_score(quiz),
            )
            logger.info(
                "Recomputed aggregate for quiz_content_id=%s user=%s: "
                "%s/%s (%s%%) passed=%s",
                quiz.id,
                user_id,
                server_total,
                max_total,
                percentage,
                submission.is_passed,
            )

        submission = await self._store_next_attempt(quiz, submission)

        SUBMISSIONS_TOTAL.labels(
            result="passed" if submission.is_passed else "failed"
        ).inc()
        logger.info(
            "Recorded submission id=%s quiz_content_id=%s user=%s attempt=%s "
            "percentage=%s passed=%s warnings=%d",
            submission.id,
            quiz.id,
            user_id,
            submission.attempt_number,
            submission.percentage_score,
            submission.is_passed,
            len(warnings),
            extra={
                "quiz_content_id": quiz.id,
                "submission_id": str(submission.id),
                "attempt_number": submission.attempt_number,
                "user_id": user_id,
            },
        )
        await self._enqueue_completion(submission)
        return SubmissionResult(submission=submission, warnings=tuple(warnings))

    def _passing_score(self, quiz: QuizContent) -> float:
        if quiz.passing_score is not None:
            return quiz.passing_score
        return self._default_passing_score

    async def _store_next_attempt(
        self, quiz: QuizContent, submission: QuizSubmission
    ) -> QuizSubmission:
        """Number the attempt and store it; retry when a concurrent submit wins."""
        for attempt in range(1, self._max_attempt_retries + 1):
            last = await self._submissions.max_attempt_number(
                submission.quiz_content_id,
                submission.user_id,
                submission.enrollment_id,
            )
            if quiz.max_attempts is not None and last >= quiz.max_attempts:
                logger.warning(
                    "Attempt limit reached quiz_content_id=%s user=%s max=%s",
                    quiz.id,
                    submission.user_id,
                    quiz.max_attempts,
                )
                raise AttemptLimitExceededError(quiz.max_attempts)

            numbered = replace(submission, attempt_number=last + 1)
            try:
                await self._submissions.add(numbered)
            except AttemptNumberConflictError:
                ATTEMPT_NUMBER_CONFLICTS.inc()
                logger.warning(
                    "Attempt number %s taken for quiz_content_id=%s user=%s "
                    "(try %d of %d)",
                    numbered.attempt_number,
                    quiz.id,
                    submission.user_id,
                    attempt,
                    self._max_attempt_retries,
                    extra={
                        "quiz_content_id": quiz.id,
                        "attempt_number": numbered.attempt_number,
                    },
                )
                if attempt == self._max_attempt_retries:
                    raise
                continue
            return numbered
        raise AssertionError("unreachable")

    async def _enqueue_completion(self, submission: QuizSubmission) -> None:
        if self._queue is None:
            return
        payload = {
            "submission_id": str(submission.id),
            "quiz_content_id": submission.quiz_content_id,
            "user_id": submission.user_id,
            "enrollment_id": submission.enrollment_id,
            "attempt_number": submission.attempt_number,
            "percentage_score": submission.percentage_score,
            "is_passed": submission.is_passed,
            "completed_at": submission.completed_at,
            "time_spent_seconds": submission.time_spent_seconds,
        }
        try:
            await self._queue.enqueue(ACTIVITY_COMPLETION_QUEUE, payload)
        except Exception:
            # The attempt is already stored; completion can be rebuilt from it.
            logger.exception(
                "Failed to enqueue activity completion for submission=%s",
                submission.id,
            )

    # --- Retrieval ---

    async def list_for_quiz(self, quiz_content_id: int) -> list[QuizSubmission]:
        if await self._quizzes.get_quiz(quiz_content_id) is None:
            raise QuizNotFoundError(quiz_content_id)
        return await self._submissions.list_by_quiz(quiz_content_id)

    async def get(self, submission_id: UUID) -> QuizSubmission:
        submission = await self._submissions.get(submission_id)
        if submission is None:
            raise SubmissionNotFoundError(f"submission {submission_id} not found")
        return submission

    async def list_for_enrollment(self, enrollment_id: int) -> list[QuizSubmission]:
        return await self._submissions.list_by_enrollment(enrollment_id)

    async def list_for_user(
        self,
        quiz_content_id: int,
        user_id: str,
        enrollment_id: int | None = None,
    ) -> list[QuizSubmission]:
        return await self._submissions.list_by_user(
            quiz_content_id, user_id, enrollment_id
        )
