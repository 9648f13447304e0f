"""Quiz submission endpoints.

  POST /v1/quizzes/{quiz_content_id}/submissions          record an attempt
  GET  /v1/quizzes/{quiz_content_id}/submissions          all attempts on a quiz
  GET  /v1/quizzes/{quiz_content_id}/user/submissions     the caller's attempts
  GET  /v1/quizzes/submissions/{submission_id}            one attempt
  GET  /v1/enrollments/{enrollment_id}/quiz-submissions   attempts in an enrollment

Routers translate between JSON and the service's dataclasses and map
domain errors onto status codes; grading lives in SubmissionService.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from quiz_service.api.dependencies import get_submission_service, require_user
from quiz_service.api.ratelimit import require_rate_limit
from quiz_service.models.principal import Principal
from quiz_service.models.submission import GradingWarning, QuizSubmission
from quiz_service.services.errors import (
    AttemptLimitExceededError,
    AttemptNumberConflictError,
    NotFoundError,
    QuizNotFoundError,
    SubmissionNotFoundError,
)
from quiz_service.services.rate_limiter import RateLimitConfig
from quiz_service.services.submission_service import (
    ResponseClaim,
    SubmissionClaim,
    SubmissionService,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["submissions"])

# A quiz is submitted once per attempt; bursts beyond this are scripts.
SUBMIT_RATE_LIMIT = RateLimitConfig(capacity=10, refill_rate=0.2)

Service = Annotated[SubmissionService, Depends(get_submission_service)]


class ResponseIn(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    quiz_question_id: int
    # Required key; null is a legitimate (empty) answer.
    user_response: Any = Field(...)
    is_correct: bool
    points_earned: float = Field(ge=0)
    max_points: float = Field(ge=0)


class SubmissionIn(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    enrollment_id: int
    score: float = Field(ge=0)
    max_score: float = Field(ge=0)
    percentage_score: float = Field(ge=0, le=100)
    is_passed: bool
    time_spent: int = Field(ge=0)
    responses: list[ResponseIn]

    def to_claim(self) -> SubmissionClaim:
        return SubmissionClaim(
            enrollment_id=self.enrollment_id,
            score=self.score,
            max_score=self.max_score,
            percentage_score=self.percentage_score,
            is_passed=self.is_passed,
            time_spent_seconds=self.time_spent,
            responses=tuple(
                ResponseClaim(
                    quiz_question_id=r.quiz_question_id,
                    user_response=r.user_response,
                    is_correct=r.is_correct,
                    points_earned=r.points_earned,
                    max_points=r.max_points,
                )
                for r in self.responses
            ),
        )


class ResponseOut(BaseModel):
    id: UUID
    quiz_question_id: int
    user_response: Any
    is_correct: bool
    points_earned: float
    max_points: float


class SubmissionOut(BaseModel):
    id: UUID
    quiz_content_id: int
    user_id: str
    enrollment_id: int
    score: float
    max_score: float
    percentage_score: float
    is_passed: bool
    completed_at: int
    time_spent: int
    attempt_number: int
    created_by: str
    responses: list[ResponseOut]

    @staticmethod
    def from_domain(submission: QuizSubmission) -> SubmissionOut:
        return SubmissionOut(
            id=submission.id,
            quiz_content_id=submission.quiz_content_id,
            user_id=submission.user_id,
            enrollment_id=submission.enrollment_id,
            score=submission.score,
            max_score=submission.max_score,
            percentage_score=submission.percentage_score,
            is_passed=submission.is_passed,
            completed_at=submission.completed_at,
            time_spent=submission.time_spent_seconds,
            attempt_number=submission.attempt_number,
            created_by=submission.created_by,
            responses=[
                ResponseOut(
                    id=r.id,
                    quiz_question_id=r.quiz_question_id,
                    user_response=r.user_response,
                    is_correct=r.is_correct,
                    points_earned=r.points_earned,
                    max_points=r.max_points,
                )
                for r in submission.responses
            ],
        )


class WarningOut(BaseModel):
    question_id: int
    client: dict[str, Any]
    server: dict[str, Any]

    @staticmethod
    def from_domain(warning: GradingWarning) -> WarningOut:
        return WarningOut(
            question_id=warning.question_id,
            client={
                "is_correct": warning.client_is_correct,
                "points": warning.client_points,
            },
            server={
                "is_correct": warning.server_is_correct,
                "points": warning.server_points,
            },
        )


class SubmitOut(BaseModel):
    message: str
    submission: SubmissionOut
    warnings: list[WarningOut] = []


def _not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.post(
    "/v1/quizzes/{quiz_content_id}/submissions",
    response_model=SubmitOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_rate_limit(SUBMIT_RATE_LIMIT))],
)
async def submit_quiz(
    quiz_content_id: int,
    body: SubmissionIn,
    principal: Annotated[Principal, Depends(require_user)],
    service: Service,
) -> SubmitOut:
    try:
        result = await service.submit(
            quiz_content_id, principal.user_id, body.to_claim()
        )
    except NotFoundError as exc:
        raise _not_found(exc) from None
    except AttemptLimitExceededError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from None
    except AttemptNumberConflictError:
        logger.error(
            "Gave up numbering attempt quiz_content_id=%s user=%s",
            quiz_content_id,
            principal.user_id,
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Concurrent submissions for this quiz; please retry",
        ) from None

    return SubmitOut(
        message="Quiz submitted successfully",
        submission=SubmissionOut.from_domain(result.submission),
        warnings=[WarningOut.from_domain(w) for w in result.warnings],
    )


@router.get(
    "/v1/quizzes/submissions/{submission_id}",
    response_model=SubmissionOut,
)
async def get_submission(
    submission_id: UUID,
    _principal: Annotated[Principal, Depends(require_user)],
    service: Service,
) -> SubmissionOut:
    try:
        submission = await service.get(submission_id)
    except SubmissionNotFoundError as exc:
        raise _not_found(exc) from None
    return SubmissionOut.from_domain(submission)


@router.get(
    "/v1/quizzes/{quiz_content_id}/submissions",
    response_model=list[SubmissionOut],
)
async def list_quiz_submissions(
    quiz_content_id: int,
    _principal: Annotated[Principal, Depends(require_user)],
    service: Service,
) -> list[SubmissionOut]:
    try:
        submissions = await service.list_for_quiz(quiz_content_id)
    except QuizNotFoundError as exc:
        raise _not_found(exc) from None
    return [SubmissionOut.from_domain(s) for s in submissions]


@router.get(
    "/v1/quizzes/{quiz_content_id}/user/submissions",
    response_model=list[SubmissionOut],
)
async def list_my_submissions(
    quiz_content_id: int,
    principal: Annotated[Principal, Depends(require_user)],
    service: Service,
    enrollment_id: int | None = None,
) -> list[SubmissionOut]:
    submissions = await service.list_for_user(
        quiz_content_id, principal.user_id, enrollment_id
    )
    return [SubmissionOut.from_domain(s) for s in submissions]


@router.get(
    "/v1/enrollments/{enrollment_id}/quiz-submissions",
    response_model=list[SubmissionOut],
)
async def list_enrollment_submissions(
    enrollment_id: int,
    _principal: Annotated[Principal, Depends(require_user)],
    service: Service,
) -> list[SubmissionOut]:
    submissions = await service.list_for_enrollment(enrollment_id)
    return [SubmissionOut.from_domain(s) for s in submissions]
