"""Activity completion lookup.

  GET /v1/enrollments/{enrollment_id}/activities/{activity_id}/completion

Records are written by the worker after each graded attempt, so a
submit that just returned may not be reflected yet.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from quiz_service.api.dependencies import get_completion_repo, require_user
from quiz_service.models.activity_completion import ActivityCompletion
from quiz_service.repos.activity_completion_repo import ActivityCompletionRepo

router = APIRouter(tags=["completions"])


class CompletionOut(BaseModel):
    enrollment_id: int
    activity_id: int
    user_id: str
    status: str
    score: float
    attempts: int
    time_spent: int
    completed_at: int | None

    @staticmethod
    def from_domain(record: ActivityCompletion) -> CompletionOut:
        return CompletionOut(
            enrollment_id=record.enrollment_id,
            activity_id=record.activity_id,
            user_id=record.user_id,
            status=record.status,
            score=record.score,
            attempts=record.attempts,
            time_spent=record.time_spent_seconds,
            completed_at=record.completed_at,
        )


@router.get(
    "/v1/enrollments/{enrollment_id}/activities/{activity_id}/completion",
    response_model=CompletionOut,
    dependencies=[Depends(require_user)],
)
async def get_completion(
    enrollment_id: int,
    activity_id: int,
    repo: Annotated[ActivityCompletionRepo, Depends(get_completion_repo)],
) -> CompletionOut:
    record = await repo.get(enrollment_id, activity_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"no completion for activity {activity_id} in enrollment {enrollment_id}",
        )
    return CompletionOut.from_domain(record)
