"""PostgreSQL implementation of SubmissionRepo."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quiz_service.db.tables import QuizQuestionResponseRow, QuizSubmissionRow
from quiz_service.models.submission import QuizQuestionResponse, QuizSubmission
from quiz_service.services.errors import AttemptNumberConflictError


class PgSubmissionRepo:
    """Satisfies the SubmissionRepo Protocol using PostgreSQL via SQLAlchemy.

    Attempt-number uniqueness is enforced by the uq_quiz_submissions_attempt
    constraint; each insert runs in a SAVEPOINT so a lost race leaves the
    request's outer transaction usable for the retry.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def max_attempt_number(
        self, quiz_content_id: int, user_id: str, enrollment_id: int
    ) -> int:
        stmt = select(func.max(QuizSubmissionRow.attempt_number)).where(
            QuizSubmissionRow.quiz_content_id == quiz_content_id,
            QuizSubmissionRow.user_id == user_id,
            QuizSubmissionRow.enrollment_id == enrollment_id,
        )
        return (await self._session.execute(stmt)).scalar() or 0

    async def add(self, submission: QuizSubmission) -> None:
        row = QuizSubmissionRow(
            id=submission.id,
            quiz_content_id=submission.quiz_content_id,
            user_id=submission.user_id,
            enrollment_id=submission.enrollment_id,
            score=submission.score,
            max_score=submission.max_score,
            percentage_score=submission.percentage_score,
            is_passed=submission.is_passed,
            completed_at=submission.completed_at,
            time_spent_seconds=submission.time_spent_seconds,
            attempt_number=submission.attempt_number,
            created_by=submission.created_by,
        )
        response_rows = [
            QuizQuestionResponseRow(
                id=r.id,
                quiz_submission_id=submission.id,
                quiz_question_id=r.quiz_question_id,
                user_response=r.user_response,
                is_correct=r.is_correct,
                points_earned=r.points_earned,
                max_points=r.max_points,
            )
            for r in submission.responses
        ]
        try:
            async with self._session.begin_nested():
                self._session.add(row)
                # Parent first so the FK holds within the flush.
                await self._session.flush()
                self._session.add_all(response_rows)
                await self._session.flush()
        except IntegrityError as exc:
            raise AttemptNumberConflictError(
                f"attempt {submission.attempt_number} already recorded"
            ) from exc

    async def get(self, submission_id: UUID) -> QuizSubmission | None:
        stmt = select(QuizSubmissionRow).where(QuizSubmissionRow.id == submission_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return (await self._with_responses([row]))[0]

    async def list_by_quiz(self, quiz_content_id: int) -> list[QuizSubmission]:
        stmt = select(QuizSubmissionRow).where(
            QuizSubmissionRow.quiz_content_id == quiz_content_id
        )
        return await self._list(stmt)

    async def list_by_enrollment(self, enrollment_id: int) -> list[QuizSubmission]:
        stmt = select(QuizSubmissionRow).where(
            QuizSubmissionRow.enrollment_id == enrollment_id
        )
        return await self._list(stmt)

    async def list_by_user(
        self,
        quiz_content_id: int,
        user_id: str,
        enrollment_id: int | None = None,
    ) -> list[QuizSubmission]:
        stmt = select(QuizSubmissionRow).where(
            QuizSubmissionRow.quiz_content_id == quiz_content_id,
            QuizSubmissionRow.user_id == user_id,
        )
        if enrollment_id is not None:
            stmt = stmt.where(QuizSubmissionRow.enrollment_id == enrollment_id)
        return await self._list(stmt)

    async def _list(self, stmt) -> list[QuizSubmission]:
        stmt = stmt.order_by(
            QuizSubmissionRow.completed_at.desc(),
            QuizSubmissionRow.attempt_number.desc(),
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return await self._with_responses(rows)

    async def _with_responses(
        self, rows: Sequence[QuizSubmissionRow]
    ) -> list[QuizSubmission]:
        if not rows:
            return []
        stmt = select(QuizQuestionResponseRow).where(
            QuizQuestionResponseRow.quiz_submission_id.in_([r.id for r in rows])
        )
        by_submission: dict[UUID, list[QuizQuestionResponse]] = defaultdict(list)
        for response_row in (await self._session.execute(stmt)).scalars():
            by_submission[response_row.quiz_submission_id].append(
                _row_to_response(response_row)
            )
        return [_row_to_submission(r, by_submission[r.id]) for r in rows]


def _row_to_response(row: QuizQuestionResponseRow) -> QuizQuestionResponse:
    return QuizQuestionResponse(
        id=row.id,
        quiz_submission_id=row.quiz_submission_id,
        quiz_question_id=row.quiz_question_id,
        user_response=row.user_response,
        is_correct=row.is_correct,
        points_earned=row.points_earned,
        max_points=row.max_points,
    )


def _row_to_submission(
    row: QuizSubmissionRow, responses: list[QuizQuestionResponse]
) -> QuizSubmission:
    return QuizSubmission(
        id=row.id,
        quiz_content_id=row.quiz_content_id,
        user_id=row.user_id,
        enrollment_id=row.enrollment_id,
        score=row.score,
        max_score=row.max_score,
        percentage_score=row.percentage_score,
        is_passed=row.is_passed,
        completed_at=row.completed_at,
        time_spent_seconds=row.time_spent_seconds,
        attempt_number=row.attempt_number,
        created_by=row.created_by,
        responses=tuple(responses),
    )
