"""PostgreSQL implementation of QuizRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quiz_service.db.tables import QuizContentRow, QuizQuestionRow
from quiz_service.models.quiz import QuizContent, QuizQuestion


class PgQuizRepo:
    """Satisfies the QuizRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_quiz(self, quiz_content_id: int) -> QuizContent | None:
        stmt = select(QuizContentRow).where(QuizContentRow.id == quiz_content_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_quiz(row)

    async def list_questions(self, quiz_content_id: int) -> list[QuizQuestion]:
        stmt = (
            select(QuizQuestionRow)
            .where(QuizQuestionRow.quiz_content_id == quiz_content_id)
            .order_by(QuizQuestionRow.id)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_question(row) for row in rows]


def _row_to_quiz(row: QuizContentRow) -> QuizContent:
    return QuizContent.from_dict(
        {
            "id": row.id,
            "title": row.title,
            "passing_score": row.passing_score,
            "max_attempts": row.max_attempts,
        }
    )


def _row_to_question(row: QuizQuestionRow) -> QuizQuestion:
    return QuizQuestion.from_dict(
        {
            "id": row.id,
            "quiz_content_id": row.quiz_content_id,
            "question_type": row.question_type,
            "points": row.points,
            "options": row.options or [],
            "subquestions": row.subquestions or [],
        }
    )
