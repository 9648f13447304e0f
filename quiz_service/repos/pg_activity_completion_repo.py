"""PostgreSQL implementation of ActivityCompletionRepo."""

from __future__ import annotations

from sqlalchemy import case, func
from sqlalchemy.dialects.postgresql import Insert, insert
from sqlalchemy.ext.asyncio import AsyncSession

from quiz_service.db.tables import ActivityCompletionRow
from quiz_service.models.activity_completion import (
    ActivityCompletion,
    CompletionAttempt,
)


def upsert_statement(attempt: CompletionAttempt) -> Insert:
    """INSERT ... ON CONFLICT that folds one attempt into the stored row.

    The merge happens in a single statement, so two workers handling
    attempts for the same activity cannot lose an update.
    """
    first = ActivityCompletion.first(attempt)
    stmt = insert(ActivityCompletionRow).values(
        enrollment_id=first.enrollment_id,
        activity_id=first.activity_id,
        user_id=first.user_id,
        status=first.status,
        score=first.score,
        attempts=first.attempts,
        time_spent_seconds=first.time_spent_seconds,
        completed_at=first.completed_at,
    )
    row = ActivityCompletionRow
    excluded = stmt.excluded
    return stmt.on_conflict_do_update(
        index_elements=[row.enrollment_id, row.activity_id],
        set_={
            # completed is sticky
            "status": case(
                (row.status == "completed", row.status), else_=excluded.status
            ),
            "score": excluded.score,
            "attempts": row.attempts + 1,
            "time_spent_seconds": row.time_spent_seconds + excluded.time_spent_seconds,
            "completed_at": func.coalesce(row.completed_at, excluded.completed_at),
        },
    ).returning(ActivityCompletionRow)


class PgActivityCompletionRepo:
    """Satisfies the ActivityCompletionRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def record_attempt(self, attempt: CompletionAttempt) -> ActivityCompletion:
        # populate_existing refreshes a row already in the identity map.
        row = (
            await self._session.scalars(
                upsert_statement(attempt),
                execution_options={"populate_existing": True},
            )
        ).one()
        return _row_to_completion(row)

    async def get(
        self, enrollment_id: int, activity_id: int
    ) -> ActivityCompletion | None:
        row = await self._session.get(
            ActivityCompletionRow, (enrollment_id, activity_id)
        )
        if row is None:
            return None
        return _row_to_completion(row)


def _row_to_completion(row: ActivityCompletionRow) -> ActivityCompletion:
    return ActivityCompletion(
        enrollment_id=row.enrollment_id,
        activity_id=row.activity_id,
        user_id=row.user_id,
        status=row.status,  # type: ignore[arg-type]
        score=row.score,
        attempts=row.attempts,
        time_spent_seconds=row.time_spent_seconds,
        completed_at=row.completed_at,
    )
