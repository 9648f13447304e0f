"""SQLAlchemy table definitions.

These map to the frozen dataclass domain models in quiz_service/models/.
Repos convert between rows and domain dataclasses; nothing outside
quiz_service/repos/ touches a row object.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import (
    Boolean,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from quiz_service.db.engine import Base

# --- Authoring (read-only for this service) ---


class QuizContentRow(Base):
    __tablename__ = "quiz_contents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    passing_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_attempts: Mapped[int | None] = mapped_column(Integer, nullable=True)


class QuizQuestionRow(Base):
    __tablename__ = "quiz_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    quiz_content_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("quiz_contents.id"), nullable=False, index=True
    )
    question_type: Mapped[str] = mapped_column(
        String(32), nullable=False
    )  # multiple_choice|multiple_response|true_false|questionnaire|short_answer|hotspot
    points: Mapped[float | None] = mapped_column(Float, nullable=True)
    options: Mapped[list[Any]] = mapped_column(JSONB, nullable=False, default=list)
    subquestions: Mapped[list[Any]] = mapped_column(
        JSONB, nullable=False, default=list
    )


# --- Submissions ---


class QuizSubmissionRow(Base):
    __tablename__ = "quiz_submissions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    quiz_content_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("quiz_contents.id"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(320), nullable=False)
    enrollment_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    max_score: Mapped[float] = mapped_column(Float, nullable=False)
    percentage_score: Mapped[float] = mapped_column(Float, nullable=False)
    is_passed: Mapped[bool] = mapped_column(Boolean, nullable=False)
    completed_at: Mapped[int] = mapped_column(Integer, nullable=False)
    time_spent_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    attempt_number: Mapped[int] = mapped_column(Integer, nullable=False)
    created_by: Mapped[str] = mapped_column(String(320), nullable=False)

    # Two concurrent first attempts cannot both become attempt 1.
    __table_args__ = (
        UniqueConstraint(
            "quiz_content_id",
            "user_id",
            "enrollment_id",
            "attempt_number",
            name="uq_quiz_submissions_attempt",
        ),
    )


class QuizQuestionResponseRow(Base):
    __tablename__ = "quiz_question_responses"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    quiz_submission_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("quiz_submissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    quiz_question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("quiz_questions.id"), nullable=False
    )
    user_response: Mapped[Any] = mapped_column(JSONB, nullable=True)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    points_earned: Mapped[float] = mapped_column(Float, nullable=False)
    max_points: Mapped[float] = mapped_column(Float, nullable=False)


# --- Activity completion ---


class ActivityCompletionRow(Base):
    __tablename__ = "activity_completions"

    enrollment_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    activity_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(320), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False)
    time_spent_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_at: Mapped[int | None] = mapped_column(Integer, nullable=True)
