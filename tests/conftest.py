from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from quiz_service.api.dependencies import quiz_repo, submission_repo
from quiz_service.api.ratelimit import _rate_limiter
from quiz_service.main import app
from quiz_service.models.quiz import QuizContent, QuizQuestion
from quiz_service.repos.activity_completion_repo import completion_store
from quiz_service.services import token_service
from quiz_service.services.cache import cache_service
from quiz_service.services.task_queue import task_queue

# Ensure repo root is on sys.path so `import quiz_service` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

QUIZ_ID = 1
ENROLLMENT_ID = 500

# multiple choice (2 pts), true/false (1 pt), short answer (1 pt)
SAMPLE_QUESTIONS: list[dict[str, Any]] = [
    {
        "id": 101,
        "question_type": "multiple_choice",
        "points": 2,
        "options": [
            {"text": "Paris", "is_correct": True},
            {"text": "Lyon"},
            {"text": "Nice"},
        ],
    },
    {
        "id": 102,
        "question_type": "true_false",
        "points": 1,
        "options": [{"text": "True", "is_correct": True}, {"text": "False"}],
    },
    {
        "id": 103,
        "question_type": "short_answer",
        "points": 1,
        "options": [{"text": "Photosynthesis"}],
    },
]


@pytest.fixture(autouse=True)
def reset_stores() -> None:
    """Clear the in-memory stores between tests."""
    quiz_repo.clear()
    submission_repo.clear()
    completion_store.clear()


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Clear rate limit buckets between tests so limits don't bleed."""
    if hasattr(_rate_limiter, "_buckets"):
        _rate_limiter._buckets.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_cache() -> None:
    if hasattr(cache_service, "_store"):
        cache_service._store.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_task_queue() -> None:
    if hasattr(task_queue, "_queues"):
        task_queue._queues.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(username: str = "test-user") -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username)


@pytest.fixture
def token() -> str:
    return mint_token()


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Quiz test helpers
# ---------------------------------------------------------------------------


def seed_quiz(
    quiz_id: int = QUIZ_ID,
    *,
    questions: list[dict[str, Any]] | None = None,
    passing_score: float | None = None,
    max_attempts: int | None = None,
) -> QuizContent:
    """Put a quiz and its questions into the in-memory repo."""
    quiz = QuizContent(
        id=quiz_id,
        title=f"Quiz {quiz_id}",
        passing_score=passing_score,
        max_attempts=max_attempts,
    )
    quiz_repo.add_quiz(quiz)
    for raw in SAMPLE_QUESTIONS if questions is None else questions:
        quiz_repo.add_question(QuizQuestion.from_dict(raw, quiz_content_id=quiz_id))
    return quiz


def response_json(
    question_id: int,
    answer: Any,
    *,
    is_correct: bool,
    points: float,
    max_points: float = 1.0,
) -> dict[str, Any]:
    return {
        "quiz_question_id": question_id,
        "user_response": answer,
        "is_correct": is_correct,
        "points_earned": points,
        "max_points": max_points,
    }


def all_correct_responses() -> list[dict[str, Any]]:
    """Honest claims for SAMPLE_QUESTIONS, every answer right."""
    return [
        response_json(101, 0, is_correct=True, points=2, max_points=2),
        response_json(102, True, is_correct=True, points=1),
        response_json(103, "photosynthesis", is_correct=True, points=1),
    ]


def submission_json(
    responses: list[dict[str, Any]] | None = None,
    *,
    enrollment_id: int = ENROLLMENT_ID,
    score: float = 4,
    max_score: float = 4,
    percentage_score: float = 100,
    is_passed: bool = True,
    time_spent: int = 90,
) -> dict[str, Any]:
    return {
        "enrollment_id": enrollment_id,
        "score": score,
        "max_score": max_score,
        "percentage_score": percentage_score,
        "is_passed": is_passed,
        "time_spent": time_spent,
        "responses": all_correct_responses() if responses is None else responses,
    }
