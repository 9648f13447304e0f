"""Read-through cache in front of a QuizRepo.

Quiz definitions are read on every submission and change rarely, so
they are cached as JSON for QUIZ_CACHE_TTL_SECONDS.  Unknown quizzes are
not cached; a quiz created right after a 404 is visible immediately.
"""

from __future__ import annotations

import json
from dataclasses import asdict

from quiz_service.core.metrics import CACHE_OPERATIONS
from quiz_service.models.quiz import QuizContent, QuizQuestion
from quiz_service.repos.quiz_repo import QuizRepo
from quiz_service.services.cache import CacheService

QUIZ_CACHE_TTL_SECONDS = 300


def _quiz_key(quiz_content_id: int) -> str:
    return f"quiz:{quiz_content_id}"


def _questions_key(quiz_content_id: int) -> str:
    return f"quiz:{quiz_content_id}:questions"


class CachedQuizRepo:
    """Satisfies the QuizRepo Protocol; delegates misses to ``inner``."""

    def __init__(
        self,
        inner: QuizRepo,
        cache: CacheService,
        *,
        ttl_seconds: int = QUIZ_CACHE_TTL_SECONDS,
    ) -> None:
        self._inner = inner
        self._cache = cache
        self._ttl = ttl_seconds

    async def get_quiz(self, quiz_content_id: int) -> QuizContent | None:
        key = _quiz_key(quiz_content_id)
        cached = await self._cache.get(key)
        if cached is not None:
            CACHE_OPERATIONS.labels(operation="hit").inc()
            return QuizContent.from_dict(json.loads(cached))

        CACHE_OPERATIONS.labels(operation="miss").inc()
        quiz = await self._inner.get_quiz(quiz_content_id)
        if quiz is not None:
            await self._cache.set(key, json.dumps(asdict(quiz)), self._ttl)
        return quiz

    async def list_questions(self, quiz_content_id: int) -> list[QuizQuestion]:
        key = _questions_key(quiz_content_id)
        cached = await self._cache.get(key)
        if cached is not None:
            CACHE_OPERATIONS.labels(operation="hit").inc()
            return [QuizQuestion.from_dict(raw) for raw in json.loads(cached)]

        CACHE_OPERATIONS.labels(operation="miss").inc()
        questions = await self._inner.list_questions(quiz_content_id)
        if questions:
            await self._cache.set(
                key, json.dumps([asdict(q) for q in questions]), self._ttl
            )
        return questions
