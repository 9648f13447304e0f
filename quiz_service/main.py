from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quiz_service.api.completions import router as completions_router
from quiz_service.api.dependencies import quiz_repo
from quiz_service.api.health import router as health_router
from quiz_service.api.metrics_endpoint import router as metrics_router
from quiz_service.api.submissions import router as submissions_router
from quiz_service.core.config import SETTINGS
from quiz_service.core.logging import setup_logging
from quiz_service.db.engine import async_session_factory, lifespan_db
from quiz_service.db.redis import lifespan_redis
from quiz_service.middleware.metrics import MetricsMiddleware
from quiz_service.middleware.request_context import RequestContextMiddleware
from quiz_service.models.quiz import QuizContent, QuizQuestion

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


def seed_sample_quiz() -> None:
    """Give a database-less dev server one quiz to submit against."""
    if quiz_repo.has_quiz(1):
        return
    quiz_repo.add_quiz(QuizContent(id=1, title="Sample quiz", passing_score=60))
    for raw in (
        {
            "id": 1,
            "question_type": "multiple_choice",
            "points": 2,
            "options": [
                {"text": "Paris", "is_correct": True},
                {"text": "Lyon"},
                {"text": "Nice"},
            ],
        },
        {
            "id": 2,
            "question_type": "true_false",
            "options": [{"text": "True", "is_correct": True}, {"text": "False"}],
        },
        {
            "id": 3,
            "question_type": "short_answer",
            "options": [{"text": "photosynthesis"}],
        },
    ):
        quiz_repo.add_question(QuizQuestion.from_dict(raw, quiz_content_id=1))
    logger.info("Seeded sample quiz_content_id=1 into the in-memory store")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Nested so teardown runs in reverse order.
    async with lifespan_db():
        async with lifespan_redis():
            if async_session_factory is None and SETTINGS.is_dev:
                seed_sample_quiz()
            yield


app = FastAPI(
    title="quiz-grading-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last-added runs first: RequestContext -> Metrics -> CORS -> route.
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(submissions_router)
app.include_router(completions_router)

logger.info(
    "quiz-grading-service started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)
