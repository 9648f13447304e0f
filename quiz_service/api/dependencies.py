from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from quiz_service.core.config import SETTINGS
from quiz_service.db.engine import async_session_factory, session_scope
from quiz_service.models.principal import Principal
from quiz_service.repos.activity_completion_repo import (
    ActivityCompletionRepo,
    completion_store,
)
from quiz_service.repos.pg_activity_completion_repo import PgActivityCompletionRepo
from quiz_service.repos.pg_quiz_repo import PgQuizRepo
from quiz_service.repos.pg_submission_repo import PgSubmissionRepo
from quiz_service.repos.quiz_repo import InMemoryQuizRepo, QuizRepo
from quiz_service.repos.submission_repo import InMemorySubmissionRepo, SubmissionRepo
from quiz_service.services import token_service
from quiz_service.services.cache import cache_service
from quiz_service.services.quiz_catalog import CachedQuizRepo
from quiz_service.services.submission_service import SubmissionService
from quiz_service.services.task_queue import task_queue

logger = logging.getLogger(__name__)

# Tokens are issued by the platform auth service, not here.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token")

# In-memory stores, used when DATABASE_URL is not set.
quiz_repo = InMemoryQuizRepo()
submission_repo = InMemorySubmissionRepo()


def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Validate the bearer JWT and return the caller's Principal."""
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    principal = Principal(user_id=str(claims["sub"]))
    logger.debug("Token validated for user=%s", principal.user_id)
    return principal


def _build_service(quizzes: QuizRepo, submissions: SubmissionRepo) -> SubmissionService:
    return SubmissionService(
        CachedQuizRepo(quizzes, cache_service),
        submissions,
        queue=task_queue,
        default_passing_score=SETTINGS.default_passing_score,
        max_attempt_retries=SETTINGS.submit_max_retries,
    )


async def get_submission_service() -> AsyncGenerator[SubmissionService, None]:
    """Request-scoped SubmissionService over PostgreSQL or the in-memory stores.

    With a database, the whole submit (every retry included) runs in one
    session that commits after the handler returns.
    """
    if async_session_factory is None:
        yield _build_service(quiz_repo, submission_repo)
        return

    async with session_scope() as session:
        yield _build_service(PgQuizRepo(session), PgSubmissionRepo(session))


async def get_completion_repo() -> AsyncGenerator[ActivityCompletionRepo, None]:
    if async_session_factory is None:
        yield completion_store
        return

    async with session_scope() as session:
        yield PgActivityCompletionRepo(session)
