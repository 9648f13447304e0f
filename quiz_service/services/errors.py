"""Domain errors raised while grading and recording quiz submissions.

Routers map these onto HTTP status codes; nothing below the API layer
knows about HTTP.
"""

from __future__ import annotations


class GradingError(Exception):
    """Base class for submission and grading failures."""


class NotFoundError(GradingError):
    pass


class QuizNotFoundError(NotFoundError):
    def __init__(self, quiz_content_id: int) -> None:
        super().__init__(f"quiz content {quiz_content_id} not found")
        self.quiz_content_id = quiz_content_id


class QuestionNotFoundError(NotFoundError):
    def __init__(self, question_id: int) -> None:
        super().__init__(f"quiz question {question_id} not found")
        self.question_id = question_id


class SubmissionNotFoundError(NotFoundError):
    pass


class AttemptLimitExceededError(GradingError):
    def __init__(self, max_attempts: int) -> None:
        super().__init__(f"maximum of {max_attempts} attempts reached")
        self.max_attempts = max_attempts


class AttemptNumberConflictError(GradingError):
    """Another submission already holds this attempt slot.

    Raised by a SubmissionRepo when (quiz_content_id, user_id,
    enrollment_id, attempt_number) is taken; nothing was stored.
    """
