from __future__ import annotations

from typing import Protocol

from quiz_service.models.quiz import QuizContent, QuizQuestion


class QuizRepo(Protocol):
    """Read-only access to quiz authoring data."""

    async def get_quiz(self, quiz_content_id: int) -> QuizContent | None: ...
    async def list_questions(self, quiz_content_id: int) -> list[QuizQuestion]: ...


class InMemoryQuizRepo:
    def __init__(self) -> None:
        self._quizzes: dict[int, QuizContent] = {}
        self._questions: dict[int, QuizQuestion] = {}

    async def get_quiz(self, quiz_content_id: int) -> QuizContent | None:
        return self._quizzes.get(quiz_content_id)

    async def list_questions(self, quiz_content_id: int) -> list[QuizQuestion]:
        return [
            q for q in self._questions.values() if q.quiz_content_id == quiz_content_id
        ]

    # Seeding helpers (dev and tests); authoring happens elsewhere.

    def has_quiz(self, quiz_content_id: int) -> bool:
        return quiz_content_id in self._quizzes

    def add_quiz(self, quiz: QuizContent) -> None:
        if quiz.id in self._quizzes:
            raise ValueError("quiz already exists")
        self._quizzes[quiz.id] = quiz

    def add_question(self, question: QuizQuestion) -> None:
        if question.quiz_content_id not in self._quizzes:
            raise KeyError("quiz not found")
        if question.id in self._questions:
            raise ValueError("question already exists")
        self._questions[question.id] = question

    def clear(self) -> None:
        self._quizzes.clear()
        self._questions.clear()
