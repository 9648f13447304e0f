"""Reconcile a client's claimed grade for one answer with the server's.

The client grades answers locally for instant feedback and submits its
claim alongside the raw answer.  The claim is accepted only when it
matches what the server computes; otherwise the server's values win.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from quiz_service.grading.graders import grade
from quiz_service.models.quiz import QuestionType, QuizQuestion

# Absolute tolerance on points, for floating-point noise in client math.
POINTS_TOLERANCE = 0.01


@dataclass(frozen=True, slots=True)
class Verdict:
    agrees: bool
    server_is_correct: bool
    server_points: float
    question_type: QuestionType


def is_empty_answer(answer: Any) -> bool:
    if answer is None:
        return True
    if isinstance(answer, str):
        return not answer.strip()
    if isinstance(answer, list | tuple | set | frozenset | Mapping):
        return len(answer) == 0
    return False


def validate_answer(
    question: QuizQuestion,
    answer: Any,
    client_is_correct: bool,
    client_points: float,
) -> Verdict:
    """Compare the client's (is_correct, points) claim with a server re-grade."""
    if is_empty_answer(answer):
        agrees = not client_is_correct and client_points == 0
        return Verdict(
            agrees=agrees,
            server_is_correct=False,
            server_points=0.0,
            question_type=question.question_type,
        )

    result = grade(question, answer)
    if result is None:
        # No server-side grader for this type: the claim stands.
        return Verdict(
            agrees=True,
            server_is_correct=client_is_correct,
            server_points=client_points,
            question_type=question.question_type,
        )

    agrees = (
        result.is_correct == client_is_correct
        and abs(result.points - client_points) < POINTS_TOLERANCE
    )
    return Verdict(
        agrees=agrees,
        server_is_correct=result.is_correct,
        server_points=result.points,
        question_type=question.question_type,
    )
