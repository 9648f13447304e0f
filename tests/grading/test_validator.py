from __future__ import annotations

import pytest

from quiz_service.grading.validator import (
    POINTS_TOLERANCE,
    is_empty_answer,
    validate_answer,
)
from quiz_service.models.quiz import QuestionType, QuizQuestion


def _question(question_type: str, options: list, points: float = 2) -> QuizQuestion:
    return QuizQuestion.from_dict(
        {
            "id": 9,
            "quiz_content_id": 1,
            "question_type": question_type,
            "points": points,
            "options": options,
        }
    )


TRUE_FALSE = _question(
    "true_false", [{"text": "True", "is_correct": True}, {"text": "False"}]
)
MULTIPLE_RESPONSE = _question(
    "multiple_response",
    [
        {"text": "A", "is_correct": True},
        {"text": "B"},
        {"text": "C", "is_correct": True},
        {"text": "D"},
    ],
)


@pytest.mark.parametrize("answer", [None, "", "   ", [], {}, set()])
def test_empty_answers(answer) -> None:
    assert is_empty_answer(answer) is True


@pytest.mark.parametrize("answer", [0, False, "a", [0], {"0": 1}])
def test_non_empty_answers(answer) -> None:
    assert is_empty_answer(answer) is False


def test_true_false_honest_claim_agrees() -> None:
    verdict = validate_answer(TRUE_FALSE, "true", True, 2)
    assert verdict.agrees is True
    assert verdict.server_is_correct is True
    assert verdict.server_points == 2.0


def test_multiple_response_inflated_claim_is_overridden() -> None:
    verdict = validate_answer(MULTIPLE_RESPONSE, [0, 1, 2], True, 2)
    assert verdict.agrees is False
    assert verdict.server_is_correct is False
    assert verdict.server_points == 1.0
    assert verdict.question_type is QuestionType.MULTIPLE_RESPONSE


def test_points_within_tolerance_agree() -> None:
    almost = 1.0 + POINTS_TOLERANCE / 2
    assert validate_answer(MULTIPLE_RESPONSE, [0], False, almost).agrees is True


def test_points_outside_tolerance_disagree() -> None:
    assert validate_answer(MULTIPLE_RESPONSE, [0], False, 1.02).agrees is False


def test_correctness_mismatch_disagrees_even_with_equal_points() -> None:
    assert validate_answer(MULTIPLE_RESPONSE, [0], True, 1.0).agrees is False


def test_empty_answer_agrees_only_with_zero_claim() -> None:
    agreed = validate_answer(TRUE_FALSE, None, False, 0)
    assert agreed.agrees is True
    assert (agreed.server_is_correct, agreed.server_points) == (False, 0.0)

    inflated = validate_answer(TRUE_FALSE, "  ", False, 0.5)
    assert inflated.agrees is False
    assert inflated.server_points == 0.0

    claimed_correct = validate_answer(MULTIPLE_RESPONSE, [], True, 0)
    assert claimed_correct.agrees is False


def test_ungradable_type_keeps_client_claim() -> None:
    question = _question("drag_and_drop", [{"text": "x"}])
    verdict = validate_answer(question, {"slot": 1}, True, 1.5)
    assert verdict.agrees is True
    assert verdict.server_is_correct is True
    assert verdict.server_points == 1.5
    assert verdict.question_type is QuestionType.OTHER
