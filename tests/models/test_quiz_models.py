from __future__ import annotations

import pytest

from quiz_service.models.quiz import (
    DEFAULT_HOTSPOT_RADIUS,
    HotspotZone,
    QuestionType,
    QuizContent,
    QuizOption,
    QuizQuestion,
    as_number,
    normalize_option_id,
)
from quiz_service.models.submission import QuizSubmission


def test_question_type_parse() -> None:
    assert QuestionType.parse("Multiple_Choice ") is QuestionType.MULTIPLE_CHOICE
    assert QuestionType.parse("essay") is QuestionType.OTHER
    assert QuestionType.parse(None) is QuestionType.OTHER


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(3, 3.0), ("2.5", 2.5), (True, None), ("nan", None), ("inf", None), ([], None)],
)
def test_as_number(raw, expected) -> None:
    assert as_number(raw) == expected


def test_normalize_option_id() -> None:
    assert normalize_option_id(3) == "3"
    assert normalize_option_id(3.0) == "3"
    assert normalize_option_id(" 3 ") == "3"
    assert normalize_option_id("") is None
    assert normalize_option_id(False) is None


def test_hotspot_zone_parse() -> None:
    assert HotspotZone.parse({"x": 1, "y": "2"}) == HotspotZone(1.0, 2.0, DEFAULT_HOTSPOT_RADIUS)
    assert HotspotZone.parse('{"x": 1, "y": 2, "radius": 4}') == HotspotZone(1.0, 2.0, 4.0)
    assert HotspotZone.parse({"x": 1}) is None
    assert HotspotZone.parse({"x": 1, "y": 2, "radius": -1}) is None
    assert HotspotZone.parse({"x": 1, "y": 2, "radius": "wide"}) is None
    assert HotspotZone.parse("not json") is None


def test_option_from_dict_accepts_alternate_keys() -> None:
    option = QuizOption.from_dict(
        {"option_text": "Agree", "is_correct": 1, "answer_option_id": 12, "points": "2"}
    )
    assert option.text == "Agree"
    assert option.is_correct is True
    assert option.option_id == "12"
    assert option.points == 2.0


def test_question_from_dict_defaults() -> None:
    question = QuizQuestion.from_dict(
        {"id": 5, "question_type": "short_answer"}, quiz_content_id=2
    )
    assert question.quiz_content_id == 2
    assert question.points == 1.0
    assert question.options == ()


def test_question_from_dict_decodes_json_options() -> None:
    question = QuizQuestion.from_dict(
        {
            "id": 5,
            "quiz_content_id": 2,
            "question_type": "multiple_choice",
            "options": '[{"text": "a", "is_correct": true}]',
        }
    )
    assert question.options[0].is_correct is True


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ({"id": "5", "quiz_content_id": 1}, "question id"),
        ({"id": 5}, "quiz_content_id"),
        ({"id": 5, "quiz_content_id": 1, "points": -1}, "non-negative"),
        ({"id": 5, "quiz_content_id": 1, "options": {"a": 1}}, "options must be a list"),
    ],
)
def test_question_from_dict_rejects_bad_payloads(raw, message) -> None:
    with pytest.raises(ValueError, match=message):
        QuizQuestion.from_dict(raw)


def test_subquestion_assignments_without_option_id_are_dropped() -> None:
    question = QuizQuestion.from_dict(
        {
            "id": 5,
            "quiz_content_id": 1,
            "question_type": "questionnaire",
            "subquestions": [
                {
                    "text": "Pace",
                    "assignments": [
                        {"answer_option_id": 4, "points": 1},
                        {"answer_option_id": None, "points": 9},
                    ],
                }
            ],
        }
    )
    assert len(question.subquestions[0].assignments) == 1


def test_quiz_content_validation() -> None:
    quiz = QuizContent.from_dict({"id": 1, "passing_score": "80", "max_attempts": 3})
    assert quiz.passing_score == 80.0
    assert quiz.max_attempts == 3
    assert QuizContent.from_dict({"id": 2}).passing_score is None

    with pytest.raises(ValueError, match="passing_score"):
        QuizContent.from_dict({"id": 1, "passing_score": 150})
    with pytest.raises(ValueError, match="max_attempts"):
        QuizContent.from_dict({"id": 1, "max_attempts": 0})


def test_new_submission_records_creator() -> None:
    submission = QuizSubmission.new(
        quiz_content_id=1,
        user_id="learner-1",
        enrollment_id=3,
        score=1,
        max_score=2,
        percentage_score=50,
        is_passed=False,
        completed_at=1_700_000_000,
        time_spent_seconds=30,
    )
    assert submission.created_by == "learner-1"
    assert submission.attempt_number == 1
    assert submission.responses == ()
