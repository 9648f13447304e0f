from __future__ import annotations

import pytest

from quiz_service.grading.graders import (
    GRADERS,
    INCORRECT,
    GradeResult,
    grade,
    grader_for,
)
from quiz_service.models.quiz import QuestionType, QuizQuestion


def _question(question_type: str, options: list, *, points: float = 1, **extra):
    return QuizQuestion.from_dict(
        {
            "id": 1,
            "quiz_content_id": 1,
            "question_type": question_type,
            "points": points,
            "options": options,
            **extra,
        }
    )


def _options(*flags: bool) -> list[dict]:
    return [{"text": f"opt {i}", "is_correct": f} for i, f in enumerate(flags)]


# ---- registry ----


def test_every_gradable_type_has_a_grader() -> None:
    gradable = set(QuestionType) - {QuestionType.OTHER}
    assert set(GRADERS) == gradable


def test_other_type_has_no_grader() -> None:
    assert grader_for(QuestionType.OTHER) is None
    assert grade(_question("matching", _options(True)), 0) is None


def test_grade_result_unpacks() -> None:
    is_correct, points = GradeResult(is_correct=True, points=2.0)
    assert (is_correct, points) == (True, 2.0)


# ---- multiple choice ----


@pytest.mark.parametrize("answer", [1, "1", " 1 ", 1.0, {"index": 1}, [1], ["1"]])
def test_multiple_choice_accepts_index_encodings(answer) -> None:
    q = _question("multiple_choice", _options(False, True, False), points=3)
    assert grade(q, answer) == GradeResult(is_correct=True, points=3.0)


@pytest.mark.parametrize("answer", [0, 2, 3, -1, 1.5, True, "b", None, [1, 2], {}])
def test_multiple_choice_wrong_or_unusable_is_zero(answer) -> None:
    q = _question("multiple_choice", _options(False, True, False), points=3)
    assert grade(q, answer) == INCORRECT


# ---- multiple response ----


def test_multiple_response_exact_set_gets_full_credit() -> None:
    q = _question("multiple_response", _options(True, False, True, False), points=4)
    assert grade(q, [2, 0]) == GradeResult(is_correct=True, points=4.0)


def test_multiple_response_extra_pick_is_penalized() -> None:
    # correct {0,2}; picked {0,1,2}: (2 - 1) / 2 = 0.5
    q = _question("multiple_response", _options(True, False, True, False), points=4)
    assert grade(q, [0, 1, 2]) == GradeResult(is_correct=False, points=2.0)


def test_multiple_response_partial_without_wrong_picks() -> None:
    q = _question("multiple_response", _options(True, False, True, False), points=4)
    assert grade(q, [0]) == GradeResult(is_correct=False, points=2.0)


def test_multiple_response_never_negative() -> None:
    q = _question("multiple_response", _options(True, False, False, False), points=2)
    assert grade(q, [1, 2, 3]) == INCORRECT


def test_multiple_response_empty_selection_is_zero() -> None:
    q = _question("multiple_response", _options(True, False), points=2)
    assert grade(q, []) == GradeResult(is_correct=False, points=0.0)


def test_multiple_response_unusable_entries_count_as_wrong() -> None:
    q = _question("multiple_response", _options(True, True), points=2)
    # two right picks, one junk entry: (2 - 1) / 2
    assert grade(q, [0, 1, "x"]) == GradeResult(is_correct=False, points=1.0)


def test_multiple_response_accepts_index_objects() -> None:
    q = _question("multiple_response", _options(True, True), points=2)
    assert grade(q, [{"index": 0}, {"index": "1"}]).is_correct is True


def test_multiple_response_non_list_is_zero() -> None:
    q = _question("multiple_response", _options(True, True), points=2)
    assert grade(q, 0) == INCORRECT


# ---- true / false ----


def _true_false(correct: str, points: float = 2):
    return _question(
        "true_false",
        [
            {"text": "True", "is_correct": correct == "True"},
            {"text": "False", "is_correct": correct == "False"},
        ],
        points=points,
    )


@pytest.mark.parametrize("answer", [True, "true", "TRUE", " True ", 1])
def test_true_false_truthy_encodings(answer) -> None:
    assert grade(_true_false("True"), answer) == GradeResult(True, 2.0)


@pytest.mark.parametrize("answer", [False, "false", 0, "yes", "1", 2, None])
def test_true_false_everything_else_reads_as_false(answer) -> None:
    assert grade(_true_false("False"), answer) == GradeResult(True, 2.0)
    assert grade(_true_false("True"), answer) == INCORRECT


def test_true_false_without_correct_true_option_expects_false() -> None:
    q = _question("true_false", [{"text": "True"}, {"text": "False"}], points=1)
    assert grade(q, False).is_correct is True


# ---- questionnaire ----


def _questionnaire(options: list | None = None, **extra):
    return _question("questionnaire", options or [], points=10, **extra)


def test_questionnaire_structured_sums_assignments() -> None:
    q = _questionnaire(
        subquestions=[
            {
                "text": "Workload",
                "assignments": [
                    {"answer_option_id": 11, "points": 1},
                    {"answer_option_id": 12, "points": 3},
                ],
            },
            {
                "text": "Pace",
                "assignments": [{"answer_option_id": 21, "points": 2}],
            },
        ]
    )
    assert grade(q, {"0": [12], "1": 21}) == GradeResult(True, 5.0)
    assert grade(q, [[11, 12], []]) == GradeResult(True, 4.0)


def test_questionnaire_structured_ignores_out_of_range_subquestions() -> None:
    q = _questionnaire(
        subquestions=[{"text": "A", "assignments": [{"answer_option_id": 1, "points": 2}]}]
    )
    assert grade(q, {"0": 1, "5": 1, "x": 1}) == GradeResult(True, 2.0)


def test_questionnaire_no_credit_is_incorrect() -> None:
    q = _questionnaire(
        subquestions=[{"text": "A", "assignments": [{"answer_option_id": 1, "points": 2}]}]
    )
    assert grade(q, {"0": [99]}) == GradeResult(False, 0.0)


def test_questionnaire_is_clamped_to_question_points() -> None:
    q = _question(
        "questionnaire",
        [],
        points=3,
        subquestions=[
            {"text": "A", "assignments": [{"answer_option_id": 1, "points": 5}]}
        ],
    )
    assert grade(q, {"0": 1}) == GradeResult(True, 3.0)


def test_questionnaire_legacy_options_path() -> None:
    q = _questionnaire(
        options=[
            {"id": 7, "text": "Agree", "subquestion_text": "Workload", "points": 2},
            {"id": 8, "text": "Disagree", "subquestion_text": "Workload", "points": 1},
            {"id": 9, "text": "No link", "points": 4},
        ]
    )
    assert grade(q, {"0": [7, "8"]}) == GradeResult(True, 3.0)
    # options without subquestion text never score
    assert grade(q, {"0": 9}) == GradeResult(False, 0.0)


def test_questionnaire_non_collection_answer_is_zero() -> None:
    assert grade(_questionnaire(), "7") == INCORRECT


# ---- short answer ----


def test_short_answer_matches_any_accepted_text() -> None:
    q = _question(
        "short_answer", [{"text": "Photosynthesis"}, {"text": "photo synthesis"}]
    )
    assert grade(q, "  PHOTOSYNTHESIS ") == GradeResult(True, 1.0)
    assert grade(q, "photo synthesis") == GradeResult(True, 1.0)


@pytest.mark.parametrize("answer", ["respiration", "", "   ", 42, ["photosynthesis"]])
def test_short_answer_mismatch_is_zero(answer) -> None:
    q = _question("short_answer", [{"text": "Photosynthesis"}])
    assert grade(q, answer) == INCORRECT


# ---- hotspot ----


def _hotspot(points: float = 4):
    return _question(
        "hotspot",
        [
            {"text": "heart", "is_correct": True, "position": {"x": 10, "y": 10, "radius": 5}},
            {"text": "lung", "is_correct": True, "position": '{"x": 50, "y": 50}'},
            {"text": "liver", "position": {"x": 90, "y": 90}},
            {"text": "brain", "position": {"x": 10, "y": 90}},
        ],
        points=points,
    )


def test_hotspot_all_zones_hit_no_misses() -> None:
    clicks = [{"x": 11, "y": 12}, {"x": 55, "y": 50}]
    assert grade(_hotspot(), clicks) == GradeResult(True, 4.0)


def test_hotspot_partial_hit_with_miss_penalty() -> None:
    # 1 of 2 zones, 1 miss over 4 options: 0.5 - 0.25
    clicks = [{"x": 10, "y": 10}, {"x": 200, "y": 200}]
    assert grade(_hotspot(), clicks) == GradeResult(False, 1.0)


def test_hotspot_default_radius_is_eight() -> None:
    # 9.5 <= 8 * 1.2
    assert grade(_hotspot(), [{"x": 59.5, "y": 50}]).points == 2.0


def test_hotspot_hits_capped_at_zone_count() -> None:
    clicks = [{"x": 10, "y": 10}] * 5
    result = grade(_hotspot(), clicks)
    assert result.is_correct is True
    assert result.points == 4.0


def test_hotspot_malformed_click_counts_as_miss() -> None:
    clicks = [{"x": 10, "y": 10}, {"x": 50, "y": 50}, {"x": "left"}]
    assert grade(_hotspot(), clicks) == GradeResult(False, 3.0)


def test_hotspot_without_zones_is_zero() -> None:
    q = _question("hotspot", [{"text": "a", "is_correct": True, "position": "junk"}])
    assert grade(q, [{"x": 0, "y": 0}]) == INCORRECT


def test_hotspot_non_list_answer_is_zero() -> None:
    assert grade(_hotspot(), {"x": 10, "y": 10}) == INCORRECT


# ---- properties across graders ----

_SAMPLES = [
    (_question("multiple_choice", _options(True, False), points=2), [0, 1, "x", None]),
    (
        _question("multiple_response", _options(True, False, True), points=3),
        [[0], [0, 2], [1], [0, 1, 2], "zz"],
    ),
    (_true_false("True"), [True, False, "true", 0]),
    (_question("short_answer", [{"text": "yes"}]), ["yes", "no", 3]),
    (_hotspot(), [[{"x": 10, "y": 10}], [{"x": 0, "y": 0}] * 9, []]),
]


@pytest.mark.parametrize(("question", "answers"), _SAMPLES)
def test_grading_is_deterministic_and_bounded(question, answers) -> None:
    binary = question.question_type in (
        QuestionType.MULTIPLE_CHOICE,
        QuestionType.TRUE_FALSE,
        QuestionType.SHORT_ANSWER,
    )
    for answer in answers:
        first = grade(question, answer)
        assert first == grade(question, answer)
        assert 0 <= first.points <= question.points
        if binary and not first.is_correct:
            assert first.points == 0
