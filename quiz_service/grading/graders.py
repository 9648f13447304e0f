"""Per-question-type graders.

Each grader recomputes correctness and points for one answer from the
question definition alone.  Graders are pure and total: an answer they
cannot interpret is graded as incorrect with zero points, never raised.
Every result is clamped into [0, question.points].

Answer encodings accepted per type:

  multiple_choice    3 | "3" | {"index": 3} | [3]
  multiple_response  [0, 2] (elements may also be {"index": n})
  true_false         true | "true" | 1          (anything else is false)
  questionnaire      {"0": [11, 12], "1": 14}   subquestion index -> option id(s)
  short_answer       "free text"
  hotspot            [{"x": 10, "y": 20}, ...]
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from quiz_service.grading.geometry import point_in_zone
from quiz_service.models.quiz import (
    QuestionType,
    QuizQuestion,
    as_number,
    normalize_option_id,
)


@dataclass(frozen=True, slots=True)
class GradeResult:
    is_correct: bool
    points: float

    def __iter__(self) -> Iterator[Any]:
        # Allows `is_correct, points = grader.grade(...)`
        yield self.is_correct
        yield self.points


INCORRECT = GradeResult(is_correct=False, points=0.0)


class Grader(Protocol):
    def grade(self, question: QuizQuestion, answer: Any) -> GradeResult: ...


def _clamp(points: float, question: QuizQuestion) -> float:
    return min(max(points, 0.0), question.points)


def _parse_index(value: Any, *, unwrap: bool = True) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    if unwrap and isinstance(value, Mapping):
        return _parse_index(value.get("index"), unwrap=False)
    return None


def _correct_indices(question: QuizQuestion) -> set[int]:
    return {i for i, option in enumerate(question.options) if option.is_correct}


class MultipleChoiceGrader:
    """Single selection; all-or-nothing."""

    def grade(self, question: QuizQuestion, answer: Any) -> GradeResult:
        if isinstance(answer, list | tuple) and len(answer) == 1:
            answer = answer[0]
        index = _parse_index(answer)
        if index is None or not 0 <= index < len(question.options):
            return INCORRECT
        if not question.options[index].is_correct:
            return INCORRECT
        return GradeResult(is_correct=True, points=_clamp(question.points, question))


class MultipleResponseGrader:
    """Several selections; partial credit with a symmetric penalty.

    score = max(0, (right picks - wrong picks) / number of correct options)
    """

    def grade(self, question: QuizQuestion, answer: Any) -> GradeResult:
        if not isinstance(answer, list | tuple | set | frozenset):
            return INCORRECT

        selected: set[int] = set()
        unusable = 0
        for item in answer:
            index = _parse_index(item)
            if index is None or not 0 <= index < len(question.options):
                unusable += 1
            else:
                selected.add(index)

        correct = _correct_indices(question)
        if unusable == 0 and sorted(selected) == sorted(correct):
            return GradeResult(is_correct=True, points=_clamp(question.points, question))

        if not correct:
            return INCORRECT

        right = len(selected & correct)
        wrong = len(selected - correct) + unusable
        score = max(0.0, (right - wrong) / len(correct))
        return GradeResult(
            is_correct=False, points=_clamp(score * question.points, question)
        )


def _as_true(answer: Any) -> bool:
    if isinstance(answer, bool):
        return answer
    if isinstance(answer, int):
        return answer == 1
    if isinstance(answer, str):
        return answer.strip().lower() == "true"
    return False


class TrueFalseGrader:
    def grade(self, question: QuizQuestion, answer: Any) -> GradeResult:
        expected = any(
            option.is_correct and option.text.strip().lower() == "true"
            for option in question.options
        )
        if _as_true(answer) != expected:
            return INCORRECT
        return GradeResult(is_correct=True, points=_clamp(question.points, question))


def _selected_ids(value: Any) -> set[str]:
    values = value if isinstance(value, list | tuple | set | frozenset) else [value]
    ids = set()
    for item in values:
        option_id = normalize_option_id(item)
        if option_id is not None:
            ids.add(option_id)
    return ids


def _questionnaire_selections(answer: Any) -> dict[int, set[str]] | None:
    if isinstance(answer, list | tuple):
        items = enumerate(answer)
    elif isinstance(answer, Mapping):
        items = answer.items()
    else:
        return None

    selections: dict[int, set[str]] = {}
    for key, value in items:
        index = _parse_index(key, unwrap=False)
        if index is None or index < 0:
            continue
        selections[index] = _selected_ids(value)
    return selections


class QuestionnaireGrader:
    """Points-per-assignment matrix: subquestion index -> selected option ids.

    There is no single right answer.  Any credit earned counts as correct.
    """

    def grade(self, question: QuizQuestion, answer: Any) -> GradeResult:
        selections = _questionnaire_selections(answer)
        if selections is None:
            return INCORRECT

        if question.subquestions:
            total = 0.0
            for index, selected in selections.items():
                if index >= len(question.subquestions):
                    continue
                subquestion = question.subquestions[index]
                total += sum(
                    a.points
                    for a in subquestion.assignments
                    if a.answer_option_id in selected
                )
        else:
            # Legacy rows: assignment points live directly on the options.
            selected_anywhere = set().union(*selections.values())
            total = sum(
                option.points
                for option in question.options
                if option.subquestion_text is not None
                and option.option_id in selected_anywhere
            )

        return GradeResult(is_correct=total > 0, points=_clamp(total, question))


class ShortAnswerGrader:
    """Exact match against any accepted answer, ignoring case and padding."""

    def grade(self, question: QuizQuestion, answer: Any) -> GradeResult:
        if not isinstance(answer, str):
            return INCORRECT
        given = answer.strip().lower()
        if not given:
            return INCORRECT
        if any(option.text.strip().lower() == given for option in question.options):
            return GradeResult(is_correct=True, points=_clamp(question.points, question))
        return INCORRECT


def _click_position(click: Any) -> tuple[float, float] | None:
    if not isinstance(click, Mapping):
        return None
    x = as_number(click.get("x"))
    y = as_number(click.get("y"))
    if x is None or y is None:
        return None
    return x, y


class HotspotGrader:
    """Clicks on an image scored against circular target zones.

    score = max(0, min(hits, zones) / zones - misses / len(options))

    The miss penalty divides by the TOTAL option count, not the number of
    distractor options.
    """

    def grade(self, question: QuizQuestion, answer: Any) -> GradeResult:
        zones = [
            option.position
            for option in question.options
            if option.is_correct and option.position is not None
        ]
        if not zones or not isinstance(answer, list | tuple):
            return INCORRECT

        hits = 0
        misses = 0
        for click in answer:
            position = _click_position(click)
            if position is not None and any(
                point_in_zone(position[0], position[1], z.x, z.y, z.radius)
                for z in zones
            ):
                hits += 1
            else:
                misses += 1

        hits = min(hits, len(zones))
        score = max(0.0, hits / len(zones) - misses / len(question.options))
        return GradeResult(
            is_correct=hits >= len(zones) and misses == 0,
            points=_clamp(score * question.points, question),
        )


# QuestionType.OTHER has no grader: its answers cannot be re-derived
# server-side, so the validator keeps the client's claim.
GRADERS: dict[QuestionType, Grader] = {
    QuestionType.MULTIPLE_CHOICE: MultipleChoiceGrader(),
    QuestionType.MULTIPLE_RESPONSE: MultipleResponseGrader(),
    QuestionType.TRUE_FALSE: TrueFalseGrader(),
    QuestionType.QUESTIONNAIRE: QuestionnaireGrader(),
    QuestionType.SHORT_ANSWER: ShortAnswerGrader(),
    QuestionType.HOTSPOT: HotspotGrader(),
}


def grader_for(question_type: QuestionType) -> Grader | None:
    return GRADERS.get(question_type)


def grade(question: QuizQuestion, answer: Any) -> GradeResult | None:
    """Grade with the question's own grader; None for ungradable types."""
    grader = grader_for(question.question_type)
    if grader is None:
        return None
    return grader.grade(question, answer)
