"""Quiz authoring records as seen by the grading engine.

Authoring data reaches the service as loosely-typed JSON (options with
optional positions, questionnaire subquestions with point assignments).
The ``from_dict`` constructors below validate that shape once, at the
boundary, so graders only ever receive typed, frozen records.

The grading engine never mutates any of these.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

DEFAULT_QUESTION_POINTS = 1.0
DEFAULT_HOTSPOT_RADIUS = 8.0


class QuestionType(StrEnum):
    MULTIPLE_CHOICE = "multiple_choice"
    MULTIPLE_RESPONSE = "multiple_response"
    TRUE_FALSE = "true_false"
    QUESTIONNAIRE = "questionnaire"
    SHORT_ANSWER = "short_answer"
    HOTSPOT = "hotspot"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: object) -> QuestionType:
        """Map an authoring type string onto the closed set; unknown => OTHER."""
        if isinstance(raw, str):
            try:
                return cls(raw.strip().lower())
            except ValueError:
                return cls.OTHER
        return cls.OTHER


def as_number(value: object) -> float | None:
    """Coerce JSON-ish numbers (and numeric strings) to float.

    Booleans are not numbers here, and neither are NaN or infinities.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def normalize_option_id(value: object) -> str | None:
    """Canonical string form of an answer-option id (``3``, ``3.0``, ``"3"``)."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _as_flag(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1")
    return False


@dataclass(frozen=True, slots=True)
class HotspotZone:
    x: float
    y: float
    radius: float = DEFAULT_HOTSPOT_RADIUS

    @staticmethod
    def parse(raw: object) -> HotspotZone | None:
        """Parse an option ``position``; returns None when it is unusable.

        Accepts a mapping or its JSON-encoded string.  A missing radius
        defaults to 8; a present but invalid radius disqualifies the zone.
        """
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except ValueError:
                return None
        if not isinstance(raw, Mapping):
            return None

        x = as_number(raw.get("x"))
        y = as_number(raw.get("y"))
        if x is None or y is None:
            return None

        radius_raw = raw.get("radius")
        if radius_raw is None:
            return HotspotZone(x=x, y=y)
        radius = as_number(radius_raw)
        if radius is None or radius < 0:
            return None
        return HotspotZone(x=x, y=y, radius=radius)


@dataclass(frozen=True, slots=True)
class QuizOption:
    text: str
    is_correct: bool = False
    position: HotspotZone | None = None
    # Questionnaire linkage
    option_id: str | None = None
    subquestion_text: str | None = None
    points: float = 0.0

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> QuizOption:
        if not isinstance(raw, Mapping):
            raise ValueError(f"option must be an object (got {type(raw).__name__})")

        text = raw.get("text", raw.get("option_text"))
        subquestion_text = raw.get("subquestion_text")
        position = raw.get("position")

        return QuizOption(
            text="" if text is None else str(text),
            is_correct=_as_flag(raw.get("is_correct")),
            position=HotspotZone.parse(position) if position is not None else None,
            option_id=normalize_option_id(
                raw.get("answer_option_id", raw.get("option_id", raw.get("id")))
            ),
            subquestion_text=None if subquestion_text is None else str(subquestion_text),
            points=as_number(raw.get("points")) or 0.0,
        )


@dataclass(frozen=True, slots=True)
class Assignment:
    answer_option_id: str
    points: float = 0.0


@dataclass(frozen=True, slots=True)
class Subquestion:
    text: str
    assignments: tuple[Assignment, ...] = ()

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> Subquestion:
        if not isinstance(raw, Mapping):
            raise ValueError(
                f"subquestion must be an object (got {type(raw).__name__})"
            )
        assignments_raw = raw.get("assignments") or []
        if not isinstance(assignments_raw, list):
            raise ValueError("subquestion assignments must be a list")

        assignments = []
        for item in assignments_raw:
            if not isinstance(item, Mapping):
                raise ValueError("assignment must be an object")
            option_id = normalize_option_id(item.get("answer_option_id"))
            if option_id is None:
                # An assignment nobody can select contributes nothing.
                continue
            assignments.append(
                Assignment(
                    answer_option_id=option_id,
                    points=as_number(item.get("points")) or 0.0,
                )
            )

        text = raw.get("text")
        return Subquestion(
            text="" if text is None else str(text),
            assignments=tuple(assignments),
        )


@dataclass(frozen=True, slots=True)
class QuizQuestion:
    id: int
    quiz_content_id: int
    question_type: QuestionType
    points: float = DEFAULT_QUESTION_POINTS
    options: tuple[QuizOption, ...] = ()
    subquestions: tuple[Subquestion, ...] = ()

    @staticmethod
    def from_dict(
        raw: Mapping[str, Any], *, quiz_content_id: int | None = None
    ) -> QuizQuestion:
        """Build a question from an authoring payload.

        Raises ValueError when the payload is structurally unusable
        (missing id, negative points, options that are not a list).
        """
        if not isinstance(raw, Mapping):
            raise ValueError(f"question must be an object (got {type(raw).__name__})")

        question_id = raw.get("id")
        if isinstance(question_id, bool) or not isinstance(question_id, int):
            raise ValueError(f"question id must be an integer (got {question_id!r})")

        owner = raw.get("quiz_content_id", quiz_content_id)
        if isinstance(owner, bool) or not isinstance(owner, int):
            raise ValueError(f"quiz_content_id must be an integer (got {owner!r})")

        points_raw = raw.get("points")
        if points_raw is None:
            points = DEFAULT_QUESTION_POINTS
        else:
            points = as_number(points_raw)
            if points is None or points < 0:
                raise ValueError(
                    f"question points must be a non-negative number (got {points_raw!r})"
                )

        options_raw = raw.get("options") or []
        if isinstance(options_raw, str):
            options_raw = json.loads(options_raw)
        if not isinstance(options_raw, list):
            raise ValueError("question options must be a list")

        subquestions_raw = raw.get("subquestions") or []
        if not isinstance(subquestions_raw, list):
            raise ValueError("question subquestions must be a list")

        return QuizQuestion(
            id=question_id,
            quiz_content_id=owner,
            question_type=QuestionType.parse(raw.get("question_type")),
            points=points,
            options=tuple(QuizOption.from_dict(o) for o in options_raw),
            subquestions=tuple(Subquestion.from_dict(s) for s in subquestions_raw),
        )


@dataclass(frozen=True, slots=True)
class QuizContent:
    id: int
    title: str = ""
    # None means "use the service-wide default"
    passing_score: float | None = None
    max_attempts: int | None = None

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> QuizContent:
        if not isinstance(raw, Mapping):
            raise ValueError(f"quiz must be an object (got {type(raw).__name__})")

        quiz_id = raw.get("id")
        if isinstance(quiz_id, bool) or not isinstance(quiz_id, int):
            raise ValueError(f"quiz id must be an integer (got {quiz_id!r})")

        passing_raw = raw.get("passing_score")
        passing_score = None
        if passing_raw is not None:
            passing_score = as_number(passing_raw)
            if passing_score is None or not 0 <= passing_score <= 100:
                raise ValueError(
                    f"passing_score must be a number in [0, 100] (got {passing_raw!r})"
                )

        max_attempts = raw.get("max_attempts")
        if max_attempts is not None and (
            isinstance(max_attempts, bool)
            or not isinstance(max_attempts, int)
            or max_attempts < 1
        ):
            raise ValueError(
                f"max_attempts must be a positive integer (got {max_attempts!r})"
            )

        title = raw.get("title")
        return QuizContent(
            id=quiz_id,
            title="" if title is None else str(title),
            passing_score=passing_score,
            max_attempts=max_attempts,
        )
