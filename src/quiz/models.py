"""
Data model for the quiz client.

Course, Lesson, Exercise and AnswerCheckResult mirror the backend's JSON
payloads and are immutable once decoded. SessionState is the read-only
snapshot handed to the presentation layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from .errors import DecodeFailure


class ExerciseType(str, Enum):
    """Input mode of an exercise."""

    MULTIPLE_CHOICE = "mcq"
    FREE_TEXT = "text"


class Screen(str, Enum):
    """Top-level screen presented to the learner."""

    CATALOG = "catalog"
    ACTIVE = "active"
    SUMMARY = "summary"


class SessionPhase(str, Enum):
    """Phase of a single lesson attempt."""

    IDLE = "idle"
    LOADING = "loading"
    AWAITING_ANSWER = "awaiting_answer"
    CHECKING = "checking"
    REVIEWING = "reviewing"
    COMPLETED = "completed"


class PendingOp(str, Enum):
    """Remote operation currently in flight."""

    SEED = "seed"
    COURSES = "courses"
    LESSONS = "lessons"
    EXERCISES = "exercises"
    ANSWER = "answer"


def _require(data: dict[str, Any], key: str, entity: str) -> Any:
    if key not in data or data[key] is None:
        raise DecodeFailure(f"{entity} payload is missing '{key}'")
    return data[key]


def _ensure_mapping(data: Any, entity: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeFailure(f"{entity} payload must be an object, got {type(data).__name__}")
    return data


@dataclass(frozen=True)
class Course:
    """A course offered by the backend."""

    id: str
    name: str
    code: str

    @property
    def display_code(self) -> str:
        return self.code.upper()

    @classmethod
    def from_dict(cls, data: Any) -> Course:
        """Parse a course from an API payload."""
        data = _ensure_mapping(data, "Course")
        return cls(
            id=str(_require(data, "id", "Course")),
            name=str(_require(data, "name", "Course")),
            code=str(_require(data, "code", "Course")),
        )


@dataclass(frozen=True)
class Lesson:
    """A lesson within a course. Several lessons may share the same order."""

    id: str
    course_id: str
    title: str
    order: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> Lesson:
        """Parse a lesson from an API payload; a missing or null order means 0."""
        data = _ensure_mapping(data, "Lesson")
        raw_order = data.get("order")
        if raw_order is None:
            order = 0
        elif isinstance(raw_order, int) and not isinstance(raw_order, bool):
            order = raw_order
        elif isinstance(raw_order, float) and raw_order.is_integer():
            order = int(raw_order)
        else:
            raise DecodeFailure(f"Lesson order is not an integer: {raw_order!r}")
        return cls(
            id=str(_require(data, "id", "Lesson")),
            course_id=str(_require(data, "course_id", "Lesson")),
            title=str(_require(data, "title", "Lesson")),
            order=order,
        )


@dataclass(frozen=True)
class Exercise:
    """
    A single exercise.

    Options are only kept for multiple-choice exercises. A multiple-choice
    exercise may legitimately carry no options at all.
    """

    id: str
    lesson_id: str
    type: ExerciseType
    prompt: str
    options: tuple[str, ...] = ()

    @property
    def is_multiple_choice(self) -> bool:
        return self.type is ExerciseType.MULTIPLE_CHOICE

    @classmethod
    def from_dict(cls, data: Any) -> Exercise:
        """Parse an exercise; any type other than 'mcq' is treated as free text."""
        data = _ensure_mapping(data, "Exercise")
        exercise_type = (
            ExerciseType.MULTIPLE_CHOICE
            if data.get("type") == ExerciseType.MULTIPLE_CHOICE.value
            else ExerciseType.FREE_TEXT
        )

        options: tuple[str, ...] = ()
        if exercise_type is ExerciseType.MULTIPLE_CHOICE:
            raw_options = data.get("options") or []
            if not isinstance(raw_options, list):
                raise DecodeFailure("Exercise options must be a list")
            options = tuple(str(opt) for opt in raw_options)

        return cls(
            id=str(_require(data, "id", "Exercise")),
            lesson_id=str(_require(data, "lesson_id", "Exercise")),
            type=exercise_type,
            prompt=str(_require(data, "prompt", "Exercise")),
            options=options,
        )


@dataclass(frozen=True)
class AnswerCheckResult:
    """Outcome of checking one submitted answer."""

    correct: bool
    expected: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> AnswerCheckResult:
        data = _ensure_mapping(data, "AnswerCheckResult")
        correct = _require(data, "correct", "AnswerCheckResult")
        if not isinstance(correct, bool):
            raise DecodeFailure(f"AnswerCheckResult 'correct' must be a boolean, got {correct!r}")
        expected = data.get("expected")
        return cls(correct=correct, expected="" if expected is None else str(expected))


ModelT = TypeVar("ModelT", Course, Lesson, Exercise)


def parse_many(model: type[ModelT], payload: Any) -> list[ModelT]:
    """
    Parse a JSON array into a list of models, preserving order.

    Raises:
        DecodeFailure: If the payload is not a list or any item is malformed
    """
    if not isinstance(payload, list):
        raise DecodeFailure(f"Expected a list of {model.__name__}, got {type(payload).__name__}")
    return [model.from_dict(item) for item in payload]


@dataclass(frozen=True)
class SessionState:
    """Read-only snapshot of everything the presentation layer may show."""

    screen: Screen = Screen.CATALOG
    phase: SessionPhase = SessionPhase.IDLE
    courses: tuple[Course, ...] = ()
    selected_course: Course | None = None
    lessons: tuple[Lesson, ...] = ()
    selected_lesson: Lesson | None = None
    exercises: tuple[Exercise, ...] = ()
    current_index: int = 0
    draft_answer: str = ""
    last_result: AnswerCheckResult | None = None
    score: int = 0
    pending: frozenset[PendingOp] = field(default_factory=frozenset)

    @property
    def busy(self) -> bool:
        return bool(self.pending)

    @property
    def current_exercise(self) -> Exercise | None:
        if 0 <= self.current_index < len(self.exercises):
            return self.exercises[self.current_index]
        return None

    @property
    def progress_label(self) -> str:
        """Position label such as '2/5' for the active lesson."""
        if not self.exercises:
            return "0/0"
        return f"{self.current_index + 1}/{len(self.exercises)}"
