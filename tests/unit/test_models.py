"""
Unit tests for quiz payload decoding and the session snapshot.
"""

import pytest

from src.quiz.errors import DecodeFailure
from src.quiz.models import (
    AnswerCheckResult,
    Course,
    Exercise,
    ExerciseType,
    Lesson,
    PendingOp,
    SessionState,
    parse_many,
)


class TestCourse:
    def test_from_dict(self):
        course = Course.from_dict({"id": "c1", "name": "Spanish", "code": "es"})

        assert course == Course(id="c1", name="Spanish", code="es")
        assert course.display_code == "ES"

    def test_numeric_id_is_stringified(self):
        course = Course.from_dict({"id": 7, "name": "Spanish", "code": "es"})

        assert course.id == "7"

    def test_missing_code_is_decode_failure(self):
        with pytest.raises(DecodeFailure, match="code"):
            Course.from_dict({"id": "c1", "name": "Spanish"})

    def test_non_object_is_decode_failure(self):
        with pytest.raises(DecodeFailure):
            Course.from_dict(["c1", "Spanish", "es"])


class TestLesson:
    def test_order_defaults_to_zero(self):
        missing = Lesson.from_dict({"id": "l1", "course_id": "c1", "title": "Intro"})
        null = Lesson.from_dict({"id": "l2", "course_id": "c1", "title": "Intro", "order": None})

        assert missing.order == 0
        assert null.order == 0

    def test_order_parsed(self):
        lesson = Lesson.from_dict({"id": "l1", "course_id": "c1", "title": "Food", "order": 3})

        assert lesson.order == 3

    def test_bad_order_is_decode_failure(self):
        with pytest.raises(DecodeFailure, match="order"):
            Lesson.from_dict({"id": "l1", "course_id": "c1", "title": "Food", "order": "third"})

    @pytest.mark.parametrize("raw_order", [1.5, True, "2"])
    def test_non_integer_order_is_decode_failure(self, raw_order):
        with pytest.raises(DecodeFailure, match="order"):
            Lesson.from_dict({"id": "l1", "course_id": "c1", "title": "Food", "order": raw_order})

    def test_integral_float_order_accepted(self):
        lesson = Lesson.from_dict({"id": "l1", "course_id": "c1", "title": "Food", "order": 2.0})

        assert lesson.order == 2
        assert isinstance(lesson.order, int)


class TestExercise:
    def test_mcq_keeps_options_in_order(self):
        exercise = Exercise.from_dict({
            "id": "e1",
            "lesson_id": "l1",
            "type": "mcq",
            "prompt": "Hello?",
            "options": ["Hola", "Adiós"],
        })

        assert exercise.type is ExerciseType.MULTIPLE_CHOICE
        assert exercise.is_multiple_choice
        assert exercise.options == ("Hola", "Adiós")

    def test_mcq_without_options(self):
        exercise = Exercise.from_dict(
            {"id": "e1", "lesson_id": "l1", "type": "mcq", "prompt": "Hello?", "options": None}
        )

        assert exercise.options == ()

    def test_other_types_are_free_text(self):
        exercise = Exercise.from_dict({
            "id": "e1",
            "lesson_id": "l1",
            "type": "translate",
            "prompt": "Thank you",
            "options": ["ignored"],
        })

        assert exercise.type is ExerciseType.FREE_TEXT
        assert exercise.options == ()

    def test_options_must_be_list(self):
        with pytest.raises(DecodeFailure):
            Exercise.from_dict(
                {"id": "e1", "lesson_id": "l1", "type": "mcq", "prompt": "Hi", "options": "Hola"}
            )


class TestAnswerCheckResult:
    def test_from_dict(self):
        result = AnswerCheckResult.from_dict({"correct": False, "expected": "Hola"})

        assert result == AnswerCheckResult(correct=False, expected="Hola")

    def test_expected_optional(self):
        assert AnswerCheckResult.from_dict({"correct": True}).expected == ""

    def test_correct_must_be_boolean(self):
        with pytest.raises(DecodeFailure):
            AnswerCheckResult.from_dict({"correct": "yes", "expected": "Hola"})


class TestParseMany:
    def test_preserves_order(self):
        courses = parse_many(Course, [
            {"id": "b", "name": "B", "code": "b"},
            {"id": "a", "name": "A", "code": "a"},
        ])

        assert [c.id for c in courses] == ["b", "a"]

    def test_rejects_non_list(self):
        with pytest.raises(DecodeFailure):
            parse_many(Course, {"courses": []})


class TestSessionState:
    def test_defaults(self):
        state = SessionState()

        assert state.busy is False
        assert state.current_exercise is None
        assert state.progress_label == "0/0"

    def test_busy_and_progress(self):
        exercises = tuple(
            Exercise(id=f"e{i}", lesson_id="l1", type=ExerciseType.FREE_TEXT, prompt="?")
            for i in range(3)
        )
        state = SessionState(
            exercises=exercises,
            current_index=1,
            pending=frozenset({PendingOp.ANSWER}),
        )

        assert state.busy is True
        assert state.current_exercise is exercises[1]
        assert state.progress_label == "2/3"
