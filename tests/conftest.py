"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import asyncio
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.quiz.models import AnswerCheckResult, Course, Exercise, ExerciseType, Lesson  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Multi-screen flows against the in-memory service")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class FakeCourseService:
    """
    In-memory CourseService.

    Set ``failures[op]`` to an exception to make an operation fail, and
    ``gates[op]`` to an asyncio.Event to hold its response until the event
    is set. Every call is recorded in ``calls``.
    """

    def __init__(self, courses=None, lessons=None, exercises=None, answers=None):
        self.courses = list(courses or [])
        self.lessons = dict(lessons or {})
        self.exercises = dict(exercises or {})
        self.answers = dict(answers or {})
        self.failures: dict[str, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple] = []
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self):
        self.closed = True

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)

    async def _enter(self, operation, *args):
        self.calls.append((operation, *args))
        gate = self.gates.get(operation)
        if gate is not None:
            await gate.wait()
        error = self.failures.get(operation)
        if error is not None:
            raise error

    async def seed_demo(self):
        await self._enter("seed_demo")
        if not self.courses:
            demo = build_demo_catalog()
            self.courses = demo["courses"]
            self.lessons = demo["lessons"]
            self.exercises = demo["exercises"]
            self.answers = demo["answers"]

    async def list_courses(self):
        await self._enter("list_courses")
        return list(self.courses)

    async def list_lessons(self, course_id):
        await self._enter("list_lessons", course_id)
        return list(self.lessons.get(course_id, []))

    async def list_exercises(self, lesson_id):
        await self._enter("list_exercises", lesson_id)
        return list(self.exercises.get(lesson_id, []))

    async def check_answer(self, exercise_id, answer):
        await self._enter("check_answer", exercise_id, answer)
        expected = self.answers[exercise_id]
        return AnswerCheckResult(
            correct=answer.strip().lower() == expected.lower(),
            expected=expected,
        )

    async def health_check(self):
        return True


def build_demo_catalog() -> dict:
    """A Spanish course with a two-exercise lesson, a one-exercise lesson and an empty one."""
    spanish = Course(id="course-es", name="Spanish Basics", code="es")
    french = Course(id="course-fr", name="French Basics", code="fr")

    greetings = Lesson(id="lesson-greetings", course_id=spanish.id, title="Greetings", order=1)
    food = Lesson(id="lesson-food", course_id=spanish.id, title="Food", order=2)
    empty = Lesson(id="lesson-empty", course_id=spanish.id, title="Coming soon", order=3)
    bonjour = Lesson(id="lesson-bonjour", course_id=french.id, title="Bonjour", order=1)

    hello = Exercise(
        id="ex-hello",
        lesson_id=greetings.id,
        type=ExerciseType.MULTIPLE_CHOICE,
        prompt="How do you say 'Hello'?",
        options=("Hola", "Adiós", "Gracias"),
    )
    thanks = Exercise(
        id="ex-thanks",
        lesson_id=greetings.id,
        type=ExerciseType.FREE_TEXT,
        prompt="Translate 'Thank you'",
    )
    apple = Exercise(
        id="ex-apple",
        lesson_id=food.id,
        type=ExerciseType.FREE_TEXT,
        prompt="Translate 'apple'",
    )

    return {
        "courses": [spanish, french],
        # Served out of order on purpose
        "lessons": {spanish.id: [food, greetings, empty], french.id: [bonjour]},
        "exercises": {greetings.id: [hello, thanks], food.id: [apple], empty.id: []},
        "answers": {hello.id: "Hola", thanks.id: "gracias", apple.id: "manzana"},
    }


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def demo_catalog():
    return build_demo_catalog()


@pytest.fixture
def make_service():
    """Factory for FakeCourseService instances."""
    return FakeCourseService


@pytest.fixture
def service(demo_catalog):
    """Fake service preloaded with the demo catalog."""
    return FakeCourseService(**demo_catalog)


@pytest.fixture
def greetings(demo_catalog):
    return demo_catalog["lessons"]["course-es"][1]


@pytest.fixture
def food(demo_catalog):
    return demo_catalog["lessons"]["course-es"][0]


@pytest.fixture
def empty_lesson(demo_catalog):
    return demo_catalog["lessons"]["course-es"][2]
