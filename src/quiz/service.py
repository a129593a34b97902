"""
Protocol for the remote course service consumed by the quiz core.
"""

from typing import Protocol

from .models import AnswerCheckResult, Course, Exercise, Lesson


class CourseService(Protocol):
    """
    Remote store of courses, lessons and exercises plus answer validation.

    Implementations raise TransportFailure or DecodeFailure on failure.
    The list operations are safe to repeat; check_answer is not.
    """

    async def seed_demo(self) -> None:
        """Populate the backend with demo content."""
        ...

    async def list_courses(self) -> list[Course]:
        ...

    async def list_lessons(self, course_id: str) -> list[Lesson]:
        ...

    async def list_exercises(self, lesson_id: str) -> list[Exercise]:
        """Exercises of a lesson, in presentation order."""
        ...

    async def check_answer(self, exercise_id: str, answer: str) -> AnswerCheckResult:
        ...
