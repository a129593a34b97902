"""
Course catalog loading.

Fetches the course list and, for the selected course, its lessons. A fetch
commits its results only once every request it depends on has succeeded,
so a failure leaves the previous catalog in place.
"""

from __future__ import annotations

from typing import Callable

from loguru import logger

from .errors import CourseServiceError
from .models import Course, Lesson, PendingOp
from .service import CourseService


def sort_lessons(lessons: list[Lesson]) -> list[Lesson]:
    """Order lessons by ascending order; ties keep the order they arrived in."""
    return sorted(lessons, key=lambda lesson: lesson.order)


class CatalogLoader:
    """
    Owns the course list, the selected course and its lessons.

    Only one catalog request may be in flight at a time; calls made while
    one is pending return False without touching the service.
    """

    def __init__(
        self,
        service: CourseService,
        on_invalidate: Callable[[], None] | None = None,
    ):
        """
        Args:
            service: Remote course service
            on_invalidate: Called whenever a new lesson list is committed, so
                downstream lesson/exercise state can be discarded
        """
        self.service = service
        self.on_invalidate = on_invalidate
        self.courses: list[Course] = []
        self.selected_course: Course | None = None
        self.lessons: list[Lesson] = []
        self.pending: PendingOp | None = None

    @property
    def busy(self) -> bool:
        return self.pending is not None

    def _is_rejected(self, operation: str) -> bool:
        if self.pending is not None:
            logger.debug(f"Catalog {operation} ignored: {self.pending.value} request in flight")
            return True
        return False

    async def _fetch_lessons(self, course: Course) -> list[Lesson]:
        lessons = await self.service.list_lessons(course.id)
        return sort_lessons(lessons)

    def _commit(self, course: Course | None, lessons: list[Lesson]) -> None:
        self.selected_course = course
        self.lessons = lessons
        if self.on_invalidate is not None:
            self.on_invalidate()

    async def load_courses(self) -> bool:
        """
        Fetch all courses and auto-select the first one.

        Returns:
            True if the catalog was refreshed, False if another request was pending

        Raises:
            CourseServiceError: If either the course or lesson fetch failed
        """
        if self._is_rejected("load_courses"):
            return False

        self.pending = PendingOp.COURSES
        try:
            courses = await self.service.list_courses()
            lessons = await self._fetch_lessons(courses[0]) if courses else []
        except CourseServiceError as e:
            logger.warning(f"Course catalog load failed, keeping previous catalog: {e}")
            raise
        finally:
            self.pending = None

        self.courses = courses
        self._commit(courses[0] if courses else None, lessons)
        logger.info(f"Loaded {len(courses)} course(s)")
        return True

    async def load_lessons(self, course: Course) -> bool:
        """
        Fetch and sort the lessons of a course, replacing the active lesson list.

        Committing the new list invalidates any selected lesson and any
        in-progress exercise list.

        Raises:
            CourseServiceError: If the fetch failed (previous lessons are kept)
        """
        if self._is_rejected("load_lessons"):
            return False

        self.pending = PendingOp.LESSONS
        try:
            lessons = await self._fetch_lessons(course)
        except CourseServiceError as e:
            logger.warning(f"Lesson load for course {course.id} failed: {e}")
            raise
        finally:
            self.pending = None

        self._commit(course, lessons)
        logger.info(f"Loaded {len(lessons)} lesson(s) for {course.display_code}")
        return True

    async def select_course(self, course: Course) -> bool:
        """Switch to another course and load its lessons."""
        return await self.load_lessons(course)

    async def seed_demo(self) -> bool:
        """Seed the backend with demo content, then reload the catalog."""
        if self._is_rejected("seed_demo"):
            return False

        self.pending = PendingOp.SEED
        try:
            await self.service.seed_demo()
        finally:
            self.pending = None

        return await self.load_courses()
