"""
Screen controller: top-level navigation between catalog, lesson and summary.

    CATALOG --start_lesson--> ACTIVE --lesson completed--> SUMMARY
       ^                        |                          |   |
       +--------- exit() -------+                          |   |
       +------------------ back_to_course() ---------------+   |
                                ACTIVE <--retry_same_lesson()--+

Each operation is only honoured on the screen it belongs to; anything else
is ignored (or raises InvalidTransition in strict mode).
"""

from __future__ import annotations

from loguru import logger

from config import Settings, get_settings

from .catalog import CatalogLoader
from .errors import InvalidTransition
from .models import Course, Lesson, Screen, SessionPhase, SessionState
from .service import CourseService
from .session import POINTS_PER_CORRECT, ExerciseSession


class ScreenController:
    """Mediates every learner action and exposes a read-only SessionState."""

    def __init__(
        self,
        service: CourseService,
        points_per_correct: int = POINTS_PER_CORRECT,
        strict: bool = False,
    ):
        self.strict = strict
        self.screen = Screen.CATALOG
        self.session = ExerciseSession(service, points_per_correct=points_per_correct, strict=strict)
        self.catalog = CatalogLoader(service, on_invalidate=self._discard_session)

    @classmethod
    def from_settings(
        cls,
        service: CourseService,
        settings: Settings | None = None,
    ) -> ScreenController:
        """Build a controller using the configured scoring and strictness."""
        settings = settings or get_settings()
        return cls(
            service,
            points_per_correct=settings.points_per_correct,
            strict=settings.strict_transitions,
        )

    # =========================================================================
    # State
    # =========================================================================

    @property
    def state(self) -> SessionState:
        pending = frozenset(
            op for op in (self.catalog.pending, self.session.pending) if op is not None
        )
        return SessionState(
            screen=self.screen,
            phase=self.session.phase,
            courses=tuple(self.catalog.courses),
            selected_course=self.catalog.selected_course,
            lessons=tuple(self.catalog.lessons),
            selected_lesson=self.session.lesson,
            exercises=self.session.exercises,
            current_index=self.session.current_index,
            draft_answer=self.session.draft_answer,
            last_result=self.session.last_result,
            score=self.session.score,
            pending=pending,
        )

    def _reject(self, operation: str) -> bool:
        if self.strict:
            raise InvalidTransition(operation, self.screen.value)
        logger.debug(f"{operation} ignored on {self.screen.value} screen")
        return False

    def _discard_session(self) -> None:
        if self.session.phase is not SessionPhase.IDLE:
            self.session.exit()
            self._follow_session()

    def _follow_session(self) -> None:
        """Move to the screen that matches the session phase."""
        if self.session.phase is SessionPhase.COMPLETED:
            screen = Screen.SUMMARY
        elif self.session.phase is SessionPhase.IDLE:
            screen = Screen.CATALOG
        else:
            screen = Screen.ACTIVE
        if screen is not self.screen:
            logger.info(f"Screen {self.screen.value} -> {screen.value}")
            self.screen = screen

    # =========================================================================
    # Catalog screen
    # =========================================================================

    async def open(self) -> bool:
        """Load the course catalog on entry."""
        if self.screen is not Screen.CATALOG:
            return self._reject("open")
        return await self.catalog.load_courses()

    async def seed_demo(self) -> bool:
        if self.screen is not Screen.CATALOG:
            return self._reject("seed_demo")
        return await self.catalog.seed_demo()

    async def select_course(self, course: Course) -> bool:
        if self.screen is not Screen.CATALOG:
            return self._reject("select_course")
        return await self.catalog.select_course(course)

    async def start_lesson(self, lesson: Lesson) -> bool:
        """
        Start a lesson from the current course's lesson list.

        The screen changes only once the exercises have loaded: to ACTIVE,
        or straight to SUMMARY when the lesson has no exercises. Ignored
        while a catalog request is pending.
        """
        if self.screen is not Screen.CATALOG:
            return self._reject("start_lesson")
        if self.catalog.busy:
            logger.debug(f"start_lesson ignored: catalog {self.catalog.pending.value} request in flight")
            return False
        if lesson not in self.catalog.lessons:
            return self._reject("start_lesson")

        started = await self.session.start_lesson(lesson)
        if started:
            self._follow_session()
        return started

    # =========================================================================
    # Active screen
    # =========================================================================

    def set_draft_answer(self, value: str) -> bool:
        if self.screen is not Screen.ACTIVE:
            return self._reject("set_draft_answer")
        return self.session.set_draft_answer(value)

    async def submit(self) -> bool:
        if self.screen is not Screen.ACTIVE:
            return self._reject("submit")
        return await self.session.submit()

    def next(self) -> bool:
        if self.screen is not Screen.ACTIVE:
            return self._reject("next")
        advanced = self.session.next()
        if advanced:
            self._follow_session()
        return advanced

    def exit(self) -> bool:
        """Leave the lesson and return to the catalog."""
        if self.screen is not Screen.ACTIVE:
            return self._reject("exit")
        self.session.exit()
        self._follow_session()
        return True

    # =========================================================================
    # Summary screen
    # =========================================================================

    async def retry_same_lesson(self) -> bool:
        if self.screen is not Screen.SUMMARY:
            return self._reject("retry_same_lesson")
        restarted = await self.session.retry_same_lesson()
        if restarted:
            self._follow_session()
        return restarted

    def back_to_course(self) -> bool:
        if self.screen is not Screen.SUMMARY:
            return self._reject("back_to_course")
        self.session.exit()
        self._follow_session()
        return True
