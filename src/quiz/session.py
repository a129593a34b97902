"""
Exercise session: the per-lesson attempt state machine.

    IDLE -> LOADING -> AWAITING_ANSWER -> CHECKING -> REVIEWING
                                ^                        |
                                +--------- next() -------+--> COMPLETED

exit() returns to IDLE from any phase. Remote calls capture the session
epoch; exit() and start_lesson() advance it, and a response that comes back
under an older epoch is discarded instead of applied.
"""

from __future__ import annotations

from loguru import logger

from .errors import CourseServiceError, InvalidTransition
from .models import AnswerCheckResult, Exercise, Lesson, PendingOp, SessionPhase
from .service import CourseService

# XP awarded per correct answer unless configured otherwise
POINTS_PER_CORRECT = 10


class ExerciseSession:
    """
    One learner's attempt at one lesson.

    Transition methods return True when they changed state and False when
    they were ignored (busy, empty draft, stale response, or not valid in
    the current phase). With strict=True an invalid phase raises
    InvalidTransition instead.
    """

    def __init__(
        self,
        service: CourseService,
        points_per_correct: int = POINTS_PER_CORRECT,
        strict: bool = False,
    ):
        self.service = service
        self.points_per_correct = points_per_correct
        self.strict = strict

        self.phase = SessionPhase.IDLE
        self.lesson: Lesson | None = None
        self.exercises: tuple[Exercise, ...] = ()
        self.current_index = 0
        self.draft_answer = ""
        self.last_result: AnswerCheckResult | None = None
        self.score = 0
        self.pending: PendingOp | None = None
        self._epoch = 0

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def busy(self) -> bool:
        return self.pending is not None

    @property
    def current_exercise(self) -> Exercise | None:
        if self.phase in (SessionPhase.IDLE, SessionPhase.LOADING):
            return None
        if 0 <= self.current_index < len(self.exercises):
            return self.exercises[self.current_index]
        return None

    # =========================================================================
    # Internals
    # =========================================================================

    def _reject(self, operation: str) -> bool:
        if self.strict:
            raise InvalidTransition(operation, self.phase.value)
        logger.debug(f"Session {operation} ignored in phase {self.phase.value}")
        return False

    def _enter(self, phase: SessionPhase) -> None:
        logger.debug(f"Session phase {self.phase.value} -> {phase.value}")
        self.phase = phase

    def _is_stale(self, epoch: int, operation: str) -> bool:
        if epoch != self._epoch:
            logger.debug(f"Discarding stale {operation} response")
            return True
        return False

    # =========================================================================
    # Transitions
    # =========================================================================

    async def start_lesson(self, lesson: Lesson) -> bool:
        """
        Fetch the lesson's exercises and begin a fresh attempt.

        Valid from IDLE or COMPLETED. On failure the session returns to the
        phase it was in before the call, with nothing from the failed
        attempt retained, and the error is re-raised.

        Raises:
            CourseServiceError: If the exercise fetch failed
        """
        if self.busy:
            logger.debug("Session start_lesson ignored: request in flight")
            return False
        if self.phase not in (SessionPhase.IDLE, SessionPhase.COMPLETED):
            return self._reject("start_lesson")

        previous = (self.phase, self.lesson)
        self._epoch += 1
        epoch = self._epoch
        self.lesson = lesson
        self.pending = PendingOp.EXERCISES
        self._enter(SessionPhase.LOADING)

        try:
            exercises = await self.service.list_exercises(lesson.id)
        except CourseServiceError as e:
            if self._is_stale(epoch, "list_exercises"):
                return False
            self.pending = None
            self.phase, self.lesson = previous
            logger.warning(f"Could not load exercises for lesson {lesson.id}: {e}")
            raise

        if self._is_stale(epoch, "list_exercises"):
            return False

        self.pending = None
        self.exercises = tuple(exercises)
        self.current_index = 0
        self.score = 0
        self.draft_answer = ""
        self.last_result = None
        logger.info(f"Started lesson '{lesson.title}' with {len(self.exercises)} exercise(s)")
        self._enter(SessionPhase.AWAITING_ANSWER if self.exercises else SessionPhase.COMPLETED)
        return True

    def set_draft_answer(self, value: str) -> bool:
        """Update the draft answer for the current exercise."""
        if self.phase is not SessionPhase.AWAITING_ANSWER:
            return self._reject("set_draft_answer")
        self.draft_answer = value
        return True

    async def submit(self) -> bool:
        """
        Send the draft answer for checking.

        An empty draft or a pending check makes this a no-op. A correct
        answer adds points_per_correct to the score. On failure the draft is
        kept so the learner can resubmit, and the error is re-raised.

        Raises:
            CourseServiceError: If the answer check failed
        """
        if self.busy:
            logger.debug("Session submit ignored: request in flight")
            return False
        if self.phase is not SessionPhase.AWAITING_ANSWER:
            return self._reject("submit")
        if not self.draft_answer:
            logger.debug("Session submit ignored: empty draft")
            return False

        exercise = self.exercises[self.current_index]
        epoch = self._epoch
        self.pending = PendingOp.ANSWER
        self._enter(SessionPhase.CHECKING)

        try:
            result = await self.service.check_answer(exercise.id, self.draft_answer)
        except CourseServiceError as e:
            if self._is_stale(epoch, "check_answer"):
                return False
            self.pending = None
            self.last_result = None
            self._enter(SessionPhase.AWAITING_ANSWER)
            logger.warning(f"Answer check for exercise {exercise.id} failed: {e}")
            raise

        if self._is_stale(epoch, "check_answer"):
            return False

        self.pending = None
        self.last_result = result
        if result.correct:
            self.score += self.points_per_correct
        self._enter(SessionPhase.REVIEWING)
        return True

    def next(self) -> bool:
        """Advance past the reviewed exercise, or complete the lesson after the last one."""
        if self.phase is not SessionPhase.REVIEWING:
            return self._reject("next")

        self.last_result = None
        if self.current_index + 1 < len(self.exercises):
            self.current_index += 1
            self.draft_answer = ""
            self._enter(SessionPhase.AWAITING_ANSWER)
        else:
            logger.info(f"Lesson completed with {self.score} XP")
            self._enter(SessionPhase.COMPLETED)
        return True

    async def retry_same_lesson(self) -> bool:
        """Re-fetch and restart the lesson that just completed."""
        if self.busy:
            return False
        if self.phase is not SessionPhase.COMPLETED or self.lesson is None:
            return self._reject("retry_same_lesson")
        return await self.start_lesson(self.lesson)

    def exit(self) -> None:
        """
        Abandon the attempt and return to IDLE.

        Any request still in flight is left to finish; its response will be
        discarded.
        """
        self._epoch += 1
        # Cleared before the abandoned request completes; its reply fails the epoch check.
        self.pending = None
        self.lesson = None
        self.exercises = ()
        self.current_index = 0
        self.draft_answer = ""
        self.last_result = None
        self._enter(SessionPhase.IDLE)
