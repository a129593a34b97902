"""
Quiz core for the Lingo Mini client.

Components:
- models: Course, Lesson, Exercise, AnswerCheckResult and the SessionState snapshot
- service: CourseService protocol consumed by the core
- catalog: CatalogLoader for courses and ordered lessons
- session: ExerciseSession, the per-lesson attempt state machine
- controller: ScreenController, navigation between catalog, lesson and summary
"""

from .catalog import CatalogLoader, sort_lessons
from .controller import ScreenController
from .errors import (
    CourseServiceError,
    DecodeFailure,
    InvalidTransition,
    QuizStateError,
    TransportFailure,
)
from .models import (
    AnswerCheckResult,
    Course,
    Exercise,
    ExerciseType,
    Lesson,
    PendingOp,
    Screen,
    SessionPhase,
    SessionState,
)
from .service import CourseService
from .session import POINTS_PER_CORRECT, ExerciseSession

__all__ = [
    "AnswerCheckResult",
    "CatalogLoader",
    "Course",
    "CourseService",
    "CourseServiceError",
    "DecodeFailure",
    "Exercise",
    "ExerciseSession",
    "ExerciseType",
    "InvalidTransition",
    "Lesson",
    "PendingOp",
    "POINTS_PER_CORRECT",
    "QuizStateError",
    "Screen",
    "ScreenController",
    "SessionPhase",
    "SessionState",
    "TransportFailure",
    "sort_lessons",
]
