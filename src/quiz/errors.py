"""
Error taxonomy for the quiz client.

Remote failures (TransportFailure, DecodeFailure) are reported to the caller
after the component has been restored to its last known-good state.
InvalidTransition is a contract violation by the caller and is only raised
when strict transitions are enabled; otherwise the call is ignored.
"""

from __future__ import annotations


class CourseServiceError(Exception):
    """Base class for failures talking to the course service."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class TransportFailure(CourseServiceError):
    """The request could not complete (connection error, timeout, non-2xx status)."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, operation)
        self.status_code = status_code


class DecodeFailure(CourseServiceError):
    """The response arrived but could not be decoded into the expected shape."""


class QuizStateError(Exception):
    """Base class for state machine contract violations."""


class InvalidTransition(QuizStateError):
    """An operation was attempted that is not valid in the current state."""

    def __init__(self, operation: str, state: str):
        super().__init__(f"'{operation}' is not valid in state {state}")
        self.operation = operation
        self.state = state
