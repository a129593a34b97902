"""
Lingo Mini backend client.

HTTP adapter implementing the CourseService protocol against the backend's
REST routes. Transport errors and malformed responses are translated into
TransportFailure and DecodeFailure so the quiz core never sees httpx types.

Usage:
    async with CourseServiceClient("http://localhost:8000") as client:
        courses = await client.list_courses()
        result = await client.check_answer(exercise_id, "hola")
"""

from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import quote

import httpx
from loguru import logger

from src.quiz.errors import DecodeFailure, TransportFailure
from src.quiz.models import AnswerCheckResult, Course, Exercise, Lesson, parse_many


class CourseServiceClient:
    """HTTP client for the Lingo Mini backend."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        retry_attempts: int = 1,
        backoff_seconds: float = 1.0,
    ):
        """
        Initialize the backend client.

        Args:
            base_url: Base URL of the backend (no trailing /api)
            timeout_seconds: Transport timeout per request
            retry_attempts: Attempts for idempotent GET requests
            backoff_seconds: Base delay between GET retries (doubles each attempt)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.retry_attempts = max(1, retry_attempts)
        self.backoff_seconds = backoff_seconds
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_seconds),
            headers={"Content-Type": "application/json"},
            follow_redirects=True,
        )

    async def __aenter__(self) -> CourseServiceClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    # =========================================================================
    # Transport
    # =========================================================================

    async def _get_json(self, path: str, operation: str) -> Any:
        """
        GET a JSON document, retrying timeouts, connection errors and 5xx.

        Raises:
            TransportFailure: When every attempt failed or on a 4xx response
            DecodeFailure: When the body is not JSON
        """
        last_error: Exception | None = None

        for attempt in range(self.retry_attempts):
            try:
                response = await self.client.get(f"{self.base_url}{path}")
                response.raise_for_status()
                return self._decode(response, operation)

            except httpx.HTTPStatusError as e:
                last_error = e
                if e.response.status_code < 500:
                    logger.warning(f"{operation}: backend rejected request ({e.response.status_code})")
                    raise TransportFailure(
                        f"{operation} failed with status {e.response.status_code}",
                        operation=operation,
                        status_code=e.response.status_code,
                    ) from e
                logger.warning(
                    f"{operation}: server error {e.response.status_code} on attempt "
                    f"{attempt + 1}/{self.retry_attempts}"
                )

            except httpx.TimeoutException as e:
                last_error = e
                logger.warning(f"{operation}: timeout on attempt {attempt + 1}/{self.retry_attempts}")

            except httpx.RequestError as e:
                last_error = e
                logger.warning(
                    f"{operation}: request error on attempt {attempt + 1}/{self.retry_attempts}: {e}"
                )

            if attempt < self.retry_attempts - 1:
                await asyncio.sleep(self.backoff_seconds * 2 ** attempt)

        status_code = None
        if isinstance(last_error, httpx.HTTPStatusError):
            status_code = last_error.response.status_code
        raise TransportFailure(
            f"{operation} failed after {self.retry_attempts} attempt(s): {last_error}",
            operation=operation,
            status_code=status_code,
        ) from last_error

    async def _post_json(
        self,
        path: str,
        operation: str,
        payload: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """POST once; non-idempotent requests are never retried."""
        try:
            response = await self.client.post(f"{self.base_url}{path}", json=payload)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            logger.warning(f"{operation}: backend returned {e.response.status_code}")
            raise TransportFailure(
                f"{operation} failed with status {e.response.status_code}",
                operation=operation,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"{operation}: request failed: {e}")
            raise TransportFailure(f"{operation} failed: {e}", operation=operation) from e

    @staticmethod
    def _decode(response: httpx.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise DecodeFailure(f"{operation} returned a non-JSON body", operation=operation) from e

    @staticmethod
    def _tag(error: DecodeFailure, operation: str) -> DecodeFailure:
        if error.operation is None:
            error.operation = operation
        return error

    # =========================================================================
    # CourseService operations
    # =========================================================================

    async def seed_demo(self) -> None:
        """Ask the backend to populate its demo course."""
        await self._post_json("/api/seed", "seed_demo")
        logger.info("Demo content seeded")

    async def list_courses(self) -> list[Course]:
        data = await self._get_json("/api/courses", "list_courses")
        try:
            return parse_many(Course, data)
        except DecodeFailure as e:
            raise self._tag(e, "list_courses")

    async def list_lessons(self, course_id: str) -> list[Lesson]:
        data = await self._get_json(f"/api/courses/{quote(course_id, safe='')}/lessons", "list_lessons")
        try:
            return parse_many(Lesson, data)
        except DecodeFailure as e:
            raise self._tag(e, "list_lessons")

    async def list_exercises(self, lesson_id: str) -> list[Exercise]:
        data = await self._get_json(f"/api/lessons/{quote(lesson_id, safe='')}/exercises", "list_exercises")
        try:
            return parse_many(Exercise, data)
        except DecodeFailure as e:
            raise self._tag(e, "list_exercises")

    async def check_answer(self, exercise_id: str, answer: str) -> AnswerCheckResult:
        """
        Validate one answer.

        Args:
            exercise_id: Exercise being answered
            answer: The learner's answer, verbatim

        Returns:
            Whether the answer was correct and the expected answer
        """
        response = await self._post_json(
            "/api/answer",
            "check_answer",
            {"exercise_id": exercise_id, "answer": answer},
        )
        data = self._decode(response, "check_answer")
        try:
            return AnswerCheckResult.from_dict(data)
        except DecodeFailure as e:
            raise self._tag(e, "check_answer")

    async def health_check(self) -> bool:
        """
        Check if the backend is reachable.

        Returns:
            True if the status route answers 200, False otherwise
        """
        try:
            response = await self.client.get(f"{self.base_url}/test", timeout=5.0)
            return response.status_code == 200
        except httpx.HTTPError:
            return False
