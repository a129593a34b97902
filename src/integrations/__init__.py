"""
External integrations for the Lingo Mini client.

Modules:
- course_service_client: httpx client for the Lingo Mini backend
"""
from .course_service_client import CourseServiceClient

__all__ = ["CourseServiceClient"]
