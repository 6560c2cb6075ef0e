from __future__ import annotations

from typing import List

from coursemaster.api.client import ApiClient
from coursemaster.data_models import Enrollment, unwrap_record

from .parsing import parse_list, parse_record


class EnrollmentService:
    """The current student's enrollments and lesson completion."""

    def __init__(self, api: ApiClient):
        self.api = api

    def enroll(self, course_id: str) -> Enrollment:
        return parse_record(Enrollment, self.api.post(f"/students/enrollments/{course_id}"))

    def my_enrollments(self) -> List[Enrollment]:
        return parse_list(Enrollment, self.api.get("/students/enrollments"))

    def get_enrollment(self, enrollment_id: str) -> Enrollment:
        return parse_record(Enrollment, self.api.get(f"/students/enrollments/{enrollment_id}"))

    def mark_lesson_complete(self, enrollment_id: str, lesson_id: str) -> Enrollment | None:
        """Mark a lesson complete; returns the updated enrollment when the API sends one."""
        payload = unwrap_record(self.api.put(f"/students/enrollments/{enrollment_id}/lessons/{lesson_id}"))
        if not isinstance(payload, dict) or "courseId" not in payload:
            return None
        return parse_record(Enrollment, payload)
