from __future__ import annotations

from coursemaster.api.client import ApiClient
from coursemaster.data_models import Course, CoursePage, CourseQuery

from .parsing import parse_payload, parse_record


class CourseService:
    """Catalog listing and course detail."""

    def __init__(self, api: ApiClient):
        self.api = api

    def list_courses(self, query: CourseQuery) -> CoursePage:
        payload = self.api.get("/courses", params=query.to_params())
        return parse_payload(CoursePage.from_response, payload, "course list")

    def get_course(self, course_id: str) -> Course:
        return parse_record(Course, self.api.get(f"/courses/{course_id}"))
