"""Shared fixtures: an in-memory HTTP session and builders for API records."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from coursemaster.api.client import ApiClient
from coursemaster.config.schema import Settings
from coursemaster.data_models import Course, CoursePage, Enrollment, Pagination, Quiz

BASE_URL = "http://api.test/api"


class FakeResponse:
    """Just enough of `requests.Response` for the API client."""

    def __init__(self, status_code: int = 200, body: Any = None, raw: Optional[str] = None):
        self.status_code = status_code
        if raw is not None:
            self.content = raw.encode("utf-8")
        elif body is None:
            self.content = b""
        else:
            self.content = json.dumps(body).encode("utf-8")

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        return json.loads(self.content)


class FakeSession:
    """
    Routes `(method, path)` to queued responses and records every call.

    A route with several queued responses pops them in order; the last one is
    repeated. Queue an exception instance to have it raised instead.
    """

    def __init__(self, base_url: str = BASE_URL):
        self.base_url = base_url
        self.routes: Dict[tuple, List[Any]] = {}
        self.calls: List[SimpleNamespace] = []

    def add(self, method: str, path: str, response: Any) -> None:
        self.routes.setdefault((method, path), []).append(response)

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        path = url[len(self.base_url):]
        self.calls.append(
            SimpleNamespace(method=method, path=path, params=params, json=json, headers=headers, timeout=timeout)
        )
        queue = self.routes.get((method, path))
        if not queue:
            return FakeResponse(404, {"message": f"No route for {method} {path}"})
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last_call(self) -> SimpleNamespace:
        return self.calls[-1]


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def api(fake_session):
    """API client bound to the fake session, already carrying a token."""
    return ApiClient(BASE_URL, timeout=5, token="test-token", session=fake_session)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing the session file into a temporary directory."""
    return Settings.model_validate(
        {
            "api": {"base_url": BASE_URL, "timeout_seconds": 5},
            "paths": {"session_file": str(tmp_path / "session.json")},
        }
    )


@pytest.fixture
def make_course():
    def _make(course_id: str = "c1", lessons: Any = 0, **extra: Any) -> Course:
        if isinstance(lessons, int):
            lessons = [
                {"_id": f"{course_id}-l{index}", "title": f"Lesson {index}", "order": index}
                for index in range(1, lessons + 1)
            ]
        payload = {
            "_id": course_id,
            "title": extra.pop("title", f"Course {course_id}"),
            "price": extra.pop("price", 49.0),
            "category": extra.pop("category", "Programming"),
            "instructor": extra.pop("instructor", "Grace Hopper"),
            "lessons": lessons,
        }
        payload.update(extra)
        return Course.model_validate(payload)

    return _make


@pytest.fixture
def make_page(make_course):
    def _make(course_ids: List[str], page: int = 1, pages: int = 1, limit: int = 12) -> CoursePage:
        return CoursePage(
            items=[make_course(course_id) for course_id in course_ids],
            pagination=Pagination(page=page, limit=limit, total=len(course_ids), pages=pages),
        )

    return _make


@pytest.fixture
def make_quiz():
    def _make(quiz_id: str = "q1", questions: int = 3, passing_score: Any = 60, course_id: str = "c1") -> Quiz:
        return Quiz.model_validate(
            {
                "_id": quiz_id,
                "courseId": course_id,
                "title": f"Quiz {quiz_id}",
                "passingScore": passing_score,
                "questions": [
                    {
                        "_id": f"{quiz_id}-q{index}",
                        "question": f"Question {index}?",
                        "options": [{"text": "A"}, {"text": "B"}, {"text": "C"}],
                    }
                    for index in range(1, questions + 1)
                ],
            }
        )

    return _make


@pytest.fixture
def make_enrollment():
    def _make(course_id: str = "c1", completed: Optional[List[str]] = None, enrollment_id: str = "e1") -> Enrollment:
        return Enrollment.model_validate(
            {
                "_id": enrollment_id,
                "studentId": "s1",
                "courseId": course_id,
                "status": "active",
                "progress": 0,
                "completedLessons": completed or [],
            }
        )

    return _make
