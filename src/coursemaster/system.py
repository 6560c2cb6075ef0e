from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import requests

from coursemaster.api.client import ApiClient
from coursemaster.config import Settings, load_settings
from coursemaster.data_models import AuthResponse, Course, User, UserRole
from coursemaster.learning import (
    AssignmentBoard,
    CatalogQuery,
    EnrollmentFlow,
    GradingBoard,
    LessonNavigator,
    QuizBoard,
    find_enrollment,
)
from coursemaster.services import (
    AdminService,
    AssignmentService,
    AuthService,
    BatchService,
    CourseService,
    EnrollmentService,
    PaymentService,
    QuizService,
)
from coursemaster.storage import SessionStore
from coursemaster.utils.logging import configure_logging

logger = logging.getLogger(__name__)

TOKEN_ENV = "COURSEMASTER_TOKEN"


class CourseMasterSystem:
    """
    Facade wiring the API transport, the resource services and the local state containers.

    Front ends (CLI, streamlit) build one system from settings and ask it for the
    components of each screen. Nothing here holds global state: every container it
    hands out is a fresh object owned by the caller.

    Attributes
    ----------
    settings : Settings
        Validated configuration (API root, timeouts, catalog page size, paths, logging).
    api : ApiClient
        Shared transport carrying the bearer token of the current session.
    sessions : SessionStore
        JSON file holding the token and user between CLI invocations.
    """

    def __init__(
        self,
        settings: Settings,
        token: Optional[str] = None,
        http_session: Optional[requests.Session] = None,
    ):
        self.settings = settings
        configure_logging(settings.logging.level, settings.logging.use_json)

        self.sessions = SessionStore(settings.paths.session_file)
        stored = self.sessions.load()
        self.user: Optional[User] = stored.user if stored else None

        self.api = ApiClient(
            settings.api.base_url,
            timeout=settings.api.timeout_seconds,
            token=token or (stored.token if stored else None),
            session=http_session,
        )
        self.auth = AuthService(self.api)
        self.courses = CourseService(self.api)
        self.enrollments = EnrollmentService(self.api)
        self.quizzes = QuizService(self.api)
        self.assignments = AssignmentService(self.api)
        self.admin = AdminService(self.api)
        self.batches = BatchService(self.api)
        self.payments = PaymentService(self.api)

    @classmethod
    def from_config(cls, config_path: Optional[Path] = None, token: Optional[str] = None) -> "CourseMasterSystem":
        settings = load_settings(config_path)
        return cls(settings, token=token or os.getenv(TOKEN_ENV))

    # --- Session ---

    @property
    def is_authenticated(self) -> bool:
        return bool(self.api.token)

    def _adopt(self, session: AuthResponse) -> User:
        self.api.set_token(session.token)
        self.user = session.user
        self.sessions.save(session)
        logger.info("Signed in as %s (%s)", session.user.email, session.user.role.value)
        return session.user

    def login(self, email: str, password: str) -> User:
        return self._adopt(self.auth.login(email, password))

    def register(self, name: str, email: str, password: str, role: UserRole = UserRole.STUDENT) -> User:
        return self._adopt(self.auth.register(name, email, password, role))

    def logout(self) -> None:
        self.api.set_token(None)
        self.user = None
        self.sessions.clear()

    # --- Screens ---

    def catalog(self) -> CatalogQuery:
        return CatalogQuery(self.courses, limit=self.settings.catalog.page_limit)

    def quiz_board(self, course_id: str) -> QuizBoard:
        board = QuizBoard(self.quizzes, course_id)
        board.load(self.enrollments.my_enrollments())
        return board

    def lesson_navigator(self, course_id: str, lesson_id: Optional[str] = None) -> LessonNavigator:
        course: Course = self.courses.get_course(course_id)
        enrollment = find_enrollment(self.enrollments.my_enrollments(), course_id)
        return LessonNavigator(course, enrollment, lesson_id=lesson_id)

    def assignment_board(self, course_id: str) -> AssignmentBoard:
        board = AssignmentBoard(self.assignments, course_id)
        board.load()
        return board

    def grading_board(self, assignment_id: str) -> GradingBoard:
        board = GradingBoard(self.admin, assignment_id)
        board.load()
        return board

    def enrollment_flow(self, course_id: str) -> EnrollmentFlow:
        flow = EnrollmentFlow(self.batches, self.payments, course_id)
        flow.load_batches()
        return flow
