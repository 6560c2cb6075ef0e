from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from coursemaster.data_models import Assignment, AssignmentSubmission
from coursemaster.errors import ApiError, InputError, describe_error

logger = logging.getLogger(__name__)


class AssignmentGateway(Protocol):
    def assignments_for_course(self, course_id: str) -> List[Assignment]: ...

    def submit(self, assignment_id: str, answer: str, file_link: Optional[str] = None) -> AssignmentSubmission: ...


class GradingGateway(Protocol):
    def submissions(self, assignment_id: str) -> List[AssignmentSubmission]: ...

    def grade_submission(self, submission_id: str, grade: int, feedback: str = "") -> Optional[AssignmentSubmission]: ...


@dataclass
class AssignmentEntry:
    assignment: Assignment
    submission: Optional[AssignmentSubmission] = None

    @property
    def submitted(self) -> bool:
        return self.submission is not None


class AssignmentBoard:
    """A course's assignments with the student's own submission attached where one exists."""

    def __init__(self, assignments: AssignmentGateway, course_id: str):
        self._service = assignments
        self.course_id = course_id
        self.entries: List[AssignmentEntry] = []
        self.error: Optional[str] = None

    def load(self) -> None:
        self.error = None
        try:
            assignments = self._service.assignments_for_course(self.course_id)
        except ApiError as exc:
            logger.warning("Loading assignments for course %s failed: %s", self.course_id, exc)
            self.error = describe_error(exc, "Failed to load assignments")
            return
        self.entries = [AssignmentEntry(item, item.submission) for item in assignments]

    def entry(self, assignment_id: str) -> AssignmentEntry:
        for entry in self.entries:
            if entry.assignment.id == assignment_id:
                return entry
        raise KeyError(assignment_id)

    def submit(self, assignment_id: str, answer: str, file_link: str = "") -> Optional[AssignmentSubmission]:
        entry = self.entry(assignment_id)
        if not answer.strip():
            raise InputError("Please provide an answer")
        self.error = None
        try:
            submission = self._service.submit(assignment_id, answer, file_link.strip() or None)
        except ApiError as exc:
            logger.warning("Submitting assignment %s failed: %s", assignment_id, exc)
            self.error = describe_error(exc, "Failed to submit assignment")
            return None
        entry.submission = submission
        return submission


class GradingBoard:
    """Admin view of one assignment's submissions; grading patches the matching row in place."""

    def __init__(self, grading: GradingGateway, assignment_id: str):
        self._service = grading
        self.assignment_id = assignment_id
        self.submissions: List[AssignmentSubmission] = []
        self.error: Optional[str] = None

    def load(self) -> None:
        self.error = None
        try:
            self.submissions = self._service.submissions(self.assignment_id)
        except ApiError as exc:
            self.error = describe_error(exc, "Failed to load submissions")

    @staticmethod
    def parse_grade(raw: str | int) -> int:
        """Validate a grade typed into a form: an integer from 0 to 100."""
        if isinstance(raw, str):
            raw = raw.strip()
            if not raw:
                raise InputError("Please enter a grade")
            try:
                raw = int(raw)
            except ValueError as exc:
                raise InputError("Grade must be a whole number") from exc
        if not 0 <= raw <= 100:
            raise InputError("Grade must be between 0 and 100")
        return raw

    def grade(self, submission_id: str, grade: str | int, feedback: str = "") -> bool:
        value = self.parse_grade(grade)
        index = next((i for i, item in enumerate(self.submissions) if item.id == submission_id), -1)
        if index < 0:
            raise KeyError(submission_id)
        self.error = None
        try:
            graded = self._service.grade_submission(submission_id, value, feedback)
        except ApiError as exc:
            logger.warning("Grading submission %s failed: %s", submission_id, exc)
            self.error = describe_error(exc, "Failed to grade submission")
            return False
        self.submissions[index] = self.submissions[index].model_copy(
            update={"grade": value, "feedback": feedback, "graded_at": graded.graded_at if graded else None}
        )
        return True
