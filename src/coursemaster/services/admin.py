from __future__ import annotations

from typing import Any, Dict, List, Optional

from coursemaster.api.client import ApiClient
from coursemaster.data_models import AdminStats, AssignmentSubmission, Enrollment, EnrollmentStatus, unwrap_record
from coursemaster.errors import InputError

from .parsing import parse_list, parse_record


class AdminService:
    """
    Admin endpoints: dashboard stats, enrollment listing and grading.

    These calls only forward requests; the API decides whether the caller is allowed to make them.
    """

    def __init__(self, api: ApiClient):
        self.api = api

    def stats(self) -> AdminStats:
        return parse_record(AdminStats, self.api.get("/admin/stats"), key="stats")

    def enrollment_stats(self) -> Dict[str, Any]:
        """Per-status enrollment counts, passed through as the API sends them."""
        payload = unwrap_record(self.api.get("/admin/enrollments/stats"))
        return payload if isinstance(payload, dict) else {}

    def enrollments(
        self,
        course_id: Optional[str] = None,
        student_id: Optional[str] = None,
        status: Optional[EnrollmentStatus] = None,
    ) -> List[Enrollment]:
        params: Dict[str, Any] = {}
        if course_id:
            params["courseId"] = course_id
        if student_id:
            params["studentId"] = student_id
        if status:
            params["status"] = EnrollmentStatus(status).value
        return parse_list(Enrollment, self.api.get("/admin/enrollments", params=params))

    def submissions(self, assignment_id: str) -> List[AssignmentSubmission]:
        payload = self.api.get("/admin/submissions", params={"assignmentId": assignment_id})
        return parse_list(AssignmentSubmission, payload)

    def grade_submission(self, submission_id: str, grade: int, feedback: str = "") -> Optional[AssignmentSubmission]:
        """Grade a submission; returns the graded record when the API echoes one back."""
        if not 0 <= grade <= 100:
            raise InputError("Grade must be between 0 and 100")
        payload = self.api.post(
            f"/admin/submissions/{submission_id}/grade",
            json={"grade": grade, "feedback": feedback},
        )
        payload = unwrap_record(payload)
        if not isinstance(payload, dict) or "assignmentId" not in payload:
            return None
        return parse_record(AssignmentSubmission, payload)
