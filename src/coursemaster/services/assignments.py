from __future__ import annotations

from typing import List, Optional

from coursemaster.api.client import ApiClient
from coursemaster.data_models import Assignment, AssignmentSubmission

from .parsing import parse_list, parse_record


class AssignmentService:
    def __init__(self, api: ApiClient):
        self.api = api

    def assignments_for_course(self, course_id: str) -> List[Assignment]:
        return parse_list(Assignment, self.api.get("/assignments", params={"courseId": course_id}))

    def submit(self, assignment_id: str, answer: str, file_link: Optional[str] = None) -> AssignmentSubmission:
        body = {"answer": answer}
        if file_link:
            body["fileLink"] = file_link
        payload = self.api.post(f"/assignments/{assignment_id}/submit", json=body)
        return parse_record(AssignmentSubmission, payload)

    def submissions(self, assignment_id: str) -> List[AssignmentSubmission]:
        return parse_list(AssignmentSubmission, self.api.get(f"/assignments/{assignment_id}/submissions"))
