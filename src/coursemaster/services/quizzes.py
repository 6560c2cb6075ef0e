from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from coursemaster.api.client import ApiClient
from coursemaster.data_models import Quiz, QuizAttempt
from coursemaster.errors import NotFoundError

from .parsing import parse_list, parse_record


class QuizService:
    """Quiz listing, attempts and submission."""

    def __init__(self, api: ApiClient):
        self.api = api

    def quizzes_for_course(self, course_id: str) -> List[Quiz]:
        return parse_list(Quiz, self.api.get("/quizzes", params={"courseId": course_id}))

    def get_quiz(self, quiz_id: str) -> Quiz:
        return parse_record(Quiz, self.api.get(f"/quizzes/{quiz_id}"))

    def submit_quiz(self, quiz_id: str, answers: Sequence[str]) -> QuizAttempt:
        """Submit answers; the scored result may omit its own id and quiz id."""
        payload = self.api.post(f"/quizzes/{quiz_id}/submit", json={"answers": list(answers)})
        attempt = parse_record(QuizAttempt, payload)
        if not attempt.quiz_id:
            attempt = attempt.model_copy(update={"quiz_id": quiz_id})
        return attempt

    def my_attempt(self, quiz_id: str) -> Optional[QuizAttempt]:
        """Return the caller's attempt, or None when the quiz was never attempted."""
        try:
            payload = self.api.get(f"/quizzes/{quiz_id}/myattempt")
        except NotFoundError:
            return None
        if isinstance(payload, dict) and "data" in payload:
            payload = payload["data"]
        if not payload:
            return None
        return parse_record(QuizAttempt, payload)

    def attempts(self, quiz_id: str) -> List[QuizAttempt]:
        return parse_list(QuizAttempt, self.api.get(f"/quizzes/{quiz_id}/attempts"))

    def create_quiz(self, payload: Dict[str, Any]) -> Quiz:
        return parse_record(Quiz, self.api.post("/quizzes", json=payload))
