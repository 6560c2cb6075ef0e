from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from coursemaster.data_models import Enrollment
from coursemaster.errors import InputError


class EnrollmentRoster:
    """Admin enrollment table with a case-insensitive search on student or course id."""

    def __init__(self, enrollments: Sequence[Enrollment]):
        self.enrollments = list(enrollments)
        self.search = ""

    def filter(self, search: str) -> List[Enrollment]:
        self.search = search
        return self.visible

    @property
    def visible(self) -> List[Enrollment]:
        term = self.search.strip().lower()
        if not term:
            return list(self.enrollments)
        return [
            enrollment
            for enrollment in self.enrollments
            if term in enrollment.student_id.lower() or term in enrollment.course_id.lower()
        ]

    @property
    def empty_message(self) -> Optional[str]:
        if not self.enrollments:
            return "No enrollments yet"
        if not self.visible:
            return "No enrollments match your search"
        return None


@dataclass
class DraftQuestion:
    question: str
    options: List[str]
    correct_option_index: int = 0

    def validate(self) -> None:
        if not self.question.strip():
            raise InputError("Please enter a question")
        if len(self.options) < 2:
            raise InputError("A question needs at least two options")
        if any(not option.strip() for option in self.options):
            raise InputError("Please fill in all options")
        if not 0 <= self.correct_option_index < len(self.options):
            raise InputError("The correct option must be one of the listed options")


@dataclass
class QuizDraft:
    """Quiz being authored by an admin before it is sent to the API."""

    title: str = ""
    description: str = ""
    passing_score: float = 70
    questions: List[DraftQuestion] = field(default_factory=list)

    def add_question(self, question: str, options: Sequence[str], correct_option_index: int = 0) -> DraftQuestion:
        draft = DraftQuestion(question.strip(), [option.strip() for option in options], correct_option_index)
        draft.validate()
        self.questions.append(draft)
        return draft

    def remove_question(self, index: int) -> None:
        if not 0 <= index < len(self.questions):
            raise InputError(f"No question at position {index + 1}")
        del self.questions[index]

    def to_payload(self, course_id: str) -> Dict[str, Any]:
        if not course_id:
            raise InputError("Please select a course")
        if not self.title.strip():
            raise InputError("Please enter quiz title")
        if not self.questions:
            raise InputError("Please add at least one question")
        if not 0 <= self.passing_score <= 100:
            raise InputError("Passing score must be between 0 and 100")
        return {
            "courseId": course_id,
            "title": self.title.strip(),
            "description": self.description.strip(),
            "passingScore": self.passing_score,
            "questions": [
                {
                    "question": item.question,
                    "options": [
                        {"text": text, "isCorrect": index == item.correct_option_index}
                        for index, text in enumerate(item.options)
                    ],
                }
                for item in self.questions
            ],
        }

    @classmethod
    def from_yaml(cls, path: Path) -> "QuizDraft":
        """
        Build a draft from a YAML file shaped like:

        ```yaml
        title: Python basics
        passing_score: 60
        questions:
          - question: What does len() return?
            options: [A count, A string, None, An error]
            correct: 0
        ```
        """
        if not path.exists():
            raise FileNotFoundError(f"Quiz file not found: {path}")
        try:
            with path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise InputError(f"{path} is not valid YAML") from exc
        if not isinstance(data, dict):
            raise InputError(f"{path} must contain a mapping with a title and questions")
        draft = cls(
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            passing_score=_number(data.get("passing_score", 70), "passing_score", float),
        )
        for position, item in enumerate(data.get("questions") or [], start=1):
            if not isinstance(item, dict):
                raise InputError(f"Question {position} must be a mapping")
            options = item.get("options") or []
            if not isinstance(options, list):
                raise InputError(f"Question {position}: options must be a list")
            draft.add_question(
                str(item.get("question", "")),
                [str(option) for option in options],
                _number(item.get("correct", 0), f"question {position} correct", int),
            )
        return draft


def _number(value: Any, label: str, kind: type) -> Any:
    if isinstance(value, bool):
        raise InputError(f"{label} must be a number")
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise InputError(f"{label} must be a number") from exc
