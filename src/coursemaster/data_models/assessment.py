from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, Field, validator

from .base import ApiModel, record_id

DEFAULT_PASSING_SCORE = 50.0


class QuizOption(ApiModel):
    """Answer option. `is_correct` is only known server-side for unattempted quizzes."""

    id: Optional[str] = record_id(default=None)
    text: str
    is_correct: Optional[bool] = None


class QuizQuestion(ApiModel):
    id: str = record_id()
    question: str
    options: List[QuizOption] = Field(default_factory=list)
    explanation: Optional[str] = None

    @property
    def option_texts(self) -> List[str]:
        return [option.text for option in self.options]


class Quiz(ApiModel):
    """Quiz definition with ordered questions and a passing threshold."""

    id: str = record_id()
    course_id: str = ""
    title: str
    description: str = ""
    questions: List[QuizQuestion] = Field(default_factory=list)
    passing_score: float = Field(default=DEFAULT_PASSING_SCORE, ge=0, le=100)
    created_at: Optional[datetime] = None

    @validator("passing_score", pre=True)
    def default_missing_threshold(cls, value):
        # The API sends null or 0 for quizzes authored without a threshold
        return value or DEFAULT_PASSING_SCORE

    def is_passing(self, score: float) -> bool:
        """A score passes when it reaches the threshold exactly or exceeds it."""
        return score >= self.passing_score


class QuizAttempt(ApiModel):
    """One scored submission of answers for a quiz. A fresh submit result may carry neither id."""

    id: str = record_id(default="")
    quiz_id: str = ""
    student_id: str = ""
    answers: List[str] = Field(default_factory=list)
    score: float = Field(ge=0, le=100)
    passed: bool = False
    correct_count: Optional[int] = Field(
        default=None, ge=0, validation_alias=AliasChoices("correctAnswers", "correctCount", "correct_count")
    )
    attempted_at: Optional[datetime] = None


class AssignmentSubmission(ApiModel):
    """A student's response to an assignment, optionally graded."""

    id: str = record_id()
    assignment_id: str
    student_id: str = ""
    answer: str = ""
    file_link: Optional[str] = None
    submitted_at: Optional[datetime] = None
    grade: Optional[int] = Field(default=None, ge=0, le=100)
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None

    @property
    def is_graded(self) -> bool:
        return self.grade is not None


class Assignment(ApiModel):
    """Due-dated course task. `submission` is the caller's own, when the API attaches it."""

    id: str = record_id()
    course_id: str = ""
    title: str
    description: str = ""
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    submission: Optional[AssignmentSubmission] = None
