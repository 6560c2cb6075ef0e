from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from coursemaster.data_models import Enrollment, Quiz, QuizAttempt, QuizQuestion
from coursemaster.errors import ApiError, InputError, SessionStateError, describe_error

logger = logging.getLogger(__name__)

SUBMIT_FAILED = "Failed to submit quiz"
LOAD_FAILED = "Failed to load quizzes"


class QuizGateway(Protocol):
    def quizzes_for_course(self, course_id: str) -> List[Quiz]: ...

    def my_attempt(self, quiz_id: str) -> Optional[QuizAttempt]: ...

    def submit_quiz(self, quiz_id: str, answers: Sequence[str]) -> QuizAttempt: ...


class QuizPhase(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTING = "submitting"
    COMPLETED = "completed"


class QuizSession:
    """
    Walk a student through one quiz, one question at a time.

    Answers are kept per question id (single selection, last write wins) and survive
    navigation in both directions. Submission is gated on every question having an
    answer; a quiz without questions is never submittable. A failed submission returns
    the session to `IN_PROGRESS` with its answers intact and `error` set.
    """

    def __init__(self, quiz: Quiz, on_complete: Optional[Callable[[QuizAttempt], None]] = None):
        self.quiz = quiz
        self.on_complete = on_complete
        self.phase = QuizPhase.NOT_STARTED
        self.current_index = 0
        self.attempt: Optional[QuizAttempt] = None
        self.error: Optional[str] = None
        self._answers: Dict[str, str] = {}
        self._closed = False

    # --- Lifecycle ---

    def start(self) -> None:
        """Begin (or, from COMPLETED, retake) the quiz with an empty answer sheet."""
        if self.phase == QuizPhase.COMPLETED:
            self.retake()
        self._require(QuizPhase.NOT_STARTED)
        self._answers = {}
        self.current_index = 0
        self.error = None
        self.phase = QuizPhase.IN_PROGRESS

    def retake(self) -> None:
        """Drop the displayed result and return to NOT_STARTED. Server attempts are kept."""
        self._require(QuizPhase.COMPLETED)
        self.attempt = None
        self._answers = {}
        self.current_index = 0
        self.error = None
        self.phase = QuizPhase.NOT_STARTED

    def close(self) -> None:
        self._closed = True

    def _require(self, *phases: QuizPhase) -> None:
        if self.phase not in phases:
            expected = ", ".join(phase.value for phase in phases)
            raise SessionStateError(f"Quiz is {self.phase.value}; expected {expected}")

    # --- Questions and answers ---

    @property
    def question_count(self) -> int:
        return len(self.quiz.questions)

    @property
    def current_question(self) -> Optional[QuizQuestion]:
        if not self.quiz.questions:
            return None
        return self.quiz.questions[self.current_index]

    @property
    def answers(self) -> Dict[str, str]:
        return dict(self._answers)

    @property
    def answered_count(self) -> int:
        return sum(1 for question in self.quiz.questions if self._answers.get(question.id))

    @property
    def progress_fraction(self) -> float:
        """Position of the current question within the quiz, for progress bars."""
        return (self.current_index + 1) / max(self.question_count, 1)

    @property
    def selected_option(self) -> Optional[str]:
        question = self.current_question
        return self._answers.get(question.id) if question else None

    def select(self, option_text: str) -> None:
        self._require(QuizPhase.IN_PROGRESS)
        question = self.current_question
        if question is None:
            raise InputError("This quiz has no questions")
        if option_text not in question.option_texts:
            raise InputError(f"'{option_text}' is not an option for this question")
        self._answers[question.id] = option_text

    # --- Navigation ---

    @property
    def can_go_previous(self) -> bool:
        return self.current_index > 0

    @property
    def can_go_next(self) -> bool:
        return self.current_index < self.question_count - 1

    def next(self) -> bool:
        self._require(QuizPhase.IN_PROGRESS)
        if not self.can_go_next:
            return False
        self.current_index += 1
        return True

    def previous(self) -> bool:
        self._require(QuizPhase.IN_PROGRESS)
        if not self.can_go_previous:
            return False
        self.current_index -= 1
        return True

    def go_to(self, index: int) -> None:
        self._require(QuizPhase.IN_PROGRESS)
        if not 0 <= index < self.question_count:
            raise InputError(f"Question index must be between 0 and {self.question_count - 1}")
        self.current_index = index

    # --- Submission ---

    @property
    def can_submit(self) -> bool:
        if self.phase != QuizPhase.IN_PROGRESS or not self.quiz.questions:
            return False
        return all(self._answers.get(question.id) for question in self.quiz.questions)

    def answer_payload(self) -> List[str]:
        """One answer per question in quiz order; unanswered slots are empty strings."""
        return [self._answers.get(question.id, "") for question in self.quiz.questions]

    def begin_submit(self) -> List[str]:
        self._require(QuizPhase.IN_PROGRESS)
        if not self.can_submit:
            raise InputError(
                f"Answer all questions before submitting ({self.answered_count}/{self.question_count} answered)"
            )
        self.phase = QuizPhase.SUBMITTING
        self.error = None
        return self.answer_payload()

    def complete_submit(self, attempt: QuizAttempt) -> bool:
        if self._closed or self.phase != QuizPhase.SUBMITTING:
            return False
        self.attempt = attempt
        self.phase = QuizPhase.COMPLETED
        if self.on_complete is not None:
            self.on_complete(attempt)
        return True

    def fail_submit(self, message: str) -> bool:
        if self._closed or self.phase != QuizPhase.SUBMITTING:
            return False
        self.error = message or SUBMIT_FAILED
        self.phase = QuizPhase.IN_PROGRESS
        return True

    def submit(self, quizzes: QuizGateway) -> Optional[QuizAttempt]:
        """Send the answer sheet; returns the scored attempt or None on a remote error."""
        answers = self.begin_submit()
        try:
            attempt = quizzes.submit_quiz(self.quiz.id, answers)
        except ApiError as exc:
            logger.warning("Submitting quiz %s failed: %s", self.quiz.id, exc)
            self.fail_submit(describe_error(exc, SUBMIT_FAILED))
            return None
        self.complete_submit(attempt)
        return attempt

    @property
    def passed(self) -> Optional[bool]:
        """Pass/fail of the shown attempt, judged against the quiz threshold; None before one exists."""
        if self.attempt is None:
            return None
        return self.quiz.is_passing(self.attempt.score)


@dataclass
class QuizEntry:
    """A quiz listing row with the caller's attempt, if any."""

    quiz: Quiz
    attempt: Optional[QuizAttempt] = None

    @property
    def attempted(self) -> bool:
        return self.attempt is not None

    @property
    def status(self) -> str:
        if self.attempt is None:
            return "Not attempted"
        return "Passed" if self.quiz.is_passing(self.attempt.score) else "Failed"


class QuizBoard:
    """Quizzes of one course together with the student's attempt on each."""

    def __init__(self, quizzes: QuizGateway, course_id: str):
        self._service = quizzes
        self.course_id = course_id
        self.entries: List[QuizEntry] = []
        self.error: Optional[str] = None
        self.enrolled = False

    def load(self, enrollments: Sequence[Enrollment]) -> None:
        """Load quizzes and attempts; nothing is shown for a course the student is not enrolled in."""
        self.error = None
        self.enrolled = any(enrollment.course_id == self.course_id for enrollment in enrollments)
        if not self.enrolled:
            self.entries = []
            return
        try:
            quizzes = self._service.quizzes_for_course(self.course_id)
        except ApiError as exc:
            logger.warning("Loading quizzes for course %s failed: %s", self.course_id, exc)
            self.error = describe_error(exc, LOAD_FAILED)
            return
        self.entries = [QuizEntry(quiz=quiz, attempt=self._attempt_for(quiz.id)) for quiz in quizzes]

    def _attempt_for(self, quiz_id: str) -> Optional[QuizAttempt]:
        # An unreadable attempt lists the quiz as not attempted.
        try:
            return self._service.my_attempt(quiz_id)
        except ApiError as exc:
            logger.warning("Loading attempt for quiz %s failed: %s", quiz_id, exc)
            return None

    def entry(self, quiz_id: str) -> QuizEntry:
        for entry in self.entries:
            if entry.quiz.id == quiz_id:
                return entry
        raise KeyError(quiz_id)

    def record_attempt(self, quiz_id: str, attempt: QuizAttempt) -> None:
        """Replace the listed attempt so the row shows the new status without a re-fetch."""
        self.entry(quiz_id).attempt = attempt

    def open_session(self, quiz_id: str) -> QuizSession:
        entry = self.entry(quiz_id)
        return QuizSession(entry.quiz, on_complete=lambda attempt: self.record_attempt(quiz_id, attempt))
