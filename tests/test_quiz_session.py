"""Tests for the quiz-taking state machine and the per-course quiz board."""

from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from coursemaster.data_models import QuizAttempt
from coursemaster.errors import ApiError, InputError, SessionStateError
from coursemaster.learning import QuizBoard, QuizPhase, QuizSession
from coursemaster.learning.quiz import SUBMIT_FAILED
from coursemaster.services import QuizService

from conftest import FakeResponse


def _attempt(quiz_id: str = "q1", score: float = 67, **extra) -> QuizAttempt:
    return QuizAttempt.model_validate({"_id": f"{quiz_id}-attempt", "quizId": quiz_id, "score": score, **extra})


class FakeQuizGateway:
    def __init__(self, quizzes=None, attempts: Optional[Dict[str, QuizAttempt]] = None):
        self.quizzes = list(quizzes or [])
        self.attempts = dict(attempts or {})
        self.submissions: List[tuple] = []
        self.submit_results: List[object] = []
        self.list_error: Optional[Exception] = None

    def quizzes_for_course(self, course_id: str):
        if self.list_error:
            raise self.list_error
        return [quiz for quiz in self.quizzes if quiz.course_id == course_id]

    def my_attempt(self, quiz_id: str):
        attempt = self.attempts.get(quiz_id)
        if isinstance(attempt, Exception):
            raise attempt
        return attempt

    def submit_quiz(self, quiz_id: str, answers):
        self.submissions.append((quiz_id, list(answers)))
        result = self.submit_results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def quiz(make_quiz):
    return make_quiz("q1", questions=3, passing_score=60)


@pytest.fixture
def session(quiz):
    started = QuizSession(quiz)
    started.start()
    return started


def _answer_all(session: QuizSession, choices: List[str]) -> None:
    session.go_to(0)
    for choice in choices:
        session.select(choice)
        session.next()


# --- Lifecycle ---


def test_new_session_is_not_started(quiz):
    session = QuizSession(quiz)

    assert session.phase == QuizPhase.NOT_STARTED
    assert session.passed is None
    with pytest.raises(SessionStateError):
        session.select("A")


def test_start_enters_first_question(session, quiz):
    assert session.phase == QuizPhase.IN_PROGRESS
    assert session.current_question.id == quiz.questions[0].id
    assert session.answers == {}


# --- Answers and navigation ---


def test_last_selection_wins(session, quiz):
    session.select("A")
    session.select("C")

    assert session.answers == {quiz.questions[0].id: "C"}
    assert session.answered_count == 1


def test_unknown_option_is_rejected(session):
    with pytest.raises(InputError):
        session.select("Z")


def test_navigation_prefills_previous_answer(session):
    session.select("B")
    session.next()
    assert session.selected_option is None

    session.previous()

    assert session.selected_option == "B"


def test_navigation_stops_at_bounds(session):
    assert session.previous() is False
    session.go_to(2)
    assert session.next() is False
    assert session.current_index == 2


def test_go_to_rejects_out_of_range(session):
    with pytest.raises(InputError):
        session.go_to(3)


def test_progress_fraction_tracks_position(session):
    assert session.progress_fraction == pytest.approx(1 / 3)
    session.go_to(2)
    assert session.progress_fraction == pytest.approx(1.0)


# --- Submission gate ---


def test_cannot_submit_until_every_question_answered(session):
    _answer_all(session, ["A", "B"])

    assert session.can_submit is False
    with pytest.raises(InputError, match="2/3 answered"):
        session.begin_submit()
    assert session.phase == QuizPhase.IN_PROGRESS


def test_zero_question_quiz_is_never_submittable(make_quiz):
    session = QuizSession(make_quiz("empty", questions=0))
    session.start()

    assert session.current_question is None
    assert session.can_submit is False
    with pytest.raises(InputError):
        session.begin_submit()


def test_answers_sent_in_question_order(session):
    session.go_to(2)
    session.select("C")
    session.go_to(0)
    session.select("A")
    session.go_to(1)
    session.select("B")

    assert session.answer_payload() == ["A", "B", "C"]


def test_full_attempt_passes_at_threshold(session):
    gateway = FakeQuizGateway()
    gateway.submit_results.append(_attempt(score=67, correctAnswers=2))
    _answer_all(session, ["A", "B", "C"])

    attempt = session.submit(gateway)

    assert gateway.submissions == [("q1", ["A", "B", "C"])]
    assert attempt.score == 67
    assert attempt.correct_count == 2
    assert session.phase == QuizPhase.COMPLETED
    assert session.passed is True


@pytest.mark.parametrize(("score", "expected"), [(70, True), (69, False), (70.0, True)])
def test_pass_is_inclusive_of_threshold(make_quiz, score, expected):
    quiz = make_quiz("q70", questions=1, passing_score=70)
    session = QuizSession(quiz)
    session.start()
    session.select("A")
    session.begin_submit()

    session.complete_submit(_attempt("q70", score=score))

    assert session.passed is expected


def test_missing_threshold_defaults_to_fifty(make_quiz):
    assert make_quiz("q0", passing_score=None).passing_score == 50
    assert make_quiz("q0", passing_score=0).passing_score == 50


def test_failed_submit_keeps_answers(session):
    gateway = FakeQuizGateway()
    gateway.submit_results.append(ApiError("Network down"))
    _answer_all(session, ["A", "B", "C"])
    before = session.answers

    assert session.submit(gateway) is None

    assert session.phase == QuizPhase.IN_PROGRESS
    assert session.error == "Network down"
    assert session.answers == before
    assert session.can_submit is True


def test_failed_submit_without_message_uses_fallback(session):
    _answer_all(session, ["A", "B", "C"])
    session.begin_submit()

    session.fail_submit("")

    assert session.error == SUBMIT_FAILED


def test_resubmit_after_failure_succeeds(session):
    gateway = FakeQuizGateway()
    gateway.submit_results.extend([ApiError("Network down"), _attempt(score=100)])
    _answer_all(session, ["A", "B", "C"])

    session.submit(gateway)
    session.submit(gateway)

    assert session.phase == QuizPhase.COMPLETED
    assert session.error is None
    assert len(gateway.submissions) == 2


def test_no_edits_while_submitting(session):
    _answer_all(session, ["A", "B", "C"])
    session.begin_submit()

    with pytest.raises(SessionStateError):
        session.select("A")
    with pytest.raises(SessionStateError):
        session.begin_submit()


def test_closed_session_ignores_late_result(session):
    _answer_all(session, ["A", "B", "C"])
    session.begin_submit()
    session.close()

    assert session.complete_submit(_attempt()) is False
    assert session.phase == QuizPhase.SUBMITTING


# --- Retake ---


def test_retake_resets_local_state(session):
    _answer_all(session, ["A", "B", "C"])
    session.begin_submit()
    session.complete_submit(_attempt(score=20))

    session.retake()

    assert session.phase == QuizPhase.NOT_STARTED
    assert session.answers == {}
    assert session.attempt is None
    assert session.current_index == 0


def test_start_after_completion_is_a_retake(session):
    _answer_all(session, ["A", "B", "C"])
    session.begin_submit()
    session.complete_submit(_attempt(score=20))

    session.start()

    assert session.phase == QuizPhase.IN_PROGRESS
    assert session.answers == {}


def test_retake_requires_completion(session):
    with pytest.raises(SessionStateError):
        session.retake()


# --- Board ---


def test_board_loads_quizzes_with_attempts(make_quiz, make_enrollment):
    gateway = FakeQuizGateway(
        quizzes=[make_quiz("q1", passing_score=60), make_quiz("q2", passing_score=60), make_quiz("other", course_id="c2")],
        attempts={"q1": _attempt("q1", score=80)},
    )
    board = QuizBoard(gateway, "c1")

    board.load([make_enrollment("c1")])

    assert board.enrolled
    assert [entry.quiz.id for entry in board.entries] == ["q1", "q2"]
    assert [entry.status for entry in board.entries] == ["Passed", "Not attempted"]


def test_board_is_empty_when_not_enrolled(make_quiz, make_enrollment):
    board = QuizBoard(FakeQuizGateway(quizzes=[make_quiz("q1")]), "c1")

    board.load([make_enrollment("c2")])

    assert not board.enrolled
    assert board.entries == []


def test_board_reports_load_failure(make_enrollment):
    gateway = FakeQuizGateway()
    gateway.list_error = ApiError("")
    board = QuizBoard(gateway, "c1")

    board.load([make_enrollment("c1")])

    assert board.error == "Failed to load quizzes"


def test_completed_session_updates_board_row(make_quiz, make_enrollment):
    gateway = FakeQuizGateway(quizzes=[make_quiz("q1", passing_score=60)], attempts={"q1": _attempt("q1", score=10)})
    gateway.submit_results.append(_attempt("q1", score=90))
    board = QuizBoard(gateway, "c1")
    board.load([make_enrollment("c1")])
    assert board.entry("q1").status == "Failed"

    session = board.open_session("q1")
    session.start()
    _answer_all(session, ["A", "A", "A"])
    session.submit(gateway)

    assert board.entry("q1").attempt.score == 90
    assert board.entry("q1").status == "Passed"


def test_board_keeps_quiz_whose_attempt_cannot_be_loaded(make_quiz, make_enrollment):
    gateway = FakeQuizGateway(
        quizzes=[make_quiz("q1"), make_quiz("q2")],
        attempts={"q1": ApiError("boom"), "q2": _attempt("q2", score=90)},
    )
    board = QuizBoard(gateway, "c1")

    board.load([make_enrollment("c1")])

    assert board.error is None
    assert [entry.quiz.id for entry in board.entries] == ["q1", "q2"]
    assert [entry.status for entry in board.entries] == ["Not attempted", "Passed"]


def test_board_over_http_survives_attempt_errors(api, fake_session, make_enrollment):
    fake_session.add("GET", "/quizzes", FakeResponse(200, {"data": [{"_id": "q1", "title": "One"}, {"_id": "q2", "title": "Two"}]}))
    fake_session.add("GET", "/quizzes/q1/myattempt", FakeResponse(500, {"message": "boom"}))
    fake_session.add("GET", "/quizzes/q2/myattempt", FakeResponse(200, {"success": True, "data": None}))
    board = QuizBoard(QuizService(api), "c1")

    board.load([make_enrollment("c1")])

    assert board.error is None
    assert [entry.attempted for entry in board.entries] == [False, False]


def test_submit_result_without_ids_completes_the_session(api, fake_session, session):
    fake_session.add("POST", "/quizzes/q1/submit", FakeResponse(200, {"score": 100, "correctAnswers": 3, "passed": True}))
    _answer_all(session, ["A", "B", "C"])

    attempt = session.submit(QuizService(api))

    assert session.phase == QuizPhase.COMPLETED
    assert attempt.quiz_id == "q1"
    assert attempt.correct_count == 3


def test_unreadable_submit_result_returns_to_in_progress(api, fake_session, session):
    fake_session.add("POST", "/quizzes/q1/submit", FakeResponse(200, {"data": {"score": 150}}))
    _answer_all(session, ["A", "B", "C"])

    assert session.submit(QuizService(api)) is None

    assert session.phase == QuizPhase.IN_PROGRESS
    assert "unexpected" in session.error
    assert session.answer_payload() == ["A", "B", "C"]
