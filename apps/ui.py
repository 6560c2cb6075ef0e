"""Streamlit front end for browsing the CourseMaster catalog and taking quizzes."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

_project_root = Path(__file__).parent.parent
if str(_project_root / "src") not in sys.path:
    sys.path.insert(0, str(_project_root / "src"))

import streamlit as st

from coursemaster.data_models import CourseSort
from coursemaster.errors import CourseMasterError
from coursemaster.learning import CatalogFilters, CatalogQuery, QuizBoard, QuizPhase, QuizSession
from coursemaster.system import CourseMasterSystem

SORT_LABELS = {
    CourseSort.NEWEST: "Newest first",
    CourseSort.PRICE_ASC: "Price: low to high",
    CourseSort.PRICE_DESC: "Price: high to low",
}


@st.cache_resource(show_spinner=False)
def load_system() -> CourseMasterSystem:
    return CourseMasterSystem.from_config()


def _catalog(system: CourseMasterSystem) -> CatalogQuery:
    if "catalog" not in st.session_state:
        catalog = system.catalog()
        catalog.refresh()
        st.session_state.catalog = catalog
    return st.session_state.catalog


def _label_choice(index: int, text: str) -> str:
    prefix = chr(ord("A") + index)
    return f"{prefix}. {text}"


def render_catalog(system: CourseMasterSystem) -> None:
    catalog = _catalog(system)

    with st.sidebar:
        st.header("Filters")
        search = st.text_input("Search", value=catalog.filters.search)
        category = st.text_input("Category", value=catalog.filters.category)
        min_price = st.number_input("Min price", min_value=0.0, value=catalog.filters.min_price or 0.0)
        max_price = st.number_input("Max price (0 = any)", min_value=0.0, value=catalog.filters.max_price or 0.0)
        sort = st.selectbox(
            "Sort by",
            options=list(SORT_LABELS),
            index=list(SORT_LABELS).index(catalog.filters.sort),
            format_func=SORT_LABELS.get,
        )
        filters = CatalogFilters(
            search=search,
            category=category,
            min_price=min_price or None,
            max_price=max_price or None,
            sort=sort,
        )
        try:
            catalog.apply_filters(filters)
        except CourseMasterError as exc:
            st.warning(str(exc))
        if st.button("Clear filters"):
            catalog.clear_filters()
            st.rerun()

    if catalog.error:
        st.error(catalog.error)
    if catalog.is_empty:
        st.info("No courses found. Try adjusting your filters.")
        return

    columns = st.columns(3)
    for index, course in enumerate(catalog.courses):
        with columns[index % 3]:
            with st.container(border=True):
                st.subheader(course.title)
                st.caption(f"{course.category} · {course.instructor}")
                st.write(course.description[:160])
                st.markdown(f"**${course.price:,.2f}**")

    left, middle, right = st.columns([1, 2, 1])
    with left:
        if st.button("Previous", key="catalog-previous", disabled=not catalog.can_go_previous):
            catalog.previous_page()
            st.rerun()
    with middle:
        st.write(f"Page {catalog.page} of {max(catalog.pages, 1)}")
    with right:
        if st.button("Next", key="catalog-next", disabled=not catalog.can_go_next):
            catalog.next_page()
            st.rerun()


def _quiz_board(system: CourseMasterSystem, course_id: str) -> Optional[QuizBoard]:
    boards = st.session_state.setdefault("quiz_boards", {})
    if course_id not in boards:
        try:
            boards[course_id] = system.quiz_board(course_id)
        except CourseMasterError as exc:
            st.error(str(exc))
            return None
    return boards[course_id]


def render_quiz(system: CourseMasterSystem, session: QuizSession) -> None:
    quiz = session.quiz
    st.header(quiz.title)
    if quiz.description:
        st.caption(quiz.description)

    if session.phase == QuizPhase.COMPLETED:
        attempt = session.attempt
        message = f"Score: {attempt.score:.0f}% (passing score {quiz.passing_score:.0f}%)"
        if session.passed:
            st.success(f"Passed! {message}")
        else:
            st.error(f"Not passed. {message}")
        if attempt.correct_count is not None:
            st.write(f"Correct answers: {attempt.correct_count}/{session.question_count}")
        if st.button("Retake quiz"):
            session.start()
            st.rerun()
        return

    if session.phase == QuizPhase.NOT_STARTED:
        st.write(f"{session.question_count} questions · passing score {quiz.passing_score:.0f}%")
        if st.button("Start quiz", disabled=session.question_count == 0):
            session.start()
            st.rerun()
        return

    if session.error:
        st.error(session.error)

    question = session.current_question
    st.progress(session.progress_fraction)
    st.caption(
        f"Question {session.current_index + 1} of {session.question_count} · "
        f"{session.answered_count} answered"
    )
    options = question.option_texts
    selected = session.selected_option
    choice = st.radio(
        question.question,
        options=options,
        index=options.index(selected) if selected in options else None,
        format_func=lambda text: _label_choice(options.index(text), text),
        key=f"answer-{question.id}",
    )
    if choice is not None and choice != selected:
        session.select(choice)

    left, middle, right = st.columns(3)
    with left:
        if st.button("Previous", key="quiz-previous", disabled=not session.can_go_previous):
            session.previous()
            st.rerun()
    with middle:
        if st.button("Next", key="quiz-next", disabled=not session.can_go_next):
            session.next()
            st.rerun()
    with right:
        if st.button("Submit quiz", type="primary", disabled=not session.can_submit):
            with st.spinner("Submitting..."):
                session.submit(system.quizzes)
            st.rerun()


def render_quizzes(system: CourseMasterSystem) -> None:
    if not system.is_authenticated:
        st.info("Sign in with `coursemaster login` to take quizzes.")
        return
    course_id = st.text_input("Course ID")
    if not course_id.strip():
        return
    board = _quiz_board(system, course_id.strip())
    if board is None:
        return
    if board.error:
        st.error(board.error)
        return
    if not board.enrolled:
        st.warning("Enroll in this course to see its quizzes.")
        return
    if not board.entries:
        st.info("No quizzes available for this course yet.")
        return

    sessions = st.session_state.setdefault("quiz_sessions", {})
    quiz_id = st.selectbox(
        "Quiz",
        options=[entry.quiz.id for entry in board.entries],
        format_func=lambda value: f"{board.entry(value).quiz.title} ({board.entry(value).status})",
    )
    if quiz_id not in sessions:
        sessions[quiz_id] = board.open_session(quiz_id)
    render_quiz(system, sessions[quiz_id])


def render() -> None:
    st.set_page_config(page_title="CourseMaster", page_icon="🎓", layout="wide")
    st.title("🎓 CourseMaster")

    try:
        system = load_system()
    except (CourseMasterError, ValueError, FileNotFoundError) as exc:
        st.error(f"Could not load configuration: {exc}")
        st.stop()

    if system.user:
        st.sidebar.caption(f"Signed in as {system.user.name}")

    catalog_tab, quiz_tab = st.tabs(["Courses", "Quizzes"])
    with catalog_tab:
        render_catalog(system)
    with quiz_tab:
        render_quizzes(system)


__all__ = ["render"]


if __name__ == "__main__":
    render()
