from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from coursemaster.data_models import CourseSort, EnrollmentStatus, UserRole
from coursemaster.errors import ConfigurationError, CourseMasterError, InputError
from coursemaster.learning import CatalogFilters, CatalogQuery, EnrollmentRoster, QuizDraft, QuizPhase, QuizSession
from coursemaster.system import CourseMasterSystem

app = typer.Typer(help="CourseMaster client: browse courses, learn, take quizzes and manage the platform.")
console = Console()

env_path = Path.cwd() / ".env"
if env_path.exists():
    load_dotenv(dotenv_path=env_path, override=False)

ConfigOption = typer.Option(None, "--config", help="Path to configuration YAML.")


@contextmanager
def _reported_errors() -> Iterator[None]:
    """Print client errors as a red banner and exit non-zero instead of dumping a traceback."""
    try:
        yield
    except CourseMasterError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc


def _load_system(config: Optional[Path]) -> CourseMasterSystem:
    """Instantiate `CourseMasterSystem`; a missing or invalid config file is reported, not raised."""
    with _reported_errors():
        try:
            return CourseMasterSystem.from_config(config)
        except (FileNotFoundError, ValueError) as exc:
            raise ConfigurationError(str(exc)) from exc


def _money(amount: float) -> str:
    return f"${amount:,.2f}"


def _render_catalog(catalog: CatalogQuery) -> None:
    if catalog.error:
        console.print(f"[red]{catalog.error}[/red]")
    if catalog.is_empty:
        console.print("No courses found.")
        return
    table = Table(title="Courses")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Category")
    table.add_column("Instructor")
    table.add_column("Price", justify="right")
    for course in catalog.courses:
        table.add_row(course.id, course.title, course.category, course.instructor, _money(course.price))
    console.print(table)
    if catalog.pagination:
        page = catalog.pagination
        console.print(f"Page {page.page} of {page.pages} ({page.total} courses)")


# --- Account ---


@app.command()
def login(
    email: str = typer.Option(..., prompt=True),
    password: str = typer.Option(..., prompt=True, hide_input=True),
    config: Optional[Path] = ConfigOption,
):
    """Sign in and remember the session for later commands."""
    system = _load_system(config)
    with _reported_errors():
        user = system.login(email, password)
    console.print(f"Signed in as [bold]{user.name}[/bold] ({user.role.value}).")


@app.command()
def register(
    name: str = typer.Option(..., prompt=True),
    email: str = typer.Option(..., prompt=True),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
    instructor: bool = typer.Option(False, help="Register as an instructor instead of a student."),
    config: Optional[Path] = ConfigOption,
):
    """Create an account and sign in."""
    system = _load_system(config)
    role = UserRole.INSTRUCTOR if instructor else UserRole.STUDENT
    with _reported_errors():
        user = system.register(name, email, password, role)
    console.print(f"Welcome, [bold]{user.name}[/bold]!")


@app.command()
def logout(config: Optional[Path] = ConfigOption):
    """Forget the stored session."""
    _load_system(config).logout()
    console.print("Signed out.")


@app.command()
def whoami(config: Optional[Path] = ConfigOption):
    """Show the signed-in account as the API sees it."""
    system = _load_system(config)
    if not system.is_authenticated:
        console.print("Not signed in.")
        raise typer.Exit(code=1)
    with _reported_errors():
        user = system.auth.me()
    console.print(f"{user.name} <{user.email}> ({user.role.value})")


# --- Catalog and enrollment ---


@app.command()
def courses(
    search: str = typer.Option("", help="Search title and description."),
    category: str = typer.Option("", help="Category filter."),
    min_price: Optional[float] = typer.Option(None, help="Lowest price."),
    max_price: Optional[float] = typer.Option(None, help="Highest price."),
    sort: CourseSort = typer.Option(CourseSort.NEWEST, help="Sort order."),
    page: int = typer.Option(1, min=1, help="Page to show."),
    config: Optional[Path] = ConfigOption,
):
    """Browse the course catalog."""
    system = _load_system(config)
    with _reported_errors():
        catalog = system.catalog()
        catalog.filters = catalog.normalize_filters(
            CatalogFilters(search=search, category=category, min_price=min_price, max_price=max_price, sort=sort)
        )
        catalog.page = page
        catalog.refresh()
    _render_catalog(catalog)
    if catalog.error:
        raise typer.Exit(code=1)


@app.command()
def course(course_id: str = typer.Argument(...), config: Optional[Path] = ConfigOption):
    """Show one course with its lessons and batches."""
    system = _load_system(config)
    with _reported_errors():
        detail = system.courses.get_course(course_id)
    console.print(f"[bold]{detail.title}[/bold] by {detail.instructor} - {_money(detail.price)}")
    if detail.description:
        console.print(detail.description)
    if detail.tags:
        console.print("Tags: " + ", ".join(detail.tags))
    for lesson in detail.lessons:
        console.print(f"  {lesson.order}. {lesson.title}")
    for batch in detail.batches:
        console.print(f"  Batch {batch.name} ({batch.id})")


@app.command()
def enroll(
    course_id: str = typer.Argument(...),
    batch_id: Optional[str] = typer.Option(None, help="Join this batch and continue to payment."),
    config: Optional[Path] = ConfigOption,
):
    """Enroll in a course, or join a batch and get the payment link."""
    system = _load_system(config)
    with _reported_errors():
        if batch_id is None:
            enrollment = system.enrollments.enroll(course_id)
            console.print(f"Enrolled (enrollment {enrollment.id}).")
            return
        flow = system.enrollment_flow(course_id)
        flow.select_batch(batch_id)
        url = flow.checkout()
    if url is None:
        console.print(f"[red]{flow.error}[/red]")
        raise typer.Exit(code=1)
    console.print(f"Complete your payment at: {url}")


@app.command()
def enrollments(config: Optional[Path] = ConfigOption):
    """List your enrollments and progress."""
    system = _load_system(config)
    with _reported_errors():
        items = system.enrollments.my_enrollments()
    if not items:
        console.print("You are not enrolled in any course yet.")
        return
    table = Table(title="My enrollments")
    table.add_column("Enrollment", style="dim")
    table.add_column("Course")
    table.add_column("Status")
    table.add_column("Progress", justify="right")
    for item in items:
        table.add_row(item.id, item.course_id, item.status.value, f"{item.progress:.0f}%")
    console.print(table)


@app.command()
def lessons(course_id: str = typer.Argument(...), config: Optional[Path] = ConfigOption):
    """List a course's lessons with completion marks."""
    system = _load_system(config)
    with _reported_errors():
        navigator = system.lesson_navigator(course_id)
    for lesson in navigator.lessons:
        mark = "[green]x[/green]" if navigator.is_completed(lesson.id) else " "
        console.print(f"[{mark}] {lesson.order}. {lesson.title} ({lesson.id})")
    console.print(f"Progress: {navigator.progress_percent}%")


@app.command("complete-lesson")
def complete_lesson(
    course_id: str = typer.Argument(...),
    lesson_id: str = typer.Argument(...),
    config: Optional[Path] = ConfigOption,
):
    """Mark a lesson as completed."""
    system = _load_system(config)
    with _reported_errors():
        navigator = system.lesson_navigator(course_id, lesson_id=lesson_id)
    if navigator.enrollment is None:
        console.print("You are not enrolled in this course.")
        raise typer.Exit(code=1)
    if navigator.current_lesson is None or navigator.current_lesson.id != lesson_id:
        console.print(f"Lesson {lesson_id} is not part of this course.")
        raise typer.Exit(code=1)
    if navigator.is_completed(lesson_id):
        console.print("Lesson already completed.")
        return
    if not navigator.mark_complete(system.enrollments):
        console.print(f"[red]{navigator.error}[/red]")
        raise typer.Exit(code=1)
    console.print(f"Lesson completed. Progress: {navigator.progress_percent}%")


# --- Quizzes ---


@app.command()
def quizzes(course_id: str = typer.Argument(...), config: Optional[Path] = ConfigOption):
    """List a course's quizzes and your result on each."""
    system = _load_system(config)
    with _reported_errors():
        board = system.quiz_board(course_id)
    if board.error:
        console.print(f"[red]{board.error}[/red]")
        raise typer.Exit(code=1)
    if not board.enrolled:
        console.print("Enroll in this course to see its quizzes.")
        return
    if not board.entries:
        console.print("No quizzes available for this course yet.")
        return
    table = Table(title="Quizzes")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Questions", justify="right")
    table.add_column("Passing", justify="right")
    table.add_column("Status")
    for entry in board.entries:
        score = f" ({entry.attempt.score:.0f}%)" if entry.attempt else ""
        table.add_row(
            entry.quiz.id,
            entry.quiz.title,
            str(len(entry.quiz.questions)),
            f"{entry.quiz.passing_score:.0f}%",
            entry.status + score,
        )
    console.print(table)


def _ask_question(session: QuizSession) -> bool:
    """Show the current question and apply one keystroke; True means the student asked to submit."""
    question = session.current_question
    console.print(
        f"\n[bold]Question {session.current_index + 1} of {session.question_count}[/bold]"
        f"  ({session.answered_count}/{session.question_count} answered)"
    )
    console.print(question.question)
    for index, text in enumerate(question.option_texts, start=1):
        marker = "*" if text == session.selected_option else " "
        console.print(f" {marker} {index}. {text}")
    hint = "number to answer, n/p to move, s to submit, q to quit"
    choice = typer.prompt(hint, default="n" if session.selected_option else "").strip().lower()
    if choice.isdigit() and 1 <= int(choice) <= len(question.options):
        session.select(question.option_texts[int(choice) - 1])
        session.next()
    elif choice == "n":
        session.next()
    elif choice == "p":
        session.previous()
    elif choice == "s":
        if session.can_submit:
            return True
        console.print("[yellow]Answer every question before submitting.[/yellow]")
    elif choice == "q":
        raise typer.Exit(code=0)
    return False


@app.command("take-quiz")
def take_quiz(
    course_id: str = typer.Argument(...),
    quiz_id: str = typer.Argument(...),
    config: Optional[Path] = ConfigOption,
):
    """Take (or retake) a quiz interactively."""
    system = _load_system(config)
    with _reported_errors():
        board = system.quiz_board(course_id)
        if not board.enrolled:
            raise InputError("You are not enrolled in this course")
        try:
            session = board.open_session(quiz_id)
        except KeyError:
            raise InputError(f"Quiz {quiz_id} is not part of this course") from None
        if not session.quiz.questions:
            raise InputError("This quiz has no questions yet")
        session.start()

        while session.phase != QuizPhase.COMPLETED:
            if not _ask_question(session):
                continue
            if session.submit(system.quizzes) is None:
                console.print(f"[red]{session.error}[/red] Your answers are kept; try again.")

    attempt = session.attempt
    verdict = "[green]Passed[/green]" if session.passed else "[red]Failed[/red]"
    correct = f", {attempt.correct_count}/{session.question_count} correct" if attempt.correct_count is not None else ""
    console.print(f"\nScore: {attempt.score:.0f}%{correct} - {verdict} (passing score {session.quiz.passing_score:.0f}%)")


# --- Assignments ---


@app.command()
def assignments(course_id: str = typer.Argument(...), config: Optional[Path] = ConfigOption):
    """List a course's assignments and your submissions."""
    system = _load_system(config)
    with _reported_errors():
        board = system.assignment_board(course_id)
    if board.error:
        console.print(f"[red]{board.error}[/red]")
        raise typer.Exit(code=1)
    if not board.entries:
        console.print("No assignments for this course yet.")
        return
    for entry in board.entries:
        due = entry.assignment.due_date.date().isoformat() if entry.assignment.due_date else "no due date"
        console.print(f"[bold]{entry.assignment.title}[/bold] ({entry.assignment.id}) - due {due}")
        if entry.submission is None:
            console.print("  Not submitted")
        elif entry.submission.is_graded:
            feedback = f": {entry.submission.feedback}" if entry.submission.feedback else ""
            console.print(f"  Graded {entry.submission.grade}/100{feedback}")
        else:
            console.print("  Submitted, awaiting grade")


@app.command("submit-assignment")
def submit_assignment(
    course_id: str = typer.Argument(...),
    assignment_id: str = typer.Argument(...),
    answer: str = typer.Option(..., prompt=True),
    file_link: str = typer.Option("", help="Optional link to an uploaded file."),
    config: Optional[Path] = ConfigOption,
):
    """Submit an answer for an assignment."""
    system = _load_system(config)
    with _reported_errors():
        board = system.assignment_board(course_id)
        try:
            submission = board.submit(assignment_id, answer, file_link)
        except KeyError:
            raise InputError(f"Assignment {assignment_id} is not part of this course") from None
    if submission is None:
        console.print(f"[red]{board.error}[/red]")
        raise typer.Exit(code=1)
    console.print("Assignment submitted.")


# --- Payments ---


@app.command()
def pay(course_id: str = typer.Argument(...), config: Optional[Path] = ConfigOption):
    """Start a payment for a course and print the gateway link."""
    system = _load_system(config)
    with _reported_errors():
        session = system.payments.create_session(course_id)
    console.print(f"Complete your payment at: {session.url}")


@app.command("validate-payment")
def validate_payment(transaction_id: str = typer.Argument(...), config: Optional[Path] = ConfigOption):
    """Check a payment after returning from the gateway."""
    system = _load_system(config)
    with _reported_errors():
        result = system.payments.validate(transaction_id)
    if not result.success:
        console.print("[red]Payment could not be verified.[/red] Check your payment status in your account.")
        raise typer.Exit(code=1)
    console.print("Payment successful! Your enrollment is now active.")


# --- Admin ---


@app.command("admin-stats")
def admin_stats(config: Optional[Path] = ConfigOption):
    """Show platform-wide counts."""
    system = _load_system(config)
    with _reported_errors():
        stats = system.admin.stats()
    table = Table(title="Platform stats", show_header=False)
    table.add_row("Courses", str(stats.total_courses))
    table.add_row("Users", str(stats.total_users))
    table.add_row("Students", str(stats.student_count))
    table.add_row("Instructors", str(stats.instructor_count))
    table.add_row("Enrollments", str(stats.total_enrollments))
    table.add_row("Active / completed", f"{stats.active_enrollments} / {stats.completed_enrollments}")
    table.add_row("Average progress", f"{stats.avg_progress:.0f}%")
    console.print(table)


@app.command("admin-enrollments")
def admin_enrollments(
    search: str = typer.Option("", help="Filter by student or course id."),
    course_id: Optional[str] = typer.Option(None),
    status: Optional[EnrollmentStatus] = typer.Option(None),
    config: Optional[Path] = ConfigOption,
):
    """List all enrollments on the platform."""
    system = _load_system(config)
    with _reported_errors():
        roster = EnrollmentRoster(system.admin.enrollments(course_id=course_id, status=status))
    rows = roster.filter(search)
    if roster.empty_message:
        console.print(roster.empty_message)
        return
    table = Table(title="Enrollments")
    table.add_column("Student")
    table.add_column("Course")
    table.add_column("Status")
    table.add_column("Progress", justify="right")
    for item in rows:
        table.add_row(item.student_id, item.course_id, item.status.value, f"{item.progress:.0f}%")
    console.print(table)


@app.command()
def submissions(assignment_id: str = typer.Argument(...), config: Optional[Path] = ConfigOption):
    """List submissions for an assignment."""
    system = _load_system(config)
    with _reported_errors():
        board = system.grading_board(assignment_id)
    if board.error:
        console.print(f"[red]{board.error}[/red]")
        raise typer.Exit(code=1)
    table = Table(title="Submissions")
    table.add_column("ID", style="dim")
    table.add_column("Student")
    table.add_column("Answer")
    table.add_column("Grade", justify="right")
    for item in board.submissions:
        table.add_row(item.id, item.student_id, item.answer[:60], "-" if item.grade is None else str(item.grade))
    console.print(table)


@app.command()
def grade(
    assignment_id: str = typer.Argument(...),
    submission_id: str = typer.Argument(...),
    score: str = typer.Option(..., "--grade", prompt=True, help="Grade from 0 to 100."),
    feedback: str = typer.Option("", help="Feedback shown to the student."),
    config: Optional[Path] = ConfigOption,
):
    """Grade a submission."""
    system = _load_system(config)
    with _reported_errors():
        board = system.grading_board(assignment_id)
        try:
            graded = board.grade(submission_id, score, feedback)
        except KeyError:
            raise InputError(f"Submission {submission_id} not found for this assignment") from None
    if not graded:
        console.print(f"[red]{board.error}[/red]")
        raise typer.Exit(code=1)
    console.print("Submission graded.")


@app.command("create-quiz")
def create_quiz(
    course_id: str = typer.Argument(...),
    quiz_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    config: Optional[Path] = ConfigOption,
):
    """Create a quiz from a YAML file."""
    system = _load_system(config)
    with _reported_errors():
        draft = QuizDraft.from_yaml(quiz_file)
        quiz = system.quizzes.create_quiz(draft.to_payload(course_id))
    console.print(f"Created quiz [bold]{quiz.title}[/bold] ({quiz.id}) with {len(quiz.questions)} questions.")


if __name__ == "__main__":
    app()
