from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from coursemaster.data_models import Course, Enrollment, Lesson
from coursemaster.errors import ApiError, describe_error

logger = logging.getLogger(__name__)


class LessonCompleter(Protocol):
    def mark_lesson_complete(self, enrollment_id: str, lesson_id: str) -> Optional[Enrollment]: ...


def find_enrollment(enrollments: Sequence[Enrollment], course_id: str) -> Optional[Enrollment]:
    """Return the caller's enrollment for `course_id`, if there is one."""
    return next((enrollment for enrollment in enrollments if enrollment.course_id == course_id), None)


class LessonNavigator:
    """Step through a course's lessons in order and record completions."""

    def __init__(self, course: Course, enrollment: Optional[Enrollment] = None, lesson_id: Optional[str] = None):
        self.course = course
        self.enrollment = enrollment
        self.current_index = 0
        self.submitting = False
        self.error: Optional[str] = None
        if lesson_id:
            self.select(lesson_id)

    @property
    def lessons(self) -> Sequence[Lesson]:
        return self.course.lessons

    @property
    def current_lesson(self) -> Optional[Lesson]:
        if not self.lessons:
            return None
        return self.lessons[self.current_index]

    def select(self, lesson_id: str) -> Optional[Lesson]:
        """Jump to a lesson by id; unknown ids fall back to the first lesson."""
        index = self.course.lesson_index(lesson_id)
        self.current_index = index if index >= 0 else 0
        return self.current_lesson

    @property
    def can_go_previous(self) -> bool:
        return self.current_index > 0

    @property
    def can_go_next(self) -> bool:
        return self.current_index < len(self.lessons) - 1

    def next(self) -> bool:
        if not self.can_go_next:
            return False
        self.current_index += 1
        return True

    def previous(self) -> bool:
        if not self.can_go_previous:
            return False
        self.current_index -= 1
        return True

    # --- Completion ---

    def is_completed(self, lesson_id: str) -> bool:
        return self.enrollment is not None and self.enrollment.has_completed(lesson_id)

    @property
    def completed_count(self) -> int:
        if self.enrollment is None:
            return 0
        lesson_ids = {lesson.id for lesson in self.lessons}
        return sum(1 for lesson_id in self.enrollment.completed_lessons if lesson_id in lesson_ids)

    @property
    def progress_percent(self) -> int:
        """Display-only progress; the stored figure is computed by the API."""
        if not self.lessons:
            return 0
        return round(self.completed_count / len(self.lessons) * 100)

    @property
    def can_mark_complete(self) -> bool:
        lesson = self.current_lesson
        return (
            lesson is not None
            and self.enrollment is not None
            and not self.submitting
            and not self.is_completed(lesson.id)
        )

    def mark_complete(self, enrollments: LessonCompleter) -> bool:
        """Mark the current lesson complete; a no-op returning False when not allowed."""
        if not self.can_mark_complete:
            return False
        lesson = self.current_lesson
        self.submitting = True
        self.error = None
        try:
            updated = enrollments.mark_lesson_complete(self.enrollment.id, lesson.id)
        except ApiError as exc:
            logger.warning("Marking lesson %s complete failed: %s", lesson.id, exc)
            self.error = describe_error(exc, "Failed to mark lesson complete")
            return False
        finally:
            self.submitting = False

        if updated is not None:
            self.enrollment = updated
        if not self.enrollment.has_completed(lesson.id):
            self.enrollment = self.enrollment.model_copy(
                update={"completed_lessons": [*self.enrollment.completed_lessons, lesson.id]}
            )
        return True
