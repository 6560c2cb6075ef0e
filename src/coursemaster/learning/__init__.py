from .admin import EnrollmentRoster, QuizDraft
from .assignments import AssignmentBoard, GradingBoard
from .catalog import CatalogFilters, CatalogQuery
from .enrollment import EnrollmentFlow
from .lessons import LessonNavigator, find_enrollment
from .quiz import QuizBoard, QuizPhase, QuizSession

__all__ = [
    "AssignmentBoard",
    "CatalogFilters",
    "CatalogQuery",
    "EnrollmentFlow",
    "EnrollmentRoster",
    "GradingBoard",
    "LessonNavigator",
    "QuizBoard",
    "QuizDraft",
    "QuizPhase",
    "QuizSession",
    "find_enrollment",
]
