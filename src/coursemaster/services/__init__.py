from .admin import AdminService
from .assignments import AssignmentService
from .auth import AuthService
from .batches import BatchService
from .courses import CourseService
from .enrollments import EnrollmentService
from .payments import PaymentService
from .quizzes import QuizService

__all__ = [
    "AdminService",
    "AssignmentService",
    "AuthService",
    "BatchService",
    "CourseService",
    "EnrollmentService",
    "PaymentService",
    "QuizService",
]
