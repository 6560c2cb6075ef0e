from .account import AdminStats, AuthResponse, Order, OrderStatus, PaymentSession, PaymentValidation, User, UserRole
from .assessment import Assignment, AssignmentSubmission, Quiz, QuizAttempt, QuizOption, QuizQuestion
from .base import ApiModel, unwrap_list, unwrap_record
from .course import (
    Batch,
    Course,
    CoursePage,
    CourseQuery,
    CourseSort,
    Enrollment,
    EnrollmentStatus,
    Lesson,
    Pagination,
)

__all__ = [
    "AdminStats",
    "ApiModel",
    "Assignment",
    "AssignmentSubmission",
    "AuthResponse",
    "Batch",
    "Course",
    "CoursePage",
    "CourseQuery",
    "CourseSort",
    "Enrollment",
    "EnrollmentStatus",
    "Lesson",
    "Order",
    "OrderStatus",
    "Pagination",
    "PaymentSession",
    "PaymentValidation",
    "Quiz",
    "QuizAttempt",
    "QuizOption",
    "QuizQuestion",
    "User",
    "UserRole",
    "unwrap_list",
    "unwrap_record",
]
