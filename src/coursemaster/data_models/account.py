from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import ApiModel, record_id


class UserRole(str, Enum):
    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


class User(ApiModel):
    """Authenticated account. The role only drives what the client displays."""

    id: str = record_id()
    name: str
    email: str
    role: UserRole = UserRole.STUDENT
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class AuthResponse(ApiModel):
    token: str
    user: User


class AdminStats(ApiModel):
    """Aggregate counts shown on the admin dashboard."""

    total_courses: int = 0
    total_users: int = 0
    student_count: int = 0
    instructor_count: int = 0
    admin_count: int = 0
    total_enrollments: int = 0
    completed_enrollments: int = 0
    active_enrollments: int = 0
    avg_progress: float = 0.0


class PaymentSession(ApiModel):
    url: str
    session_id: Optional[str] = None


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Order(ApiModel):
    id: str = record_id()
    course_id: str = ""
    course_name: str = ""
    amount: float = Field(default=0.0, ge=0)
    status: OrderStatus = OrderStatus.PENDING
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    created_at: Optional[datetime] = None


class PaymentValidation(ApiModel):
    success: bool
    order: Optional[Order] = None
