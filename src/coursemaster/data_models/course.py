from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, validator

from .base import ApiModel, record_id, unwrap_list


class Lesson(ApiModel):
    """Single lesson of a course; `order` defines its place in the sequence."""

    id: str = record_id()
    title: str
    content: str = ""
    description: Optional[str] = None
    video_url: Optional[str] = None
    order: int = 0


class Batch(ApiModel):
    """Scheduled cohort of a course with its own dates and seat capacity."""

    id: str = record_id()
    course_id: Optional[str] = None
    name: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    schedule: Optional[str] = None
    max_students: Optional[int] = Field(default=None, ge=0)
    current_students: int = Field(default=0, ge=0)
    is_active: bool = True
    instructor_id: Optional[str] = None
    instructor_name: Optional[str] = None

    @property
    def is_full(self) -> bool:
        return self.max_students is not None and self.current_students >= self.max_students


class Course(ApiModel):
    """Course as returned by the catalog and detail endpoints."""

    id: str = record_id()
    title: str
    description: str = ""
    price: float = Field(default=0.0, ge=0)
    category: str = ""
    instructor: str = ""
    tags: List[str] = Field(default_factory=list)
    lessons: List[Lesson] = Field(default_factory=list)
    batches: List[Batch] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @validator("lessons")
    def order_lessons(cls, value: List[Lesson]) -> List[Lesson]:
        # sorted() is stable, so equal order indexes keep the API order
        return sorted(value, key=lambda lesson: lesson.order)

    def lesson_index(self, lesson_id: str) -> int:
        """Position of `lesson_id` in the lesson sequence, or -1."""
        return next((i for i, lesson in enumerate(self.lessons) if lesson.id == lesson_id), -1)


class Pagination(ApiModel):
    page: int = 1
    limit: int = 12
    total: int = 0
    pages: int = 1

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "Pagination":
        """Build pagination, treating missing or zero values like the API's defaults."""
        payload = payload or {}
        return cls(
            page=payload.get("page") or 1,
            limit=payload.get("limit") or 12,
            total=payload.get("total") or 0,
            pages=payload.get("pages") or 1,
        )


class CoursePage(ApiModel):
    """One page of the course catalog."""

    items: List[Course] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)

    @classmethod
    def from_response(cls, payload: Any) -> "CoursePage":
        pagination = payload.get("pagination") if isinstance(payload, dict) else None
        return cls(
            items=[Course.model_validate(item) for item in unwrap_list(payload)],
            pagination=Pagination.from_payload(pagination),
        )


class CourseSort(str, Enum):
    NEWEST = "newest"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"


class CourseQuery(ApiModel):
    """Parameters of one list-courses request."""

    search: str = ""
    category: str = ""
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)
    sort: CourseSort = CourseSort.NEWEST
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=12, gt=0)

    @validator("max_price")
    def max_not_below_min(cls, value: Optional[float], values: Dict[str, Any]) -> Optional[float]:
        """Reject an inverted price range."""
        min_price = values.get("min_price")
        if value is not None and min_price is not None and value < min_price:
            raise ValueError("max_price must not be lower than min_price")
        return value

    def to_params(self) -> Dict[str, Any]:
        """Render the wire query, dropping empty strings and unset prices."""
        params: Dict[str, Any] = {"page": self.page, "limit": self.limit}
        if self.search:
            params["search"] = self.search
        if self.category:
            params["category"] = self.category
        if self.min_price is not None:
            params["minPrice"] = self.min_price
        if self.max_price is not None:
            params["maxPrice"] = self.max_price
        params["sort"] = self.sort.value
        return params


class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DROPPED = "dropped"


class Enrollment(ApiModel):
    """Link between one student and one course, tracking progress."""

    id: str = record_id()
    student_id: str = ""
    course_id: str
    batch_id: Optional[str] = None
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE
    progress: float = Field(default=0, ge=0, le=100)
    completed_lessons: List[str] = Field(default_factory=list)
    enrollment_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None

    @validator("completed_lessons")
    def dedupe_lessons(cls, value: List[str]) -> List[str]:
        """Completed lessons behave as a set; keep first-seen order."""
        return list(dict.fromkeys(value))

    def has_completed(self, lesson_id: str) -> bool:
        return lesson_id in self.completed_lessons
