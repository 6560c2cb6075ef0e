from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from coursemaster.data_models import Batch, PaymentSession
from coursemaster.errors import ApiError, InputError, describe_error

logger = logging.getLogger(__name__)


class BatchGateway(Protocol):
    def batches_for_course(self, course_id: str) -> List[Batch]: ...

    def enroll(self, course_id: str, batch_id: str) -> bool: ...


class PaymentGateway(Protocol):
    def create_session(self, course_id: str) -> PaymentSession: ...


class EnrollmentFlow:
    """Pick a batch, join it, then hand off to the payment gateway."""

    def __init__(self, batches: BatchGateway, payments: PaymentGateway, course_id: str):
        self._batches = batches
        self._payments = payments
        self.course_id = course_id
        self.available: List[Batch] = []
        self.selected_batch_id: Optional[str] = None
        self.error: Optional[str] = None

    def load_batches(self) -> List[Batch]:
        self.error = None
        try:
            self.available = [batch for batch in self._batches.batches_for_course(self.course_id) if batch.is_active]
        except ApiError as exc:
            self.error = describe_error(exc, "Failed to load batches")
        return self.available

    def select_batch(self, batch_id: str) -> None:
        batch = next((item for item in self.available if item.id == batch_id), None)
        if batch is None:
            raise InputError(f"Unknown batch: {batch_id}")
        if batch.is_full:
            raise InputError(f"Batch '{batch.name}' is full")
        self.selected_batch_id = batch_id

    def checkout(self) -> Optional[str]:
        """Enroll in the selected batch and return the payment redirect URL (None on failure)."""
        if not self.selected_batch_id:
            raise InputError("Please select a batch")
        self.error = None
        try:
            self._batches.enroll(self.course_id, self.selected_batch_id)
            session = self._payments.create_session(self.course_id)
        except ApiError as exc:
            logger.warning("Enrollment for course %s failed: %s", self.course_id, exc)
            self.error = describe_error(exc, "Failed to process enrollment. Please try again.")
            return None
        return session.url
