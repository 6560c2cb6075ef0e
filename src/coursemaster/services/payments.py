from __future__ import annotations

from typing import List

from coursemaster.api.client import ApiClient
from coursemaster.data_models import Order, PaymentSession, PaymentValidation
from coursemaster.errors import InputError

from .parsing import parse_list, parse_payload, parse_record


class PaymentService:
    """Payment gateway hand-off. Session creation and validation happen server-side."""

    def __init__(self, api: ApiClient):
        self.api = api

    def create_session(self, course_id: str) -> PaymentSession:
        payload = self.api.post("/payments/create-session", json={"courseId": course_id})
        return parse_record(PaymentSession, payload)

    def validate(self, transaction_id: str) -> PaymentValidation:
        if not transaction_id.strip():
            raise InputError("A transaction id is required")
        payload = self.api.get("/payments/validate", params={"tran_id": transaction_id.strip()})
        return parse_payload(PaymentValidation.model_validate, payload, "payment validation")

    def my_orders(self) -> List[Order]:
        return parse_list(Order, self.api.get("/payments/orders"))
