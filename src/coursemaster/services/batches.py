from __future__ import annotations

from typing import List

from coursemaster.api.client import ApiClient
from coursemaster.data_models import Batch

from .parsing import parse_list


class BatchService:
    def __init__(self, api: ApiClient):
        self.api = api

    def batches_for_course(self, course_id: str) -> List[Batch]:
        return parse_list(Batch, self.api.get(f"/batches/courses/{course_id}"))

    def enroll(self, course_id: str, batch_id: str) -> bool:
        payload = self.api.post(f"/batches/courses/{course_id}/{batch_id}/enroll")
        return bool(payload.get("success", True)) if isinstance(payload, dict) else True
