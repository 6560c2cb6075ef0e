from __future__ import annotations

from typing import Any, Callable, List, Type, TypeVar

from coursemaster.data_models import ApiModel, unwrap_list, unwrap_record
from coursemaster.errors import ApiError
from coursemaster.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=ApiModel)


def parse_payload(parse: Callable[[Any], T], payload: Any, resource: str) -> T:
    """Run `parse` on a response body; a body that does not fit becomes `ApiError`."""
    try:
        return parse(payload)
    except ValueError as exc:
        logger.warning("api_unexpected_payload", resource=resource, error=str(exc))
        raise ApiError(f"The API returned an unexpected {resource} response") from exc


def parse_record(model: Type[M], payload: Any, key: str = "data") -> M:
    return parse_payload(lambda body: model.model_validate(unwrap_record(body, key=key)), payload, model.__name__)


def parse_list(model: Type[M], payload: Any) -> List[M]:
    return parse_payload(lambda body: [model.model_validate(item) for item in unwrap_list(body)], payload, model.__name__)
