from __future__ import annotations

from typing import Any, List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for records exchanged with the API (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def record_id(**kwargs: Any):
    """Identifier field accepting both `_id` and `id` keys."""
    return Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id", **kwargs)


def unwrap_list(payload: Any) -> List[Any]:
    """Accept either a bare JSON array or a `{"data": [...]}` envelope."""
    if isinstance(payload, dict):
        payload = payload.get("data")
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list payload, got {type(payload).__name__}")
    return payload


def unwrap_record(payload: Any, key: str = "data") -> Any:
    """Accept either a bare JSON object or one nested under `key`."""
    if isinstance(payload, dict) and isinstance(payload.get(key), dict):
        return payload[key]
    return payload
