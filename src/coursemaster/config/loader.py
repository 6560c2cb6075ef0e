from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from .schema import Settings

DEFAULT_CONFIG_PATH = Path("config/default.yaml")
CONFIG_PATH_ENV = "COURSEMASTER_CONFIG"
OVERRIDES_ENV = "COURSEMASTER_CONFIG_OVERRIDES"
API_URL_ENV = "COURSEMASTER_API_URL"


def read_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping; a blank file yields an empty dict."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge two dictionaries, letting override values replace base entries."""
    result: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            result[key] = merge_dicts(base[key], value)
        else:
            result[key] = value
    return result


def _resolve_config_path(config_path: str | Path | None) -> Path | None:
    explicit = config_path or os.getenv(CONFIG_PATH_ENV)
    if explicit:
        return Path(explicit)
    return DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.exists() else None


def env_overrides() -> Dict[str, Any]:
    """Collect overrides from the environment: the JSON blob first, then the API URL shortcut."""
    overrides: Dict[str, Any] = {}
    raw = os.getenv(OVERRIDES_ENV)
    if raw:
        try:
            overrides = json.loads(raw)
        except json.JSONDecodeError as err:
            raise ValueError(f"Failed to parse {OVERRIDES_ENV} env var as JSON.") from err
        if not isinstance(overrides, dict):
            raise ValueError(f"{OVERRIDES_ENV} must be a JSON object.")
    api_url = os.getenv(API_URL_ENV)
    if api_url:
        overrides = merge_dicts(overrides, {"api": {"base_url": api_url}})
    return overrides


def load_settings(config_path: str | Path | None = None) -> Settings:
    """
    Read configuration, apply environment overrides, and return validated Settings.

    The file is `config_path`, else `$COURSEMASTER_CONFIG`, else `config/default.yaml`
    when it exists; with none of them the schema defaults apply. An explicitly named
    file must exist. `env_overrides()` is merged on top before validation, and schema
    errors surface as `ValueError`.
    """
    path = _resolve_config_path(config_path)
    data = read_yaml(path) if path else {}
    data = merge_dicts(data, env_overrides())

    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
