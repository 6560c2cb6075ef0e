from __future__ import annotations

from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, validator


class ApiConfig(BaseModel):
    """Where the CourseMaster REST API lives and how long to wait for it."""

    base_url: str = Field("http://localhost:5000/api", description="API root, without trailing slash.")
    timeout_seconds: float = Field(10.0, gt=0, description="Per-request timeout.")

    @validator("base_url")
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize the base URL so paths can be joined with a single slash."""
        value = value.strip()
        if not value:
            raise ValueError("base_url must not be empty")
        return value.rstrip("/")


class CatalogConfig(BaseModel):
    """Defaults for the course catalog listing."""

    page_limit: int = Field(12, ge=1, le=1000)


class PathsConfig(BaseModel):
    """Filesystem locations used by the client."""

    session_file: Path = Field(Path(".coursemaster/session.json"))


class LoggingConfig(BaseModel):
    """Controls for client logging output and format."""

    model_config = ConfigDict(populate_by_name=True)

    level: str = Field("INFO")
    use_json: bool = Field(False, alias="json")


class Settings(BaseModel):
    """Top-level client configuration aggregating all sub-settings."""

    project_name: str = Field("CourseMaster")
    api: ApiConfig = Field(default_factory=ApiConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
