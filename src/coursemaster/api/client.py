"""Thin requests-based transport for the CourseMaster REST API."""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from coursemaster.errors import ApiError, NotFoundError
from coursemaster.utils.logging import get_logger

logger = get_logger(__name__)

GENERIC_ERROR = "Request failed"


def _server_message(response: requests.Response) -> Optional[str]:
    """Pull the `message` field out of an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


class ApiClient:
    """
    Issue authenticated JSON requests against the API root.

    Every call carries the configured timeout. HTTP 404 becomes `NotFoundError`, any other
    non-2xx status or transport failure becomes `ApiError` with the server-provided message
    when the body has one.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("base_url is not configured")
        self.timeout = timeout
        self.token = token
        self.session = session or requests.Session()

    def set_token(self, token: Optional[str]) -> None:
        self.token = token

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Any:
        url = self.url_for(path)
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            logger.warning("api_timeout", method=method, path=path, timeout=self.timeout)
            raise ApiError(f"Request timed out after {self.timeout:g}s") from exc
        except requests.RequestException as exc:
            logger.warning("api_unreachable", method=method, path=path, error=str(exc))
            raise ApiError(f"Could not reach the API at {self.base_url}") from exc

        logger.debug("api_response", method=method, path=path, status=response.status_code)

        if response.status_code == 404:
            raise NotFoundError(_server_message(response) or "Not found", status_code=404)
        if not response.ok:
            message = _server_message(response) or f"{GENERIC_ERROR} ({response.status_code})"
            logger.info("api_error", method=method, path=path, status=response.status_code, message=message)
            raise ApiError(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("The API returned a response that is not valid JSON", response.status_code) from exc

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Optional[Any] = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("POST", path, params=params, json=json)

    def put(self, path: str, json: Optional[Any] = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
