from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from coursemaster.data_models import AuthResponse

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Persist the logged-in session (token plus user record) as a small JSON file.

    The file holds exactly what the login endpoint returned:

    ```json
    {"token": "eyJ...", "user": {"_id": "u1", "name": "Ada", "email": "ada@example.com", "role": "student"}}
    ```

    A missing or unreadable file means "not logged in".
    """

    def __init__(self, path: Path):
        """Record the JSON filepath; the parent directory is created on first save."""
        self.path = path

    def load(self) -> Optional[AuthResponse]:
        """Return the stored session, or None when nothing usable is stored."""
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
            return AuthResponse.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return None

    def save(self, session: AuthResponse) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            handle.write(session.model_dump_json(by_alias=True, indent=2))

    def clear(self) -> None:
        """Forget the stored session; a no-op when none exists."""
        self.path.unlink(missing_ok=True)
