from __future__ import annotations

from coursemaster.api.client import ApiClient
from coursemaster.data_models import AuthResponse, User, UserRole
from coursemaster.errors import InputError

from .parsing import parse_record


class AuthService:
    """Login, registration and current-user lookups."""

    def __init__(self, api: ApiClient):
        self.api = api

    def login(self, email: str, password: str) -> AuthResponse:
        if not email.strip() or not password:
            raise InputError("Email and password are required")
        payload = self.api.post("/auth/login", json={"email": email.strip(), "password": password})
        return parse_record(AuthResponse, payload)

    def register(self, name: str, email: str, password: str, role: UserRole = UserRole.STUDENT) -> AuthResponse:
        if not name.strip() or not email.strip() or not password:
            raise InputError("Name, email and password are required")
        if role == UserRole.ADMIN:
            raise InputError("Admin accounts cannot be self-registered")
        payload = self.api.post(
            "/auth/register",
            json={"name": name.strip(), "email": email.strip(), "password": password, "role": role.value},
        )
        return parse_record(AuthResponse, payload)

    def me(self) -> User:
        return parse_record(User, self.api.get("/auth/me"), key="user")
