"""Tests for session persistence and the system facade's login flow."""

from __future__ import annotations

from coursemaster.data_models import AuthResponse
from coursemaster.storage import SessionStore
from coursemaster.system import CourseMasterSystem

from conftest import FakeResponse, FakeSession

USER = {"_id": "u1", "name": "Ada", "email": "ada@example.com", "role": "admin"}


def test_save_and_load_round_trip(tmp_path):
    store = SessionStore(tmp_path / "nested" / "session.json")

    store.save(AuthResponse.model_validate({"token": "jwt", "user": USER}))
    loaded = store.load()

    assert loaded.token == "jwt"
    assert loaded.user.id == "u1"
    assert loaded.user.is_admin


def test_missing_or_corrupt_file_means_logged_out(tmp_path):
    path = tmp_path / "session.json"
    store = SessionStore(path)
    assert store.load() is None

    path.write_text("{broken", encoding="utf-8")
    assert store.load() is None


def test_clear_is_safe_without_file(tmp_path):
    store = SessionStore(tmp_path / "session.json")

    store.clear()

    assert store.load() is None


def test_login_persists_session_for_next_run(settings):
    http = FakeSession()
    http.add("POST", "/auth/login", FakeResponse(200, {"token": "jwt", "user": USER}))
    system = CourseMasterSystem(settings, http_session=http)
    assert not system.is_authenticated

    system.login("ada@example.com", "secret")

    restored = CourseMasterSystem(settings, http_session=FakeSession())
    assert restored.is_authenticated
    assert restored.api.token == "jwt"
    assert restored.user.name == "Ada"


def test_logout_forgets_session(settings):
    http = FakeSession()
    http.add("POST", "/auth/login", FakeResponse(200, {"token": "jwt", "user": USER}))
    system = CourseMasterSystem(settings, http_session=http)
    system.login("ada@example.com", "secret")

    system.logout()

    assert not system.is_authenticated
    assert not CourseMasterSystem(settings, http_session=FakeSession()).is_authenticated


def test_explicit_token_wins_over_stored_session(settings):
    SessionStore(settings.paths.session_file).save(AuthResponse.model_validate({"token": "stored", "user": USER}))

    system = CourseMasterSystem(settings, token="explicit", http_session=FakeSession())

    assert system.api.token == "explicit"


def test_catalog_uses_configured_page_size(settings):
    settings.catalog.page_limit = 5

    catalog = CourseMasterSystem(settings, http_session=FakeSession()).catalog()

    assert catalog.limit == 5
