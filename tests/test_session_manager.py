# tests/test_session_manager.py

from __future__ import annotations

import pytest
from postgrest.exceptions import APIError

from taskhub.core.exceptions import (
    AuthError, EmailAlreadyRegistered, InvalidCredentials, ProfileCreateFailure, ProfileLoadFailure
)
from taskhub.modules.auth.service import SessionManager

from .conftest import WORKER_ID
from .fakes import FakeSupabase


def _db_error(message: str = "connection reset") -> APIError:
    return APIError({"code": "08006", "message": message, "details": None, "hint": None})


@pytest.fixture()
def session(supabase: FakeSupabase, retry_policy) -> SessionManager:
    supabase.auth.add_user("wendy@example.com", "secret1", user_id=WORKER_ID)
    return SessionManager(supabase, retry_policy=retry_policy)


def test_sign_in_loads_profile(session: SessionManager) -> None:
    profile = session.sign_in("wendy@example.com", "secret1")

    assert profile.id == WORKER_ID
    assert session.user == profile
    assert session.session.access_token == f"token-{WORKER_ID}"


def test_profile_fetch_failing_three_times_signs_out(session: SessionManager, supabase: FakeSupabase, sleeps: list) -> None:
    supabase.fail("profiles", "select", _db_error("profile read timed out"), times=3)

    with pytest.raises(ProfileLoadFailure) as exc_info:
        session.sign_in("wendy@example.com", "secret1")

    assert "profile read timed out" in exc_info.value.message
    assert isinstance(exc_info.value.last_error, APIError)
    assert session.user is None
    assert session.session is None
    assert supabase.auth.sign_out_calls == 1
    assert supabase.calls.count(("profiles", "select")) == 3
    assert sleeps == [1.0, 2.0]


def test_profile_fetch_recovers_within_retry_limit(session: SessionManager, supabase: FakeSupabase) -> None:
    supabase.fail("profiles", "select", _db_error(), times=2)

    profile = session.sign_in("wendy@example.com", "secret1")

    assert profile.id == WORKER_ID
    assert supabase.auth.sign_out_calls == 0


def test_invalid_credentials(session: SessionManager, supabase: FakeSupabase) -> None:
    with pytest.raises(InvalidCredentials) as exc_info:
        session.sign_in("wendy@example.com", "wrong")

    assert exc_info.value.message == "Invalid email or password"
    assert session.user is None
    assert supabase.auth.sign_out_calls == 1


def test_sign_up_profile_failure_keeps_auth_identity(supabase: FakeSupabase, retry_policy) -> None:
    session = SessionManager(supabase, retry_policy=retry_policy)
    supabase.fail("profiles", "insert", _db_error("insert failed"), times=3)

    with pytest.raises(ProfileCreateFailure):
        session.sign_up("new@example.com", "secret1", "New Person")

    assert "new@example.com" in supabase.auth.users
    new_id = supabase.auth.users["new@example.com"]["id"]
    assert not [p for p in supabase.tables["profiles"] if p["id"] == new_id]


def test_sign_up_creates_worker_profile(supabase: FakeSupabase, retry_policy) -> None:
    session = SessionManager(supabase, retry_policy=retry_policy)

    profile = session.sign_up("new@example.com", "secret1", "New Person")

    assert profile.full_name == "New Person"
    assert profile.role == "worker"


def test_sign_up_existing_email(session: SessionManager) -> None:
    with pytest.raises(EmailAlreadyRegistered):
        session.sign_up("wendy@example.com", "secret1", "Wendy Again")


def test_sign_out_clears_state_even_when_remote_fails(session: SessionManager, supabase: FakeSupabase) -> None:
    session.sign_in("wendy@example.com", "secret1")
    supabase.auth.sign_out_error = RuntimeError("network down")

    session.sign_out()

    assert session.user is None
    assert session.session is None


def test_load_user_from_token(session: SessionManager) -> None:
    profile = session.load_user(f"token-{WORKER_ID}")

    assert profile is not None and profile.id == WORKER_ID
    assert session.loading is False


def test_load_user_with_bad_token_returns_none(session: SessionManager, supabase: FakeSupabase) -> None:
    assert session.load_user("garbage") is None
    assert session.user is None
    assert session.loading is False
    assert supabase.auth.sign_out_calls == 1


def test_change_password_validation(session: SessionManager, supabase: FakeSupabase) -> None:
    session.sign_in("wendy@example.com", "secret1")

    with pytest.raises(ValueError, match="do not match"):
        session.change_password("abcdef", "abcdeg")
    with pytest.raises(ValueError, match="at least 6"):
        session.change_password("abc", "abc")

    admin = FakeSupabase()
    session.change_password("newpass", "newpass", admin_client=admin)
    assert admin.auth.password_updates == [(WORKER_ID, "newpass")]


def test_update_profile_requires_user(supabase: FakeSupabase, retry_policy) -> None:
    session = SessionManager(supabase, retry_policy=retry_policy)
    with pytest.raises(AuthError):
        session.update_profile({"full_name": "Nobody"})
