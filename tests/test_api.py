# tests/test_api.py

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from taskhub.core.dependencies import get_current_user, get_user_supabase
from taskhub.core.local_storage import LocalStorage, ThemePreferences
from taskhub.core.realtime import ChangeFeed
from taskhub.core.retry import RetryPolicy
from taskhub.database.supabase_client import SupabaseClient
from taskhub.main import app
from taskhub.modules.auth.routes import get_sign_in_session
from taskhub.modules.auth.service import SessionManager
from taskhub.modules.preferences.routes import get_theme_preferences
from taskhub.modules.realtime import routes as realtime_routes

from .conftest import MANAGER_ID, WORKER_ID
from .fakes import FakeAsyncClient, FakeSupabase


@pytest.fixture()
def client(supabase: FakeSupabase, worker, tmp_path: Path):
    supabase.tables["notifications"] = [
        {"id": "n1", "user_id": WORKER_ID, "type": "assignment", "content": "Assigned", "read": False,
         "created_at": "2025-01-01T10:00:00+00:00"},
        {"id": "n2", "user_id": WORKER_ID, "type": "comment", "content": "New comment", "read": False,
         "created_at": "2025-01-01T09:00:00+00:00"},
    ]
    state = {"user": worker}
    theme = ThemePreferences(LocalStorage(tmp_path / "storage.json"))

    app.dependency_overrides[get_user_supabase] = lambda: supabase
    app.dependency_overrides[get_current_user] = lambda: state["user"]
    app.dependency_overrides[get_theme_preferences] = lambda: theme
    app.dependency_overrides[get_sign_in_session] = lambda: SessionManager(
        supabase, retry_policy=RetryPolicy(attempts=3, delay=0, sleep=lambda _: None)
    )
    test_client = TestClient(app)
    test_client.state = state
    yield test_client
    app.dependency_overrides.clear()


def test_health_has_security_headers(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.headers["X-Frame-Options"] == "DENY"


def test_notifications_endpoints(client: TestClient, supabase: FakeSupabase) -> None:
    assert [n["id"] for n in client.get("/api/v1/notifications").json()] == ["n1", "n2"]
    assert client.get("/api/v1/notifications/unread-count").json() == {"count": 2}

    assert client.post("/api/v1/notifications/n1/read").status_code == 204
    assert client.get("/api/v1/notifications/unread-count").json() == {"count": 1}
    assert client.post("/api/v1/notifications/missing/read").status_code == 404


def test_manager_only_pages_are_forbidden_for_workers(client: TestClient, manager) -> None:
    response = client.get("/api/v1/statistics")
    assert response.status_code == 403
    assert response.json()["detail"] == "You do not have permission to view this page"

    client.state["user"] = manager
    assert client.get("/api/v1/statistics").status_code == 200


def test_theme_preference_roundtrip(client: TestClient) -> None:
    assert client.get("/api/v1/settings/theme").json() == {"dark_mode": False}
    assert client.put("/api/v1/settings/theme", json={"dark_mode": True}).json() == {"dark_mode": True}
    assert client.get("/api/v1/settings/theme").json() == {"dark_mode": True}


def test_login_errors_map_to_status_codes(client: TestClient, supabase: FakeSupabase) -> None:
    supabase.auth.add_user("wendy@example.com", "secret1", user_id=WORKER_ID)

    response = client.post("/api/v1/auth/login", json={"email": "wendy@example.com", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"

    supabase.fail("profiles", "select", RuntimeError("profiles unavailable"), times=3)
    response = client.post("/api/v1/auth/login", json={"email": "wendy@example.com", "password": "secret1"})
    assert response.status_code == 503
    assert response.json()["detail"] == "profiles unavailable"

    response = client.post("/api/v1/auth/login", json={"email": "wendy@example.com", "password": "secret1"})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == WORKER_ID


def test_partial_upload_failure_returns_banner(client: TestClient, supabase: FakeSupabase) -> None:
    supabase.storage.fail_bodies.add(b"bad")

    response = client.post(
        "/api/v1/tasks/t1/attachments",
        files=[("files", ("ok.txt", b"good", "text/plain")), ("files", ("bad.txt", b"bad", "text/plain"))],
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to upload files"
    assert response.json()["failed"] == ["bad.txt"]
    assert [a["file_name"] for a in supabase.tables["attachments"]] == ["ok.txt"]


def test_task_update_rules_over_http(client: TestClient, supabase: FakeSupabase) -> None:
    supabase.tables["tasks"] = [{
        "id": "t1", "title": "Ship it", "status": "pending", "priority": "medium",
        "created_by": MANAGER_ID, "assigned_to": WORKER_ID,
    }]

    response = client.put("/api/v1/tasks/t1", json={"priority": "high"})
    assert response.status_code == 403

    response = client.put("/api/v1/tasks/t1", json={"status": "in_progress"})
    assert response.status_code == 200
    assert response.json()["status"] == "in_progress"


@pytest.fixture()
def ws_setup(monkeypatch, supabase: FakeSupabase, worker):
    realtime = FakeAsyncClient()

    async def fake_feed(token: str) -> ChangeFeed:
        return ChangeFeed(realtime)

    monkeypatch.setattr(SupabaseClient, "get_user_client", lambda token: supabase)
    monkeypatch.setattr(realtime_routes, "resolve_user", lambda token, session: worker if token == "good" else None)
    monkeypatch.setattr(realtime_routes, "open_change_feed", fake_feed)
    return realtime


def test_websocket_rejects_missing_or_bad_token(client: TestClient, ws_setup) -> None:
    for url in ("/ws/search", "/ws/search?token=bad"):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect(url) as ws:
                ws.receive_json()


def test_websocket_search_returns_debounced_results(client: TestClient, ws_setup) -> None:
    with client.websocket_connect("/ws/search?token=good") as ws:
        ws.send_json({"query": "m"})
        ws.send_json({"query": "max"})
        frame = ws.receive_json()

    assert frame["type"] == "results"
    assert frame["query"] == "max"
    assert [p["full_name"] for p in frame["items"]] == ["Max Manager"]


def test_websocket_notifications_patch_locally(client: TestClient, ws_setup) -> None:
    with client.websocket_connect("/ws/notifications?token=good") as ws:
        assert ws.receive_json() == {"type": "counts", "notifications": 2, "messages": 0}

        ws.send_json({"action": "open"})
        assert [n["read"] for n in ws.receive_json()["items"]] == [False, False]

        ws.send_json({"action": "mark_read", "id": "n2"})
        assert ws.receive_json() == {"type": "counts", "notifications": 1, "messages": 0}
        frame = ws.receive_json()

    assert frame["type"] == "notifications"
    assert {n["id"]: n["read"] for n in frame["items"]} == {"n1": False, "n2": True}
    assert set(ws_setup.channels) == {f"notifications-{WORKER_ID}", f"unread-messages-{WORKER_ID}"}
    assert sorted(ws_setup.removed) == sorted(ws_setup.channels)


def test_websocket_ignores_malformed_frames(client: TestClient, ws_setup) -> None:
    with client.websocket_connect("/ws/notifications?token=good") as ws:
        assert ws.receive_json()["type"] == "counts"

        ws.send_text("not json")
        ws.send_json(["open"])
        ws.send_json({"action": "open"})
        frame = ws.receive_json()

    assert frame["type"] == "notifications"
    assert len(frame["items"]) == 2


def test_websocket_chat_sends_history(client: TestClient, ws_setup, supabase: FakeSupabase) -> None:
    supabase.tables["task_chat_messages"] = [
        {"id": "c2", "task_id": "t1", "sender_id": MANAGER_ID, "content": "second", "created_at": "2025-01-01T10:01:00+00:00"},
        {"id": "c1", "task_id": "t1", "sender_id": WORKER_ID, "content": "first", "created_at": "2025-01-01T10:00:00+00:00"},
    ]

    with client.websocket_connect("/ws/tasks/t1/chat?token=good") as ws:
        frame = ws.receive_json()

    assert frame["type"] == "messages"
    assert [m["id"] for m in frame["items"]] == ["c1", "c2"]
    binding = ws_setup.channels["task-chat-t1"].bindings[0]
    assert (binding["event"], binding["filter"]) == ("INSERT", "task_id=eq.t1")
