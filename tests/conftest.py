# tests/conftest.py

from __future__ import annotations

import os

# Settings are read at import time; give the app connection parameters before any taskhub import.
os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "anon-test-key")

import pytest

from taskhub.core.dependencies import clear_profile_cache
from taskhub.core.retry import RetryPolicy
from taskhub.modules.profiles.schemas import Profile

from .fakes import FakeSupabase

WORKER_ID = "00000000-0000-0000-0000-000000000001"
MANAGER_ID = "00000000-0000-0000-0000-000000000002"
ADMIN_ID = "00000000-0000-0000-0000-000000000003"


@pytest.fixture(autouse=True)
def _fresh_profile_cache():
    clear_profile_cache()
    yield
    clear_profile_cache()


@pytest.fixture()
def supabase() -> FakeSupabase:
    return FakeSupabase({
        "profiles": [
            {"id": WORKER_ID, "full_name": "Wendy Worker", "role": "worker"},
            {"id": MANAGER_ID, "full_name": "Max Manager", "role": "manager"},
            {"id": ADMIN_ID, "full_name": "Ada Admin", "role": "admin"},
        ],
    })


@pytest.fixture()
def worker() -> Profile:
    return Profile(id=WORKER_ID, full_name="Wendy Worker", role="worker")


@pytest.fixture()
def manager() -> Profile:
    return Profile(id=MANAGER_ID, full_name="Max Manager", role="manager")


@pytest.fixture()
def admin() -> Profile:
    return Profile(id=ADMIN_ID, full_name="Ada Admin", role="admin")


@pytest.fixture()
def sleeps() -> list:
    return []


@pytest.fixture()
def retry_policy(sleeps: list) -> RetryPolicy:
    """Profile retry policy with the real schedule but a recording sleep."""
    return RetryPolicy(attempts=3, delay=1.0, sleep=sleeps.append)
