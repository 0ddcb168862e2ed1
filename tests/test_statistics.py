# tests/test_statistics.py

from __future__ import annotations

from datetime import datetime, timezone

from taskhub.modules.statistics.service import (
    StatisticsService, range_start, statistics_csv, summarize_tasks
)

from .conftest import MANAGER_ID, WORKER_ID
from .fakes import FakeSupabase


def _task(task_id: str, status: str, priority: str, created_at: str, updated_at: str | None = None,
          assigned_to: str | None = WORKER_ID) -> dict:
    return {
        "id": task_id,
        "status": status,
        "priority": priority,
        "created_at": created_at,
        "updated_at": updated_at or created_at,
        "assigned_to": assigned_to,
    }


TASKS = [
    _task("t1", "completed", "high", "2024-09-10T00:00:00+00:00", "2024-09-11T00:00:00+00:00"),
    _task("t2", "completed", "low", "2024-10-01T00:00:00+00:00", "2024-10-03T00:00:00+00:00"),
    _task("t3", "in_progress", "high", "2024-11-05T00:00:00+00:00"),
    _task("t4", "pending", "medium", "2025-01-02T00:00:00+00:00", assigned_to="ghost"),
    _task("t5", "pending", "medium", "2025-01-20T00:00:00+00:00", assigned_to=None),
    _task("t6", "pending", "low", "2024-10-15T00:00:00+00:00"),
    _task("t7", "in_progress", "medium", "2024-10-16T00:00:00+00:00", assigned_to=MANAGER_ID),
    _task("t8", "pending", "low", "2024-10-17T00:00:00+00:00", assigned_to=MANAGER_ID),
]


def test_totals_and_rates() -> None:
    report = summarize_tasks(TASKS)

    assert report.tasks.total == 8
    assert (report.tasks.completed, report.tasks.in_progress, report.tasks.pending) == (2, 2, 4)
    assert (report.priorities.high, report.priorities.medium, report.priorities.low) == (2, 3, 3)
    # 2 / 8 = 25%
    assert report.completion_rate == 25
    # (1 day + 2 days) / 2 = 1.5, rounded half up
    assert report.avg_completion_days == 2


def test_completion_rate_rounds_half_up() -> None:
    tasks = [_task("a", "completed", "low", "2025-01-01T00:00:00+00:00")] + [
        _task(f"p{n}", "pending", "low", "2025-01-01T00:00:00+00:00") for n in range(7)
    ]
    # 1 / 8 = 12.5%
    assert summarize_tasks(tasks).completion_rate == 13


def test_empty_report() -> None:
    report = summarize_tasks([])

    assert report.tasks.total == 0
    assert report.completion_rate == 0
    assert report.avg_completion_days == 0
    assert report.users == [] and report.months == []


def test_per_user_stats_with_unknown_fallback() -> None:
    report = summarize_tasks(TASKS, {WORKER_ID: "Wendy Worker", MANAGER_ID: "Max Manager"})
    users = {u.user_id: u for u in report.users}

    assert set(users) == {WORKER_ID, MANAGER_ID, "ghost"}
    assert users["ghost"].user_name == "Unknown"
    wendy = users[WORKER_ID]
    assert (wendy.total, wendy.completed, wendy.in_progress, wendy.pending) == (4, 2, 1, 1)


def test_months_are_chronological() -> None:
    report = summarize_tasks(TASKS)

    assert [m.month for m in report.months] == ["2024-9", "2024-10", "2024-11", "2025-1"]
    assert [m.label for m in report.months] == ["Sep 2024", "Oct 2024", "Nov 2024", "Jan 2025"]
    assert [m.count for m in report.months] == [1, 4, 1, 2]


def test_range_start() -> None:
    now = datetime(2025, 3, 31, 12, 30, tzinfo=timezone.utc)

    assert range_start("all", now) is None
    assert range_start("today", now) == datetime(2025, 3, 31, tzinfo=timezone.utc)
    assert range_start("week", now) == datetime(2025, 3, 24, 12, 30, tzinfo=timezone.utc)
    assert range_start("month", now) == datetime(2025, 2, 28, 12, 30, tzinfo=timezone.utc)
    assert range_start("quarter", now) == datetime(2024, 12, 31, 12, 30, tzinfo=timezone.utc)


def test_service_filters_by_range_and_assignee(supabase: FakeSupabase) -> None:
    supabase.tables["tasks"] = TASKS
    service = StatisticsService(supabase)
    now = datetime(2025, 1, 31, tzinfo=timezone.utc)

    month = service.get_statistics("month", now=now)
    assert month.tasks.total == 2

    managers = service.get_statistics("all", user_filter=MANAGER_ID)
    assert managers.tasks.total == 2
    assert [u.user_name for u in managers.users] == ["Max Manager"]


def test_csv_export() -> None:
    csv_text = statistics_csv(summarize_tasks(TASKS, {WORKER_ID: "Wendy Worker"}))
    lines = csv_text.splitlines()

    assert lines[0] == "Category,Metric,Value"
    assert "Performance,Completion Rate,25%" in lines
    assert "User,Wendy Worker Completed,2" in lines
    assert "Time,Oct 2024,4" in lines
