"""
Task statistics for the admin/manager reports page.

Aggregation runs in Python over the filtered task rows; only assignee names
are looked up separately.
"""

import calendar
import csv
import io
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from fastapi import HTTPException
from supabase import Client

from taskhub.modules.statistics.schemas import (
    StatisticsResponse, StatusTotals, PriorityTotals, UserStats, MonthStats
)

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24


def _round(value: float) -> int:
    """Round half up."""
    return int(value + 0.5)


def _parse(value) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _months_back(moment: datetime, months: int) -> datetime:
    month_index = moment.year * 12 + moment.month - 1 - months
    year, month = divmod(month_index, 12)
    day = min(moment.day, calendar.monthrange(year, month + 1)[1])
    return moment.replace(year=year, month=month + 1, day=day)


def range_start(date_range: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """Lower bound on created_at for a date range filter; None for "all"."""
    now = now or datetime.now(timezone.utc)
    if date_range == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if date_range == "week":
        return now - timedelta(days=7)
    if date_range == "month":
        return _months_back(now, 1)
    if date_range == "quarter":
        return _months_back(now, 3)
    return None


def summarize_tasks(tasks: List[dict], names: Optional[Dict[str, str]] = None) -> StatisticsResponse:
    """Aggregate task rows into the statistics report."""
    names = names or {}
    total = len(tasks)
    by_status = {status: 0 for status in ("completed", "in_progress", "pending")}
    by_priority = {priority: 0 for priority in ("high", "medium", "low")}
    users: Dict[str, UserStats] = {}
    months: Dict[str, MonthStats] = {}
    month_order: Dict[str, tuple] = {}
    completion_seconds = 0.0
    completed_count = 0

    for task in tasks:
        status = task.get("status")
        if status in by_status:
            by_status[status] += 1
        if task.get("priority") in by_priority:
            by_priority[task["priority"]] += 1

        created = _parse(task.get("created_at"))
        if status == "completed":
            completed_count += 1
            updated = _parse(task.get("updated_at"))
            if created and updated:
                completion_seconds += (updated - created).total_seconds()

        assignee = task.get("assigned_to")
        if assignee:
            stats = users.setdefault(assignee, UserStats(user_id=assignee))
            stats.total += 1
            if status == "completed":
                stats.completed += 1
            elif status == "in_progress":
                stats.in_progress += 1
            else:
                stats.pending += 1

        if created:
            key = f"{created.year}-{created.month}"
            if key not in months:
                months[key] = MonthStats(
                    month=key,
                    label=f"{calendar.month_abbr[created.month]} {created.year}",
                )
                month_order[key] = (created.year, created.month)
            months[key].count += 1

    for user_id, stats in users.items():
        stats.user_name = names.get(user_id) or "Unknown"

    return StatisticsResponse(
        tasks=StatusTotals(total=total, **by_status),
        priorities=PriorityTotals(**by_priority),
        completion_rate=_round(by_status["completed"] / total * 100) if total else 0,
        avg_completion_days=_round(completion_seconds / completed_count / SECONDS_PER_DAY) if completed_count else 0,
        users=list(users.values()),
        months=[months[key] for key in sorted(months, key=month_order.get)],
    )


def statistics_csv(report: StatisticsResponse) -> str:
    """Flatten a report into Category,Metric,Value rows."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["Category", "Metric", "Value"])
    rows: Iterable[tuple] = (
        ("Tasks", "Total", report.tasks.total),
        ("Tasks", "Completed", report.tasks.completed),
        ("Tasks", "In Progress", report.tasks.in_progress),
        ("Tasks", "Pending", report.tasks.pending),
        ("Priority", "High", report.priorities.high),
        ("Priority", "Medium", report.priorities.medium),
        ("Priority", "Low", report.priorities.low),
        ("Performance", "Completion Rate", f"{report.completion_rate}%"),
        ("Performance", "Avg Completion Time", f"{report.avg_completion_days} days"),
    )
    writer.writerows(rows)
    for stats in report.users:
        writer.writerow(["User", f"{stats.user_name} Total", stats.total])
        writer.writerow(["User", f"{stats.user_name} Completed", stats.completed])
    for month in report.months:
        writer.writerow(["Time", month.label, month.count])
    return buffer.getvalue()


class StatisticsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _assignee_names(self, user_ids: List[str]) -> Dict[str, str]:
        if not user_ids:
            return {}
        result = self.supabase.table("profiles")\
            .select("id, full_name")\
            .in_("id", user_ids)\
            .execute()
        return {row["id"]: row.get("full_name") for row in result.data or []}

    def get_statistics(
        self,
        date_range: str = "all",
        user_filter: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> StatisticsResponse:
        """Report over tasks created in the range, optionally for one assignee"""
        try:
            query = self.supabase.table("tasks").select("*")
            start = range_start(date_range, now)
            if start:
                query = query.gte("created_at", start.isoformat())
            if user_filter and user_filter != "all":
                query = query.eq("assigned_to", user_filter)
            tasks = query.execute().data or []

            assignees = list(dict.fromkeys(t["assigned_to"] for t in tasks if t.get("assigned_to")))
            return summarize_tasks(tasks, self._assignee_names(assignees))
        except Exception as e:
            logger.error(f"Error fetching statistics: {e}")
            raise HTTPException(status_code=500, detail="Failed to load statistics")
