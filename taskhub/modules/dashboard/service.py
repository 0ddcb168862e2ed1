import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import HTTPException
from supabase import Client

from taskhub.modules.dashboard.schemas import DashboardResponse, StatusStats
from taskhub.modules.profiles.schemas import Profile
from taskhub.modules.tasks.schemas import TaskResponse
from taskhub.modules.tasks.service import TASK_SELECT, involvement_filter

logger = logging.getLogger(__name__)

PANEL_SIZE = 5
DUE_SOON_DAYS = 7


class DashboardService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _tasks(self, user: Profile):
        query = self.supabase.table("tasks").select(TASK_SELECT)
        if not user.is_manager:
            query = query.or_(involvement_filter(user.id))
        return query

    def status_stats(self) -> StatusStats:
        """Totals per status over every task the caller can see"""
        result = self.supabase.table("tasks").select("status").execute()
        statuses = [row["status"] for row in result.data or []]
        return StatusStats(
            total=len(statuses),
            completed=statuses.count("completed"),
            in_progress=statuses.count("in_progress"),
            pending=statuses.count("pending"),
        )

    def recent_tasks(self, user: Profile) -> List[TaskResponse]:
        result = self._tasks(user)\
            .order("created_at", desc=True)\
            .limit(PANEL_SIZE)\
            .execute()
        return [TaskResponse(**row) for row in result.data or []]

    def due_soon_tasks(self, user: Profile, now: Optional[datetime] = None) -> List[TaskResponse]:
        """Open tasks due within the next week, soonest first"""
        now = now or datetime.now(timezone.utc)
        result = self._tasks(user)\
            .lt("due_date", (now + timedelta(days=DUE_SOON_DAYS)).isoformat())\
            .gt("due_date", now.isoformat())\
            .neq("status", "completed")\
            .order("due_date")\
            .limit(PANEL_SIZE)\
            .execute()
        return [TaskResponse(**row) for row in result.data or []]

    def high_priority_tasks(self, user: Profile) -> List[TaskResponse]:
        result = self._tasks(user)\
            .eq("priority", "high")\
            .neq("status", "completed")\
            .order("created_at", desc=True)\
            .limit(PANEL_SIZE)\
            .execute()
        return [TaskResponse(**row) for row in result.data or []]

    def get_dashboard(self, user: Profile) -> DashboardResponse:
        try:
            return DashboardResponse(
                stats=self.status_stats(),
                recent_tasks=self.recent_tasks(user),
                due_soon_tasks=self.due_soon_tasks(user),
                high_priority_tasks=self.high_priority_tasks(user),
            )
        except Exception as e:
            logger.error(f"Error fetching dashboard data: {e}")
            raise HTTPException(status_code=500, detail="Failed to load dashboard")
