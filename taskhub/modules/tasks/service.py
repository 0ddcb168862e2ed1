import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException
from supabase import Client

from taskhub.modules.profiles.schemas import Profile
from taskhub.modules.tasks.schemas import (
    TaskCreate, TaskUpdate, TaskResponse, TaskHistoryResponse
)

logger = logging.getLogger(__name__)

TASK_SELECT = """
    *,
    assigned_to_profile:profiles!tasks_assigned_to_fkey(*),
    created_by_profile:profiles!tasks_created_by_fkey(*)
"""

PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}
STATUS_ORDER = {"pending": 1, "in_progress": 2, "completed": 3}
MANAGER_FIELDS = ("title", "description", "priority", "assigned_to", "due_date")


def involvement_filter(user_id: str) -> str:
    """PostgREST or() filter for tasks the user created or is assigned to."""
    return f"assigned_to.eq.{user_id},created_by.eq.{user_id}"


def _timestamp(value: Optional[datetime]) -> float:
    return value.timestamp() if value else 0


def filter_and_sort_tasks(
    tasks: List[TaskResponse],
    search: Optional[str] = None,
    status: str = "all",
    priority: str = "all",
    sort_field: str = "created_at",
    sort_direction: str = "desc",
) -> List[TaskResponse]:
    """Client-side list filtering: text search, status/priority filters, sorting."""
    result = list(tasks)

    if search:
        query = search.lower()
        result = [
            t for t in result
            if query in t.title.lower() or (t.description and query in t.description.lower())
        ]
    if status != "all":
        result = [t for t in result if t.status == status]
    if priority != "all":
        result = [t for t in result if t.priority == priority]

    if sort_field in ("created_at", "due_date"):
        key = lambda t: _timestamp(getattr(t, sort_field))
    elif sort_field == "title":
        key = lambda t: t.title.lower()
    elif sort_field == "priority":
        key = lambda t: PRIORITY_ORDER.get(t.priority, 0)
    elif sort_field == "status":
        key = lambda t: STATUS_ORDER.get(t.status, 0)
    else:
        raise ValueError(f"Unsupported sort field: {sort_field}")

    return sorted(result, key=key, reverse=sort_direction != "asc")


class TaskService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _count(self, table: str, **filters) -> int:
        query = self.supabase.table(table).select("*", count="exact", head=True)
        for column, value in filters.items():
            query = query.eq(column, value)
        return query.execute().count or 0

    def _with_counts(self, task: dict, user_id: str) -> TaskResponse:
        counts = {}
        for name, table, filters in (
            ("comment_count", "comments", {"task_id": task["id"]}),
            ("attachment_count", "attachments", {"task_id": task["id"]}),
            ("unread_notifications", "notifications", {"task_id": task["id"], "user_id": user_id, "read": False}),
        ):
            try:
                counts[name] = self._count(table, **filters)
            except Exception as e:
                logger.error(f"Error fetching {table} count for task {task['id']}: {e}")
                counts[name] = 0
        return TaskResponse(**{**task, **counts})

    def list_tasks(self, user: Profile) -> List[TaskResponse]:
        """Tasks visible in the task list, with comment/attachment/unread counts."""
        try:
            query = self.supabase.table("tasks").select(TASK_SELECT)
            if not user.is_manager:
                query = query.or_(involvement_filter(user.id))
            result = query.execute()
        except Exception as e:
            logger.error(f"Error fetching tasks: {e}")
            raise HTTPException(status_code=500, detail="Failed to load tasks")

        return [self._with_counts(task, user.id) for task in result.data or []]

    def get_task(self, task_id: str) -> TaskResponse:
        """Get task by ID with both profiles joined"""
        try:
            result = self.supabase.table("tasks")\
                .select(TASK_SELECT)\
                .eq("id", task_id)\
                .maybe_single()\
                .execute()

            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Task not found")

            return TaskResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching task {task_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def create_task(self, task_data: TaskCreate, user_id: str) -> TaskResponse:
        """Create a pending task owned by the caller"""
        if not task_data.title or not task_data.title.strip():
            raise HTTPException(status_code=400, detail="Title is required")
        try:
            result = self.supabase.table("tasks").insert({
                "title": task_data.title,
                "description": task_data.description or None,
                "priority": task_data.priority,
                "status": "pending",
                "created_by": user_id,
                "assigned_to": task_data.assigned_to or None,
                "team_id": task_data.team_id or None,
                "due_date": task_data.due_date.isoformat() if task_data.due_date else None,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create task - no data returned")

            return TaskResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating task: {e}")
            raise HTTPException(status_code=500, detail=str(e) or "Failed to create task")

    def build_update(self, task: TaskResponse, changes: TaskUpdate, user: Profile) -> dict:
        """Field-level update rule.

        Status may be changed by the assignee, admins and managers; every
        other field only by admins and managers. Fields the caller may not
        change are ignored.
        """
        sent = changes.model_fields_set
        update_data = {}
        can_change_status = user.is_manager or task.assigned_to == user.id

        if can_change_status and "status" in sent and changes.status and changes.status != task.status:
            update_data["status"] = changes.status

        if user.is_manager:
            for field in MANAGER_FIELDS:
                if field not in sent:
                    continue
                value = getattr(changes, field)
                if field == "priority" and value is None:
                    continue
                if field == "title" and not (value and value.strip()):
                    raise HTTPException(status_code=400, detail="Title is required")
                if field in ("description", "assigned_to"):
                    value = value or None
                if value != getattr(task, field):
                    update_data[field] = value.isoformat() if isinstance(value, datetime) else value
        elif not update_data:
            raise HTTPException(status_code=403, detail="You do not have permission to update this task")

        if not update_data:
            raise HTTPException(status_code=400, detail="No changes to save")
        return update_data

    def update_task(self, task_id: str, changes: TaskUpdate, user: Profile) -> TaskResponse:
        """Update a task according to the caller's role"""
        task = self.get_task(task_id)
        update_data = self.build_update(task, changes, user)
        try:
            result = self.supabase.table("tasks")\
                .update(update_data)\
                .eq("id", task_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Task not found")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating task {task_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update task")
        return self.get_task(task_id)

    def delete_task(self, task_id: str, user: Profile) -> bool:
        """Delete a task (creator, admin or manager)"""
        task = self.get_task(task_id)
        if not (user.is_manager or task.created_by == user.id):
            raise HTTPException(status_code=403, detail="You do not have permission to delete this task")
        try:
            result = self.supabase.table("tasks")\
                .delete()\
                .eq("id", task_id)\
                .execute()

            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting task {task_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete task")

    def list_history(self, task_id: str) -> List[TaskHistoryResponse]:
        """Change history for a task, newest first"""
        try:
            result = self.supabase.table("task_history")\
                .select("*, user_profile:profiles(*)")\
                .eq("task_id", task_id)\
                .order("created_at", desc=True)\
                .execute()
            return [TaskHistoryResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error fetching task history for {task_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load task history")
