from pydantic import BaseModel
from typing import List
from taskhub.modules.tasks.schemas import TaskResponse


class StatusStats(BaseModel):
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    pending: int = 0


class DashboardResponse(BaseModel):
    stats: StatusStats
    recent_tasks: List[TaskResponse] = []
    due_soon_tasks: List[TaskResponse] = []
    high_priority_tasks: List[TaskResponse] = []
