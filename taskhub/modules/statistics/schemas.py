from pydantic import BaseModel
from typing import List, Literal

DateRange = Literal["all", "today", "week", "month", "quarter"]


class StatusTotals(BaseModel):
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    pending: int = 0


class PriorityTotals(BaseModel):
    high: int = 0
    medium: int = 0
    low: int = 0


class UserStats(BaseModel):
    user_id: str
    user_name: str = "Unknown"
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    pending: int = 0


class MonthStats(BaseModel):
    month: str
    label: str
    count: int = 0


class StatisticsResponse(BaseModel):
    tasks: StatusTotals
    priorities: PriorityTotals
    completion_rate: int = 0
    avg_completion_days: int = 0
    users: List[UserStats] = []
    months: List[MonthStats] = []
