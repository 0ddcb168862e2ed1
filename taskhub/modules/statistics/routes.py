from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from taskhub.core.dependencies import get_user_supabase, require_manager
from taskhub.modules.profiles.schemas import Profile
from taskhub.modules.statistics.schemas import StatisticsResponse, DateRange
from taskhub.modules.statistics.service import StatisticsService, statistics_csv
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/statistics", tags=["statistics"])


def get_statistics_service(supabase: Client = Depends(get_user_supabase)) -> StatisticsService:
    return StatisticsService(supabase)


@router.get("", response_model=StatisticsResponse)
async def get_statistics(
    date_range: DateRange = "all",
    user_filter: Optional[str] = None,
    current_user: Profile = Depends(require_manager),
    service: StatisticsService = Depends(get_statistics_service)
):
    """Task statistics (admins and managers)"""
    return service.get_statistics(date_range, user_filter)


@router.get("/export", response_class=PlainTextResponse)
async def export_statistics(
    date_range: DateRange = "all",
    user_filter: Optional[str] = None,
    current_user: Profile = Depends(require_manager),
    service: StatisticsService = Depends(get_statistics_service)
):
    """Same report as CSV"""
    report = service.get_statistics(date_range, user_filter)
    return PlainTextResponse(
        statistics_csv(report),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="task_statistics.csv"'},
    )
