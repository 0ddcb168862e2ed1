from fastapi import APIRouter, Depends
from taskhub.core.dependencies import get_current_user, get_user_supabase
from taskhub.modules.dashboard.schemas import DashboardResponse
from taskhub.modules.dashboard.service import DashboardService
from taskhub.modules.profiles.schemas import Profile
from supabase import Client

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def get_dashboard_service(supabase: Client = Depends(get_user_supabase)) -> DashboardService:
    return DashboardService(supabase)


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    current_user: Profile = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Status totals plus recent, due-soon and high-priority panels"""
    return service.get_dashboard(current_user)
