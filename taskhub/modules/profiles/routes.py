from fastapi import APIRouter, Depends, UploadFile, File
from taskhub.core.dependencies import get_current_user, get_user_supabase, require_admin, clear_profile_cache
from taskhub.modules.profiles.schemas import Profile, RoleUpdate
from taskhub.modules.profiles.service import ProfileService
from supabase import Client
from typing import List

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_user_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/search", response_model=List[Profile])
async def search_profiles(
    q: str = "",
    exclude_self: bool = False,
    current_user: Profile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Search users by name (assignee, team member and contact pickers)"""
    return service.search_profiles(q, exclude_id=current_user.id if exclude_self else None)


@router.get("", response_model=List[Profile])
async def list_profiles(
    current_user: Profile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """List all users ordered by name"""
    return service.list_profiles()


@router.get("/{user_id}", response_model=Profile)
async def get_profile(
    user_id: str,
    current_user: Profile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Get a user's profile"""
    return service.get_profile(user_id)


@router.put("/{user_id}/role", response_model=Profile)
async def update_role(
    user_id: str,
    role_data: RoleUpdate,
    current_user: Profile = Depends(require_admin),
    service: ProfileService = Depends(get_profile_service)
):
    """Change a user's role (admin only)"""
    profile = service.update_role(user_id, role_data.role)
    clear_profile_cache()
    return profile


@router.post("/me/avatar", response_model=Profile)
async def upload_avatar(
    file: UploadFile = File(...),
    current_user: Profile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Upload a new profile picture (images up to 2MB)"""
    content = await file.read()
    profile = service.upload_avatar(current_user.id, file.filename or "avatar", file.content_type, content)
    clear_profile_cache()
    return profile


@router.delete("/me/avatar", response_model=Profile)
async def remove_avatar(
    current_user: Profile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Remove the current profile picture"""
    profile = service.remove_avatar(current_user.id)
    clear_profile_cache()
    return profile
