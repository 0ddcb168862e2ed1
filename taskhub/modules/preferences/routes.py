from fastapi import APIRouter, Depends
from taskhub.config import settings
from taskhub.core.dependencies import get_current_user, get_user_supabase, require_admin
from taskhub.core.local_storage import LocalStorage, ThemePreferences
from taskhub.modules.preferences.schemas import (
    AppSettingsResponse, AppSettingsUpdate, ThemeResponse, ThemeUpdate
)
from taskhub.modules.preferences.service import AppSettingsService
from taskhub.modules.profiles.schemas import Profile
from supabase import Client

router = APIRouter(prefix="/settings", tags=["settings"])


def get_app_settings_service(supabase: Client = Depends(get_user_supabase)) -> AppSettingsService:
    return AppSettingsService(supabase)


def get_theme_preferences() -> ThemePreferences:
    return ThemePreferences(LocalStorage(settings.local_storage_path))


@router.get("", response_model=AppSettingsResponse)
async def get_app_settings(
    current_user: Profile = Depends(get_current_user),
    service: AppSettingsService = Depends(get_app_settings_service)
):
    """App name, primary color and logo"""
    return service.load_settings()


@router.put("", response_model=AppSettingsResponse)
async def update_app_settings(
    changes: AppSettingsUpdate,
    current_user: Profile = Depends(require_admin),
    service: AppSettingsService = Depends(get_app_settings_service)
):
    """Update branding settings (admin only)"""
    return service.update_settings(changes)


@router.get("/theme", response_model=ThemeResponse)
async def get_theme(
    current_user: Profile = Depends(get_current_user),
    preferences: ThemePreferences = Depends(get_theme_preferences)
):
    return ThemeResponse(dark_mode=preferences.is_dark(current_user.id))


@router.put("/theme", response_model=ThemeResponse)
async def set_theme(
    theme: ThemeUpdate,
    current_user: Profile = Depends(get_current_user),
    preferences: ThemePreferences = Depends(get_theme_preferences)
):
    """Persist the dark mode flag for the current user"""
    return ThemeResponse(dark_mode=preferences.set_dark(current_user.id, theme.dark_mode))


@router.post("/theme/toggle", response_model=ThemeResponse)
async def toggle_theme(
    current_user: Profile = Depends(get_current_user),
    preferences: ThemePreferences = Depends(get_theme_preferences)
):
    return ThemeResponse(dark_mode=preferences.toggle(current_user.id))
