import logging

from fastapi import HTTPException
from postgrest.exceptions import APIError
from supabase import Client

from taskhub.core.retry import describe_error
from taskhub.modules.preferences.schemas import AppSettingsResponse, AppSettingsUpdate

logger = logging.getLogger(__name__)

NO_ROWS = "PGRST116"


class AppSettingsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def load_settings(self) -> AppSettingsResponse:
        """Branding settings; defaults when the table has no row"""
        try:
            result = self.supabase.table("app_settings")\
                .select("*")\
                .single()\
                .execute()
        except APIError as e:
            if e.code != NO_ROWS:
                logger.error(f"Error loading app settings: {describe_error(e)}")
            return AppSettingsResponse()
        except Exception as e:
            logger.error(f"Error loading app settings: {e}")
            return AppSettingsResponse()

        data = result.data or {}
        defaults = AppSettingsResponse()
        return AppSettingsResponse(
            app_name=data.get("app_name") or defaults.app_name,
            primary_color=data.get("primary_color") or defaults.primary_color,
            logo_url=data.get("logo_url"),
        )

    def update_settings(self, changes: AppSettingsUpdate) -> AppSettingsResponse:
        """Merge changes over the current settings; update the row or insert the first one"""
        current = self.load_settings()
        updated = current.model_copy(update=changes.model_dump(exclude_unset=True))
        payload = updated.model_dump()
        try:
            existing = self.supabase.table("app_settings")\
                .select("id")\
                .limit(1)\
                .execute()

            if existing.data:
                self.supabase.table("app_settings")\
                    .update(payload)\
                    .eq("id", existing.data[0]["id"])\
                    .execute()
            else:
                self.supabase.table("app_settings").insert(payload).execute()
        except Exception as e:
            logger.error(f"Error updating app settings: {describe_error(e)}")
            raise HTTPException(status_code=500, detail="Failed to update settings")

        logger.info("App settings updated")
        return updated
