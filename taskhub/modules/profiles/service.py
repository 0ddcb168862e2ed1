import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import HTTPException
from supabase import Client

from taskhub.config import settings
from taskhub.modules.profiles.schemas import Profile, UserRole

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, user_id: str) -> Profile:
        """Get profile by ID"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()

            if not result or not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            return Profile(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching profile {user_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def search_profiles(self, query: str, exclude_id: Optional[str] = None, limit: Optional[int] = None) -> List[Profile]:
        """Case-insensitive substring search on full_name. Blank query returns nothing."""
        if not query or not query.strip():
            return []
        try:
            request = self.supabase.table("profiles")\
                .select("*")\
                .ilike("full_name", f"%{query.strip()}%")
            if exclude_id:
                request = request.neq("id", exclude_id)
            result = request.limit(limit or settings.search_result_limit).execute()
            return [Profile(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error searching users: {e}")
            raise HTTPException(status_code=500, detail="Failed to search users")

    def list_profiles(self) -> List[Profile]:
        """All profiles ordered by name (admin panel and statistics filters)."""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .order("full_name")\
                .execute()
            return [Profile(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error fetching users: {e}")
            raise HTTPException(status_code=500, detail="Failed to load users")

    def update_profile(self, user_id: str, updates: dict) -> Profile:
        """Apply a partial update to a profile row."""
        try:
            result = self.supabase.table("profiles")\
                .update({**updates, "updated_at": _now()})\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            return Profile(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating profile {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update profile")

    def update_role(self, user_id: str, role: UserRole) -> Profile:
        """Change a user's role (admin panel)."""
        try:
            return self.update_profile(user_id, {"role": role})
        except HTTPException as e:
            if e.status_code == 404:
                raise
            raise HTTPException(status_code=500, detail="Failed to update user role")

    def upload_avatar(self, user_id: str, file_name: str, content_type: Optional[str], content: bytes) -> Profile:
        """Store a new profile picture and point avatar_url at its public URL."""
        if not content_type or not content_type.startswith("image/"):
            raise HTTPException(status_code=400, detail="Please upload an image file")
        if len(content) > settings.max_avatar_bytes:
            raise HTTPException(status_code=400, detail="File size must be less than 2MB")

        ext = file_name.split(".")[-1]
        path = f"avatars/{user_id}-{uuid.uuid4().hex[:12]}.{ext}"
        try:
            bucket = self.supabase.storage.from_(settings.avatars_bucket)
            bucket.upload(path, content, {"content-type": content_type})
            avatar_url = bucket.get_public_url(path)
        except Exception as e:
            logger.error(f"Error uploading avatar for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to upload profile picture")
        return self.update_profile(user_id, {"avatar_url": avatar_url})

    def remove_avatar(self, user_id: str) -> Profile:
        try:
            return self.update_profile(user_id, {"avatar_url": None})
        except HTTPException as e:
            if e.status_code == 404:
                raise
            raise HTTPException(status_code=500, detail="Failed to remove profile picture")
