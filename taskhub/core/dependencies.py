"""
Core dependencies for route protection and per-request Supabase clients
"""

import hashlib
import logging
import time
from typing import Dict, Optional, Tuple

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import Client

from taskhub.config import settings
from taskhub.database.supabase_client import SupabaseClient
from taskhub.modules.auth.service import SessionManager
from taskhub.modules.profiles.schemas import Profile

logger = logging.getLogger(__name__)

security = HTTPBearer()

# Short TTL cache so a burst of requests with the same token loads the profile once
_PROFILE_CACHE: Dict[str, Tuple[Profile, float]] = {}
_PROFILE_CACHE_MAX_SIZE = 500


def _cache_key(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def clear_profile_cache() -> None:
    _PROFILE_CACHE.clear()


def get_access_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_user_supabase(token: str = Depends(get_access_token)) -> Client:
    """Supabase client acting as the caller, so RLS policies decide row access."""
    return SupabaseClient.get_user_client(token)


def get_session_manager(supabase: Client = Depends(get_user_supabase)) -> SessionManager:
    return SessionManager(supabase)


def resolve_user(token: str, session: SessionManager) -> Optional[Profile]:
    """Restore the caller's profile from a bearer token, using the TTL cache."""
    key = _cache_key(token)
    now = time.monotonic()
    cached = _PROFILE_CACHE.get(key)
    if cached:
        profile, expiry = cached
        if now < expiry:
            session.user = profile
            session.loading = False
            return profile
        del _PROFILE_CACHE[key]

    profile = session.load_user(token)
    if profile and len(_PROFILE_CACHE) < _PROFILE_CACHE_MAX_SIZE:
        _PROFILE_CACHE[key] = (profile, now + settings.auth_cache_ttl_seconds)
    return profile


def get_current_user(
    token: str = Depends(get_access_token),
    session: SessionManager = Depends(get_session_manager)
) -> Profile:
    """Current profile for the bearer token, or 401."""
    profile = resolve_user(token, session)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token"
        )
    return profile


def require_role(*roles: str):
    """Factory function to create a role check dependency.

    Roles only decide which views are offered; RLS still enforces row access.
    """
    def check_role(user: Profile = Depends(get_current_user)) -> Profile:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to view this page"
            )
        return user
    return check_role


def require_manager(user: Profile = Depends(require_role("admin", "manager"))) -> Profile:
    return user


def require_admin(user: Profile = Depends(require_role("admin"))) -> Profile:
    return user
