import logging
from typing import Any, Optional

from postgrest.exceptions import APIError
from supabase import Client

from taskhub.core.exceptions import (
    AuthError, InvalidCredentials, EmailAlreadyRegistered,
    ProfileLoadFailure, ProfileCreateFailure
)
from taskhub.core.retry import RetryPolicy, RetryError, describe_error
from taskhub.modules.profiles.schemas import Profile
from taskhub.modules.profiles.service import ProfileService

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class SessionManager:
    """Holds the signed-in profile for one Supabase client.

    Every failure path signs the client out before the error propagates, so
    no half-authenticated state survives. Profile reads and the post-sign-up
    profile insert go through ``retry_policy``; nothing else is retried.
    """

    def __init__(self, supabase: Client, retry_policy: Optional[RetryPolicy] = None):
        self.supabase = supabase
        self.retry_policy = retry_policy or RetryPolicy.for_profiles()
        self.user: Optional[Profile] = None
        self.session: Any = None
        self.loading = True

    # Profile row access

    def _select_profile(self, user_id: str) -> dict:
        result = self.supabase.table("profiles")\
            .select("*")\
            .eq("id", user_id)\
            .single()\
            .execute()
        if not result.data:
            raise LookupError(f"Profile {user_id} not found")
        return result.data

    def _insert_profile(self, user_id: str, full_name: str) -> dict:
        result = self.supabase.table("profiles").insert({
            "id": user_id,
            "full_name": full_name,
            "role": "worker",
        }).execute()
        if not result.data:
            raise LookupError("Profile insert returned no data")
        return result.data[0]

    def _load_profile(self, user_id: str, description: str) -> Profile:
        try:
            data = self.retry_policy.call(self._select_profile, user_id, description=description)
        except RetryError as e:
            message = describe_error(e.last_error).get("message") or "Failed to load profile"
            raise ProfileLoadFailure(message, e.last_error) from e.last_error
        return Profile(**data)

    def _clear_session(self) -> None:
        try:
            self.supabase.auth.sign_out()
        except Exception as e:
            logger.error(f"Sign out error: {e}")
        finally:
            self.user = None
            self.session = None

    # Public operations

    def sign_in(self, email: str, password: str) -> Profile:
        """Authenticate and load the profile. Raises an AuthError subclass on any failure."""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": email,
                "password": password
            })
            session = getattr(auth_response, "session", None)
            if not session or not session.user:
                raise AuthError("No session after sign in")
            profile = self._load_profile(session.user.id, "Profile fetch")
        except Exception as e:
            logger.error(f"Authentication error: {describe_error(e)}")
            self._clear_session()
            raise self._classify_sign_in_error(e) from e

        self.session = session
        self.user = profile
        return profile

    @staticmethod
    def _classify_sign_in_error(error: Exception) -> AuthError:
        if isinstance(error, AuthError):
            return error
        if "invalid login credentials" in str(error).lower():
            return InvalidCredentials(error)
        if isinstance(error, APIError):
            return AuthError("Database error occurred", error)
        return AuthError(str(error) or "Authentication failed", error)

    def sign_up(self, email: str, password: str, full_name: str) -> Profile:
        """Create the auth identity, then the profile row.

        If the profile insert still fails after retries the auth identity is
        deliberately kept; the user can sign in later and the profile load
        will be retried then.
        """
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": email,
                "password": password,
                "options": {
                    "data": {"full_name": full_name}
                }
            })
        except Exception as e:
            logger.error(f"Sign up error: {e}")
            if "user already registered" in str(e).lower():
                raise EmailAlreadyRegistered(e) from e
            raise AuthError(str(e) or "Sign up failed", e) from e

        if not auth_response or not auth_response.user:
            raise AuthError("No user data after sign up")

        try:
            data = self.retry_policy.call(
                self._insert_profile, auth_response.user.id, full_name,
                description="Profile creation"
            )
        except RetryError as e:
            logger.error(
                f"Profile for {auth_response.user.id} not created; auth identity kept: "
                f"{describe_error(e.last_error)}"
            )
            message = describe_error(e.last_error).get("message") or "Failed to create profile"
            raise ProfileCreateFailure(message, e.last_error) from e.last_error
        return Profile(**data)

    def load_user(self, access_token: Optional[str] = None) -> Optional[Profile]:
        """Restore the session (explicit JWT or the client's stored session) and reload the profile.

        Returns None when there is no session or anything fails; failures sign out.
        """
        try:
            if access_token:
                user_response = self.supabase.auth.get_user(jwt=access_token)
                auth_user = user_response.user if user_response else None
            else:
                session = self.supabase.auth.get_session()
                auth_user = session.user if session else None

            if not auth_user:
                self.user = None
                return None

            profile = self._load_profile(auth_user.id, "Profile load")
        except Exception as e:
            logger.error(f"Load user error: {describe_error(e)}")
            self._clear_session()
            return None
        finally:
            self.loading = False

        self.user = profile
        return profile

    def sign_out(self) -> None:
        """Sign out remotely; local state is cleared even if that call fails."""
        self._clear_session()

    def update_profile(self, updates: dict) -> Profile:
        if not self.user:
            raise AuthError("No user logged in")
        ProfileService(self.supabase).update_profile(self.user.id, updates)
        self.user = self.user.model_copy(update=updates)
        return self.user

    def change_password(self, new_password: str, confirm_password: str, admin_client: Optional[Client] = None) -> None:
        """Validate and set a new password.

        ``admin_client`` (service role) is used when this client holds no
        session of its own, e.g. a request authorized by a bearer token.
        """
        if not self.user:
            raise AuthError("No user logged in")
        if new_password != confirm_password:
            raise ValueError("New passwords do not match")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        if admin_client is not None:
            admin_client.auth.admin.update_user_by_id(self.user.id, {"password": new_password})
        else:
            self.supabase.auth.update_user({"password": new_password})
