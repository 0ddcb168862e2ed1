from fastapi import APIRouter, Depends, HTTPException
from taskhub.database.supabase_client import SupabaseClient
from taskhub.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    PasswordChangeRequest
)
from taskhub.modules.auth.service import SessionManager
from taskhub.modules.profiles.schemas import Profile, ProfileUpdate
from taskhub.core.dependencies import get_current_user, get_session_manager, clear_profile_cache

router = APIRouter(prefix="/auth", tags=["auth"])


def get_sign_in_session() -> SessionManager:
    """Session manager on a fresh client, used before the caller has a token."""
    return SessionManager(SupabaseClient.create_session_client())


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    session: SessionManager = Depends(get_sign_in_session)
):
    """Register a new user and create their profile"""
    profile = session.sign_up(register_data.email, register_data.password, register_data.full_name)
    return RegisterResponse(
        user_id=profile.id,
        email=register_data.email,
        profile=profile,
        message="User registered successfully"
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    session: SessionManager = Depends(get_sign_in_session)
):
    """Login and get access token plus profile"""
    profile = session.sign_in(login_data.email, login_data.password)
    return TokenResponse(
        access_token=session.session.access_token,
        refresh_token=getattr(session.session, "refresh_token", None),
        user=profile
    )


@router.post("/logout", status_code=200)
async def logout(
    session: SessionManager = Depends(get_session_manager)
):
    """Logout; local state is cleared even if the remote call fails"""
    session.sign_out()
    clear_profile_cache()
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=Profile)
async def get_me(current_user: Profile = Depends(get_current_user)):
    """Get the current user's profile"""
    return current_user


@router.put("/me", response_model=Profile)
async def update_me(
    profile_data: ProfileUpdate,
    current_user: Profile = Depends(get_current_user),
    session: SessionManager = Depends(get_session_manager)
):
    """Update the current user's profile"""
    updates = profile_data.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No changes to save")
    profile = session.update_profile(updates)
    clear_profile_cache()
    return profile


@router.put("/password", status_code=200)
async def change_password(
    request: PasswordChangeRequest,
    current_user: Profile = Depends(get_current_user),
    session: SessionManager = Depends(get_session_manager)
):
    """Change the current user's password (requires the service role key)"""
    admin_client = SupabaseClient.get_service_client()
    if admin_client is None:
        raise HTTPException(
            status_code=500,
            detail="Service role key not configured. Cannot update password."
        )
    try:
        session.change_password(request.new_password, request.confirm_password, admin_client=admin_client)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update password: {str(e)}")
    return {"message": "Password updated successfully"}
