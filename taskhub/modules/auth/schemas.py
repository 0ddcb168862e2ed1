from pydantic import BaseModel, EmailStr
from typing import Optional
from taskhub.modules.profiles.schemas import Profile


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    user: Profile


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    profile: Profile
    message: str


class PasswordChangeRequest(BaseModel):
    new_password: str
    confirm_password: str
