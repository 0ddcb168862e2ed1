from pydantic import BaseModel
from typing import Optional

DEFAULT_APP_NAME = "TaskManager"
DEFAULT_PRIMARY_COLOR = "#3b82f6"


class AppSettingsResponse(BaseModel):
    app_name: str = DEFAULT_APP_NAME
    primary_color: str = DEFAULT_PRIMARY_COLOR
    logo_url: Optional[str] = None


class AppSettingsUpdate(BaseModel):
    app_name: Optional[str] = None
    primary_color: Optional[str] = None
    logo_url: Optional[str] = None


class ThemeResponse(BaseModel):
    dark_mode: bool


class ThemeUpdate(BaseModel):
    dark_mode: bool
