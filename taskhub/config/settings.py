from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""  # public anon key; every query runs under the caller's JWT and RLS
    supabase_service_role_key: Optional[str] = None  # Required for admin operations like password resets
    client_info: str = "task-management-app"  # sent as X-Client-Info

    # Storage buckets
    attachments_bucket: str = "attachments"
    avatars_bucket: str = "avatars"
    max_avatar_bytes: int = 2 * 1024 * 1024
    upload_max_workers: int = 4

    # Session / sync behaviour
    profile_retry_attempts: int = 3
    profile_retry_delay_seconds: float = 1.0
    search_debounce_seconds: float = 0.3
    search_result_limit: int = 5
    auth_cache_ttl_seconds: int = 60

    # Local persistence (theme flag)
    local_storage_path: str = ".taskhub/storage.json"

    # App
    app_name: str = "taskhub-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def require_supabase(self) -> None:
        """Fail fast when the two connection parameters are missing."""
        if not self.supabase_url or not self.supabase_key:
            raise RuntimeError("Missing Supabase environment variables")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
