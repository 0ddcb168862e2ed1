from supabase import create_client, acreate_client, Client, AsyncClient, ClientOptions, AsyncClientOptions
from taskhub.config import settings


def _headers(access_token: str = None) -> dict:
    headers = {"X-Client-Info": settings.client_info}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    return headers


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        """Shared anon client. Never signs in, so it carries no user session."""
        if cls._client is None:
            settings.require_supabase()
            cls._client = create_client(
                settings.supabase_url,
                settings.supabase_key,
                options=ClientOptions(headers=_headers(), persist_session=False, auto_refresh_token=False),
            )
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Use only for auth admin calls."""
        if cls._service_client is None and settings.supabase_service_role_key:
            settings.require_supabase()
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client

    @classmethod
    def create_session_client(cls) -> Client:
        """Fresh client for a sign-in/sign-up flow so sessions never leak between users."""
        settings.require_supabase()
        return create_client(
            settings.supabase_url,
            settings.supabase_key,
            options=ClientOptions(headers=_headers(), persist_session=False, auto_refresh_token=False),
        )

    @classmethod
    def get_user_client(cls, access_token: str) -> Client:
        """Client whose PostgREST and Storage calls carry the caller's JWT, so RLS applies."""
        settings.require_supabase()
        return create_client(
            settings.supabase_url,
            settings.supabase_key,
            options=ClientOptions(
                headers=_headers(access_token), persist_session=False, auto_refresh_token=False
            ),
        )

    @classmethod
    async def get_realtime_client(cls, access_token: str) -> AsyncClient:
        """Async client for realtime change feeds, authorized as the caller."""
        settings.require_supabase()
        client = await acreate_client(
            settings.supabase_url,
            settings.supabase_key,
            options=AsyncClientOptions(
                headers=_headers(access_token), persist_session=False, auto_refresh_token=False
            ),
        )
        await client.realtime.set_auth(access_token)
        return client

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()
