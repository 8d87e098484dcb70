import logging

from supabase import create_client, Client, ClientOptions
from app.config import settings

logger = logging.getLogger(__name__)


def _client_options(**overrides) -> ClientOptions:
    return ClientOptions(
        schema=settings.supabase_schema,
        postgrest_client_timeout=settings.supabase_timeout_seconds,
        **overrides,
    )


def _standalone_client() -> Client:
    # No session is kept or refreshed on these clients.
    return create_client(
        settings.supabase_url,
        settings.supabase_key,
        options=_client_options(auto_refresh_token=False, persist_session=False),
    )


class SupabaseClient:
    """Supabase clients for the profiles/repositories/prompts/stars tables.

    The shared anon client only ever carries the anon key. Sign-in and sign-out
    run on throwaway clients, and calls made on behalf of a user go through
    get_user_client() so row-level security sees that user's JWT.
    """
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            if not settings.supabase_url or not settings.supabase_key:
                logger.warning("SUPABASE_URL / SUPABASE_KEY are not set; backend calls will fail")
            cls._client = create_client(settings.supabase_url, settings.supabase_key, options=_client_options())
        return cls._client

    @classmethod
    def get_user_client(cls, access_token: str) -> Client:
        """Fresh client whose table and RPC calls run as the owner of access_token"""
        client = _standalone_client()
        client.postgrest.auth(access_token)
        return client

    @classmethod
    def create_session_client(cls) -> Client:
        """Throwaway client for sign-up, sign-in and sign-out"""
        return _standalone_client()

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Only the maintenance scripts use it."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key, options=_client_options()
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()
