from supabase import create_client, Client
from typing import Optional
from library_app.config import settings


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS and exposes auth.admin."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def has_service_client(cls) -> bool:
        return bool(settings.supabase_service_role_key)

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_admin_supabase() -> Optional[Client]:
    """Service-role client when a key is configured, else None (auth.admin unavailable)."""
    if not SupabaseClient.has_service_client():
        return None
    return SupabaseClient.get_service_client()
