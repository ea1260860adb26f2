from __future__ import annotations

from supabase import Client, create_client

from app.core.config import settings
from app.core.errors import ConfigError

_client: Client | None = None


def supabase_configured() -> bool:
    return bool(settings.SUPABASE_URL and settings.SUPABASE_SERVICE_ROLE_KEY)


def get_supabase() -> Client:
    """Process-wide client for the contract document bucket."""
    global _client
    if _client is not None:
        return _client
    if not supabase_configured():
        raise ConfigError("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY")
    _client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    return _client
