# supabase_client.py — Supabase Auth client and token lookup

import logging

from supabase import create_client, Client
from config import SUPABASE_URL, SUPABASE_ANON_KEY

logger = logging.getLogger(__name__)

# Global Supabase client instance
_supabase_client: Client = None


def get_supabase_client() -> Client:
    """
    Get Supabase client with anonymous key (limited permissions).
    Only used to ask Supabase Auth who a token belongs to.
    """
    global _supabase_client

    if _supabase_client is None:
        if not SUPABASE_URL or not SUPABASE_ANON_KEY:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be set in environment variables")

        _supabase_client = create_client(SUPABASE_URL, SUPABASE_ANON_KEY)

    return _supabase_client


def is_supabase_configured() -> bool:
    """Check if Supabase is configured with the variables the backend needs."""
    return bool(SUPABASE_URL and SUPABASE_ANON_KEY)


async def get_user_from_token(access_token: str) -> dict | None:
    """Resolve a Supabase access token to {id, email}, or None if Auth rejects it."""
    supabase = get_supabase_client()
    try:
        response = supabase.auth.get_user(access_token)
    except Exception as e:
        logger.warning(f"Supabase Auth rejected token: {e}")
        return None
    user = getattr(response, "user", None)
    if user is None:
        return None
    return {"id": str(user.id), "email": getattr(user, "email", None)}
