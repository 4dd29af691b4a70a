from __future__ import annotations

import asyncio

from supabase import Client, create_client
from supabase.lib.client_options import ClientOptions

from app.config import settings
from app.utils.logging import get_logger

logger = get_logger(__name__)


def create_request_supabase_client(bearer_token: str | None = None) -> Client:
    """Create a request-scoped Supabase client using the anon key.

    If a JWT is provided, set it as the PostgREST bearer so that RLS policies
    keep every bookmark, folder and settings query scoped to that user.
    """
    logger.debug("Creating request-scoped Supabase client")
    anon_key = settings.supabase_anon_key
    if not anon_key:
        raise RuntimeError("supabase_anon_key is required for request client")

    client = create_client(
        settings.supabase_url,
        anon_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
    if bearer_token:
        client.postgrest.auth(bearer_token)
    return client


async def ping_database(client: Client | None = None) -> str:
    """Run a trivial query against the bookmarks table for readiness checks."""
    supabase = client or create_request_supabase_client()
    try:
        await asyncio.to_thread(lambda: supabase.table("bookmarks").select("id").limit(1).execute())
    except Exception as err:
        logger.warning("Database readiness check failed", extra={"error_type": type(err).__name__})
        return f"error: {err}"
    return "connected"
