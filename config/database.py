"""
Rule store connection management.

The Supabase client is only created when RULES_STORE=supabase; the
in-memory store needs no connection at all.
"""

from supabase import create_client, Client
from functools import lru_cache
import structlog

from config.settings import settings
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)

RULES_TABLE = "location_cutoff_rules"
BRANCHES_TABLE = "branches"


@lru_cache()
def get_supabase_client() -> Client:
    """
    Cached Supabase client for the rule store and branch facts.

    Call get_supabase_client.cache_clear() (or reset_connection()) to
    reconnect after a credentials change.

    Raises:
        DatabaseError: If credentials are missing or the client cannot be built
    """
    if not settings.supabase_configured:
        raise DatabaseError("connect", "SUPABASE_URL and SUPABASE_KEY must be set for the supabase store")

    try:
        client = create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error("supabase_connection_failed", error=str(e), error_type=type(e).__name__)
        raise DatabaseError("connect", str(e)) from e

    # Partial URL only
    logger.info("supabase_connected", url=settings.supabase_url[:30] + "...")
    return client


def check_connection() -> dict:
    """
    Rule store health for /health and startup.

    Returns:
        dict with status ("healthy" | "unhealthy"), store and row counts
    """
    if settings.rules_store == "memory":
        return {"status": "healthy", "store": "memory"}

    try:
        client = get_supabase_client()
        rules = client.table(RULES_TABLE).select("location_id", count="exact").execute()
        branches = client.table(BRANCHES_TABLE).select("location_id", count="exact").execute()
    except Exception as e:
        return {"status": "unhealthy", "store": "supabase", "error": str(e)}

    return {
        "status": "healthy",
        "store": "supabase",
        "rule_sets": rules.count,
        "branches": branches.count,
    }


def reset_connection() -> None:
    """Drop the cached client."""
    get_supabase_client.cache_clear()
    logger.info("supabase_connection_reset")
