"""
Database connection management.

Supabase is read-only here and optional: the planner computes shipments
from the request alone, and the client is only needed to load the
planned_shipments rows (and their order items) of an order being edited.
Without credentials, get_supabase_client() raises ConnectionError and
check_connection() reports "not_configured".
"""

from supabase import create_client, Client
from functools import lru_cache
from typing import Optional
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)


class DatabaseError(Exception):
    """Base exception for database errors."""
    pass


class ConnectionError(DatabaseError):
    """Failed to connect to database."""
    pass


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get cached Supabase client instance.

    Uses lru_cache to ensure only one client is created.
    Call get_supabase_client.cache_clear() to reconnect.

    Returns:
        Client: Supabase client

    Raises:
        ConnectionError: If credentials are missing or connection fails
    """
    if not settings.supabase_configured:
        logger.error("supabase_not_configured")
        raise ConnectionError("Supabase URL and key are not configured")

    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )

        logger.info(
            "supabase_connected",
            status="success"
        )

        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise ConnectionError(f"Failed to connect to Supabase: {e}") from e


# ===================
# HELPER FUNCTIONS
# ===================

def check_connection() -> dict:
    """
    Check database connection health.

    Counts planned_shipments rows with a one-row query, the same table
    the loader reads first.

    Returns:
        dict: {"status": "not_configured"}, {"status": "healthy",
        "planned_shipments_count": n} or {"status": "unhealthy", "error": ...}
    """
    if not settings.supabase_configured:
        return {"status": "not_configured"}

    try:
        client = get_supabase_client()
        shipments = (
            client.table("planned_shipments")
            .select("id", count="exact")
            .limit(1)
            .execute()
        )

        return {
            "status": "healthy",
            "planned_shipments_count": shipments.count,
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }


def reset_connection():
    """
    Reset the cached database connection.

    Call this if connection becomes stale or after config changes.
    """
    get_supabase_client.cache_clear()
    logger.info("database_connection_reset")
