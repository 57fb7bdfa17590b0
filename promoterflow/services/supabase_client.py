"""Supabase client wrapper with async context manager support."""

import os
from datetime import datetime, timezone
from typing import Any, Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from promoterflow.utils.errors import SupabaseError
import logging

logger = logging.getLogger(__name__)

# Global client instance (singleton pattern)
_client: Optional[Client] = None

ACTIVITY_LIST_LIMIT = 200


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")

        if not url or not key:
            raise SupabaseError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", extra={"url": url})

    return _client


async def close_supabase_client() -> None:
    """Drop the Supabase client reference."""
    global _client
    if _client:
        _client = None
        logger.info("Supabase client closed")


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                extra={"error": str(exc_val), "type": exc_type.__name__}
            )
        return False


# Activities table operations
async def list_activities(role: str, user: Optional[str] = None) -> list[dict]:
    """List activities newest first; non-admin listings only include rows created by or assigned to ``user``."""
    async with SupabaseClient() as client:
        try:
            query = client.table("activities").select("*, observations:activity_observations(*)")
            if role != "admin":
                query = query.or_(f'created_by.eq."{user}",assigned_to.eq."{user}"')
            result = query.order("created_at", desc=True).limit(ACTIVITY_LIST_LIMIT).execute()
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list activities: {e}")


async def create_activity(activity_data: dict) -> dict:
    """Insert a new activity row."""
    async with SupabaseClient() as client:
        try:
            result = client.table("activities").insert(activity_data).execute()
            if result.data and len(result.data) > 0:
                return result.data[0]
            raise SupabaseError("Failed to create activity: no data returned")
        except SupabaseError:
            raise
        except Exception as e:
            raise SupabaseError(f"Failed to create activity: {e}")


async def create_activity_observation(observation_data: dict) -> dict:
    """Append an observation note to an activity."""
    async with SupabaseClient() as client:
        try:
            result = client.table("activity_observations").insert(observation_data).execute()
            if result.data and len(result.data) > 0:
                return result.data[0]
            raise SupabaseError("Failed to create observation: no data returned")
        except SupabaseError:
            raise
        except Exception as e:
            raise SupabaseError(f"Failed to create observation: {e}")


# Promoters table operations
async def list_promoters() -> list[dict]:
    """List promoters, most recently updated first."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table("promoters")
                .select("id, name, email, role, photo, phone, is_online, last_connection, updated_at")
                .order("updated_at", desc=True)
                .order("name")
                .execute()
            )
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list promoters: {e}")


async def upsert_promoter(promoter_data: dict[str, Any]) -> dict:
    """Insert or update a promoter by id; ``None`` fields keep their stored value."""
    updates = {key: value for key, value in promoter_data.items() if value is not None}
    updates["updated_at"] = datetime.now(timezone.utc).isoformat()
    async with SupabaseClient() as client:
        try:
            result = client.table("promoters").upsert(updates, on_conflict="id").execute()
            if result.data and len(result.data) > 0:
                return result.data[0]
            raise SupabaseError(f"Failed to upsert promoter: {promoter_data.get('id')}")
        except SupabaseError:
            raise
        except Exception as e:
            raise SupabaseError(f"Failed to upsert promoter: {e}")
