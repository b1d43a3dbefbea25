import logging
from typing import Optional

from supabase import AsyncClient, acreate_client
from app.config import settings

logger = logging.getLogger(__name__)


class SupabaseClient:
    _client: Optional[AsyncClient] = None

    @classmethod
    async def connect(cls) -> Optional[AsyncClient]:
        """Create the async client once. Leaves the client unset (fallback mode) when creation fails."""
        if cls._client is not None:
            return cls._client
        if not settings.store_configured:
            logger.warning("SUPABASE_URL/SUPABASE_KEY not set; serving synthetic group data")
            return None
        try:
            cls._client = await acreate_client(settings.supabase_url, settings.supabase_key)
            logger.info("Connected to Supabase")
        except Exception as e:
            logger.error(f"Could not connect to Supabase, serving synthetic group data: {e}")
            cls._client = None
        return cls._client

    @classmethod
    def get_client(cls) -> Optional[AsyncClient]:
        return cls._client

    @classmethod
    def is_connected(cls) -> bool:
        return cls._client is not None

    @classmethod
    def reset_client(cls):
        cls._client = None


def get_supabase() -> Optional[AsyncClient]:
    return SupabaseClient.get_client()
