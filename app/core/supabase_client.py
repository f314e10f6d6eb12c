import logging
from functools import lru_cache
from supabase import create_client, Client
from app.core.config import settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Create the process-wide Supabase client on first use.

    Raises:
        ValueError: If SUPABASE_URL or SUPABASE_KEY is not configured
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        raise ValueError(
            "Missing Supabase credentials. Please set SUPABASE_URL and "
            "SUPABASE_KEY environment variables."
        )

    client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    logger.info(f"Supabase client initialized for {settings.SUPABASE_URL}")
    return client
