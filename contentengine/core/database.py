"""
Supabase client for the jobs, queue, assets and brief tables.

One client per process. EngineDependencies.create() and the CLI are the only
callers; services receive the client they were constructed with.
"""

import logging
from typing import Optional

from supabase import Client, create_client

from .config import Config

logger = logging.getLogger(__name__)

_supabase_client: Optional[Client] = None


def create_supabase_client(url: Optional[str] = None, service_key: Optional[str] = None) -> Client:
    """
    Build a new Supabase client.

    Args:
        url: Project URL (defaults to Config.SUPABASE_URL)
        service_key: Service-role key (defaults to Config.SUPABASE_SERVICE_KEY)

    Raises:
        ValueError: if a setting is neither passed nor configured
    """
    if not (url and service_key):
        Config.validate()
    url = url or Config.SUPABASE_URL
    logger.debug(f"Creating Supabase client for {url}")
    return create_client(url, service_key or Config.SUPABASE_SERVICE_KEY)


def get_supabase_client() -> Client:
    """Process-wide client, created from Config on first use."""
    global _supabase_client

    if _supabase_client is None:
        _supabase_client = create_supabase_client()

    return _supabase_client


def reset_supabase_client() -> None:
    """Drop the cached client so the next call re-reads Config."""
    global _supabase_client
    _supabase_client = None
