"""Builds the configured record store."""

import logging

from feedback_portal.config import StoreConfig
from feedback_portal.store.base import RecordStore
from feedback_portal.store.memory import InMemoryStore
from feedback_portal.store.supabase import SupabaseStore

logger = logging.getLogger(__name__)


def create_store(config: StoreConfig) -> RecordStore:
    """Supabase when credentials are configured, otherwise an in-memory store."""
    if config.url and config.key:
        logger.info("Using Supabase record store at %s", config.url)
        return SupabaseStore(config.url, config.key, timeout=config.timeout_seconds)
    logger.warning("SUPABASE_URL not configured; using in-memory record store")
    return InMemoryStore()
