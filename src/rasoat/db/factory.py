"""Process-wide document store selection."""

from __future__ import annotations

import logging
from functools import lru_cache

from ..config import settings
from .store import DocumentStore, InMemoryDocumentStore
from .supabase import SupabaseDocumentStore, get_supabase_client

logger = logging.getLogger(__name__)


@lru_cache()
def get_document_store() -> DocumentStore:
    """Build the shared store once; sessions and repositories reuse it."""
    if settings.store_backend == "memory":
        logger.info("Using in-memory document store - records are not persisted")
        return InMemoryDocumentStore()

    client = get_supabase_client()
    if client is None:
        raise RuntimeError(
            "Supabase not configured. Set RASOAT_SUPABASE_URL and RASOAT_SUPABASE_KEY "
            "or RASOAT_STORE_BACKEND=memory."
        )
    return SupabaseDocumentStore(client)
