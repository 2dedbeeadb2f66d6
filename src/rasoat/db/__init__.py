"""Database clients and utilities."""

from .factory import get_document_store
from .store import Document, DocumentStore, InMemoryDocumentStore, StoreError
from .supabase import SupabaseDocumentStore, get_supabase_client

__all__ = [
    "Document",
    "DocumentStore",
    "InMemoryDocumentStore",
    "StoreError",
    "SupabaseDocumentStore",
    "get_document_store",
    "get_supabase_client",
]
