"""Supabase client and the document store built on top of it."""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Callable, Mapping, TypeVar

import httpx
from supabase import Client, create_client

from ..config import settings
from .store import (
    FAILED_PRECONDITION,
    NOT_FOUND,
    PERMISSION_DENIED,
    UNAVAILABLE,
    Document,
    ErrorCallback,
    SnapshotCallback,
    StoreError,
    Unsubscribe,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# PostgREST / Postgres error codes mapped onto the store failure codes.
_CODE_MAP = {
    "42501": PERMISSION_DENIED,  # insufficient_privilege (row level security)
    "PGRST301": PERMISSION_DENIED,  # JWT rejected
    "PGRST302": PERMISSION_DENIED,
    "42P01": NOT_FOUND,  # undefined_table
    "PGRST205": NOT_FOUND,  # table missing from schema cache
    "PGRST116": NOT_FOUND,
    "42703": FAILED_PRECONDITION,  # undefined_column, e.g. ordering column absent
    "PGRST100": FAILED_PRECONDITION,
}


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client: {e}")
        return None


def translate_error(exc: Exception) -> StoreError:
    """Convert a supabase/postgrest/httpx failure into a StoreError."""
    if isinstance(exc, StoreError):
        return exc
    if isinstance(exc, (httpx.TimeoutException, httpx.TransportError)):
        return StoreError(UNAVAILABLE, str(exc))
    raw_code = getattr(exc, "code", None)
    message = getattr(exc, "message", None) or str(exc)
    if raw_code is None:
        return StoreError("unknown", message)
    code = str(raw_code)
    if code in {"401", "403"}:
        return StoreError(PERMISSION_DENIED, message)
    if code in {"502", "503", "504"}:
        return StoreError(UNAVAILABLE, message)
    return StoreError(_CODE_MAP.get(code, code), message)


def _encode(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _to_document(row: Mapping[str, Any]) -> Document:
    data = dict(row)
    document_id = data.pop("id")
    return Document(id=str(document_id), data=data)


class _PollingWatch(threading.Thread):
    """Re-reads a collection on an interval and emits when the snapshot changes."""

    def __init__(
        self,
        fetch: Callable[[], list[Document]],
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
        interval: float,
        name: str,
    ) -> None:
        super().__init__(name=name, daemon=True)
        self._fetch = fetch
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._interval = interval
        self._stopped = threading.Event()

    def run(self) -> None:
        last: tuple[Document, ...] | None = None
        while not self._stopped.is_set():
            try:
                snapshot = tuple(self._fetch())
            except StoreError as exc:
                if not self._stopped.is_set():
                    self._on_error(exc)
                return
            if snapshot != last and not self._stopped.is_set():
                last = snapshot
                self._on_snapshot(snapshot)
            self._stopped.wait(self._interval)

    def stop(self) -> None:
        self._stopped.set()


class SupabaseDocumentStore:
    """Document store where each collection is a Supabase table keyed by ``id``."""

    def __init__(self, client: Client, *, poll_interval: float | None = None) -> None:
        self._client = client
        self.poll_interval = poll_interval if poll_interval is not None else settings.live_poll_interval_seconds

    def _execute(self, operation: Callable[[], T]) -> T:
        try:
            return operation()
        except StoreError:
            raise
        except Exception as exc:
            raise translate_error(exc) from exc

    def add(self, collection: str, data: Mapping[str, Any]) -> str:
        payload = {key: _encode(value) for key, value in data.items()}
        response = self._execute(lambda: self._client.table(collection).insert(payload).execute())
        if not response.data:
            raise StoreError("unknown", f"Insert into {collection} returned no row")
        return str(response.data[0]["id"])

    def delete(self, collection: str, document_id: str) -> None:
        response = self._execute(
            lambda: self._client.table(collection).delete().eq("id", document_id).execute()
        )
        if not response.data:
            raise StoreError(NOT_FOUND, f"Document {document_id} not found in {collection}")

    def fetch(self, collection: str, *, order_by: str | None = None) -> list[Document]:
        def run():
            query = self._client.table(collection).select("*")
            if order_by:
                query = query.order(order_by)
            return query.execute()

        response = self._execute(run)
        return [_to_document(row) for row in (response.data or [])]

    def watch(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
        *,
        order_by: str | None = None,
    ) -> Unsubscribe:
        watcher = _PollingWatch(
            fetch=lambda: self.fetch(collection, order_by=order_by),
            on_snapshot=on_snapshot,
            on_error=on_error,
            interval=self.poll_interval,
            name=f"watch-{collection}",
        )
        watcher.start()
        return watcher.stop
