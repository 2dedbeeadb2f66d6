"""Live merged view over the per-type collection and the legacy collection."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from ...data.records_repository import CollectionNames
from ...db.store import DocumentStore, Snapshot, StoreError, Unsubscribe
from ...errors import Operation, classify_store_error
from ...models.domain import CREATED_AT_FIELD, ResidenceRecord, ResidenceType
from .merge import merge_snapshots

logger = logging.getLogger(__name__)

RecordsCallback = Callable[[list[ResidenceRecord]], None]
MessageCallback = Callable[[str], None]


class SessionState(str, Enum):
    INITIALIZING = "initializing"
    PARTIALLY_READY = "partially_ready"
    READY = "ready"
    TORN_DOWN = "torn_down"


class _Feed:
    """Latest snapshot and subscription handle of one underlying watch."""

    def __init__(self, collection: str) -> None:
        self.collection = collection
        self.snapshot: Optional[Snapshot] = None
        self.unsubscribe: Optional[Unsubscribe] = None

    @property
    def has_emitted(self) -> bool:
        return self.snapshot is not None


class LiveMergeSession:
    """One subscription session delivering the merged, sorted list of a record type.

    No callback fires until every required feed has emitted at least once.
    After :meth:`close`, emissions from either feed are ignored.
    """

    def __init__(
        self,
        store: DocumentStore,
        record_type: ResidenceType,
        on_records: RecordsCallback,
        on_error: Optional[MessageCallback] = None,
        *,
        collections: CollectionNames | None = None,
    ) -> None:
        self.record_type = record_type
        self._store = store
        self._on_records = on_records
        self._on_error = on_error
        names = collections or CollectionNames.from_settings()
        self._primary = _Feed(names.for_type(record_type))
        self._legacy = _Feed(names.legacy) if names.uses_legacy(record_type) else None
        self._lock = threading.RLock()
        self._closed = False

    @property
    def state(self) -> SessionState:
        with self._lock:
            if self._closed:
                return SessionState.TORN_DOWN
            feeds = self._required_feeds()
            emitted = sum(1 for feed in feeds if feed.has_emitted)
            if emitted == len(feeds):
                return SessionState.READY
            if emitted:
                return SessionState.PARTIALLY_READY
            return SessionState.INITIALIZING

    def _required_feeds(self) -> list[_Feed]:
        return [self._primary] if self._legacy is None else [self._primary, self._legacy]

    def open(self) -> "LiveMergeSession":
        logger.info(
            f"Opening live session for {self.record_type.value} (legacy feed: {'yes' if self._legacy else 'no'})"
        )
        with self._lock:
            try:
                self._primary.unsubscribe = self._store.watch(
                    self._primary.collection,
                    self._on_primary_snapshot,
                    self._on_primary_error,
                    order_by=CREATED_AT_FIELD,
                )
            except StoreError as exc:
                self._on_primary_error(exc)
            if self._legacy is not None:
                try:
                    self._legacy.unsubscribe = self._store.watch(
                        self._legacy.collection,
                        self._on_legacy_snapshot,
                        self._on_legacy_error,
                    )
                except StoreError as exc:
                    self._on_legacy_error(exc)
            if self._closed:
                # closed from inside a synchronous first emission
                self._release()
        return self

    def close(self) -> None:
        """Release both feeds. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._release()
        logger.info(f"Closed live session for {self.record_type.value}")

    def _release(self) -> None:
        for feed in (self._primary, self._legacy):
            if feed is None or feed.unsubscribe is None:
                continue
            unsubscribe, feed.unsubscribe = feed.unsubscribe, None
            unsubscribe()

    def _on_primary_snapshot(self, snapshot: Snapshot) -> None:
        with self._lock:
            if self._closed:
                return
            self._primary.snapshot = snapshot
            self._deliver()

    def _on_legacy_snapshot(self, snapshot: Snapshot) -> None:
        with self._lock:
            if self._closed or self._legacy is None:
                return
            self._legacy.snapshot = snapshot
            self._deliver()

    def _on_primary_error(self, error: StoreError) -> None:
        with self._lock:
            if self._closed:
                return
            classified = classify_store_error(error, Operation.WATCH)
            logger.error(f"Live feed for {self._primary.collection} failed ({classified.kind}): {error.message}")
            if self._on_error is not None:
                self._on_error(classified.message)

    def _on_legacy_error(self, error: StoreError) -> None:
        with self._lock:
            if self._closed or self._legacy is None:
                return
            logger.warning(
                f"Legacy feed {self._legacy.collection} failed ({error.code}); continuing without legacy records"
            )
            self._legacy.snapshot = ()
            self._deliver()

    def _deliver(self) -> None:
        if not all(feed.has_emitted for feed in self._required_feeds()):
            return
        legacy = self._legacy.snapshot if self._legacy is not None else ()
        records = merge_snapshots(self._primary.snapshot or (), legacy or (), self.record_type)
        self._on_records(records)


def subscribe_records(
    store: DocumentStore,
    record_type: ResidenceType,
    on_records: RecordsCallback,
    on_error: Optional[MessageCallback] = None,
    *,
    collections: CollectionNames | None = None,
) -> LiveMergeSession:
    """Open a live session; call ``close()`` on the result to tear it down."""
    session = LiveMergeSession(store, record_type, on_records, on_error, collections=collections)
    return session.open()
