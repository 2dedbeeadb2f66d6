"""Document store contract and the in-process implementation."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Protocol

# Failure codes shared by every store implementation.
PERMISSION_DENIED = "permission-denied"
UNAVAILABLE = "unavailable"
NOT_FOUND = "not-found"
FAILED_PRECONDITION = "failed-precondition"


@dataclass(frozen=True, slots=True)
class Document:
    """A stored document: store-assigned id plus its field data."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)


Snapshot = tuple[Document, ...]
SnapshotCallback = Callable[[Snapshot], None]
ErrorCallback = Callable[["StoreError"], None]
Unsubscribe = Callable[[], None]


class StoreError(Exception):
    """Backend failure carrying the store's classification code."""

    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(message or code)
        self.code = code
        self.message = message or code


class DocumentStore(Protocol):
    """Operations the record layer needs from a remote document store."""

    def add(self, collection: str, data: Mapping[str, Any]) -> str:
        ...

    def delete(self, collection: str, document_id: str) -> None:
        ...

    def fetch(self, collection: str, *, order_by: str | None = None) -> list[Document]:
        ...

    def watch(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
        *,
        order_by: str | None = None,
    ) -> Unsubscribe:
        ...


def _order_key(field_name: str) -> Callable[[Document], tuple]:
    from ..models.domain import parse_timestamp

    floor = datetime.min.replace(tzinfo=timezone.utc)

    def key(document: Document) -> tuple:
        # seeded and legacy rows mix datetimes, ISO strings and epoch millis
        value = parse_timestamp(document.data.get(field_name))
        if value is None:
            return (1, floor)
        return (0, value)

    return key


class InMemoryDocumentStore:
    """Process-local store used for development runs and tests.

    Watchers receive the current snapshot as soon as they subscribe and again
    after every write to their collection.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._watchers: dict[str, dict[int, tuple[SnapshotCallback, str | None]]] = {}
        self._lock = threading.RLock()
        self._next_watch_id = 0

    def add(self, collection: str, data: Mapping[str, Any]) -> str:
        document_id = uuid.uuid4().hex
        with self._lock:
            self._collections.setdefault(collection, {})[document_id] = dict(data)
        self._notify(collection)
        return document_id

    def delete(self, collection: str, document_id: str) -> None:
        with self._lock:
            documents = self._collections.get(collection, {})
            if document_id not in documents:
                raise StoreError(NOT_FOUND, f"Document {document_id} not found in {collection}")
            del documents[document_id]
        self._notify(collection)

    def fetch(self, collection: str, *, order_by: str | None = None) -> list[Document]:
        with self._lock:
            documents = [
                Document(id=document_id, data=dict(data))
                for document_id, data in self._collections.get(collection, {}).items()
            ]
        if order_by:
            documents.sort(key=_order_key(order_by))
        return documents

    def watch(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
        *,
        order_by: str | None = None,
    ) -> Unsubscribe:
        with self._lock:
            watch_id = self._next_watch_id
            self._next_watch_id += 1
            self._watchers.setdefault(collection, {})[watch_id] = (on_snapshot, order_by)

        def unsubscribe() -> None:
            with self._lock:
                self._watchers.get(collection, {}).pop(watch_id, None)

        on_snapshot(tuple(self.fetch(collection, order_by=order_by)))
        return unsubscribe

    def _notify(self, collection: str) -> None:
        with self._lock:
            watchers = list(self._watchers.get(collection, {}).values())
        for callback, order_by in watchers:
            callback(tuple(self.fetch(collection, order_by=order_by)))
