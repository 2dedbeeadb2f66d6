"""Record store adapter: typed submissions in, classified failures out."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable
from zoneinfo import ZoneInfo

from ..config import settings
from ..db.store import FAILED_PRECONDITION, NOT_FOUND, Document, DocumentStore, StoreError
from ..errors import Operation, classify_store_error
from ..models.domain import CHECK_DATE_FIELD, CREATED_AT_FIELD, ResidenceRecord, ResidenceType

if TYPE_CHECKING:
    from ..schemas.records import RecordSubmission

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CollectionNames:
    """Collection layout: one collection per record type plus the legacy one."""

    temporary: str
    permanent: str
    legacy: str
    legacy_types: tuple[str, ...] = (ResidenceType.TEMPORARY.value,)

    @classmethod
    def from_settings(cls) -> "CollectionNames":
        return cls(
            temporary=settings.temporary_collection,
            permanent=settings.permanent_collection,
            legacy=settings.legacy_collection,
            legacy_types=tuple(settings.legacy_record_types),
        )

    def for_type(self, record_type: ResidenceType) -> str:
        if record_type is ResidenceType.TEMPORARY:
            return self.temporary
        return self.permanent

    def uses_legacy(self, record_type: ResidenceType) -> bool:
        return record_type.value in self.legacy_types


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_check_date(moment: datetime, tz_name: str | None = None) -> str:
    """dd/mm/yyyy of ``moment`` in the configured local timezone."""
    local = moment.astimezone(ZoneInfo(tz_name or settings.timezone))
    return local.strftime("%d/%m/%Y")


class RecordRepository:
    """Create, delete and list records against the collection of their type."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        collections: CollectionNames | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.store = store
        self.collections = collections or CollectionNames.from_settings()
        self._clock = clock

    def create(self, record: "RecordSubmission") -> str:
        """Persist a validated submission and return the store-assigned id."""
        if record.record_type is None:
            raise ValueError("Record type (loaiCuTru) must be set before saving a record.")

        now = self._clock()
        payload = record.model_dump(by_alias=True, mode="json")
        payload[CHECK_DATE_FIELD] = format_check_date(now)
        payload[CREATED_AT_FIELD] = now
        collection = self.collections.for_type(record.record_type)
        try:
            record_id = self.store.add(collection, payload)
        except StoreError as exc:
            logger.error(f"Error adding record to {collection}: {exc.code} {exc.message}")
            raise classify_store_error(exc, Operation.ADD) from exc
        logger.info(f"Added record {record_id} to {collection}")
        return record_id

    def delete(self, record_id: str, record_type: ResidenceType) -> None:
        collection = self.collections.for_type(record_type)
        try:
            self.store.delete(collection, record_id)
        except StoreError as exc:
            logger.error(f"Error deleting record {record_id} from {collection}: {exc.code} {exc.message}")
            raise classify_store_error(exc, Operation.DELETE) from exc
        logger.info(f"Deleted record {record_id} from {collection}")

    def list_once(self, record_type: ResidenceType) -> list[ResidenceRecord]:
        """All records of a type, oldest first."""
        collection = self.collections.for_type(record_type)
        try:
            documents = self._fetch_sorted(collection)
        except StoreError as exc:
            if exc.code == NOT_FOUND:
                logger.warning(f"Collection {collection} does not exist yet, returning no records")
                return []
            logger.error(f"Error listing records from {collection}: {exc.code} {exc.message}")
            raise classify_store_error(exc, Operation.LIST) from exc
        return [ResidenceRecord.from_document(document, record_type=record_type) for document in documents]

    def _fetch_sorted(self, collection: str) -> list[Document]:
        from ..services.records.merge import created_at_key

        try:
            return self.store.fetch(collection, order_by=CREATED_AT_FIELD)
        except StoreError as exc:
            if exc.code not in {FAILED_PRECONDITION, NOT_FOUND}:
                raise
            logger.warning(f"Ordered query on {collection} failed ({exc.code}), sorting locally: {exc.message}")
        documents = self.store.fetch(collection)
        return sorted(
            documents,
            key=lambda document: created_at_key(ResidenceRecord.from_document(document)),
        )

    def list_merged(self, record_type: ResidenceType) -> list[ResidenceRecord]:
        """One-shot equivalent of the live view: per-type records plus matching legacy ones."""
        from ..services.records.merge import merge_snapshots

        primary = self.list_once(record_type)
        legacy: list[Document] = []
        if self.collections.uses_legacy(record_type):
            try:
                legacy = self.store.fetch(self.collections.legacy)
            except StoreError as exc:
                logger.warning(f"Legacy collection {self.collections.legacy} unavailable ({exc.code}), skipping")
        primary_documents = [Document(id=record.id, data=record.raw) for record in primary]
        return merge_snapshots(primary_documents, legacy, record_type)
