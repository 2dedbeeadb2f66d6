"""Pure helpers that turn feed snapshots into the ordered records view."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Sequence

from ...db.store import Document
from ...models.domain import RECORD_TYPE_FIELD, ResidenceRecord, ResidenceType

_FLOOR = datetime.min.replace(tzinfo=timezone.utc)


def created_at_key(record: ResidenceRecord) -> tuple[int, datetime]:
    # Records without a timestamp compare equal to each other and follow the timestamped ones.
    if record.created_at is None:
        return (1, _FLOOR)
    return (0, record.created_at)


def sort_by_created_at(records: Iterable[ResidenceRecord]) -> list[ResidenceRecord]:
    """Stable ascending sort by creation time."""
    return sorted(records, key=created_at_key)


def belongs_to(document: Document, record_type: ResidenceType) -> bool:
    """Legacy documents count for a type unless they are tagged with another one."""
    stored = document.data.get(RECORD_TYPE_FIELD)
    return not stored or stored == record_type.value


def tag_legacy(document: Document, record_type: ResidenceType) -> ResidenceRecord:
    record = ResidenceRecord.from_document(document, record_type=record_type)
    record.raw[RECORD_TYPE_FIELD] = record_type.value
    return record


def merge_snapshots(
    primary: Sequence[Document],
    legacy: Sequence[Document],
    record_type: ResidenceType,
) -> list[ResidenceRecord]:
    """Union the per-type snapshot with the filtered legacy snapshot.

    Identifiers are unique in the result; the per-type collection wins when the
    same id appears in both.
    """
    records: list[ResidenceRecord] = []
    seen: set[str] = set()
    for document in primary:
        if document.id in seen:
            continue
        seen.add(document.id)
        records.append(ResidenceRecord.from_document(document, record_type=record_type))
    for document in legacy:
        if document.id in seen or not belongs_to(document, record_type):
            continue
        seen.add(document.id)
        records.append(tag_legacy(document, record_type))
    return sort_by_created_at(records)
