import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from src.rasoat.config import settings
from src.rasoat.data import regions_repository
from src.rasoat.data.records_repository import CollectionNames
from src.rasoat.db.store import Document, InMemoryDocumentStore, StoreError

REGIONS = {
    "Tỉnh Bình Dương": ["Thành phố Tân Uyên", "Thành phố Dĩ An"],
    "Thành phố Hà Nội": ["Quận Ba Đình", "Quận Cầu Giấy"],
}

COLLECTIONS = CollectionNames(
    temporary="tam_tru_records",
    permanent="thuong_tru_records",
    legacy="verification_records",
    legacy_types=("tamTru",),
)


def make_document(doc_id: str, created_at: int | None = None, record_type: str | None = None, **fields: Any) -> Document:
    data: dict[str, Any] = {"hoTen": f"Người {doc_id}", "cccd": "123456789012", **fields}
    if created_at is not None:
        data["createdAt"] = datetime.fromtimestamp(created_at, tz=timezone.utc)
    if record_type is not None:
        data["loaiCuTru"] = record_type
    return Document(id=doc_id, data=data)


def submission_payload(**overrides: Any) -> dict:
    payload = {
        "hoTen": "Nguyễn Văn A",
        "ngaySinh": "1990-05-17",
        "cccd": "123456789012",
        "hkttTinhTP": "Tỉnh Bình Dương",
        "hkttXaPhuong": "Thành phố Tân Uyên",
        "noiOHienTai": "12 Đường ĐT746, Tân Uyên",
        "dangKyTamTru": "rồi",
        "ngheNghiep": "Công nhân",
        "soDienThoai": "0912345678",
        "dangKyBauCuTanLap": "Đồng ý",
        "loaiCuTru": "tamTru",
    }
    payload.update(overrides)
    return payload


class _Watch:
    def __init__(self, on_snapshot, on_error, order_by):
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.order_by = order_by
        self.active = True

    def unsubscribe(self) -> None:
        self.active = False


class ScriptedStore:
    """Store whose watches only fire when a test calls ``emit`` or ``fail``.

    ``emit`` reaches unsubscribed watches too, which is how late deliveries
    after teardown are simulated.
    """

    def __init__(self) -> None:
        self.watches: dict[str, list[_Watch]] = {}
        self.watch_errors: dict[str, StoreError] = {}

    def watch(self, collection, on_snapshot, on_error, *, order_by=None):
        if collection in self.watch_errors:
            raise self.watch_errors[collection]
        watch = _Watch(on_snapshot, on_error, order_by)
        self.watches.setdefault(collection, []).append(watch)
        return watch.unsubscribe

    def emit(self, collection: str, *documents: Document) -> None:
        for watch in self.watches.get(collection, []):
            watch.on_snapshot(tuple(documents))

    def fail(self, collection: str, code: str) -> None:
        for watch in self.watches.get(collection, []):
            watch.on_error(StoreError(code, f"{collection} failed"))

    def add(self, collection, data):
        raise NotImplementedError

    def delete(self, collection, document_id):
        raise NotImplementedError

    def fetch(self, collection, *, order_by=None):
        return []


@pytest.fixture(autouse=True)
def region_reference(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "regions.json"
    path.write_text(json.dumps(REGIONS, ensure_ascii=False), encoding="utf-8")
    monkeypatch.setattr(settings, "regions_file", path)
    regions_repository.load_regions.cache_clear()
    yield path
    regions_repository.load_regions.cache_clear()


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def scripted_store() -> ScriptedStore:
    return ScriptedStore()
