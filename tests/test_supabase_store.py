import threading
from datetime import datetime, timezone
from types import SimpleNamespace

import httpx
import pytest

from src.rasoat.db.store import FAILED_PRECONDITION, NOT_FOUND, PERMISSION_DENIED, UNAVAILABLE, StoreError
from src.rasoat.db.supabase import SupabaseDocumentStore, translate_error


class FakeAPIError(Exception):
    def __init__(self, code, message="boom"):
        super().__init__(message)
        self.code = code
        self.message = message


class FakeQuery:
    def __init__(self, client: "FakeClient", table: str) -> None:
        self.client = client
        self.table = table
        self.calls: list[tuple] = []

    def _record(self, *call):
        self.calls.append(call)
        return self

    def insert(self, payload):
        return self._record("insert", payload)

    def delete(self):
        return self._record("delete")

    def select(self, columns):
        return self._record("select", columns)

    def eq(self, column, value):
        return self._record("eq", column, value)

    def order(self, column):
        return self._record("order", column)

    def execute(self):
        self.client.queries.append((self.table, self.calls))
        if self.client.error is not None:
            raise self.client.error
        return SimpleNamespace(data=self.client.responses.get(self.table, []))


class FakeClient:
    def __init__(self) -> None:
        self.queries: list[tuple[str, list]] = []
        self.responses: dict[str, list[dict]] = {}
        self.error: Exception | None = None

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.mark.parametrize(
    "error, expected",
    [
        (FakeAPIError("42501"), PERMISSION_DENIED),
        (FakeAPIError("PGRST301"), PERMISSION_DENIED),
        (FakeAPIError("42P01"), NOT_FOUND),
        (FakeAPIError("PGRST205"), NOT_FOUND),
        (FakeAPIError("42703"), FAILED_PRECONDITION),
        (FakeAPIError(403), PERMISSION_DENIED),
        (FakeAPIError("503"), UNAVAILABLE),
        (FakeAPIError("23505"), "23505"),
        (httpx.ConnectError("refused"), UNAVAILABLE),
        (httpx.ReadTimeout("slow"), UNAVAILABLE),
        (RuntimeError("no code"), "unknown"),
    ],
)
def test_translate_error_maps_backend_codes(error, expected) -> None:
    assert translate_error(error).code == expected


def test_add_encodes_datetimes_and_returns_row_id(client) -> None:
    client.responses["tam_tru_records"] = [{"id": 42, "hoTen": "A"}]
    store = SupabaseDocumentStore(client, poll_interval=0.01)
    created_at = datetime(2026, 1, 1, 7, 0, tzinfo=timezone.utc)

    record_id = store.add("tam_tru_records", {"hoTen": "A", "createdAt": created_at})

    assert record_id == "42"
    table, calls = client.queries[0]
    assert table == "tam_tru_records"
    assert calls == [("insert", {"hoTen": "A", "createdAt": "2026-01-01T07:00:00+00:00"})]


def test_delete_of_missing_row_is_not_found(client) -> None:
    store = SupabaseDocumentStore(client, poll_interval=0.01)

    with pytest.raises(StoreError) as exc_info:
        store.delete("thuong_tru_records", "abc")

    assert exc_info.value.code == NOT_FOUND
    assert client.queries[0][1] == [("delete",), ("eq", "id", "abc")]


def test_fetch_orders_and_splits_id_from_data(client) -> None:
    client.responses["thuong_tru_records"] = [{"id": 7, "hoTen": "B", "createdAt": "2026-01-01T00:00:00Z"}]
    store = SupabaseDocumentStore(client, poll_interval=0.01)

    documents = store.fetch("thuong_tru_records", order_by="createdAt")

    assert [(doc.id, doc.data["hoTen"]) for doc in documents] == [("7", "B")]
    assert "id" not in documents[0].data
    assert client.queries[0][1] == [("select", "*"), ("order", "createdAt")]


def test_backend_errors_surface_as_store_errors(client) -> None:
    client.error = FakeAPIError("42501", "new row violates row-level security policy")
    store = SupabaseDocumentStore(client, poll_interval=0.01)

    with pytest.raises(StoreError) as exc_info:
        store.add("tam_tru_records", {"hoTen": "A"})

    assert exc_info.value.code == PERMISSION_DENIED
    assert "row-level security" in exc_info.value.message


def test_watch_emits_initial_snapshot_and_stops(client) -> None:
    client.responses["tam_tru_records"] = [{"id": 1, "hoTen": "A"}]
    store = SupabaseDocumentStore(client, poll_interval=0.01)
    received = threading.Event()
    snapshots = []

    def on_snapshot(snapshot):
        snapshots.append(snapshot)
        received.set()

    unsubscribe = store.watch("tam_tru_records", on_snapshot, lambda error: None, order_by="createdAt")
    assert received.wait(2)
    unsubscribe()

    # unchanged data is not re-emitted
    assert len(snapshots) == 1
    assert snapshots[0][0].id == "1"


def test_watch_reports_failure_once(client) -> None:
    client.error = FakeAPIError("42501")
    store = SupabaseDocumentStore(client, poll_interval=0.01)
    failed = threading.Event()
    errors = []

    def on_error(error):
        errors.append(error)
        failed.set()

    unsubscribe = store.watch("tam_tru_records", lambda snapshot: None, on_error)
    assert failed.wait(2)
    unsubscribe()

    assert [error.code for error in errors] == [PERMISSION_DENIED]
