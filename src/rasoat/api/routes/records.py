"""Residence record endpoints, including the live WebSocket feed."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Response, WebSocket, WebSocketDisconnect, status

from ...config import settings
from ...data.records_repository import RecordRepository
from ...db.store import DocumentStore
from ...errors import RecordStoreError
from ...models.domain import ResidenceRecord, ResidenceType
from ...schemas.records import CreateRecordResponse, RecordListResponse, RecordModel, RecordSubmission
from ...services.auth import Identity, is_authorized_user
from ...services.export import XLSX_MEDIA_TYPE, export_file_name, export_records_xlsx
from ...services.records import subscribe_records
from ..dependencies import (
    get_repository,
    get_store,
    get_websocket_identity,
    require_admin,
    store_error_to_http,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/records", tags=["records"])


def _serialize(records: list[ResidenceRecord]) -> list[dict]:
    return [RecordModel.from_record(record).model_dump(by_alias=True, mode="json") for record in records]


@router.post("", response_model=CreateRecordResponse, status_code=status.HTTP_201_CREATED)
def create_record(
    submission: RecordSubmission,
    repository: RecordRepository = Depends(get_repository),
) -> CreateRecordResponse:
    """Public form submission; no sign-in required."""
    try:
        record_id = repository.create(submission)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Vui lòng chọn loại cư trú.",
        ) from exc
    except RecordStoreError as exc:
        raise store_error_to_http(exc) from exc
    return CreateRecordResponse(id=record_id)


@router.get("/{record_type}", response_model=RecordListResponse, status_code=status.HTTP_200_OK)
def list_records(
    record_type: ResidenceType,
    repository: RecordRepository = Depends(get_repository),
    _: Identity = Depends(require_admin),
) -> RecordListResponse:
    try:
        records = repository.list_merged(record_type)
    except RecordStoreError as exc:
        raise store_error_to_http(exc) from exc
    return RecordListResponse(
        record_type=record_type,
        total=len(records),
        items=[RecordModel.from_record(record) for record in records],
    )


@router.get("/{record_type}/export", status_code=status.HTTP_200_OK)
def export_records(
    record_type: ResidenceType,
    repository: RecordRepository = Depends(get_repository),
    _: Identity = Depends(require_admin),
) -> Response:
    try:
        records = repository.list_merged(record_type)
    except RecordStoreError as exc:
        raise store_error_to_http(exc) from exc

    today = datetime.now(ZoneInfo(settings.timezone))
    file_name = export_file_name(record_type, today)
    return Response(
        content=export_records_xlsx(records, record_type, today=today),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.delete("/{record_type}/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_record(
    record_type: ResidenceType,
    record_id: str,
    repository: RecordRepository = Depends(get_repository),
    _: Identity = Depends(require_admin),
) -> Response:
    try:
        repository.delete(record_id, record_type)
    except RecordStoreError as exc:
        raise store_error_to_http(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


async def _forward(queue: "asyncio.Queue[dict]", websocket: WebSocket) -> None:
    while True:
        message = await queue.get()
        await websocket.send_json(message)


async def _stop_sender(sender: "asyncio.Task[None]") -> None:
    """Cancel the forwarding task and collect a send failure so it is logged once."""
    sender.cancel()
    try:
        await sender
    except asyncio.CancelledError:
        pass
    except Exception as exc:
        logger.warning(f"Live records socket send failed: {exc}")


@router.websocket("/{record_type}/live")
async def records_live(
    websocket: WebSocket,
    record_type: ResidenceType,
    identity: Identity | None = Depends(get_websocket_identity),
    store: DocumentStore = Depends(get_store),
) -> None:
    """Push the merged list on every change until the client disconnects."""
    if not is_authorized_user(identity):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[dict] = asyncio.Queue()

    # Feeds may emit from worker threads; hand everything to the event loop.
    def push(message: dict) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, message)

    session = subscribe_records(
        store,
        record_type,
        on_records=lambda records: push({"type": "records", "data": _serialize(records)}),
        on_error=lambda message: push({"type": "error", "message": message}),
    )
    sender = asyncio.create_task(_forward(queue, websocket))
    logger.info(f"Live records socket opened for {identity.email} ({record_type.value})")
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"Live records socket closed for {identity.email} ({record_type.value})")
    finally:
        session.close()
        await _stop_sender(sender)
