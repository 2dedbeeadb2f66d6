"""Shared FastAPI dependencies: store handle, repository and access control."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..data.records_repository import RecordRepository
from ..db.factory import get_document_store
from ..db.store import DocumentStore
from ..errors import IndexMissing, NotFound, PermissionDenied, RecordStoreError, Unavailable
from ..services.auth import Identity, get_auth_provider, is_authorized_user

bearer_scheme = HTTPBearer(auto_error=False)


def get_store() -> DocumentStore:
    return get_document_store()


def get_repository(store: DocumentStore = Depends(get_store)) -> RecordRepository:
    return RecordRepository(store)


def identity_from_token(token: str | None) -> Identity | None:
    if not token:
        return None
    provider = get_auth_provider()
    if provider is None:
        return None
    return provider.resolve(token)


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Identity | None:
    return identity_from_token(credentials.credentials if credentials else None)


def get_websocket_identity(token: str | None = Query(default=None)) -> Identity | None:
    """Browsers cannot set headers on WebSocket upgrades, so the token rides in the query string."""
    return identity_from_token(token)


def require_admin(identity: Identity | None = Depends(get_current_identity)) -> Identity:
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Vui lòng đăng nhập để xem danh sách.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not is_authorized_user(identity):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Tài khoản không có quyền xem danh sách.",
        )
    return identity


def store_error_to_http(exc: RecordStoreError) -> HTTPException:
    if isinstance(exc, PermissionDenied):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, NotFound):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, Unavailable):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(exc, IndexMissing):
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        code = status.HTTP_502_BAD_GATEWAY
    return HTTPException(status_code=code, detail=exc.message)
