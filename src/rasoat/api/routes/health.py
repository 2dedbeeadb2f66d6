"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/store", status_code=status.HTTP_200_OK)
def check_store() -> dict:
    """Check the document store connection and per-collection record counts."""
    from ...db.factory import get_document_store
    from ...db.store import StoreError

    try:
        store = get_document_store()
    except RuntimeError as exc:
        return {
            "backend": settings.store_backend,
            "configured": False,
            "message": str(exc),
        }

    collections = (
        settings.temporary_collection,
        settings.permanent_collection,
        settings.legacy_collection,
    )
    counts: dict[str, int | None] = {}
    errors: dict[str, str] = {}
    for collection in collections:
        try:
            counts[collection] = len(store.fetch(collection))
        except StoreError as exc:
            counts[collection] = None
            errors[collection] = exc.code
    return {
        "backend": settings.store_backend,
        "configured": True,
        "connected": not errors,
        "counts": counts,
        "errors": errors,
    }
