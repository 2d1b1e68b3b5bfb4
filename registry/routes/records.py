"""
GET /api/records -- Admin listing of every submission, newest first.

Requires `Authorization: Bearer <token>` from /api/admin/login.
A storage failure is reported as a 500, never as an empty list.
"""

import logging

from fastapi import APIRouter, Depends

from registry.deps import get_store, require_admin
from registry.errors import StorageError
from registry.models.schemas import ErrorResponse, Record
from registry.sessions import Session
from registry.store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/api/records",
    response_model=list[Record],
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="List all submissions",
    tags=["Admin"],
)
async def list_records(
    session: Session = Depends(require_admin),
    store: RecordStore = Depends(get_store),
) -> list[Record]:
    try:
        return await store.list_all()
    except StorageError as e:
        logger.error("Failed to list records for %s: %s", session.username, e.message)
        raise StorageError(f"Kayıtlar alınamadı: {e.message}") from e
