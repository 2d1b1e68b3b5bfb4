"""
POST /api/submit -- Public name submission.

The landing page posts the visitor's name here, optionally along with
the public IP the browser looked up for itself. The server stamps the
entry with Azerbaijan local time and a UTC instant, stores it, and
echoes the stored record back.
"""

import logging

from fastapi import APIRouter, Depends, Request

from registry.deps import get_store
from registry.errors import StorageError
from registry.models.schemas import ErrorResponse, SubmitRequest, SubmitResponse
from registry.store import RecordStore
from registry.timeutil import client_ip

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/api/submit",
    response_model=SubmitResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Submit a name",
    tags=["Records"],
)
async def submit(
    body: SubmitRequest,
    request: Request,
    store: RecordStore = Depends(get_store),
) -> SubmitResponse:
    ip = body.public_ip.strip() if body.public_ip and body.public_ip.strip() else client_ip(request)

    try:
        record = await store.append(body.name, ip)
    except StorageError as e:
        logger.error("Failed to store submission: %s", e.message)
        raise StorageError(f"Kayıt sırasında hata oluştu: {e.message}") from e

    return SubmitResponse(message="Kayıt başarıyla eklendi", record=record)
