"""
POST /api/admin/login -- Admin authentication.

Exchanges the configured admin username and password for a bearer
token. The token unlocks GET /api/records for 24 hours. Tokens live in
memory only, so restarting the server logs every admin out.
"""

from fastapi import APIRouter, Depends

from registry.deps import get_sessions
from registry.models.schemas import ErrorResponse, LoginRequest, LoginResponse
from registry.sessions import SessionCache

router = APIRouter()


@router.post(
    "/api/admin/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Admin login",
    description="Returns a bearer token when the credentials match ADMIN_USERNAME / ADMIN_PASSWORD.",
    tags=["Admin"],
)
async def login(
    body: LoginRequest,
    sessions: SessionCache = Depends(get_sessions),
) -> LoginResponse:
    token = sessions.authenticate(body.username, body.password)
    return LoginResponse(token=token)
