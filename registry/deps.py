"""
FastAPI dependencies.

The store and the session cache are built once at startup and kept on
app.state; routes get them through these functions so tests can swap
in their own instances.
"""

from fastapi import Header, Request

from registry.sessions import Session, SessionCache
from registry.store import RecordStore


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_sessions(request: Request) -> SessionCache:
    return request.app.state.sessions


def bearer_token(authorization: str | None) -> str | None:
    """Strip the `Bearer ` scheme from an Authorization header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def require_admin(
    request: Request,
    authorization: str | None = Header(default=None),
) -> Session:
    """Gate for admin-only routes. Raises AuthorizationError (401)."""
    return get_sessions(request).authorize(bearer_token(authorization))
