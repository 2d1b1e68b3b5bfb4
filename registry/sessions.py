"""
Admin session cache.

Process-local map of bearer token -> Session. Empty at start, lost on
restart; nothing is persisted. A token is valid for `ttl` from the
moment it was issued:

    absent --authenticate--> active --ttl elapsed--> absent

There is no revoke or renew. Logging in again mints a brand-new token,
and earlier tokens for the same admin stay valid until their own
window ends.

Expiry is checked on every authorize() call against the injected
clock, so an entry is unreachable after ttl even if it is still in the
map. sweep() removes such entries; one background task (run_sweeper)
calls it periodically instead of keeping a timer per token.
"""

import asyncio
import base64
import hmac
import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from registry.errors import AuthorizationError

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)

INVALID_CREDENTIALS = "Kullanıcı adı veya şifre hatalı"
UNAUTHORIZED = "Yetkisiz erişim"


@dataclass(frozen=True)
class Session:
    username: str
    login_time: datetime
    issued_at: float  # clock() reading at login


class SessionCache:
    def __init__(
        self,
        username: str,
        password: str,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self._username = username
        self._password = password
        self._ttl = ttl.total_seconds()
        self._clock = clock
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def authenticate(self, username: str | None, password: str | None) -> str:
        """Check admin credentials and return a fresh bearer token."""
        if not (_same(username, self._username) and _same(password, self._password)):
            logger.warning("Failed admin login for %r", username)
            raise AuthorizationError(INVALID_CREDENTIALS)

        now = self._clock()
        token = self._mint_token(now)
        self._sessions[token] = Session(
            username=self._username,
            login_time=datetime.fromtimestamp(now, timezone.utc),
            issued_at=now,
        )
        logger.info("Admin %s logged in (%d active sessions)", self._username, len(self._sessions))
        return token

    def authorize(self, token: str | None) -> Session:
        """Return the session behind `token`, or raise AuthorizationError."""
        if not token:
            raise AuthorizationError(UNAUTHORIZED)

        session = self._sessions.get(token)
        if session is None or self._expired(session, self._clock()):
            raise AuthorizationError(UNAUTHORIZED)

        return session

    def sweep(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self._clock()
        expired = [t for t, s in self._sessions.items() if self._expired(s, now)]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.info("Swept %d expired admin sessions", len(expired))
        return len(expired)

    def clear(self) -> None:
        self._sessions.clear()

    def _expired(self, session: Session, now: float) -> bool:
        return now - session.issued_at >= self._ttl

    def _mint_token(self, now: float) -> str:
        # Unique with overwhelming probability; re-roll on the off chance
        while True:
            raw = f"{self._username}:{int(now * 1000)}:{secrets.token_hex(16)}"
            token = base64.b64encode(raw.encode("utf-8")).decode("ascii")
            if token not in self._sessions:
                return token


def _same(given: str | None, expected: str) -> bool:
    if not isinstance(given, str):
        return False
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


async def run_sweeper(cache: SessionCache, interval: float) -> None:
    """Background loop: sweep expired sessions every `interval` seconds."""
    while True:
        await asyncio.sleep(interval)
        cache.sweep()
