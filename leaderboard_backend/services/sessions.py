"""
Issuing single-use run sessions.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Any, Callable

from leaderboard_backend.errors import InvalidArgument
from leaderboard_backend.models.run_session import RunSession
from leaderboard_backend.services.rate_limiter import (
    DEFAULT_DAILY_LIMIT,
    DEFAULT_HOURLY_LIMIT,
    RateLimiter,
)
from leaderboard_backend.store import SessionStore
from leaderboard_backend.utils import MS_PER_SECOND, now_ms

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32
DEFAULT_SESSION_TTL_SECONDS = 15 * 60


@dataclass
class StartedRun:
    """Result of starting a run. The only time the token leaves the server."""

    session_id: str
    session_token: str


def generate_session_token() -> str:
    """256 random bits as 64 lowercase hex characters."""
    return secrets.token_hex(TOKEN_BYTES)


class SessionService:
    """Creates run sessions bound to a (leg, device) pair."""

    def __init__(
        self,
        store: SessionStore,
        rate_limiter: RateLimiter | None = None,
        clock: Callable[[], int] = now_ms,
        session_ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
        hourly_limit: int = DEFAULT_HOURLY_LIMIT,
        daily_limit: int = DEFAULT_DAILY_LIMIT,
    ) -> None:
        self._store = store
        self._clock = clock
        self._rate_limiter = rate_limiter or RateLimiter(store, clock=clock)
        self._ttl_ms = session_ttl_seconds * MS_PER_SECOND
        self._hourly_limit = hourly_limit
        self._daily_limit = daily_limit

    async def start_run(self, leg_id: Any, device_fingerprint: Any) -> StartedRun:
        if not leg_id or not isinstance(leg_id, str):
            raise InvalidArgument("Invalid leg ID")
        if not device_fingerprint or not isinstance(device_fingerprint, str):
            raise InvalidArgument("Invalid device fingerprint")

        await self._rate_limiter.check(
            device_fingerprint,
            hourly_limit=self._hourly_limit,
            daily_limit=self._daily_limit,
        )

        now = self._clock()
        session = await self._store.create(
            RunSession(
                leg_id=leg_id,
                device_fingerprint=device_fingerprint,
                token=generate_session_token(),
                start_time=now,
                expires_at=now + self._ttl_ms,
            )
        )

        logger.info(f"Session created: {session.id} for leg {leg_id}")
        return StartedRun(session_id=session.id, session_token=session.token)
