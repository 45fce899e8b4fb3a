"""
Per-device throttling of run-session creation.
"""

import logging
from typing import Callable

from leaderboard_backend.errors import ResourceExhausted
from leaderboard_backend.store import SessionStore
from leaderboard_backend.utils import MS_PER_DAY, MS_PER_HOUR, now_ms

logger = logging.getLogger(__name__)

DEFAULT_HOURLY_LIMIT = 5
DEFAULT_DAILY_LIMIT = 50


class RateLimiter:
    """
    Counts a device's live session records against hourly and daily ceilings.

    There is no separate counter: consumed sessions are deleted on submit and
    expired ones by the reaper, so only sessions still in the store count.
    """

    def __init__(
        self,
        store: SessionStore,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._store = store
        self._clock = clock

    async def check(
        self,
        device_fingerprint: str,
        hourly_limit: int = DEFAULT_HOURLY_LIMIT,
        daily_limit: int = DEFAULT_DAILY_LIMIT,
    ) -> None:
        """Raise ``ResourceExhausted`` if the device is over either limit."""
        sessions = await self._store.find_by_device(device_fingerprint)
        if not sessions:
            return

        now = self._clock()
        hour_ago = now - MS_PER_HOUR
        day_ago = now - MS_PER_DAY

        hourly_count = sum(1 for s in sessions if s.start_time > hour_ago)
        daily_count = sum(1 for s in sessions if s.start_time > day_ago)

        if hourly_count >= hourly_limit:
            logger.info(f"Hourly rate limit hit for device {device_fingerprint[:12]}")
            raise ResourceExhausted(
                f"Rate limit exceeded: {hourly_limit} runs per hour"
            )

        if daily_count >= daily_limit:
            logger.info(f"Daily rate limit hit for device {device_fingerprint[:12]}")
            raise ResourceExhausted(
                f"Rate limit exceeded: {daily_limit} runs per day"
            )
