"""
Session reaper for the Leaderboard Backend.
Periodically deletes expired run sessions so they stop counting against
device rate limits.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from leaderboard_backend.store import SessionStore
from leaderboard_backend.utils import now_ms

logger = logging.getLogger(__name__)

# Global reaper instance
_reaper: "SessionReaper | None" = None


def get_session_reaper() -> "SessionReaper | None":
    """Get the global session reaper instance."""
    return _reaper


def set_session_reaper(reaper: "SessionReaper | None") -> None:
    """Set the global session reaper instance."""
    global _reaper
    _reaper = reaper


@dataclass
class SweepStats:
    """Outcome of one sweep."""

    sweep_number: int
    deleted: int
    duration_ms: float


class SessionReaper:
    """
    Runs a sweep every ``interval_seconds`` until stopped.
    Each sweep reads all sessions and bulk-deletes the expired ones.
    """

    def __init__(
        self,
        interval_seconds: float,
        db_session_factory,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._interval_seconds = interval_seconds
        self._db_session_factory = db_session_factory
        self._clock = clock

        self._sweep_number = 0
        self._total_deleted = 0
        self._is_running = False
        self._task: asyncio.Task | None = None
        self._stop_event = asyncio.Event()
        self._last_stats: SweepStats | None = None

    @property
    def sweep_number(self) -> int:
        """Number of sweeps completed."""
        return self._sweep_number

    @property
    def total_deleted(self) -> int:
        """Sessions deleted since start."""
        return self._total_deleted

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def interval_seconds(self) -> float:
        return self._interval_seconds

    @property
    def last_stats(self) -> SweepStats | None:
        return self._last_stats

    async def start(self) -> None:
        """Start the periodic sweep loop."""
        if self._task is not None:
            return

        self._is_running = True
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run_loop())
        logger.info(f"Session reaper started (interval: {self._interval_seconds}s)")

    async def stop(self) -> None:
        """Stop the sweep loop."""
        if self._task is None:
            return

        self._is_running = False
        self._stop_event.set()

        try:
            await asyncio.wait_for(self._task, timeout=5.0)
        except asyncio.TimeoutError:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        self._task = None
        logger.info("Session reaper stopped")

    async def _run_loop(self) -> None:
        while self._is_running:
            # Wait for either the interval or stop signal
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(),
                    timeout=self._interval_seconds,
                )
                break
            except asyncio.TimeoutError:
                pass

            try:
                await self.sweep()
            except SQLAlchemyError:
                # Next sweep retries; expired sessions are also rejected lazily
                logger.exception("Session sweep failed")

    async def sweep(self) -> int:
        """
        Delete every session whose expiry has passed.
        Returns the number of sessions deleted.
        """
        sweep_start = time.perf_counter()
        now = self._clock()

        async with self._db_session_factory() as db:
            store = SessionStore(db)
            sessions = await store.list_all()
            expired_ids = [s.id for s in sessions if s.is_expired(now)]

            deleted = 0
            if expired_ids:
                deleted = await store.delete_many(expired_ids)
                await db.commit()

        self._sweep_number += 1
        self._total_deleted += deleted
        self._last_stats = SweepStats(
            sweep_number=self._sweep_number,
            deleted=deleted,
            duration_ms=(time.perf_counter() - sweep_start) * 1000,
        )

        if deleted:
            logger.info(f"Cleaned up {deleted} expired sessions")
        elif not sessions:
            logger.info("No sessions to clean up")
        else:
            logger.info("No expired sessions to clean up")

        return deleted
