"""
Keyed record stores for run sessions and leaderboard entries.

Thin wrappers over an ``AsyncSession`` exposing only the primitives the
services rely on: create, point lookup, field-equality query, ordered query
with a limit, and bulk delete. Writes are flushed, not committed; the caller
owns the transaction.
"""

from typing import Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from leaderboard_backend.models.leaderboard_entry import LeaderboardEntry
from leaderboard_backend.models.run_session import RunSession


class SessionStore:
    """Persistence for ``RunSession`` records."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def commit(self) -> None:
        """Commit now, for deletes that must outlive an error raised afterwards."""
        await self._db.commit()

    async def create(self, session: RunSession) -> RunSession:
        self._db.add(session)
        await self._db.flush()
        await self._db.refresh(session)
        return session

    async def get(self, session_id: str) -> RunSession | None:
        result = await self._db.execute(
            select(RunSession).where(RunSession.id == session_id)
        )
        return result.scalar_one_or_none()

    async def find_by_device(self, device_fingerprint: str) -> Sequence[RunSession]:
        result = await self._db.execute(
            select(RunSession).where(
                RunSession.device_fingerprint == device_fingerprint
            )
        )
        return result.scalars().all()

    async def list_all(self) -> Sequence[RunSession]:
        result = await self._db.execute(select(RunSession))
        return result.scalars().all()

    async def delete(self, session: RunSession) -> None:
        await self._db.delete(session)
        await self._db.flush()

    async def delete_many(self, session_ids: Sequence[str]) -> int:
        """Delete the given sessions in one statement. Returns the row count."""
        if not session_ids:
            return 0
        result = await self._db.execute(
            delete(RunSession).where(RunSession.id.in_(list(session_ids)))
        )
        await self._db.flush()
        return result.rowcount or 0


class LeaderboardStore:
    """Persistence for ``LeaderboardEntry`` records."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def create(self, entry: LeaderboardEntry) -> LeaderboardEntry:
        self._db.add(entry)
        await self._db.flush()
        await self._db.refresh(entry)
        return entry

    async def validated_times(self, leg_id: str) -> list[float]:
        """Total times of every validated entry on a leg."""
        result = await self._db.execute(
            select(LeaderboardEntry.total_time).where(
                LeaderboardEntry.leg_id == leg_id,
                LeaderboardEntry.validated.is_(True),
            )
        )
        return list(result.scalars().all())

    async def count_faster(self, leg_id: str, total_time: float) -> int:
        """Number of validated entries on a leg strictly faster than ``total_time``."""
        result = await self._db.execute(
            select(func.count(LeaderboardEntry.id)).where(
                LeaderboardEntry.leg_id == leg_id,
                LeaderboardEntry.validated.is_(True),
                LeaderboardEntry.total_time < total_time,
            )
        )
        return result.scalar_one()

    async def top(self, leg_id: str, limit: int) -> Sequence[LeaderboardEntry]:
        """Fastest validated entries on a leg, ascending by total time."""
        result = await self._db.execute(
            select(LeaderboardEntry)
            .where(
                LeaderboardEntry.leg_id == leg_id,
                LeaderboardEntry.validated.is_(True),
            )
            .order_by(LeaderboardEntry.total_time.asc(), LeaderboardEntry.finish_timestamp.asc())
            .limit(limit)
        )
        return result.scalars().all()
