"""
Run submission and ranked leaderboard reads.

Submission pipeline, strictly sequential and fail-fast:

1. Validate the request shape
2. Resolve the session (missing -> NotFound, expired -> delete + DeadlineExceeded)
3. Verify the proof chain against the session token
4. Check physics bounds
5. Flag statistical anomalies (never rejects)
6. Persist the entry, delete the session, compute the rank

The entry create and the session delete are not one transaction; rank is
read without isolation from concurrent submissions and is advisory.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from leaderboard_backend.errors import DeadlineExceeded, InvalidArgument, NotFound
from leaderboard_backend.models.leaderboard_entry import LeaderboardEntry
from leaderboard_backend.services.anomaly import AnomalyDetector
from leaderboard_backend.services.physics import PhysicsValidator
from leaderboard_backend.services.proof_chain import CHECKPOINT_COUNT, ProofChainVerifier
from leaderboard_backend.store import LeaderboardStore, SessionStore
from leaderboard_backend.utils import as_number, now_ms

logger = logging.getLogger(__name__)

PLAYER_NAME_LENGTH = 4
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass
class SubmitResult:
    entry_id: str
    rank: int
    flagged: bool


@dataclass
class RankedEntry:
    rank: int
    player_name: str
    total_time: int | float
    flagged: bool


class LeaderboardService:
    """Orchestrates run verification and serves ranked reads."""

    def __init__(
        self,
        sessions: SessionStore,
        entries: LeaderboardStore,
        verifier: ProofChainVerifier | None = None,
        physics: PhysicsValidator | None = None,
        anomaly_detector: AnomalyDetector | None = None,
        clock: Callable[[], int] = now_ms,
        checkpoint_count: int = CHECKPOINT_COUNT,
        max_limit: int = MAX_LIMIT,
    ) -> None:
        self._sessions = sessions
        self._entries = entries
        self._verifier = verifier or ProofChainVerifier(checkpoint_count)
        self._physics = physics or PhysicsValidator()
        self._anomaly_detector = anomaly_detector or AnomalyDetector(entries)
        self._clock = clock
        self._checkpoint_count = checkpoint_count
        self._max_limit = max_limit

    async def submit_run(
        self,
        session_id: Any,
        player_name: Any,
        checkpoint_times: Any,
        proof_chain: Any,
    ) -> SubmitResult:
        count = self._checkpoint_count
        if not session_id or not isinstance(session_id, str):
            raise InvalidArgument("Invalid session ID")
        # Stored upper-cased; upper() can change length ("ß" becomes "SS")
        if not isinstance(player_name, str) or len(player_name.upper()) != PLAYER_NAME_LENGTH:
            raise InvalidArgument(
                f"Player name must be exactly {PLAYER_NAME_LENGTH} characters"
            )
        if not isinstance(checkpoint_times, (list, tuple)) or len(checkpoint_times) != count:
            raise InvalidArgument(f"Must have exactly {count} checkpoint times")
        if not isinstance(proof_chain, (list, tuple)) or len(proof_chain) != count:
            raise InvalidArgument(f"Must have exactly {count} proofs")

        session = await self._sessions.get(session_id)
        if session is None:
            raise NotFound("Session not found or expired")

        if session.is_expired(self._clock()):
            # Clean up expired session
            await self._sessions.delete(session)
            await self._sessions.commit()
            logger.info(f"Rejected submission for expired session {session_id}")
            raise DeadlineExceeded("Session expired")

        self._verifier.verify(session.leg_id, checkpoint_times, proof_chain, session.token)
        self._physics.validate(checkpoint_times)

        total_time = checkpoint_times[-1]
        flagged = await self._anomaly_detector.is_anomalous(session.leg_id, total_time)

        entry = await self._entries.create(
            LeaderboardEntry(
                leg_id=session.leg_id,
                player_name=player_name.upper(),
                total_time=total_time,
                checkpoint_times=list(checkpoint_times),
                finish_timestamp=self._clock(),
                device_fingerprint=session.device_fingerprint,
                validated=True,
                flagged=flagged,
            )
        )

        # One-time use
        await self._sessions.delete(session)

        logger.info(
            f"Run submitted: {entry.id} for leg {entry.leg_id}, "
            f"time: {total_time}ms, flagged: {flagged}"
        )

        rank = await self._entries.count_faster(entry.leg_id, total_time) + 1
        return SubmitResult(entry_id=entry.id, rank=rank, flagged=flagged)

    async def get_leaderboard(self, leg_id: Any, limit: Any = DEFAULT_LIMIT) -> list[RankedEntry]:
        if not leg_id or not isinstance(leg_id, str):
            raise InvalidArgument("Invalid leg ID")
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise InvalidArgument("Limit must be a positive integer")

        entries = await self._entries.top(leg_id, min(limit, self._max_limit))
        return [
            RankedEntry(
                rank=position,
                player_name=entry.player_name,
                total_time=as_number(entry.total_time),
                flagged=bool(entry.flagged),
            )
            for position, entry in enumerate(entries, start=1)
        ]
