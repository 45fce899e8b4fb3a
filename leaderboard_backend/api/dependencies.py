"""
Dependency wiring for the API routes.
Builds per-request services from the database session and settings.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from leaderboard_backend.config import Settings
from leaderboard_backend.services.anomaly import AnomalyDetector
from leaderboard_backend.services.leaderboard import LeaderboardService
from leaderboard_backend.services.physics import PhysicsValidator
from leaderboard_backend.services.proof_chain import ProofChainVerifier
from leaderboard_backend.services.rate_limiter import RateLimiter
from leaderboard_backend.services.sessions import SessionService
from leaderboard_backend.store import LeaderboardStore, SessionStore


def build_session_service(db: AsyncSession, settings: Settings) -> SessionService:
    """Wire a SessionService for one database session."""
    store = SessionStore(db)
    return SessionService(
        store,
        rate_limiter=RateLimiter(store),
        session_ttl_seconds=settings.session_ttl_seconds,
        hourly_limit=settings.hourly_run_limit,
        daily_limit=settings.daily_run_limit,
    )


def build_leaderboard_service(db: AsyncSession, settings: Settings) -> LeaderboardService:
    """Wire a LeaderboardService for one database session."""
    entries = LeaderboardStore(db)
    return LeaderboardService(
        SessionStore(db),
        entries,
        verifier=ProofChainVerifier(settings.checkpoint_count),
        physics=PhysicsValidator(
            min_checkpoint_time=settings.min_checkpoint_ms,
            max_checkpoint_time=settings.max_checkpoint_ms,
        ),
        anomaly_detector=AnomalyDetector(
            entries,
            min_samples=settings.anomaly_min_samples,
            z_threshold=settings.anomaly_z_threshold,
        ),
        checkpoint_count=settings.checkpoint_count,
        max_limit=settings.max_leaderboard_limit,
    )
