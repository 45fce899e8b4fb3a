"""
Run session model for the Leaderboard Backend.
"""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from leaderboard_backend.database import Base
from leaderboard_backend.utils import new_record_id


class RunSession(Base):
    """
    One authorized attempt at one leg by one device.
    Holds the secret HMAC key for the run's proof chain.
    """

    __tablename__ = "run_sessions"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_record_id,
    )
    leg_id: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    device_fingerprint: Mapped[str] = mapped_column(
        String(200),
        index=True,
        nullable=False,
    )
    token: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )
    # Milliseconds since epoch
    start_time: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )
    expires_at: Mapped[int] = mapped_column(
        BigInteger,
        index=True,
        nullable=False,
    )

    def is_expired(self, now: int) -> bool:
        """Check if the session has expired as of ``now`` (ms)."""
        return self.expires_at < now

    def __repr__(self) -> str:
        return f"<RunSession(id={self.id}, leg_id={self.leg_id})>"
