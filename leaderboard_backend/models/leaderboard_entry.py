"""
Leaderboard entry model for the Leaderboard Backend.
"""

from sqlalchemy import JSON, BigInteger, Boolean, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from leaderboard_backend.database import Base
from leaderboard_backend.utils import new_record_id


class LeaderboardEntry(Base):
    """
    A validated result for a leg.
    Entries are never updated once written.
    """

    __tablename__ = "leaderboard_entries"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_record_id,
    )
    leg_id: Mapped[str] = mapped_column(
        String(200),
        index=True,
        nullable=False,
    )
    player_name: Mapped[str] = mapped_column(
        String(4),
        nullable=False,
    )
    # Elapsed ms at the final checkpoint
    total_time: Mapped[float] = mapped_column(
        Float,
        index=True,
        nullable=False,
    )
    checkpoint_times: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
    )
    finish_timestamp: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )
    device_fingerprint: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    validated: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    flagged: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<LeaderboardEntry(id={self.id}, leg_id={self.leg_id}, "
            f"total_time={self.total_time})>"
        )
