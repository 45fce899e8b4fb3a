"""
SQLAlchemy models for the Leaderboard Backend.
"""

from leaderboard_backend.models.leaderboard_entry import LeaderboardEntry
from leaderboard_backend.models.run_session import RunSession

__all__ = ["LeaderboardEntry", "RunSession"]
