"""
Expired-session reaper for the Leaderboard Backend.
"""

from leaderboard_backend.reaper.reaper import SessionReaper, get_session_reaper, set_session_reaper

__all__ = ["SessionReaper", "get_session_reaper", "set_session_reaper"]
