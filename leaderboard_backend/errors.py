"""
Error taxonomy for the Leaderboard Backend.

Services raise these exceptions; the FastAPI handlers in ``main`` turn them
into ``{"detail": ..., "code": ...}`` JSON responses. Codes follow the
callable-function naming the game client already understands.
"""

from fastapi import status


class LeaderboardError(Exception):
    """Base class for all errors surfaced to callers."""

    code = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class InvalidArgument(LeaderboardError):
    """Malformed input, including physically implausible timings."""

    code = "invalid-argument"
    status_code = status.HTTP_400_BAD_REQUEST


class PermissionDenied(LeaderboardError):
    """Proof chain mismatch."""

    code = "permission-denied"
    status_code = status.HTTP_403_FORBIDDEN


class ResourceExhausted(LeaderboardError):
    """Device exceeded its session rate limit."""

    code = "resource-exhausted"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS


class NotFound(LeaderboardError):
    """Unknown or already consumed session."""

    code = "not-found"
    status_code = status.HTTP_404_NOT_FOUND


class DeadlineExceeded(LeaderboardError):
    """Session existed but its expiry has passed."""

    code = "deadline-exceeded"
    status_code = status.HTTP_410_GONE


__all__ = [
    "DeadlineExceeded",
    "InvalidArgument",
    "LeaderboardError",
    "NotFound",
    "PermissionDenied",
    "ResourceExhausted",
]
