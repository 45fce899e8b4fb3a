"""
Utility helpers shared by the leaderboard services.
"""

import time
import uuid

MS_PER_SECOND = 1000
MS_PER_HOUR = 60 * 60 * MS_PER_SECOND
MS_PER_DAY = 24 * MS_PER_HOUR


def now_ms() -> int:
    """Return the current time in milliseconds since the epoch."""
    return int(time.time() * MS_PER_SECOND)


def new_record_id() -> str:
    """Generate a store-assigned record identifier."""
    return str(uuid.uuid4())


def as_number(value: float) -> int | float:
    """
    Collapse integral floats to int.
    Keeps times rendered as ``50000`` rather than ``50000.0``.
    """
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
