"""
Statistical flagging of implausible total times.
"""

import logging
import math

from leaderboard_backend.store import LeaderboardStore

logger = logging.getLogger(__name__)

DEFAULT_MIN_SAMPLES = 10
DEFAULT_Z_THRESHOLD = 3.0


def z_score(value: float, samples: list[float]) -> float:
    """
    Distance of ``value`` from the sample mean in population standard deviations.
    A zero spread gives 0 for the mean itself and infinity for anything else.
    """
    mean = sum(samples) / len(samples)
    variance = sum((s - mean) ** 2 for s in samples) / len(samples)
    std_dev = math.sqrt(variance)
    if std_dev == 0:
        return 0.0 if value == mean else math.inf
    return abs(value - mean) / std_dev


class AnomalyDetector:
    """
    Flags totals far from a leg's validated distribution.
    Advisory only: flagged entries are still stored and ranked.
    """

    def __init__(
        self,
        store: LeaderboardStore,
        min_samples: int = DEFAULT_MIN_SAMPLES,
        z_threshold: float = DEFAULT_Z_THRESHOLD,
    ) -> None:
        self._store = store
        self.min_samples = min_samples
        self.z_threshold = z_threshold

    async def is_anomalous(self, leg_id: str, total_time: float) -> bool:
        times = await self._store.validated_times(leg_id)
        if len(times) < self.min_samples:
            return False

        score = z_score(total_time, times)
        if score > self.z_threshold:
            logger.info(f"Flagging {total_time}ms on leg {leg_id} (z={score:.2f})")
            return True
        return False
