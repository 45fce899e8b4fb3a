"""
Plausibility bounds on checkpoint times.
"""

import math
from typing import Sequence

from leaderboard_backend.errors import InvalidArgument

MIN_CHECKPOINT_TIME = 2000  # 2 seconds
MAX_CHECKPOINT_TIME = 5 * 60 * 1000  # 5 minutes


class PhysicsValidator:
    """
    Checks each checkpoint's elapsed time against fixed bounds and requires
    strictly increasing times. Stops at the first violation.
    """

    def __init__(
        self,
        min_checkpoint_time: int = MIN_CHECKPOINT_TIME,
        max_checkpoint_time: int = MAX_CHECKPOINT_TIME,
    ) -> None:
        self.min_checkpoint_time = min_checkpoint_time
        self.max_checkpoint_time = max_checkpoint_time

    def validate(self, checkpoint_times: Sequence[float]) -> bool:
        for i, time in enumerate(checkpoint_times):
            # NaN compares False against every bound
            if not math.isfinite(time):
                raise InvalidArgument(f"Checkpoint {i} time is not a finite number")
            if time < self.min_checkpoint_time:
                raise InvalidArgument(
                    f"Checkpoint {i} too fast: {time}ms (min: {self.min_checkpoint_time}ms)"
                )
            if time > self.max_checkpoint_time:
                raise InvalidArgument(
                    f"Checkpoint {i} too slow: {time}ms (max: {self.max_checkpoint_time}ms)"
                )
            if i > 0 and time <= checkpoint_times[i - 1]:
                raise InvalidArgument(
                    f"Checkpoint times must be monotonically increasing at checkpoint {i}"
                )
        return True
