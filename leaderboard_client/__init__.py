"""Python client for the leaderboard API."""

from .recorder import RunRecorder, format_time, generate_device_fingerprint

__all__ = ["RunRecorder", "format_time", "generate_device_fingerprint"]
