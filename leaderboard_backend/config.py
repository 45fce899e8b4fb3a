"""
Configuration management for the Leaderboard Backend.
Uses pydantic-settings for environment variable parsing.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./leaderboard.db",
        description="SQLAlchemy async connection URL (aiosqlite or asyncpg driver)"
    )

    # Debug
    debug_mode: bool = Field(
        default=False,
        description="Enable debug endpoints and SQL echo"
    )

    # Run sessions
    session_ttl_seconds: int = Field(
        default=15 * 60,
        description="Lifetime of a run session before it expires"
    )
    hourly_run_limit: int = Field(
        default=5,
        description="Sessions a device may start per rolling hour"
    )
    daily_run_limit: int = Field(
        default=50,
        description="Sessions a device may start per rolling day"
    )

    # Run validation
    checkpoint_count: int = Field(
        default=10,
        description="Number of checkpoints on every leg"
    )
    min_checkpoint_ms: int = Field(
        default=2000,
        description="Fastest plausible elapsed time at any checkpoint"
    )
    max_checkpoint_ms: int = Field(
        default=5 * 60 * 1000,
        description="Slowest accepted elapsed time at any checkpoint"
    )

    # Anomaly detection
    anomaly_min_samples: int = Field(
        default=10,
        description="Validated entries required before z-score flagging applies"
    )
    anomaly_z_threshold: float = Field(
        default=3.0,
        description="Z-score above which a total time is flagged"
    )

    # Leaderboard reads
    default_leaderboard_limit: int = Field(default=10)
    max_leaderboard_limit: int = Field(default=100)

    # Session reaper
    reaper_interval_seconds: int = Field(
        default=60 * 60,
        description="Period between expired-session sweeps"
    )

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database pooling
    db_pool_size: int = Field(
        default=5,
        description="Database connection pool size"
    )
    db_max_overflow: int = Field(
        default=10,
        description="Maximum database connections above pool size"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use dependency injection in FastAPI routes.
    """
    return Settings()
