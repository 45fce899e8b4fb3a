"""
Debug API routes for the Leaderboard Backend.
All endpoints require debug mode.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from leaderboard_backend.config import Settings, get_settings

router = APIRouter()


class ReaperStatusResponse(BaseModel):
    """Response schema for session reaper status."""

    is_running: bool
    interval_seconds: float
    sweep_number: int
    total_deleted: int
    last_deleted: int | None


def require_debug_mode(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Settings:
    """
    Dependency that rejects requests unless debug mode is enabled.
    """
    if not settings.debug_mode:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Debug mode is not enabled",
        )
    return settings


@router.get("/reaper/status", response_model=ReaperStatusResponse)
async def get_reaper_status(
    settings: Annotated[Settings, Depends(require_debug_mode)],
) -> ReaperStatusResponse:
    """
    Get the current session reaper status.
    """
    from leaderboard_backend.reaper import get_session_reaper

    reaper = get_session_reaper()

    if reaper is None:
        return ReaperStatusResponse(
            is_running=False,
            interval_seconds=settings.reaper_interval_seconds,
            sweep_number=0,
            total_deleted=0,
            last_deleted=None,
        )

    last = reaper.last_stats
    return ReaperStatusResponse(
        is_running=reaper.is_running,
        interval_seconds=reaper.interval_seconds,
        sweep_number=reaper.sweep_number,
        total_deleted=reaper.total_deleted,
        last_deleted=last.deleted if last else None,
    )


@router.post("/reaper/sweep")
async def sweep_now(
    settings: Annotated[Settings, Depends(require_debug_mode)],
) -> dict:
    """
    Run one expired-session sweep immediately.
    """
    from leaderboard_backend.reaper import get_session_reaper

    reaper = get_session_reaper()
    if reaper is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session reaper not initialized",
        )

    deleted = await reaper.sweep()
    return {"message": "Sweep complete", "deleted": deleted}
