"""
Leaderboard read API routes for the Leaderboard Backend.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from leaderboard_backend.config import Settings, get_settings
from leaderboard_backend.database import get_db
from leaderboard_backend.api.dependencies import build_leaderboard_service

router = APIRouter()


class LeaderboardRow(BaseModel):
    """One ranked entry."""

    rank: int
    player_name: str = Field(..., alias="playerName")
    total_time: int | float = Field(..., alias="totalTime")
    flagged: bool

    class Config:
        populate_by_name = True


class LeaderboardResponse(BaseModel):
    """Response schema for a leg's leaderboard."""

    entries: list[LeaderboardRow]


@router.get("/{leg_id}", response_model=LeaderboardResponse)
async def get_leaderboard(
    leg_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    limit: Annotated[int | None, Query()] = None,
) -> LeaderboardResponse:
    """
    Get the fastest validated entries for a leg.
    """
    service = build_leaderboard_service(db, settings)
    rows = await service.get_leaderboard(
        leg_id,
        settings.default_leaderboard_limit if limit is None else limit,
    )
    return LeaderboardResponse(
        entries=[
            LeaderboardRow(
                rank=row.rank,
                player_name=row.player_name,
                total_time=row.total_time,
                flagged=row.flagged,
            )
            for row in rows
        ]
    )
