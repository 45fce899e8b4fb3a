"""
Run session API routes for the Leaderboard Backend.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from leaderboard_backend.config import Settings, get_settings
from leaderboard_backend.database import get_db
from leaderboard_backend.api.dependencies import build_leaderboard_service, build_session_service

router = APIRouter()


# Request/Response schemas
# Request fields stay loosely typed: the services own input validation so
# every malformed field fails the same way.
class StartRunRequest(BaseModel):
    """Request schema for starting a run."""

    leg_id: Any = Field(default=None, alias="legId")
    device_fingerprint: Any = Field(default=None, alias="deviceFingerprint")

    class Config:
        populate_by_name = True


class StartRunResponse(BaseModel):
    """Response schema for a new run session."""

    session_id: str = Field(..., alias="sessionId")
    session_token: str = Field(..., alias="sessionToken")

    class Config:
        populate_by_name = True


class SubmitRunRequest(BaseModel):
    """Request schema for submitting a completed run."""

    session_id: Any = Field(default=None, alias="sessionId")
    player_name: Any = Field(default=None, alias="playerName")
    checkpoint_times: Any = Field(default=None, alias="checkpointTimes")
    proof_chain: Any = Field(default=None, alias="proofChain")

    class Config:
        populate_by_name = True


class SubmitRunResponse(BaseModel):
    """Response schema for an accepted run."""

    entry_id: str = Field(..., alias="entryId")
    rank: int
    flagged: bool

    class Config:
        populate_by_name = True


# Routes
@router.post(
    "/start",
    response_model=StartRunResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_run(
    request: StartRunRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> StartRunResponse:
    """
    Start a run session for a leg.
    Returns the session id and the token used to sign checkpoints.
    """
    service = build_session_service(db, settings)
    started = await service.start_run(request.leg_id, request.device_fingerprint)
    return StartRunResponse(
        session_id=started.session_id,
        session_token=started.session_token,
    )


@router.post("/submit", response_model=SubmitRunResponse)
async def submit_run(
    request: SubmitRunRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SubmitRunResponse:
    """
    Submit a completed run.
    Verifies the proof chain and timings, records the entry and returns its rank.
    """
    service = build_leaderboard_service(db, settings)
    result = await service.submit_run(
        request.session_id,
        request.player_name,
        request.checkpoint_times,
        request.proof_chain,
    )
    return SubmitRunResponse(
        entry_id=result.entry_id,
        rank=result.rank,
        flagged=result.flagged,
    )
