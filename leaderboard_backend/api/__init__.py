"""
REST API routes for the Leaderboard Backend.
"""

from fastapi import APIRouter

from leaderboard_backend.api.runs import router as runs_router
from leaderboard_backend.api.leaderboard import router as leaderboard_router
from leaderboard_backend.api.debug import router as debug_router

api_router = APIRouter()

api_router.include_router(runs_router, prefix="/runs", tags=["runs"])
api_router.include_router(leaderboard_router, prefix="/leaderboard", tags=["leaderboard"])
api_router.include_router(debug_router, prefix="/debug", tags=["debug"])

__all__ = ["api_router"]
