"""
Main FastAPI application for the Leaderboard Backend.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, OperationalError, IntegrityError

from leaderboard_backend.config import get_settings
from leaderboard_backend.database import init_db, close_db, async_session_factory
from leaderboard_backend.api import api_router
from leaderboard_backend.errors import InvalidArgument, LeaderboardError
from leaderboard_backend.reaper import SessionReaper, set_session_reaper

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Initializes and cleans up resources.
    """
    settings = get_settings()

    # Initialize database
    logger.info("Initializing database...")
    await init_db()

    # Start the expired-session sweep
    logger.info(f"Starting session reaper (interval: {settings.reaper_interval_seconds}s)...")
    reaper = SessionReaper(
        interval_seconds=settings.reaper_interval_seconds,
        db_session_factory=async_session_factory,
    )
    set_session_reaper(reaper)
    await reaper.start()

    logger.info("Leaderboard Backend started successfully!")

    yield

    # Shutdown
    logger.info("Shutting down...")

    await reaper.stop()
    set_session_reaper(None)

    # Close database connections
    await close_db()

    logger.info("Leaderboard Backend stopped.")


# Create FastAPI application
app = FastAPI(
    title="Leaderboard Backend",
    description="Verified run submission and per-leg leaderboards for the racing game",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Browser game client is served from its own origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(LeaderboardError)
async def leaderboard_error_handler(request: Request, exc: LeaderboardError):
    """Translate domain errors into coded JSON responses."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and query strings are invalid arguments."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"Invalid request: {location} {first.get('msg', '')}".strip()
    error = InvalidArgument(message)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# Database error exception handlers
@app.exception_handler(OperationalError)
async def operational_error_handler(request: Request, exc: OperationalError):
    """Handle database connection/operational errors."""
    logger.error(f"Database operational error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database connection error. Please try again later."},
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """Handle database integrity constraint violations."""
    logger.error(f"Database integrity error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Database integrity error. The operation conflicts with existing data."},
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    """Handle general SQLAlchemy errors."""
    logger.error(f"Database error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error. Please try again later."},
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    from leaderboard_backend.reaper import get_session_reaper

    reaper = get_session_reaper()

    return {
        "status": "healthy",
        "reaper_running": reaper is not None and reaper.is_running,
        "sweeps": reaper.sweep_number if reaper else 0,
    }


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "leaderboard_backend.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
