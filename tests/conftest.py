"""
Pytest fixtures for Leaderboard Backend tests.
"""

import os
import tempfile
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

# Create a temp file for SQLite test database
_test_db_file = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_test_db_path = _test_db_file.name
_test_db_file.close()

# Set test environment - using SQLite
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_db_path}"
os.environ["DEBUG_MODE"] = "true"
os.environ["REAPER_INTERVAL_SECONDS"] = "3600"

from leaderboard_backend.database import Base, get_db
from leaderboard_backend.main import app
from leaderboard_backend.services.proof_chain import build_proof_chain
from leaderboard_backend import models  # noqa: F401


# Create test database engine (SQLite)
test_engine = create_async_engine(
    os.environ["DATABASE_URL"],
    echo=False,
    poolclass=NullPool,
)

test_session_factory = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

LEG_ID = "mountain-dawn"
STEADY_TIMES = [(i + 1) * 5000 for i in range(10)]


class FakeClock:
    """Millisecond clock tests can move by hand."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    # Create all tables
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_session_factory() as session:
        yield session

    # Clean up tables
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


async def start_run(client: AsyncClient, leg_id: str = LEG_ID, fingerprint: str = "fp1") -> dict:
    """Start a run through the API and return the JSON body."""
    response = await client.post(
        "/api/runs/start",
        json={"legId": leg_id, "deviceFingerprint": fingerprint},
    )
    assert response.status_code == 201, response.text
    return response.json()


async def submit_run(
    client: AsyncClient,
    session: dict,
    checkpoint_times: list,
    player_name: str = "ALEX",
    leg_id: str = LEG_ID,
    proof_chain: list | None = None,
):
    """Submit a run signed with the session's token."""
    if proof_chain is None:
        proof_chain = build_proof_chain(session["sessionToken"], leg_id, checkpoint_times)
    return await client.post(
        "/api/runs/submit",
        json={
            "sessionId": session["sessionId"],
            "playerName": player_name,
            "checkpointTimes": checkpoint_times,
            "proofChain": proof_chain,
        },
    )


def scaled_times(total: int) -> list[int]:
    """Ten evenly spaced checkpoint times ending at ``total``."""
    step = total // 10
    return [step * (i + 1) for i in range(9)] + [total]
