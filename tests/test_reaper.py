"""
Tests for the expired-session reaper.
"""

import asyncio

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import FakeClock, test_session_factory
from leaderboard_backend.models.run_session import RunSession
from leaderboard_backend.reaper import SessionReaper, get_session_reaper, set_session_reaper
from leaderboard_backend.store import SessionStore

TTL_MS = 15 * 60 * 1000


async def _seed_sessions(db: AsyncSession, start_times: list[int]) -> list[str]:
    store = SessionStore(db)
    ids = []
    for i, start in enumerate(start_times):
        session = await store.create(
            RunSession(
                leg_id="mountain-dawn",
                device_fingerprint=f"fp-reap-{i}",
                token=f"{i:02d}" * 32,
                start_time=start,
                expires_at=start + TTL_MS,
            )
        )
        ids.append(session.id)
    await db.commit()
    return ids


@pytest.mark.asyncio
async def test_sweep_empty_store(db_session: AsyncSession, clock: FakeClock):
    """Sweeping with no sessions is a no-op."""
    reaper = SessionReaper(3600, test_session_factory, clock=clock)
    assert await reaper.sweep() == 0
    assert reaper.sweep_number == 1


@pytest.mark.asyncio
async def test_sweep_deletes_only_expired(db_session: AsyncSession, clock: FakeClock):
    now = clock.now
    expired_ids = await _seed_sessions(db_session, [now - TTL_MS - 10, now - TTL_MS - 1])
    live_ids = await _seed_sessions(db_session, [now - 1000, now])

    reaper = SessionReaper(3600, test_session_factory, clock=clock)
    assert await reaper.sweep() == 2
    assert reaper.total_deleted == 2
    assert reaper.last_stats.deleted == 2

    async with test_session_factory() as db:
        store = SessionStore(db)
        remaining = {s.id for s in await store.list_all()}
    assert remaining == set(live_ids)
    assert not remaining & set(expired_ids)


@pytest.mark.asyncio
async def test_sweep_keeps_session_at_exact_expiry(db_session: AsyncSession, clock: FakeClock):
    """A session is only reaped once now is past its expiry."""
    await _seed_sessions(db_session, [clock.now - TTL_MS])
    reaper = SessionReaper(3600, test_session_factory, clock=clock)
    assert await reaper.sweep() == 0

    clock.advance(1)
    assert await reaper.sweep() == 1


@pytest.mark.asyncio
async def test_reaped_sessions_stop_counting_for_rate_limit(
    db_session: AsyncSession, clock: FakeClock
):
    from leaderboard_backend.services.sessions import SessionService

    async with test_session_factory() as db:
        service = SessionService(SessionStore(db), clock=clock, hourly_limit=2, daily_limit=2)
        await service.start_run("mountain-dawn", "fp-reaped")
        await service.start_run("mountain-dawn", "fp-reaped")
        await db.commit()

    clock.advance(TTL_MS + 1)
    reaper = SessionReaper(3600, test_session_factory, clock=clock)
    assert await reaper.sweep() == 2

    async with test_session_factory() as db:
        service = SessionService(SessionStore(db), clock=clock, hourly_limit=2, daily_limit=2)
        started = await service.start_run("mountain-dawn", "fp-reaped")
    assert started.session_id


@pytest.mark.asyncio
async def test_periodic_loop_sweeps_and_stops(db_session: AsyncSession, clock: FakeClock):
    await _seed_sessions(db_session, [clock.now - TTL_MS - 1])
    reaper = SessionReaper(0.05, test_session_factory, clock=clock)

    await reaper.start()
    assert reaper.is_running
    for _ in range(100):
        if reaper.sweep_number > 0:
            break
        await asyncio.sleep(0.01)
    await reaper.stop()

    assert not reaper.is_running
    assert reaper.sweep_number >= 1
    assert reaper.total_deleted == 1


@pytest.mark.asyncio
async def test_debug_sweep_endpoint(client: AsyncClient, db_session: AsyncSession):
    reaper = SessionReaper(3600, test_session_factory)
    set_session_reaper(reaper)
    try:
        response = await client.post("/api/debug/reaper/sweep")
        assert response.status_code == 200
        assert response.json()["deleted"] == 0

        status = await client.get("/api/debug/reaper/status")
        assert status.status_code == 200
        assert status.json()["sweep_number"] == 1
        assert status.json()["is_running"] is False
    finally:
        set_session_reaper(None)
    assert get_session_reaper() is None


@pytest.mark.asyncio
async def test_health_reports_reaper(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
