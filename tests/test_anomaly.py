"""
Tests for statistical anomaly flagging.
"""

import math

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from leaderboard_backend.models.leaderboard_entry import LeaderboardEntry
from leaderboard_backend.services.anomaly import AnomalyDetector, z_score
from leaderboard_backend.store import LeaderboardStore


async def _seed(db: AsyncSession, leg_id: str, totals: list[float], validated: bool = True) -> None:
    store = LeaderboardStore(db)
    for i, total in enumerate(totals):
        await store.create(
            LeaderboardEntry(
                leg_id=leg_id,
                player_name=f"P{i:03d}",
                total_time=total,
                checkpoint_times=[total / 10 * (n + 1) for n in range(10)],
                finish_timestamp=1_700_000_000_000 + i,
                device_fingerprint=f"fp{i}",
                validated=validated,
                flagged=False,
            )
        )


def test_z_score_population_std():
    """Uses population (not sample) standard deviation."""
    samples = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]
    # mean 5, population std 2
    assert z_score(11.0, samples) == pytest.approx(3.0)


def test_z_score_zero_spread():
    assert z_score(5.0, [5.0, 5.0]) == 0.0
    assert math.isinf(z_score(6.0, [5.0, 5.0]))


@pytest.mark.asyncio
async def test_not_anomalous_below_min_samples(db_session: AsyncSession):
    """Fewer than ten validated entries never flag, however extreme the time."""
    await _seed(db_session, "leg-a", [50000 + i for i in range(9)])
    detector = AnomalyDetector(LeaderboardStore(db_session))
    assert await detector.is_anomalous("leg-a", 2000) is False
    assert await detector.is_anomalous("leg-a", 10_000_000) is False


@pytest.mark.asyncio
async def test_unvalidated_entries_do_not_count(db_session: AsyncSession):
    await _seed(db_session, "leg-b", [50000 + i for i in range(9)])
    await _seed(db_session, "leg-b", [50000 + i for i in range(5)], validated=False)
    detector = AnomalyDetector(LeaderboardStore(db_session))
    assert await detector.is_anomalous("leg-b", 2000) is False


@pytest.mark.asyncio
async def test_far_outlier_flagged(db_session: AsyncSession):
    await _seed(db_session, "leg-c", [50000 + (i * 37) % 500 for i in range(15)])
    detector = AnomalyDetector(LeaderboardStore(db_session))
    assert await detector.is_anomalous("leg-c", 25000) is True


@pytest.mark.asyncio
async def test_typical_time_not_flagged(db_session: AsyncSession):
    await _seed(db_session, "leg-d", [50000 + (i * 37) % 500 for i in range(15)])
    detector = AnomalyDetector(LeaderboardStore(db_session))
    assert await detector.is_anomalous("leg-d", 50200) is False


@pytest.mark.asyncio
async def test_other_legs_ignored(db_session: AsyncSession):
    await _seed(db_session, "leg-e", [50000 + (i * 37) % 500 for i in range(15)])
    detector = AnomalyDetector(LeaderboardStore(db_session))
    assert await detector.is_anomalous("leg-f", 25000) is False


@pytest.mark.asyncio
async def test_threshold_is_configurable(db_session: AsyncSession):
    totals = [40000.0, 60000.0] * 5  # mean 50000, std 10000
    await _seed(db_session, "leg-g", totals)
    store = LeaderboardStore(db_session)
    assert await AnomalyDetector(store).is_anomalous("leg-g", 75000) is False
    assert await AnomalyDetector(store, z_threshold=2.0).is_anomalous("leg-g", 75000) is True
