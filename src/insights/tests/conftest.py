"""Shared fixtures and event factories for insights engine tests."""

from __future__ import annotations

import itertools
from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from src.insights.config_loader import InsightsConfig, load_insights_config
from src.insights.records import FeelingCheckIn, PhaseTag

# Canonical test subject and clock
TEST_SUBJECT_ID = "user_2mumtaz0000000000000000"
NOW = datetime(2026, 2, 23, 12, 0, 0, tzinfo=timezone.utc)
TODAY = NOW.date()

LABELS = {
    "tired": "Tired",
    "pain": "In pain",
    "bloated": "Bloated",
    "emotional": "Emotional",
    "restless": "Restless",
    "hormonal": "Hormonal",
}

_ids = itertools.count(1)


def make_checkin(
    category_id: str,
    days_ago: float = 0,
    *,
    at: datetime | None = None,
    label: str | None = None,
    subject_id: str = TEST_SUBJECT_ID,
) -> FeelingCheckIn:
    """Build a check-in ``days_ago`` days before NOW (or at an explicit time)."""
    return FeelingCheckIn(
        id=f"chk-{next(_ids):05d}",
        subject_id=subject_id,
        category_id=category_id,
        label=label or LABELS.get(category_id, category_id.title()),
        occurred_at=at or NOW - timedelta(days=days_ago),
    )


def make_checkins(category_id: str, count: int, days_ago: float = 1) -> list[FeelingCheckIn]:
    """``count`` check-ins of one category, an hour apart, starting ``days_ago``."""
    start = NOW - timedelta(days=days_ago)
    return [
        make_checkin(category_id, at=start + timedelta(hours=i)) for i in range(count)
    ]


def make_tag(d: date, phase: str, subject_id: str = TEST_SUBJECT_ID) -> PhaseTag:
    return PhaseTag(subject_id=subject_id, date=d, phase=phase)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def insights_config() -> InsightsConfig:
    """Load the real bundled insights config."""
    return load_insights_config()


@pytest.fixture
def scenario_checkins() -> tuple[list[FeelingCheckIn], list[FeelingCheckIn]]:
    """tired×5, pain×3, tired×2 in the current period; tired×4, pain×1 before."""
    current = (
        make_checkins("tired", 5, days_ago=20)
        + make_checkins("pain", 3, days_ago=10)
        + make_checkins("tired", 2, days_ago=3)
    )
    previous = make_checkins("tired", 4, days_ago=45) + make_checkins("pain", 1, days_ago=40)
    return current, previous


@pytest.fixture
def mock_store() -> AsyncMock:
    """EventStore double returning no events."""
    store = AsyncMock()
    store.list_feeling_checkins.return_value = []
    store.list_phase_tags.return_value = []
    return store
