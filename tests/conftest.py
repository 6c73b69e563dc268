"""Shared pytest fixtures for all mood insight tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Callable, Iterable, Mapping, Sequence, Union

import pytest

from moodinsights.history import MoodHistory
from moodinsights.insight_store import InsightStore
from moodinsights.models import (
    AlertPriority,
    CorrelationRecord,
    Insight,
    InsightType,
    MoodSample,
    Segment,
)
from moodinsights.storage import MemoryKeyValueStore

# Wednesday
TODAY = date(2024, 6, 12)
NOW = datetime(2024, 6, 12, 9, 30, 0, tzinfo=timezone.utc)

Ratings = Union[float, Sequence[float]]


def build_samples(moods: Mapping[date, Ratings]) -> list[MoodSample]:
    """A single number logs the morning only; a sequence fills segments in order."""
    samples: list[MoodSample] = []
    for day, ratings in moods.items():
        if isinstance(ratings, (int, float)):
            ratings = [ratings]
        for segment, rating in zip(Segment, ratings):
            samples.append(MoodSample(day, segment, float(rating)))
    return samples


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def days_ago() -> Callable[[int], date]:
    """``days_ago(n)`` is the date *n* days before :data:`TODAY`."""
    return lambda n: TODAY - timedelta(days=n)


# ---------------------------------------------------------------------------
# History builders
# ---------------------------------------------------------------------------


@pytest.fixture
def history_of() -> Callable[..., MoodHistory]:
    """Build a :class:`MoodHistory` from ``{date: rating(s)}`` plus records."""

    def _build(
        moods: Mapping[date, Ratings],
        records: Iterable[CorrelationRecord] = (),
        today: date = TODAY,
    ) -> MoodHistory:
        return MoodHistory.from_records(today, build_samples(moods), records)

    return _build


@pytest.fixture
def empty_history() -> MoodHistory:
    return MoodHistory(TODAY)


# ---------------------------------------------------------------------------
# Storage fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def kv_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def insight_store(kv_store) -> InsightStore:
    return InsightStore(kv_store, retention_days=30)


@pytest.fixture
def make_insight() -> Callable[..., Insight]:
    def _make(
        insight_id: str = "i1",
        priority: AlertPriority = AlertPriority.MEDIUM,
        confidence: float | None = 0.5,
        created_at: datetime = NOW,
        insight_type: InsightType = InsightType.PATTERN,
    ) -> Insight:
        return Insight(
            id=insight_id,
            title=f"Title {insight_id}",
            description=f"Description {insight_id}",
            type=insight_type,
            priority=priority,
            created_at=created_at,
            confidence=confidence,
        )

    return _make
