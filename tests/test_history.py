"""Tests for moodinsights.history."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from conftest import TODAY, build_samples
from moodinsights.history import MoodHistory, current_streak, load_history
from moodinsights.models import CorrelationRecord, DayAggregate, Segment
from moodinsights.repository import InMemoryMoodRepository


def _repo(moods, records=()) -> InMemoryMoodRepository:
    return InMemoryMoodRepository(build_samples(moods), records)


class TestMoodHistory:
    def test_joins_samples_and_records(self, history_of, days_ago) -> None:
        record = CorrelationRecord(days_ago(1), sleep_quality=6.0)
        history = history_of({days_ago(1): [5.0, 7.0]}, [record])
        day = history.get(days_ago(1))
        assert day.moods == {Segment.MORNING: 5.0, Segment.MIDDAY: 7.0}
        assert day.average_mood == pytest.approx(6.0)
        assert day.correlation is record

    def test_record_only_days_are_not_logged(self, history_of, days_ago) -> None:
        history = history_of({}, [CorrelationRecord(days_ago(2), work_stress=5)])
        assert len(history) == 1
        assert history.logged_days() == []

    def test_trailing_includes_today(self, history_of, days_ago) -> None:
        history = history_of({days_ago(i): 6.0 for i in range(10)})
        assert [d.date for d in history.trailing(3)] == [days_ago(2), days_ago(1), days_ago(0)]

    def test_rejects_duplicate_days(self) -> None:
        with pytest.raises(ValueError):
            MoodHistory(TODAY, [DayAggregate(TODAY), DayAggregate(TODAY)])


class TestLoadHistory:
    def test_window_bounds(self, days_ago) -> None:
        repo = _repo({days_ago(i): 6.0 for i in range(10)})
        history = load_history(repo, TODAY, 5)
        assert [d.date for d in history.logged_days()][0] == days_ago(4)
        assert history.today == TODAY


class TestCurrentStreak:
    def test_counts_back_from_today(self, days_ago) -> None:
        moods = {days_ago(i): 6.0 for i in range(4)}
        moods[days_ago(6)] = 6.0
        repo = _repo(moods)
        history = load_history(repo, TODAY, 30)
        assert current_streak(repo, history, 30, 365) == 4

    def test_zero_without_today(self, days_ago) -> None:
        repo = _repo({days_ago(1): 6.0})
        history = load_history(repo, TODAY, 30)
        assert current_streak(repo, history, 30, 365) == 0

    def test_extends_beyond_loaded_window(self, days_ago) -> None:
        repo = _repo({days_ago(i): 6.0 for i in range(12)})
        history = load_history(repo, TODAY, 5)
        assert current_streak(repo, history, 5, 365) == 12

    def test_capped_at_max_days(self, days_ago) -> None:
        repo = _repo({days_ago(i): 6.0 for i in range(20)})
        history = load_history(repo, TODAY, 30)
        assert current_streak(repo, history, 30, 7) == 7

    def test_no_extra_fetch_when_streak_breaks_early(self, days_ago) -> None:
        repo = MagicMock(wraps=_repo({days_ago(0): 6.0}))
        history = load_history(repo, TODAY, 30)
        repo.load_window.reset_mock()
        current_streak(repo, history, 30, 365)
        repo.load_window.assert_not_called()
