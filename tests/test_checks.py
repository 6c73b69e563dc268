"""Tests for the achievement, celebration, concern and suggestion checks."""

from __future__ import annotations

import pytest

from moodinsights.checks import (
    CheckContext,
    day_specific,
    low_mood,
    mood_consistency,
    perfect_day,
    personal_best,
    poor_sleep,
    streak_milestone,
)
from moodinsights.models import AlertPriority, CorrelationRecord, InsightType


def _context(history, streak: int = 0) -> CheckContext:
    return CheckContext(history=history, streak=streak)


# ---------------------------------------------------------------------------
# Achievements
# ---------------------------------------------------------------------------


class TestStreakMilestone:
    @pytest.mark.parametrize("streak", [7, 14, 30, 50, 100, 365])
    def test_fires_on_milestones(self, empty_history, streak) -> None:
        draft = streak_milestone(_context(empty_history, streak))
        assert draft is not None
        assert draft.type is InsightType.ACHIEVEMENT
        assert draft.priority is AlertPriority.HIGH
        assert draft.discriminator == str(streak)
        assert draft.title == f"{streak} day streak!"

    @pytest.mark.parametrize("streak", [0, 6, 8, 31, 364])
    def test_silent_between_milestones(self, empty_history, streak) -> None:
        assert streak_milestone(_context(empty_history, streak)) is None


class TestMoodConsistency:
    def test_fires_when_most_days_are_high(self, history_of, days_ago) -> None:
        moods = {days_ago(i): [5.0, 7.5] for i in range(15)}
        moods.update({days_ago(i): 5.0 for i in range(15, 20)})
        draft = mood_consistency(_context(history_of(moods)))
        assert draft is not None
        assert draft.confidence == pytest.approx(0.75)
        assert draft.data["highMoodDays"] == 15

    def test_below_share(self, history_of, days_ago) -> None:
        moods = {days_ago(i): 7.5 for i in range(13)}
        moods.update({days_ago(i): 5.0 for i in range(13, 20)})
        assert mood_consistency(_context(history_of(moods))) is None

    def test_needs_twenty_days(self, history_of, days_ago) -> None:
        moods = {days_ago(i): 9.0 for i in range(19)}
        assert mood_consistency(_context(history_of(moods))) is None

    def test_ignores_days_outside_window(self, history_of, days_ago) -> None:
        moods = {days_ago(i): 9.0 for i in range(25, 50)}
        assert mood_consistency(_context(history_of(moods))) is None


# ---------------------------------------------------------------------------
# Celebrations
# ---------------------------------------------------------------------------


class TestPerfectDay:
    def test_all_segments_high(self, history_of, today) -> None:
        draft = perfect_day(_context(history_of({today: [8.0, 9.0, 8.5]})))
        assert draft is not None
        assert draft.type is InsightType.CELEBRATION
        assert draft.priority is AlertPriority.HIGH
        assert draft.data["moods"] == {"Morning": 8.0, "Midday": 9.0, "Evening": 8.5}

    def test_needs_all_three_segments(self, history_of, today) -> None:
        assert perfect_day(_context(history_of({today: [9.0, 9.0]}))) is None

    def test_one_low_segment(self, history_of, today) -> None:
        assert perfect_day(_context(history_of({today: [9.0, 7.9, 9.0]}))) is None

    def test_only_today_counts(self, history_of, days_ago) -> None:
        assert perfect_day(_context(history_of({days_ago(1): [9.0, 9.0, 9.0]}))) is None


class TestPersonalBest:
    def test_ties_previous_best(self, history_of, days_ago, today) -> None:
        moods = {days_ago(i): 6.0 for i in range(1, 31)}
        moods[days_ago(5)] = 8.0
        moods[today] = 8.0
        draft = personal_best(_context(history_of(moods)))
        assert draft is not None
        assert draft.data["previousBest"] == pytest.approx(8.0)

    def test_below_previous_best(self, history_of, days_ago, today) -> None:
        moods = {days_ago(i): 6.0 for i in range(1, 31)}
        moods[days_ago(5)] = 8.5
        moods[today] = 8.0
        assert personal_best(_context(history_of(moods))) is None

    def test_needs_thirty_prior_days(self, history_of, days_ago, today) -> None:
        moods = {days_ago(i): 5.0 for i in range(1, 30)}
        moods[today] = 9.0
        assert personal_best(_context(history_of(moods))) is None

    def test_nothing_logged_today(self, history_of, days_ago) -> None:
        moods = {days_ago(i): 5.0 for i in range(1, 40)}
        assert personal_best(_context(history_of(moods))) is None


# ---------------------------------------------------------------------------
# Concerns
# ---------------------------------------------------------------------------


class TestLowMood:
    def test_critical_after_five_low_days(self, history_of, days_ago) -> None:
        moods = {days_ago(i): [3.0, 4.0] for i in range(5)}
        moods.update({days_ago(i): 6.0 for i in range(5, 10)})
        draft = low_mood(_context(history_of(moods)))
        assert draft is not None
        assert draft.type is InsightType.CONCERN
        assert draft.priority is AlertPriority.CRITICAL
        assert len(draft.action_steps) == 5
        assert draft.data == {"lowMoodDays": 5, "loggedDays": 10}

    def test_any_higher_rating_spares_the_day(self, history_of, days_ago) -> None:
        moods = {days_ago(i): [3.0, 4.5] for i in range(5)}
        moods.update({days_ago(i): 6.0 for i in range(5, 10)})
        assert low_mood(_context(history_of(moods))) is None

    def test_needs_ten_logged_days(self, history_of, days_ago) -> None:
        moods = {days_ago(i): 2.0 for i in range(9)}
        assert low_mood(_context(history_of(moods))) is None


class TestPoorSleep:
    def _records(self, days_ago, qualities):
        return [
            CorrelationRecord(date=days_ago(i), sleep_quality=q)
            for i, q in enumerate(qualities)
        ]

    def test_fires_on_low_average(self, history_of, days_ago) -> None:
        records = self._records(days_ago, [3.0, 4.0, 5.0, 3.0, 4.0])
        draft = poor_sleep(_context(history_of({}, records)))
        assert draft is not None
        assert draft.priority is AlertPriority.HIGH
        assert draft.data["averageSleep"] == pytest.approx(3.8)

    def test_needs_five_records(self, history_of, days_ago) -> None:
        records = self._records(days_ago, [2.0] * 4)
        assert poor_sleep(_context(history_of({}, records))) is None

    def test_average_above_limit(self, history_of, days_ago) -> None:
        records = self._records(days_ago, [4.5] * 6)
        assert poor_sleep(_context(history_of({}, records))) is None


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


class TestDaySpecific:
    """Today is a Wednesday, so earlier Wednesdays are multiples of 7 days ago."""

    def _wednesdays(self, days_ago, ratings):
        return {days_ago(7 * (i + 1)): r for i, r in enumerate(ratings)}

    def test_fires_at_four_instances_and_limit_average(self, history_of, days_ago) -> None:
        moods = self._wednesdays(days_ago, [6.0] * 4)
        draft = day_specific(_context(history_of(moods)))
        assert draft is not None
        assert draft.kind == "day_specific"
        assert draft.discriminator == "wednesday"
        assert draft.type is InsightType.ACTIONABLE
        assert draft.priority is AlertPriority.MEDIUM
        assert draft.confidence == pytest.approx(0.5)
        assert draft.data["weekday"] == 3
        assert draft.data["instances"] == 4
        assert len(draft.action_steps) == 5

    def test_three_instances_is_too_few(self, history_of, days_ago) -> None:
        moods = self._wednesdays(days_ago, [4.0] * 3)
        assert day_specific(_context(history_of(moods))) is None

    def test_average_above_limit(self, history_of, days_ago) -> None:
        moods = self._wednesdays(days_ago, [6.1] * 4)
        assert day_specific(_context(history_of(moods))) is None

    def test_today_is_not_an_instance(self, history_of, days_ago, today) -> None:
        moods = self._wednesdays(days_ago, [5.0] * 3)
        moods[today] = 5.0
        assert day_specific(_context(history_of(moods))) is None

    def test_confidence_caps_at_one(self, history_of, days_ago) -> None:
        moods = self._wednesdays(days_ago, [5.0] * 10)
        draft = day_specific(_context(history_of(moods)))
        assert draft is not None
        assert draft.confidence == pytest.approx(1.0)

    def test_other_weekdays_are_ignored(self, history_of, days_ago) -> None:
        moods = {days_ago(7 * i + 1): 3.0 for i in range(6)}
        assert day_specific(_context(history_of(moods))) is None
