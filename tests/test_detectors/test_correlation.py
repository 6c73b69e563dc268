"""Tests for the correlation-record detectors."""

from __future__ import annotations

from datetime import timedelta

import pytest

from moodinsights.detectors.correlation import (
    ExerciseDetector,
    SleepQualityDetector,
    SocialActivityDetector,
    WeatherDetector,
    WorkStressDetector,
)
from moodinsights.models import (
    CorrelationRecord,
    ExerciseLevel,
    PatternKind,
    SocialActivity,
    WeatherCondition,
)


def _categorised(days_ago, entries):
    """Turn ``[(mood, record_kwargs), ...]`` into moods and records, one per day."""
    moods, records = {}, []
    for i, (mood, kwargs) in enumerate(entries):
        day = days_ago(i + 1)
        moods[day] = mood
        records.append(CorrelationRecord(date=day, **kwargs))
    return moods, records


def _sleep_nights(days_ago, nights):
    """``[(sleep_quality, next_day_mood), ...]``, one night every other day."""
    moods, records = {}, []
    for i, (quality, next_mood) in enumerate(nights):
        night = days_ago(2 * i + 2)
        records.append(CorrelationRecord(date=night, sleep_quality=quality))
        moods[night + timedelta(days=1)] = next_mood
    return moods, records


# ---------------------------------------------------------------------------
# SleepQualityDetector
# ---------------------------------------------------------------------------


class TestSleepQualityDetector:
    def test_reports_best_bucket_not_highest_sleep(self, history_of, days_ago) -> None:
        nights = [(5.0, 5.0), (7.0, 8.0), (9.0, 7.0)] * 3
        moods, records = _sleep_nights(days_ago, nights)
        result = SleepQualityDetector().detect(history_of(moods, records))
        assert result is not None
        assert result.kind is PatternKind.SLEEP_SWEET_SPOT
        assert result.data["optimalSleepQuality"] == 7.0
        assert result.data["resultingMood"] == pytest.approx(8.0)
        assert result.magnitude == pytest.approx(3.0)
        assert result.sample_count == 9

    def test_uses_next_day_mood(self, history_of, days_ago) -> None:
        nights = [(5.0, 5.0), (7.0, 8.0), (9.0, 7.0)] * 2
        moods, records = _sleep_nights(days_ago, nights)
        # Same-day moods on the nights themselves must not be paired.
        for record in records:
            moods[record.date] = 1.0
        result = SleepQualityDetector().detect(history_of(moods, records))
        assert result is not None
        assert result.data["optimalSleepQuality"] == 7.0

    def test_gate_on_pairs(self, history_of, days_ago) -> None:
        nights = [(5.0, 5.0), (7.0, 8.0), (9.0, 7.0), (7.0, 8.0)]
        moods, records = _sleep_nights(days_ago, nights)
        assert SleepQualityDetector().detect(history_of(moods, records)) is None

    def test_gate_on_buckets(self, history_of, days_ago) -> None:
        nights = [(5.0, 5.0), (7.0, 8.0)] * 4
        moods, records = _sleep_nights(days_ago, nights)
        assert SleepQualityDetector().detect(history_of(moods, records)) is None

    def test_best_bucket_must_be_a_good_mood(self, history_of, days_ago) -> None:
        nights = [(5.0, 4.0), (7.0, 6.0), (9.0, 5.0)] * 3
        moods, records = _sleep_nights(days_ago, nights)
        assert SleepQualityDetector().detect(history_of(moods, records)) is None


# ---------------------------------------------------------------------------
# Category detectors
# ---------------------------------------------------------------------------


class TestExerciseDetector:
    def test_boost_over_rest_days(self, history_of, days_ago) -> None:
        moods, records = _categorised(days_ago, [
            (5.0, {"exercise_level": ExerciseLevel.NONE}),
            (5.0, {"exercise_level": ExerciseLevel.NONE}),
            (7.0, {"exercise_level": ExerciseLevel.MODERATE}),
            (7.0, {"exercise_level": ExerciseLevel.MODERATE}),
        ])
        result = ExerciseDetector().detect(history_of(moods, records))
        assert result is not None
        assert result.kind is PatternKind.EXERCISE
        assert result.data["best"] == "moderate"
        assert result.data["baselineMood"] == pytest.approx(5.0)
        assert result.magnitude == pytest.approx(2.0)

    def test_default_baseline_without_rest_days(self, history_of, days_ago) -> None:
        moods, records = _categorised(days_ago, [
            (6.5, {"exercise_level": ExerciseLevel.LIGHT}),
            (6.5, {"exercise_level": ExerciseLevel.LIGHT}),
            (7.5, {"exercise_level": ExerciseLevel.INTENSE}),
            (7.5, {"exercise_level": ExerciseLevel.INTENSE}),
        ])
        result = ExerciseDetector().detect(history_of(moods, records))
        assert result is not None
        assert result.data["baselineMood"] == pytest.approx(6.0)
        assert result.magnitude == pytest.approx(1.5)

    def test_rest_days_best_is_no_signal(self, history_of, days_ago) -> None:
        moods, records = _categorised(days_ago, [
            (8.0, {"exercise_level": ExerciseLevel.NONE}),
            (8.0, {"exercise_level": ExerciseLevel.NONE}),
            (5.0, {"exercise_level": ExerciseLevel.LIGHT}),
            (5.0, {"exercise_level": ExerciseLevel.LIGHT}),
        ])
        assert ExerciseDetector().detect(history_of(moods, records)) is None

    def test_gate_on_samples(self, history_of, days_ago) -> None:
        moods, records = _categorised(days_ago, [
            (5.0, {"exercise_level": ExerciseLevel.NONE}),
            (5.0, {"exercise_level": ExerciseLevel.NONE}),
            (8.0, {"exercise_level": ExerciseLevel.MODERATE}),
        ])
        assert ExerciseDetector().detect(history_of(moods, records)) is None

    def test_days_without_mood_are_ignored(self, history_of, days_ago) -> None:
        records = [
            CorrelationRecord(date=days_ago(i), exercise_level=ExerciseLevel.INTENSE)
            for i in range(6)
        ]
        assert ExerciseDetector().detect(history_of({}, records)) is None


    def test_single_qualifying_category_against_default_baseline(
        self, history_of, days_ago
    ) -> None:
        moods, records = _categorised(days_ago, [
            (7.5, {"exercise_level": ExerciseLevel.INTENSE}),
            (7.5, {"exercise_level": ExerciseLevel.INTENSE}),
            (7.5, {"exercise_level": ExerciseLevel.INTENSE}),
            (7.5, {"exercise_level": ExerciseLevel.INTENSE}),
            (5.0, {"exercise_level": ExerciseLevel.NONE}),
        ])
        result = ExerciseDetector().detect(history_of(moods, records))
        assert result is not None
        assert result.data["best"] == "intense"
        assert result.data["baselineMood"] == pytest.approx(6.0)
        assert result.magnitude == pytest.approx(1.5)
        assert result.sample_count == 4

    def test_one_observed_category_is_no_signal(self, history_of, days_ago) -> None:
        moods, records = _categorised(days_ago, [
            (7.5, {"exercise_level": ExerciseLevel.INTENSE}),
        ] * 5)
        assert ExerciseDetector().detect(history_of(moods, records)) is None

class TestWeatherDetector:
    def test_worst_versus_best(self, history_of, days_ago) -> None:
        moods, records = _categorised(days_ago, [
            (8.0, {"weather": WeatherCondition.SUNNY}),
            (8.0, {"weather": WeatherCondition.SUNNY}),
            (5.0, {"weather": WeatherCondition.RAINY}),
            (5.0, {"weather": WeatherCondition.RAINY}),
            (6.5, {"weather": WeatherCondition.CLOUDY}),
        ])
        result = WeatherDetector().detect(history_of(moods, records))
        assert result is not None
        assert result.kind is PatternKind.WEATHER
        assert result.data["best"] == "sunny"
        assert result.data["worst"] == "rainy"
        assert result.magnitude == pytest.approx(3.0)
        assert result.sample_count == 4

    def test_below_threshold(self, history_of, days_ago) -> None:
        moods, records = _categorised(days_ago, [
            (7.0, {"weather": WeatherCondition.SUNNY}),
            (7.0, {"weather": WeatherCondition.SUNNY}),
            (6.5, {"weather": WeatherCondition.FOGGY}),
            (6.5, {"weather": WeatherCondition.FOGGY}),
        ])
        assert WeatherDetector().detect(history_of(moods, records)) is None


class TestSocialActivityDetector:
    def test_uses_first_non_none_activity(self, history_of, days_ago) -> None:
        friends_first = (SocialActivity.NONE, SocialActivity.FRIENDS, SocialActivity.WORK)
        moods, records = _categorised(days_ago, [
            (8.0, {"social_activities": friends_first}),
            (8.0, {"social_activities": friends_first}),
            (6.0, {"social_activities": (SocialActivity.NONE,)}),
            (6.0, {"social_activities": (SocialActivity.NONE,)}),
        ])
        result = SocialActivityDetector().detect(history_of(moods, records))
        assert result is not None
        assert result.kind is PatternKind.SOCIAL
        assert result.data["best"] == "friends"
        assert result.magnitude == pytest.approx(2.0)

    def test_empty_activity_list_is_skipped(self, history_of, days_ago) -> None:
        moods, records = _categorised(days_ago, [
            (9.0, {"social_activities": ()}),
            (9.0, {"social_activities": ()}),
            (8.0, {"social_activities": (SocialActivity.FAMILY,)}),
            (8.0, {"social_activities": (SocialActivity.FAMILY,)}),
        ])
        assert SocialActivityDetector().detect(history_of(moods, records)) is None


class TestWorkStressDetector:
    def test_high_stress_lowers_mood(self, history_of, days_ago) -> None:
        moods, records = _categorised(days_ago, [
            (4.5, {"work_stress": 8}),
            (4.5, {"work_stress": 9}),
            (7.0, {"work_stress": 3}),
            (7.0, {"work_stress": 2}),
            (1.0, {"work_stress": 5}),
        ])
        result = WorkStressDetector().detect(history_of(moods, records))
        assert result is not None
        assert result.kind is PatternKind.WORK_STRESS
        assert result.data["impact"] == pytest.approx(2.5)
        assert result.sample_count == 4

    def test_gate_needs_two_high_stress_days(self, history_of, days_ago) -> None:
        moods, records = _categorised(days_ago, [
            (4.5, {"work_stress": 8}),
            (7.0, {"work_stress": 3}),
            (7.0, {"work_stress": 2}),
        ])
        assert WorkStressDetector().detect(history_of(moods, records)) is None

    def test_boundary_values_are_inclusive(self, history_of, days_ago) -> None:
        moods, records = _categorised(days_ago, [
            (5.0, {"work_stress": 7}),
            (5.0, {"work_stress": 7}),
            (6.0, {"work_stress": 4}),
            (6.0, {"work_stress": 4}),
        ])
        result = WorkStressDetector().detect(history_of(moods, records))
        assert result is not None
        assert result.magnitude == pytest.approx(1.0)
