"""Detectors that relate daily mood to the day's correlation record."""

from __future__ import annotations

import logging
from abc import abstractmethod
from datetime import timedelta
from enum import Enum
from typing import Any

import config
from moodinsights.detectors.base import (
    PatternDetector,
    group_means,
    group_values,
    mean,
    pick_extremes,
    scaled_confidence,
)
from moodinsights.history import MoodHistory
from moodinsights.models import (
    DayAggregate,
    ExerciseLevel,
    PatternKind,
    PatternResult,
    SocialActivity,
    WeatherCondition,
)

logger = logging.getLogger(__name__)


class SleepQualityDetector(PatternDetector):
    """Finds the sleep-quality value that precedes the best next-day mood.

    Each night's ``sleep_quality`` (rounded to one decimal, so every
    observed value is its own bucket) is paired with the *following*
    calendar day's average mood.  The detector reports the best bucket,
    which need not be the highest sleep score.
    """

    name = "sleep_quality"

    def __init__(
        self,
        min_pairs: int = config.SLEEP_MIN_PAIRS,
        min_buckets: int = config.SLEEP_MIN_BUCKETS,
        threshold: float = config.SLEEP_THRESHOLD,
        min_peak_mood: float = config.SLEEP_MIN_PEAK_MOOD,
    ) -> None:
        self.min_pairs = min_pairs
        self.min_buckets = min_buckets
        self.threshold = threshold
        self.min_peak_mood = min_peak_mood

    def detect(self, history: MoodHistory) -> PatternResult | None:
        pairs: list[tuple[float, float]] = []
        for day in history:
            if day.correlation is None or day.correlation.sleep_quality is None:
                continue
            next_day = history.get(day.date + timedelta(days=1))
            if next_day is None or not next_day.has_mood:
                continue
            pairs.append((round(day.correlation.sleep_quality, 1), next_day.average_mood))

        if len(pairs) < self.min_pairs:
            return None

        groups = group_values(pairs)
        means = group_means(groups, order=sorted(groups))
        if len(means) < self.min_buckets:
            return None

        best, worst = pick_extremes(means)
        difference = means[best] - means[worst]
        if difference < self.threshold or means[best] <= self.min_peak_mood:
            return None

        return self._result(
            PatternKind.SLEEP_SWEET_SPOT,
            difference,
            scaled_confidence(difference, len(pairs), 2.0, 10),
            len(pairs),
            optimalSleepQuality=best,
            resultingMood=means[best],
            worstSleepQuality=worst,
            worstMood=means[worst],
            bucketSize=len(groups[best]),
        )


class CategoryEffectDetector(PatternDetector):
    """Shared logic for detectors that group days by a categorical factor.

    Subclasses map a day to its category with :meth:`_category` and choose
    how the effect is measured:

    * with a :attr:`baseline` category the magnitude is
      ``best mean - baseline mean`` (falling back to *default_baseline*
      when the baseline category has too few days);
    * without one it is ``best mean - worst mean``.

    A category qualifies once it has *min_days* days.  At least
    *min_samples* categorised days are needed.  With a baseline, one
    qualifying category is enough as long as a second category was
    observed at all; without one, two qualifying categories are needed.
    """

    kind: PatternKind
    categories: tuple[Enum, ...]
    baseline: Enum | None = None
    magnitude_scale: float = 2.0
    sample_scale: float = 5.0

    def __init__(
        self,
        threshold: float,
        min_samples: int = config.CATEGORY_MIN_SAMPLES,
        min_days: int = config.CATEGORY_MIN_DAYS,
        default_baseline: float = config.DEFAULT_BASELINE_MOOD,
    ) -> None:
        self.threshold = threshold
        self.min_samples = min_samples
        self.min_days = min_days
        self.default_baseline = default_baseline

    @abstractmethod
    def _category(self, day: DayAggregate) -> Enum | None:
        """Return the day's category, or ``None`` when it was not recorded."""

    def detect(self, history: MoodHistory) -> PatternResult | None:
        pairs = []
        for day in history.logged_days():
            category = self._category(day)
            if category is not None:
                pairs.append((category, day.average_mood))
        if len(pairs) < self.min_samples:
            return None

        groups = group_values(pairs)
        means = group_means(groups, self.min_days, order=self.categories)
        if self.baseline is not None:
            # One qualifying category is enough when it can face the baseline.
            if len(groups) < 2 or not means:
                return None
        elif len(means) < 2:
            return None

        best, worst = pick_extremes(means)
        if self.baseline is not None:
            reference = self.baseline
            reference_mood = means.get(self.baseline, self.default_baseline)
            samples = len(groups[best])
        else:
            reference = worst
            reference_mood = means[worst]
            samples = len(groups[best]) + len(groups[worst])

        magnitude = means[best] - reference_mood
        if best == reference or magnitude < self.threshold:
            return None

        return self._result(
            self.kind,
            magnitude,
            scaled_confidence(magnitude, samples, self.magnitude_scale, self.sample_scale),
            samples,
            **self._payload(best, worst, means, reference_mood),
        )

    def _payload(
        self,
        best: Enum,
        worst: Enum,
        means: dict[Any, float],
        reference_mood: float,
    ) -> dict[str, Any]:
        return {
            "best": best.value,
            "worst": worst.value,
            "bestMood": means[best],
            "worstMood": means[worst],
            "baselineMood": reference_mood,
            "averages": {k.value: v for k, v in means.items()},
        }


class ExerciseDetector(CategoryEffectDetector):
    """Exercise level with the best mood, measured against rest days."""

    name = "exercise"
    kind = PatternKind.EXERCISE
    categories = tuple(ExerciseLevel)
    baseline = ExerciseLevel.NONE

    def __init__(self, threshold: float = config.EXERCISE_THRESHOLD, **kwargs: Any) -> None:
        super().__init__(threshold, **kwargs)

    def _category(self, day: DayAggregate) -> Enum | None:
        return day.correlation.exercise_level if day.correlation else None


class WeatherDetector(CategoryEffectDetector):
    """Worst versus best weather condition."""

    name = "weather"
    kind = PatternKind.WEATHER
    categories = tuple(WeatherCondition)
    magnitude_scale = 2.5
    sample_scale = 8.0

    def __init__(self, threshold: float = config.WEATHER_THRESHOLD, **kwargs: Any) -> None:
        super().__init__(threshold, **kwargs)

    def _category(self, day: DayAggregate) -> Enum | None:
        return day.correlation.weather if day.correlation else None


class SocialActivityDetector(CategoryEffectDetector):
    """Primary social activity with the best mood, measured against solo days."""

    name = "social_activity"
    kind = PatternKind.SOCIAL
    categories = tuple(SocialActivity)
    baseline = SocialActivity.NONE

    def __init__(self, threshold: float = config.SOCIAL_THRESHOLD, **kwargs: Any) -> None:
        super().__init__(threshold, **kwargs)

    def _category(self, day: DayAggregate) -> Enum | None:
        return day.correlation.primary_social_activity if day.correlation else None


class WorkStressDetector(PatternDetector):
    """Compares mood on high-stress days (>= *high*) with low-stress days (<= *low*)."""

    name = "work_stress"

    def __init__(
        self,
        high: int = config.WORK_STRESS_HIGH,
        low: int = config.WORK_STRESS_LOW,
        min_days: int = config.WORK_STRESS_MIN_DAYS,
        threshold: float = config.WORK_STRESS_THRESHOLD,
    ) -> None:
        self.high = high
        self.low = low
        self.min_days = min_days
        self.threshold = threshold

    def detect(self, history: MoodHistory) -> PatternResult | None:
        high_days: list[float] = []
        low_days: list[float] = []
        for day in history.logged_days():
            stress = day.correlation.work_stress if day.correlation else None
            if stress is None:
                continue
            if stress >= self.high:
                high_days.append(day.average_mood)
            elif stress <= self.low:
                low_days.append(day.average_mood)

        if len(high_days) < self.min_days or len(low_days) < self.min_days:
            return None

        high_avg, low_avg = mean(high_days), mean(low_days)
        impact = low_avg - high_avg
        if impact < self.threshold:
            return None

        samples = len(high_days) + len(low_days)
        return self._result(
            PatternKind.WORK_STRESS,
            impact,
            scaled_confidence(impact, samples, 2.0, 8),
            samples,
            impact=impact,
            highStressAvg=high_avg,
            lowStressAvg=low_avg,
            highStressDays=len(high_days),
            lowStressDays=len(low_days),
        )
