"""Detectors that compare mood across time: segments, weekdays and weeks."""

from __future__ import annotations

import logging
from datetime import timedelta

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
from moodinsights.models import PatternKind, PatternResult, Segment

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)


class TimeOfDayDetector(PatternDetector):
    """Finds the logging segment with the highest mean rating.

    Every rating counts individually (not the day average).  A segment
    qualifies once it has *min_ratings* ratings; at least two segments must
    qualify.  Fires when the best and worst segment means differ by at
    least *threshold* points.
    """

    name = "time_of_day"

    def __init__(
        self,
        min_ratings: int = config.TIME_OF_DAY_MIN_RATINGS,
        threshold: float = config.TIME_OF_DAY_THRESHOLD,
    ) -> None:
        self.min_ratings = min_ratings
        self.threshold = threshold

    def detect(self, history: MoodHistory) -> PatternResult | None:
        groups = group_values(
            (segment, rating)
            for day in history.logged_days()
            for segment, rating in day.moods.items()
        )
        means = group_means(groups, self.min_ratings, order=list(Segment))
        if len(means) < 2:
            return None

        best, worst = pick_extremes(means)
        difference = means[best] - means[worst]
        if difference < self.threshold:
            return None

        samples = len(groups[best]) + len(groups[worst])
        return self._result(
            PatternKind.TIME_OF_DAY,
            difference,
            scaled_confidence(difference, samples, 3.0, 10),
            samples,
            bestSegment=int(best),
            worstSegment=int(worst),
            bestTime=best.label,
            worstTime=worst.label,
            bestAverage=means[best],
            worstAverage=means[worst],
            segmentAverages={s.label: m for s, m in means.items()},
        )


class WeekdayDetector(PatternDetector):
    """Finds the day of the week with the highest mean daily mood.

    A weekday qualifies once *min_days* logged days fall on it; at least
    *min_coverage* distinct weekdays must qualify.
    """

    name = "weekday"

    def __init__(
        self,
        min_days: int = config.WEEKDAY_MIN_DAYS,
        min_coverage: int = config.WEEKDAY_MIN_COVERAGE,
        threshold: float = config.WEEKDAY_THRESHOLD,
    ) -> None:
        self.min_days = min_days
        self.min_coverage = min_coverage
        self.threshold = threshold

    def detect(self, history: MoodHistory) -> PatternResult | None:
        groups = group_values(
            (day.date.weekday(), day.average_mood) for day in history.logged_days()
        )
        means = group_means(groups, self.min_days, order=range(7))
        if len(means) < self.min_coverage:
            return None

        best, worst = pick_extremes(means)
        difference = means[best] - means[worst]
        if difference < self.threshold:
            return None

        samples = sum(len(groups[d]) for d in means)
        return self._result(
            PatternKind.WEEKDAY,
            difference,
            scaled_confidence(difference, samples, 2.0, 14),
            samples,
            bestDay=best + 1,
            worstDay=worst + 1,
            bestDayName=WEEKDAY_NAMES[best],
            worstDayName=WEEKDAY_NAMES[worst],
            bestAverage=means[best],
            worstAverage=means[worst],
        )


def split_last_two_weeks(history: MoodHistory) -> tuple[list[float], list[float]]:
    """Return daily averages for ``(this week, last week)``.

    "This week" is the seven calendar days ending on ``history.today``;
    "last week" the seven before that.  Unlogged days are skipped.
    """
    today = history.today
    recent = history.between(today - timedelta(days=6), today)
    previous = history.between(today - timedelta(days=13), today - timedelta(days=7))
    return (
        [d.average_mood for d in recent.logged_days()],
        [d.average_mood for d in previous.logged_days()],
    )


class RecentTrendDetector(PatternDetector):
    """Compares this week's mean daily mood with last week's, both directions."""

    name = "recent_trend"

    def __init__(
        self,
        min_days: int = config.TREND_MIN_DAYS,
        threshold: float = config.TREND_THRESHOLD,
    ) -> None:
        self.min_days = min_days
        self.threshold = threshold

    def detect(self, history: MoodHistory) -> PatternResult | None:
        recent, previous = split_last_two_weeks(history)
        if len(recent) < self.min_days or len(previous) < self.min_days:
            return None

        recent_avg, previous_avg = mean(recent), mean(previous)
        change = recent_avg - previous_avg
        if abs(change) < self.threshold:
            return None

        kind = PatternKind.TREND_IMPROVING if change > 0 else PatternKind.TREND_DECLINING
        samples = len(recent) + len(previous)
        return self._result(
            kind,
            abs(change),
            scaled_confidence(abs(change), samples, 2.0, 14),
            samples,
            recentAverage=recent_avg,
            previousAverage=previous_avg,
            change=change,
        )


class EarlyWarningDetector(PatternDetector):
    """Flags a week-over-week decline large enough to be a concern.

    Same comparison as :class:`RecentTrendDetector` with a lower minimum
    day count and a higher threshold, and only for declines.
    """

    name = "early_warning"

    def __init__(
        self,
        min_days: int = config.EARLY_WARNING_MIN_DAYS,
        threshold: float = config.EARLY_WARNING_THRESHOLD,
    ) -> None:
        self.min_days = min_days
        self.threshold = threshold

    def detect(self, history: MoodHistory) -> PatternResult | None:
        recent, previous = split_last_two_weeks(history)
        if len(recent) < self.min_days or len(previous) < self.min_days:
            return None

        recent_avg, previous_avg = mean(recent), mean(previous)
        decline = previous_avg - recent_avg
        if decline < self.threshold:
            return None

        samples = len(recent) + len(previous)
        return self._result(
            PatternKind.EARLY_WARNING,
            decline,
            scaled_confidence(decline, samples, 2.0, 14),
            samples,
            decline=decline,
            thisWeekAverage=recent_avg,
            lastWeekAverage=previous_avg,
        )


class ProgressDetector(PatternDetector):
    """Compares the earliest and latest thirds of the logged days in the window."""

    name = "progress"

    def __init__(
        self,
        min_days: int = config.PROGRESS_MIN_DAYS,
        threshold: float = config.PROGRESS_THRESHOLD,
    ) -> None:
        self.min_days = min_days
        self.threshold = threshold

    def detect(self, history: MoodHistory) -> PatternResult | None:
        averages = [d.average_mood for d in history.logged_days()]
        if len(averages) < self.min_days:
            return None

        third = len(averages) // 3
        early_avg = mean(averages[:third])
        middle_avg = mean(averages[third:third * 2])
        recent_avg = mean(averages[third * 2:])
        change = recent_avg - early_avg
        if abs(change) < self.threshold:
            return None

        kind = (
            PatternKind.PROGRESS_IMPROVING if change > 0 else PatternKind.PROGRESS_DECLINING
        )
        return self._result(
            kind,
            abs(change),
            scaled_confidence(abs(change), len(averages), 2.0, 30),
            len(averages),
            earlyAverage=early_avg,
            middleAverage=middle_avg,
            recentAverage=recent_avg,
            change=change,
            recentTrend=recent_avg - middle_avg,
        )
