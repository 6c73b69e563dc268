"""Weekly and monthly summary reports."""

from __future__ import annotations

import calendar
import logging
from datetime import date, timedelta
from typing import Sequence

import config
from moodinsights.detectors.base import group_means, group_values, mean, pick_extremes
from moodinsights.history import MoodHistory
from moodinsights.models import DayAggregate, MonthlySummary, Segment, Trend, WeeklySummary
from moodinsights.repository import MoodRepository

logger = logging.getLogger(__name__)

_DAYS_PER_WEEK = 7


def week_start_for(day: date) -> date:
    """Monday of the calendar week containing *day*."""
    return day - timedelta(days=day.weekday())


def month_start_for(day: date) -> date:
    return day.replace(day=1)


def classify_trend(
    daily_averages: Sequence[float],
    min_days: int = config.SUMMARY_TREND_MIN_DAYS,
    threshold: float = config.SUMMARY_TREND_THRESHOLD,
) -> Trend:
    """Compare the first and second half of chronologically ordered averages.

    The split point is ``len // 2``, so an odd count puts the extra day in
    the second half.  Fewer than *min_days* values is always stable.
    """
    if len(daily_averages) < min_days:
        return Trend.STABLE
    split = len(daily_averages) // 2
    first, second = mean(daily_averages[:split]), mean(daily_averages[split:])
    if second - first >= threshold:
        return Trend.IMPROVING
    if first - second >= threshold:
        return Trend.DECLINING
    return Trend.STABLE


class SummaryReporter:
    """Builds :class:`WeeklySummary` and :class:`MonthlySummary` reports.

    Each report is computed fresh from one bulk repository fetch covering
    exactly the report window.  Days without any mood sample are excluded
    from every average rather than counted as zero.

    Args:
        repository: The :class:`~moodinsights.repository.MoodRepository`.
    """

    def __init__(self, repository: MoodRepository) -> None:
        self._repository = repository

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def weekly_summary(self, week_start: date) -> WeeklySummary:
        """Summarise the seven days starting on *week_start*.

        Args:
            week_start: First day of the window.  Any weekday is accepted;
                callers default it to the current Monday.

        Returns:
            A :class:`~moodinsights.models.WeeklySummary`.  An empty window
            yields zero statistics, a stable trend and one onboarding
            highlight and recommendation.
        """
        week_end = week_start + timedelta(days=_DAYS_PER_WEEK - 1)
        days = self._logged_days(week_start, week_end)

        if not days:
            return WeeklySummary(
                week_start=week_start,
                week_end=week_end,
                average_mood=0.0,
                days_logged=0,
                total_days=_DAYS_PER_WEEK,
                best_day=0.0,
                worst_day=0.0,
                trend=Trend.STABLE,
                highlights=["Start logging to see insights"],
                concerns=[],
                recommendations=["Begin tracking your moods daily"],
            )

        averages = [d.average_mood for d in days]
        average = mean(averages)
        best, worst = max(averages), min(averages)
        trend = classify_trend(averages)

        highlights: list[str] = []
        concerns: list[str] = []
        recommendations: list[str] = []

        if average >= 7.5:
            highlights.append(f"Great week! Your average mood was {average:.1f}")
        if len(days) >= 6:
            highlights.append(f"Excellent consistency - logged {len(days)}/7 days")
        if best >= 9.0:
            highlights.append(f"You had an amazing day with {best:.1f} average mood!")

        if trend is Trend.IMPROVING:
            highlights.append("Your mood improved throughout the week")
        elif trend is Trend.DECLINING:
            concerns.append("Your mood declined this week - consider self-care")
            recommendations.append("Try activities that usually boost your mood")

        if len(days) < 5:
            recommendations.append("Try to log moods more consistently")

        return WeeklySummary(
            week_start=week_start,
            week_end=week_end,
            average_mood=average,
            days_logged=len(days),
            total_days=_DAYS_PER_WEEK,
            best_day=best,
            worst_day=worst,
            trend=trend,
            highlights=highlights,
            concerns=concerns,
            recommendations=recommendations,
        )

    def monthly_summary(self, month_start: date) -> MonthlySummary:
        """Summarise the calendar month containing *month_start*.

        Args:
            month_start: Any day of the month; it is normalised to the 1st.

        Returns:
            A :class:`~moodinsights.models.MonthlySummary`.
        """
        month_start = month_start_for(month_start)
        total_days = calendar.monthrange(month_start.year, month_start.month)[1]
        month_end = month_start + timedelta(days=total_days - 1)
        days = self._logged_days(month_start, month_end)

        if not days:
            return MonthlySummary(
                month_start=month_start,
                month_end=month_end,
                average_mood=0.0,
                days_logged=0,
                total_days=total_days,
                streak_days=0,
                time_of_day_averages={},
                best_week="",
                worst_week="",
                trend=Trend.STABLE,
                achievements=["Ready to start your mood tracking journey"],
                insights=[],
                goals_for_next_month=["Log your mood at least once a day"],
            )

        averages = [d.average_mood for d in days]
        average = mean(averages)
        streak = _longest_run(days)
        segment_means = group_means(
            group_values(
                (segment, rating) for d in days for segment, rating in d.moods.items()
            ),
            order=list(Segment),
        )
        week_means = group_means(
            group_values((week_start_for(d.date), d.average_mood) for d in days)
        )
        best_week, worst_week = pick_extremes(week_means)
        trend = classify_trend(averages)

        achievements: list[str] = []
        if average >= 7.0:
            achievements.append(f"Strong month! Your average mood was {average:.1f}")
        if len(days) >= 20:
            achievements.append(f"Dedicated tracker - logged {len(days)}/{total_days} days")
        if streak >= 7:
            achievements.append(f"Longest streak this month: {streak} days in a row")

        insights: list[str] = []
        if len(segment_means) >= 2:
            top, low = pick_extremes(segment_means)
            if segment_means[top] - segment_means[low] >= 1.0:
                insights.append(
                    f"You tend to feel best in the {top.label.lower()} "
                    f"({segment_means[top]:.1f}) and lowest in the "
                    f"{low.label.lower()} ({segment_means[low]:.1f})"
                )
        if trend is Trend.IMPROVING:
            insights.append("Your mood improved over the course of the month")
        elif trend is Trend.DECLINING:
            insights.append("Your mood dipped over the course of the month")

        goals: list[str] = []
        if len(days) < total_days / 2:
            goals.append(f"Log your mood on at least {total_days // 2 + 1} days next month")
        if average < 5.5:
            goals.append("Plan one mood-boosting activity every week")
        if not goals:
            goals.append("Keep your current routine going")

        return MonthlySummary(
            month_start=month_start,
            month_end=month_end,
            average_mood=average,
            days_logged=len(days),
            total_days=total_days,
            streak_days=streak,
            time_of_day_averages={s.label: m for s, m in segment_means.items()},
            best_week=_week_label(best_week),
            worst_week=_week_label(worst_week),
            trend=trend,
            achievements=achievements,
            insights=insights,
            goals_for_next_month=goals,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _logged_days(self, start: date, end: date) -> list[DayAggregate]:
        samples, records = self._repository.load_window(start, end)
        history = MoodHistory.from_records(end, samples, records)
        days = history.logged_days()
        logger.debug("Summary window %s..%s: %d logged days.", start, end, len(days))
        return days


def _longest_run(days: Sequence[DayAggregate]) -> int:
    longest = current = 0
    previous: date | None = None
    for day in days:
        if previous is not None and day.date - previous == timedelta(days=1):
            current += 1
        else:
            current = 1
        longest = max(longest, current)
        previous = day.date
    return longest


def _week_label(week_start: date) -> str:
    return f"Week of {week_start.isoformat()}"
