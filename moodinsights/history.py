"""Joins mood samples and correlation records into per-day aggregates."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, Iterator

from moodinsights.models import CorrelationRecord, DayAggregate, MoodSample
from moodinsights.repository import MoodRepository

logger = logging.getLogger(__name__)


class MoodHistory:
    """An ordered, read-only collection of :class:`DayAggregate` objects.

    Only days that have at least one sample or a correlation record are
    stored.  *today* anchors the relative windows ("last 7 days") used by
    detectors and checks; it does not have to be present in the data.

    Args:
        today: The reference day of the analysis run.
        days: Day aggregates in any order.  Duplicate dates are not allowed.
    """

    def __init__(self, today: date, days: Iterable[DayAggregate] = ()) -> None:
        self.today = today
        self._days: dict[date, DayAggregate] = {}
        for day in sorted(days, key=lambda d: d.date):
            if day.date in self._days:
                raise ValueError(f"Duplicate day aggregate for {day.date}")
            self._days[day.date] = day

    @classmethod
    def from_records(
        cls,
        today: date,
        samples: Iterable[MoodSample],
        records: Iterable[CorrelationRecord] = (),
    ) -> MoodHistory:
        """Join raw samples and records into day aggregates.

        A second sample for the same ``(date, segment)`` replaces the first.
        """
        days: dict[date, DayAggregate] = {}
        for sample in samples:
            day = days.setdefault(sample.date, DayAggregate(date=sample.date))
            day.moods[sample.segment] = sample.rating
        for record in records:
            day = days.setdefault(record.date, DayAggregate(date=record.date))
            day.correlation = record
        return cls(today, days.values())

    def __len__(self) -> int:
        return len(self._days)

    def __iter__(self) -> Iterator[DayAggregate]:
        return iter(self._days.values())

    @property
    def days(self) -> list[DayAggregate]:
        """All stored days, ascending by date."""
        return list(self._days.values())

    def get(self, day: date) -> DayAggregate | None:
        return self._days.get(day)

    def logged_days(self) -> list[DayAggregate]:
        """Days with at least one mood sample, ascending by date."""
        return [d for d in self._days.values() if d.has_mood]

    def between(self, start: date, end: date) -> MoodHistory:
        """Return the sub-history dated within ``[start, end]``."""
        return MoodHistory(
            self.today, (d for d in self._days.values() if start <= d.date <= end)
        )

    def trailing(self, n_days: int) -> MoodHistory:
        """Return the last *n_days* calendar days ending on :attr:`today`."""
        return self.between(self.today - timedelta(days=n_days - 1), self.today)


def load_history(repository: MoodRepository, today: date, n_days: int) -> MoodHistory:
    """Fetch the *n_days* window ending on *today* in one bulk call.

    Args:
        repository: The data source.
        today: Last day of the window (inclusive).
        n_days: Window length in calendar days.

    Returns:
        A :class:`MoodHistory` anchored on *today*.
    """
    start = today - timedelta(days=n_days - 1)
    samples, records = repository.load_window(start, today)
    logger.debug(
        "Loaded %d samples and %d correlation records for %s..%s.",
        len(samples), len(records), start, today,
    )
    return MoodHistory.from_records(today, samples, records)


def current_streak(
    repository: MoodRepository,
    history: MoodHistory,
    window_days: int,
    max_days: int,
) -> int:
    """Count consecutive logged days ending on ``history.today``.

    Starts from the already-loaded *history*; when the streak runs into the
    start of that window, earlier windows of the same length are fetched
    until the streak breaks or *max_days* is reached.

    Args:
        repository: The data source used for the extra fetches.
        history: The analysis history already in memory.
        window_days: How many days ending on ``history.today`` *history*
            was loaded for; also the size of each extra fetch.
        max_days: Upper bound on the streak length to look for.

    Returns:
        Number of consecutive days, including today, with at least one sample.
    """
    logged = {d.date for d in history.logged_days()}
    chunk = max(window_days, 1)
    window_start = history.today - timedelta(days=chunk - 1)

    streak = 0
    cursor = history.today
    while streak < max_days:
        if cursor < window_start:
            fetch_end = window_start - timedelta(days=1)
            window_start = fetch_end - timedelta(days=chunk - 1)
            samples, _ = repository.load_window(window_start, fetch_end)
            logged.update(s.date for s in samples)
        if cursor not in logged:
            break
        streak += 1
        cursor -= timedelta(days=1)
    return streak
