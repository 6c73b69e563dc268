"""Read-only access to mood samples and correlation records."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import Iterable

from moodinsights.models import CorrelationRecord, MoodSample, Segment
from moodinsights.storage import KeyValueStore

logger = logging.getLogger(__name__)

MOOD_KEY_PREFIX = "mood_"
CORRELATION_KEY_PREFIX = "correlation_"


class MoodRepository(ABC):
    """Abstract read access to the two record sources the engine consumes.

    Subclasses must implement the single-record lookups.  :meth:`load_window`
    has a day-by-day default built on them; implementations that can scan
    their backing store in one pass should override it.
    """

    @abstractmethod
    def load_mood_sample(self, day: date, segment: Segment) -> MoodSample | None:
        """Return the sample logged for *day* / *segment*, or ``None``."""

    @abstractmethod
    def load_correlation_record(self, day: date) -> CorrelationRecord | None:
        """Return the correlation record for *day*, or ``None``."""

    def load_window(
        self, start: date, end: date
    ) -> tuple[list[MoodSample], list[CorrelationRecord]]:
        """Return every sample and record dated within ``[start, end]``.

        Args:
            start: First day of the window (inclusive).
            end: Last day of the window (inclusive).

        Returns:
            ``(samples, records)`` in ascending date order.
        """
        samples: list[MoodSample] = []
        records: list[CorrelationRecord] = []
        for day in iter_days(start, end):
            for segment in Segment:
                sample = self.load_mood_sample(day, segment)
                if sample is not None:
                    samples.append(sample)
            record = self.load_correlation_record(day)
            if record is not None:
                records.append(record)
        return samples, records


class InMemoryMoodRepository(MoodRepository):
    """Repository over plain lists.  Later duplicates replace earlier ones,
    keeping at most one sample per ``(date, segment)`` and one record per date.

    Args:
        samples: Mood samples to serve.
        records: Correlation records to serve.
    """

    def __init__(
        self,
        samples: Iterable[MoodSample] = (),
        records: Iterable[CorrelationRecord] = (),
    ) -> None:
        self._samples: dict[tuple[date, Segment], MoodSample] = {
            (s.date, s.segment): s for s in samples
        }
        self._records: dict[date, CorrelationRecord] = {r.date: r for r in records}

    def load_mood_sample(self, day: date, segment: Segment) -> MoodSample | None:
        return self._samples.get((day, segment))

    def load_correlation_record(self, day: date) -> CorrelationRecord | None:
        return self._records.get(day)

    def load_window(
        self, start: date, end: date
    ) -> tuple[list[MoodSample], list[CorrelationRecord]]:
        samples = sorted(
            (s for s in self._samples.values() if start <= s.date <= end),
            key=lambda s: (s.date, s.segment),
        )
        records = sorted(
            (r for r in self._records.values() if start <= r.date <= end),
            key=lambda r: r.date,
        )
        return samples, records


class KeyValueMoodRepository(MoodRepository):
    """Repository reading the mobile app's key layout from a key-value store.

    Samples live under ``mood_YYYY-MM-DD_<segment>`` as
    ``{"rating": ..., "note": ...}``; records live under
    ``correlation_YYYY-MM-DD``.  Blobs that fail to parse are logged and
    skipped so one bad entry cannot hide the rest of the window.

    Args:
        store: The backing :class:`~moodinsights.storage.KeyValueStore`.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def load_mood_sample(self, day: date, segment: Segment) -> MoodSample | None:
        blob = self._store.get(mood_key(day, segment))
        if blob is None:
            return None
        return self._parse_sample(blob, day, segment)

    def load_correlation_record(self, day: date) -> CorrelationRecord | None:
        blob = self._store.get(correlation_key(day))
        if blob is None:
            return None
        return self._parse_record(blob, day)

    def load_window(
        self, start: date, end: date
    ) -> tuple[list[MoodSample], list[CorrelationRecord]]:
        """Scan the store once per prefix instead of probing every key."""
        samples: list[MoodSample] = []
        for key in self._store.keys(MOOD_KEY_PREFIX):
            parsed = _parse_mood_key(key)
            if parsed is None:
                continue
            day, segment = parsed
            if not start <= day <= end:
                continue
            blob = self._store.get(key)
            sample = self._parse_sample(blob, day, segment) if blob is not None else None
            if sample is not None:
                samples.append(sample)

        records: list[CorrelationRecord] = []
        for key in self._store.keys(CORRELATION_KEY_PREFIX):
            day = _parse_date(key[len(CORRELATION_KEY_PREFIX):])
            if day is None or not start <= day <= end:
                continue
            blob = self._store.get(key)
            record = self._parse_record(blob, day) if blob is not None else None
            if record is not None:
                records.append(record)

        samples.sort(key=lambda s: (s.date, s.segment))
        records.sort(key=lambda r: r.date)
        return samples, records

    # ------------------------------------------------------------------
    # Writes (seeding and tests; the logging flow owns real writes)
    # ------------------------------------------------------------------

    def save_mood_sample(self, sample: MoodSample) -> None:
        self._store.set(
            mood_key(sample.date, sample.segment),
            {"rating": sample.rating, "note": sample.note or ""},
        )

    def save_correlation_record(self, record: CorrelationRecord) -> None:
        self._store.set(correlation_key(record.date), record.to_dict())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_sample(blob: object, day: date, segment: Segment) -> MoodSample | None:
        if not isinstance(blob, dict) or blob.get("rating") is None:
            return None
        try:
            return MoodSample.from_dict(blob, day, segment)
        except (TypeError, ValueError):
            logger.warning("Skipping unreadable mood sample %s.", mood_key(day, segment))
            return None

    @staticmethod
    def _parse_record(blob: object, day: date) -> CorrelationRecord | None:
        if not isinstance(blob, dict):
            return None
        try:
            return CorrelationRecord.from_dict({**blob, "date": day.isoformat()})
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping unreadable correlation record %s.", correlation_key(day))
            return None


# ---------------------------------------------------------------------------
# Key helpers
# ---------------------------------------------------------------------------


def mood_key(day: date, segment: Segment) -> str:
    return f"{MOOD_KEY_PREFIX}{day.isoformat()}_{int(segment)}"


def correlation_key(day: date) -> str:
    return f"{CORRELATION_KEY_PREFIX}{day.isoformat()}"


def iter_days(start: date, end: date) -> Iterable[date]:
    """Yield every calendar day from *start* to *end* inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def _parse_mood_key(key: str) -> tuple[date, Segment] | None:
    body = key[len(MOOD_KEY_PREFIX):]
    date_part, _, segment_part = body.rpartition("_")
    day = _parse_date(date_part)
    if day is None:
        return None
    try:
        return day, Segment(int(segment_part))
    except ValueError:
        return None


def _parse_date(text: str) -> date | None:
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None
