"""Persisted insight list, last-analysis marker and per-category settings."""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime, timedelta
from typing import Any, Iterable

import config
from moodinsights.models import Insight
from moodinsights.storage import KeyValueStore

logger = logging.getLogger(__name__)

INSIGHTS_KEY = "smart_insights"
LAST_ANALYSIS_KEY = "last_analysis_date"
SETTINGS_KEY = "insights_settings"

DEFAULT_SETTINGS: dict[str, bool] = {
    "patternAlerts": True,
    "celebrations": True,
}


class InsightStore:
    """Thread-safe wrapper over the key-value substrate for insight data.

    Every read-merge-write sequence runs under one re-entrant lock, so two
    generation passes (or a pass and a ``mark_read``) cannot interleave
    their merges and resurrect a stale copy of an insight.

    Reads never raise: a missing or corrupt blob is logged and treated as
    empty.  Writes propagate any storage failure to the caller.

    Args:
        store: The backing :class:`~moodinsights.storage.KeyValueStore`.
        retention_days: Insights created more than this many days before
            the save time are dropped on every save.
    """

    def __init__(
        self,
        store: KeyValueStore,
        retention_days: int = config.INSIGHT_RETENTION_DAYS,
    ) -> None:
        self._store = store
        self._retention = timedelta(days=retention_days)
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Insights
    # ------------------------------------------------------------------

    def load(self) -> list[Insight]:
        """Return every stored insight, newest first.

        Entries that fail to parse are skipped; a blob that is not a list
        yields an empty result.
        """
        with self._lock:
            try:
                blob = self._store.get(INSIGHTS_KEY)
            except Exception:
                logger.exception("Failed to read stored insights.")
                return []
        if blob is None:
            return []
        if not isinstance(blob, list):
            logger.warning("Stored insights are not a list; ignoring them.")
            return []

        insights: list[Insight] = []
        for entry in blob:
            try:
                insights.append(Insight.from_dict(entry))
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.warning("Skipping unreadable stored insight: %r", entry)
        insights.sort(key=lambda i: i.created_at.timestamp(), reverse=True)
        return insights

    def save(self, new_insights: Iterable[Insight], now: datetime) -> list[Insight]:
        """Merge *new_insights* into the stored list and persist it.

        Stored and new insights are de-duplicated by id with the new copy
        winning (a read flag already stored under the same id is kept),
        then anything created before ``now - retention_days`` is
        dropped.  Saving the same batch twice leaves the store unchanged.

        Args:
            new_insights: Insights produced by the current pass.
            now: The reference time for retention (timezone-aware).

        Returns:
            The persisted list, newest first.

        Raises:
            OSError: If the backing store cannot write.
            TypeError: If an insight payload is not JSON-serialisable.
        """
        with self._lock:
            merged: dict[str, Insight] = {i.id: i for i in self.load()}
            for insight in new_insights:
                stored = merged.get(insight.id)
                if stored is not None and stored.is_read and not insight.is_read:
                    insight = insight.mark_as_read()
                merged[insight.id] = insight
            cutoff = now - self._retention
            kept = [i for i in merged.values() if _aware(i.created_at, now) >= cutoff]
            kept.sort(key=lambda i: i.created_at.timestamp(), reverse=True)
            self._store.set(INSIGHTS_KEY, [i.to_dict() for i in kept])

        dropped = len(merged) - len(kept)
        logger.debug(
            "Saved %d insights (%d expired beyond %s).",
            len(kept), dropped, self._retention,
        )
        return kept

    def mark_read(self, insight_id: str) -> Insight:
        """Persist the read flag for one insight.

        Raises:
            KeyError: If no stored insight has *insight_id*.
            OSError: If the backing store cannot write.
        """
        with self._lock:
            insights = self.load()
            for index, insight in enumerate(insights):
                if insight.id == insight_id:
                    updated = insight.mark_as_read()
                    insights[index] = updated
                    self._store.set(INSIGHTS_KEY, [i.to_dict() for i in insights])
                    return updated
        raise KeyError(insight_id)

    # ------------------------------------------------------------------
    # Last-analysis marker
    # ------------------------------------------------------------------

    def last_analysis_date(self) -> date | None:
        try:
            raw = self._store.get(LAST_ANALYSIS_KEY)
        except Exception:
            logger.exception("Failed to read last analysis date.")
            return None
        if raw is None:
            return None
        try:
            return datetime.fromisoformat(str(raw)).date()
        except ValueError:
            logger.warning("Ignoring unreadable last analysis date %r.", raw)
            return None

    def set_last_analysis(self, when: datetime) -> None:
        with self._lock:
            self._store.set(LAST_ANALYSIS_KEY, when.isoformat())

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def settings(self) -> dict[str, bool]:
        """Return the per-category toggles merged over :data:`DEFAULT_SETTINGS`."""
        settings = dict(DEFAULT_SETTINGS)
        try:
            raw: Any = self._store.get(SETTINGS_KEY)
        except Exception:
            logger.exception("Failed to read insight settings.")
            return settings
        if isinstance(raw, dict):
            settings.update({k: bool(v) for k, v in raw.items() if k in DEFAULT_SETTINGS})
        return settings

    def update_settings(self, **changes: bool) -> dict[str, bool]:
        """Persist new values for known settings.

        Raises:
            KeyError: If a name is not a known setting.
        """
        unknown = set(changes) - set(DEFAULT_SETTINGS)
        if unknown:
            raise KeyError(", ".join(sorted(unknown)))
        with self._lock:
            settings = self.settings()
            settings.update(changes)
            self._store.set(SETTINGS_KEY, settings)
        return settings


def _aware(value: datetime, reference: datetime) -> datetime:
    """Give a naive timestamp the timezone of *reference* so the two compare."""
    if value.tzinfo is None and reference.tzinfo is not None:
        return value.replace(tzinfo=reference.tzinfo)
    if value.tzinfo is not None and reference.tzinfo is None:
        return value.replace(tzinfo=None)
    return value
