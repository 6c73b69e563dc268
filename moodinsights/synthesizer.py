"""Insight synthesizer: runs detectors and checks, ranks and persists insights."""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime
from typing import Callable, Iterable, Sequence

import config
from moodinsights.checks import (
    ACHIEVEMENT_CHECKS,
    CELEBRATION_CHECKS,
    CONCERN_CHECKS,
    SUGGESTION_CHECKS,
    Check,
    CheckContext,
    InsightDraft,
)
from moodinsights.detectors.base import PatternDetector
from moodinsights.detectors.correlation import (
    ExerciseDetector,
    SleepQualityDetector,
    SocialActivityDetector,
    WeatherDetector,
    WorkStressDetector,
)
from moodinsights.detectors.temporal import (
    WEEKDAY_NAMES,
    EarlyWarningDetector,
    ProgressDetector,
    RecentTrendDetector,
    TimeOfDayDetector,
    WeekdayDetector,
)
from moodinsights.forecast import ForecastEngine
from moodinsights.history import MoodHistory, current_streak, load_history
from moodinsights.insight_store import InsightStore
from moodinsights.models import (
    AlertPriority,
    Forecast,
    ForecastOutlook,
    Insight,
    InsightType,
    MonthlySummary,
    PatternResult,
    WeeklySummary,
)
from moodinsights.narratives import protection_steps, render_pattern
from moodinsights.repository import MoodRepository
from moodinsights.summary import SummaryReporter, month_start_for, week_start_for

logger = logging.getLogger(__name__)

_HIGH_CONFIDENCE_FORECAST = 0.7


def default_detectors() -> list[PatternDetector]:
    """The full detector catalogue with default thresholds, in run order."""
    return [
        TimeOfDayDetector(),
        WeekdayDetector(),
        RecentTrendDetector(),
        SleepQualityDetector(),
        ExerciseDetector(),
        WeatherDetector(),
        SocialActivityDetector(),
        WorkStressDetector(),
        EarlyWarningDetector(),
        ProgressDetector(),
    ]


def rank_insights(insights: Iterable[Insight]) -> list[Insight]:
    """Sort by priority (critical first), then confidence, highest first.

    The sort is stable, so insights with equal priority and confidence keep
    their input order.  A missing confidence sorts as 0.0.
    """
    return sorted(
        insights,
        key=lambda i: (-i.priority.rank, -(i.confidence or 0.0)),
    )


def _local_now() -> datetime:
    return datetime.now().astimezone()


class InsightSynthesizer:
    """Produces, ranks and persists the user's insights.

    One generation pass:

    1. Fetch the analysis window (90 days) in one bulk call.
    2. Run every detector over the trailing pattern window (30 days),
       isolating failures, and render each result.
    3. Forecast tomorrow from the whole analysis window.
    4. Run the achievement, celebration, concern and suggestion checks.
    5. Rank, cap to the page size, merge into the store and stamp the
       last-analysis marker.

    Passes are serialised with a lock.  Unless forced, a pass that finds
    the marker already set to today returns the stored insights, ranked,
    without recomputing.

    Per-category settings are read from the store: ``patternAlerts`` turns
    detectors, the forecast and suggestions on or off, ``celebrations`` does the same
    for achievements and celebrations.  Concerns always run.

    Args:
        repository: Read access to mood samples and correlation records.
        insight_store: Persistence for insights, the marker and settings.
        detectors: Detector catalogue; defaults to :func:`default_detectors`.
        forecast_engine: Defaults to a :class:`ForecastEngine` with default
            thresholds.
        reporter: Defaults to a :class:`SummaryReporter` over *repository*.
        clock: Returns the current timezone-aware time.
        analysis_window_days: Length of the bulk fetch.
        pattern_window_days: Trailing window the detectors see.
        streak_lookback_days: Longest streak that will be counted.
        page_size: Maximum insights returned and saved per pass.
    """

    def __init__(
        self,
        repository: MoodRepository,
        insight_store: InsightStore,
        detectors: Sequence[PatternDetector] | None = None,
        forecast_engine: ForecastEngine | None = None,
        reporter: SummaryReporter | None = None,
        clock: Callable[[], datetime] = _local_now,
        analysis_window_days: int = config.ANALYSIS_WINDOW_DAYS,
        pattern_window_days: int = config.PATTERN_WINDOW_DAYS,
        streak_lookback_days: int = config.STREAK_LOOKBACK_DAYS,
        page_size: int = config.INSIGHT_PAGE_SIZE,
    ) -> None:
        self._repository = repository
        self._store = insight_store
        self._detectors = list(detectors) if detectors is not None else default_detectors()
        self._forecast_engine = forecast_engine or ForecastEngine()
        self._reporter = reporter or SummaryReporter(repository)
        self._clock = clock
        self._analysis_window_days = analysis_window_days
        self._pattern_window_days = pattern_window_days
        self._streak_lookback_days = streak_lookback_days
        self._page_size = page_size
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def generate_insights(self, force_refresh: bool = False) -> list[Insight]:
        """Run a generation pass, or return today's stored insights.

        Args:
            force_refresh: Ignore the once-per-day gate.

        Returns:
            Up to ``page_size`` insights, ranked.

        Raises:
            OSError: If saving the insights or the marker fails.
        """
        with self._lock:
            now = self._clock()
            today = now.date()

            if not force_refresh and self._store.last_analysis_date() == today:
                logger.info("Insights already generated for %s; returning stored list.", today)
                return rank_insights(self._store.load())[: self._page_size]

            history = load_history(self._repository, today, self._analysis_window_days)
            settings = self._store.settings()

            drafts: list[InsightDraft] = []
            checks: list[Check] = list(CONCERN_CHECKS)
            if settings["patternAlerts"]:
                results = self._run_detectors(history)
                drafts.extend(_pattern_draft(r) for r in results)
                forecast_draft = self._run_forecast(history, results)
                if forecast_draft is not None:
                    drafts.append(forecast_draft)
                checks.extend(SUGGESTION_CHECKS)

            if settings["celebrations"]:
                checks = list(ACHIEVEMENT_CHECKS) + list(CELEBRATION_CHECKS) + checks
            streak = current_streak(
                self._repository,
                history,
                self._analysis_window_days,
                self._streak_lookback_days,
            )
            drafts.extend(self._run_checks(checks, CheckContext(history, streak)))

            insights = self._stamp(drafts, now)
            ranked = rank_insights(insights)[: self._page_size]
            self._store.save(ranked, now)
            self._store.set_last_analysis(now)

        logger.info(
            "Generated %d insights for %s (%d candidates, streak %d).",
            len(ranked), today, len(insights), streak,
        )
        return ranked

    def load_insights(self) -> list[Insight]:
        """Return every stored insight, newest first, without recomputing."""
        return self._store.load()

    def generate_weekly_summary(self, week_start: date | None = None) -> WeeklySummary:
        """Summarise the week starting on *week_start* (default: this Monday)."""
        if week_start is None:
            week_start = week_start_for(self._clock().date())
        return self._reporter.weekly_summary(week_start)

    def generate_monthly_summary(self, month_start: date | None = None) -> MonthlySummary:
        """Summarise the month containing *month_start* (default: this month)."""
        if month_start is None:
            month_start = month_start_for(self._clock().date())
        return self._reporter.monthly_summary(month_start)

    def mark_insight_read(self, insight_id: str) -> Insight:
        """Persist the read flag for *insight_id*.

        Raises:
            KeyError: If no stored insight has that id.
        """
        return self._store.mark_read(insight_id)

    def settings(self) -> dict[str, bool]:
        return self._store.settings()

    def update_settings(self, **changes: bool) -> dict[str, bool]:
        """Persist new toggle values; they apply from the next pass.

        Raises:
            KeyError: If a name is not a known setting.
        """
        settings = self._store.update_settings(**changes)
        logger.info("Insight settings updated: %s.", settings)
        return settings

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _run_detectors(self, history: MoodHistory) -> list[PatternResult]:
        window = history.trailing(self._pattern_window_days)
        results: list[PatternResult] = []
        for detector in self._detectors:
            try:
                result = detector.detect(window)
                if result is None:
                    logger.debug("Detector %s: no signal.", detector.name)
                    continue
                render_pattern(result)
            except Exception:
                logger.exception("Detector %s failed; skipping it.", detector.name)
                continue
            results.append(result)
            logger.debug(
                "Detector %s: %s (magnitude %.2f, confidence %.2f).",
                detector.name, result.kind.value, result.magnitude, result.confidence,
            )
        return results

    def _run_forecast(
        self, history: MoodHistory, results: Sequence[PatternResult]
    ) -> InsightDraft | None:
        try:
            forecast = self._forecast_engine.forecast(history)
        except Exception:
            logger.exception("Forecast failed; skipping it.")
            return None
        return _forecast_draft(forecast, results) if forecast is not None else None

    @staticmethod
    def _run_checks(checks: Sequence[Check], context: CheckContext) -> list[InsightDraft]:
        drafts: list[InsightDraft] = []
        for check in checks:
            try:
                draft = check(context)
            except Exception:
                logger.exception("Check %s failed; skipping it.", check.__name__)
                continue
            if draft is not None:
                drafts.append(draft)
        return drafts

    @staticmethod
    def _stamp(drafts: Iterable[InsightDraft], now: datetime) -> list[Insight]:
        """Turn drafts into insights with ids unique within this pass."""
        seen: set[str] = set()
        insights: list[Insight] = []
        for draft in drafts:
            insight_id = make_insight_id(draft.kind, draft.discriminator, now.date())
            base, suffix = insight_id, 2
            while insight_id in seen:
                insight_id = f"{base}_{suffix}"
                suffix += 1
            seen.add(insight_id)
            insights.append(
                Insight(
                    id=insight_id,
                    title=draft.title,
                    description=draft.description,
                    type=draft.type,
                    priority=draft.priority,
                    created_at=now,
                    confidence=draft.confidence,
                    action_steps=draft.action_steps,
                    data=draft.data,
                    action_label=draft.action_label,
                    action_route=draft.action_route,
                )
            )
        return insights


def make_insight_id(kind: str, discriminator: str, day: date) -> str:
    """``{kind}_{discriminator}_{YYYYMMDD}``.

    The date stamp makes a rerun on the same day replace its earlier
    insights when the store merges by id.
    """
    parts = [kind, discriminator, day.strftime("%Y%m%d")]
    return "_".join(p for p in parts if p)


def _pattern_draft(result: PatternResult) -> InsightDraft:
    narrative = render_pattern(result)
    return InsightDraft(
        kind=result.kind.value,
        discriminator=narrative.discriminator,
        title=narrative.title,
        description=narrative.description,
        type=narrative.type,
        priority=narrative.priority,
        confidence=result.confidence,
        action_steps=narrative.action_steps,
        data=dict(result.data, sampleCount=result.sample_count),
        action_label=narrative.action_label,
        action_route=narrative.action_route,
    )


def _forecast_draft(
    forecast: Forecast, results: Sequence[PatternResult] = ()
) -> InsightDraft:
    day_name = WEEKDAY_NAMES[forecast.target_date.weekday()]
    priority = (
        AlertPriority.HIGH
        if forecast.confidence > _HIGH_CONFIDENCE_FORECAST
        else AlertPriority.MEDIUM
    )
    steps = forecast.action_steps
    if forecast.outlook is ForecastOutlook.PROTECTIVE:
        steps = protection_steps(results, steps)
    return InsightDraft(
        kind="forecast",
        discriminator=day_name.lower(),
        title="Tomorrow's forecast",
        description=forecast.message,
        type=InsightType.PREDICTION,
        priority=priority,
        confidence=forecast.confidence,
        action_steps=steps,
        data={
            "targetDate": forecast.target_date.isoformat(),
            "predictedMood": forecast.predicted_mood,
            "outlook": forecast.outlook.value,
            "sampleCount": forecast.sample_count,
            "reasoning": forecast.reasoning,
        },
        action_label="View action plan",
    )
