"""Next-day mood forecast from same-weekday history."""

from __future__ import annotations

import logging
from datetime import timedelta

import config
from moodinsights.detectors.base import mean
from moodinsights.detectors.temporal import WEEKDAY_NAMES
from moodinsights.history import MoodHistory
from moodinsights.models import Forecast, ForecastOutlook
from moodinsights.narratives import FORECAST_STEPS, forecast_message

logger = logging.getLogger(__name__)


class ForecastEngine:
    """Predicts tomorrow's mood band from the mean of past same-weekday days.

    The outlook thresholds are inclusive at both ends: a mean of exactly
    *optimistic_at* is optimistic and a mean of exactly *protective_at* is
    protective.

    Args:
        min_instances: Logged same-weekday days needed before forecasting.
        optimistic_at: Lower bound of the optimistic band.
        protective_at: Upper bound of the protective band.
        full_confidence_instances: Instance count at which confidence
            reaches 1.0.
    """

    def __init__(
        self,
        min_instances: int = config.FORECAST_MIN_INSTANCES,
        optimistic_at: float = config.FORECAST_OPTIMISTIC_AT,
        protective_at: float = config.FORECAST_PROTECTIVE_AT,
        full_confidence_instances: int = config.FORECAST_FULL_CONFIDENCE_INSTANCES,
    ) -> None:
        if protective_at >= optimistic_at:
            raise ValueError("protective_at must be below optimistic_at")
        self.min_instances = min_instances
        self.optimistic_at = optimistic_at
        self.protective_at = protective_at
        self.full_confidence_instances = full_confidence_instances

    def forecast(self, history: MoodHistory) -> Forecast | None:
        """Forecast the day after ``history.today``.

        Args:
            history: The analysis window (90 days by default).

        Returns:
            A :class:`~moodinsights.models.Forecast`, or ``None`` when fewer
            than *min_instances* logged days share tomorrow's weekday.
        """
        target = history.today + timedelta(days=1)
        weekday = target.weekday()
        moods = [
            d.average_mood
            for d in history.logged_days()
            if d.date.weekday() == weekday and d.date <= history.today
        ]
        if len(moods) < self.min_instances:
            logger.debug(
                "No forecast for %s: %d prior instances.", target, len(moods)
            )
            return None

        predicted = mean(moods)
        outlook = self.classify(predicted)
        day_name = WEEKDAY_NAMES[weekday]
        return Forecast(
            target_date=target,
            predicted_mood=predicted,
            confidence=min(1.0, len(moods) / self.full_confidence_instances),
            outlook=outlook,
            sample_count=len(moods),
            message=forecast_message(day_name, predicted, outlook),
            action_steps=FORECAST_STEPS[outlook],
            reasoning=f"Based on {len(moods)} previous {day_name}s",
        )

    def classify(self, predicted: float) -> ForecastOutlook:
        """Map a predicted mean onto the three outlook bands."""
        if predicted >= self.optimistic_at:
            return ForecastOutlook.OPTIMISTIC
        if predicted <= self.protective_at:
            return ForecastOutlook.PROTECTIVE
        return ForecastOutlook.NEUTRAL
