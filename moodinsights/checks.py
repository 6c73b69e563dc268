"""Achievement, celebration, concern and suggestion checks.

These are not statistical comparisons between groups, so they live apart
from :mod:`moodinsights.detectors`.  Each check takes a
:class:`CheckContext` and returns an :class:`InsightDraft` or ``None``; the
synthesizer stamps the draft with an id and a timestamp.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

import config
from moodinsights.detectors.base import mean
from moodinsights.detectors.temporal import WEEKDAY_NAMES
from moodinsights.history import MoodHistory
from moodinsights.models import AlertPriority, InsightType, Segment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckContext:
    """Inputs shared by every check.

    Attributes:
        history: The full analysis window (90 days by default).
        streak: Consecutive logged days ending today.
    """

    history: MoodHistory
    streak: int


@dataclass(frozen=True)
class InsightDraft:
    """An insight before the synthesizer assigns its id and timestamp."""

    kind: str
    discriminator: str
    title: str
    description: str
    type: InsightType
    priority: AlertPriority
    confidence: float | None = None
    action_steps: tuple[str, ...] = ()
    data: dict[str, Any] = field(default_factory=dict)
    action_label: str | None = None
    action_route: str | None = None


Check = Callable[[CheckContext], Optional[InsightDraft]]


# ---------------------------------------------------------------------------
# Achievements
# ---------------------------------------------------------------------------


def streak_milestone(
    context: CheckContext,
    milestones: Sequence[int] = config.STREAK_MILESTONES,
) -> InsightDraft | None:
    """Fires only when the streak is exactly a milestone.

    A milestone skipped between runs is not reported later.
    """
    streak = context.streak
    if streak not in milestones:
        return None
    if streak >= 100:
        description = f"{streak} days! You're a mood tracking champion!"
    elif streak >= 30:
        description = f"{streak} days! You've built a strong habit!"
    else:
        description = f"{streak} days of consistent mood tracking!"
    return InsightDraft(
        kind="streak",
        discriminator=str(streak),
        title=f"{streak} day streak!",
        description=description,
        type=InsightType.ACHIEVEMENT,
        priority=AlertPriority.HIGH,
        confidence=1.0,
        data={"streak": streak, "milestone": streak},
        action_label="Share achievement",
    )


def mood_consistency(
    context: CheckContext,
    window_days: int = config.PATTERN_WINDOW_DAYS,
    min_days: int = config.CONSISTENCY_MIN_DAYS,
    high_rating: float = config.CONSISTENCY_HIGH_RATING,
    min_share: float = config.CONSISTENCY_MIN_SHARE,
) -> InsightDraft | None:
    """Most recent days included at least one rating of *high_rating* or more."""
    days = context.history.trailing(window_days).logged_days()
    if len(days) < min_days:
        return None
    high_days = sum(1 for d in days if max(d.moods.values()) >= high_rating)
    share = high_days / len(days)
    if share < min_share:
        return None
    return InsightDraft(
        kind="high_mood_consistency",
        discriminator=f"{window_days}d",
        title="Great mood consistency!",
        description=(
            f"{round(share * 100)}% of your recent days had mood ratings of "
            f"{high_rating:g}+. You're doing amazing!"
        ),
        type=InsightType.ACHIEVEMENT,
        priority=AlertPriority.MEDIUM,
        confidence=share,
        data={"percentage": share * 100, "highMoodDays": high_days},
    )


# ---------------------------------------------------------------------------
# Celebrations
# ---------------------------------------------------------------------------


def perfect_day(
    context: CheckContext,
    min_rating: float = config.PERFECT_DAY_MIN_RATING,
) -> InsightDraft | None:
    """All three segments logged today and every one at *min_rating* or above."""
    today = context.history.get(context.history.today)
    if today is None or len(today.moods) < len(Segment):
        return None
    if any(rating < min_rating for rating in today.moods.values()):
        return None
    ratings = [today.moods[s] for s in Segment]
    return InsightDraft(
        kind="perfect_day",
        discriminator="today",
        title="Perfect day!",
        description=(
            f"All your mood ratings today are {min_rating:g}+ "
            f"({', '.join(f'{r:.1f}' for r in ratings)}). Celebrate this amazing day!"
        ),
        type=InsightType.CELEBRATION,
        priority=AlertPriority.HIGH,
        confidence=1.0,
        action_steps=(
            "Take a moment to acknowledge this achievement",
            "Notice what contributed to this great day",
            "Plan to repeat the successful elements",
            "Share this win with someone who cares about you",
        ),
        data={"moods": {s.label: today.moods[s] for s in Segment}},
        action_label="Celebrate!",
    )


def personal_best(
    context: CheckContext,
    min_history_days: int = config.PERSONAL_BEST_MIN_HISTORY_DAYS,
) -> InsightDraft | None:
    """Today's average ties or beats every earlier day in the window."""
    history = context.history
    today = history.get(history.today)
    if today is None or not today.has_mood:
        return None
    prior = [d.average_mood for d in history.logged_days() if d.date < history.today]
    if len(prior) < min_history_days:
        return None
    today_avg = today.average_mood
    if today_avg < max(prior):
        return None
    return InsightDraft(
        kind="personal_best",
        discriminator="today",
        title="Personal best!",
        description=(
            f"Today's average mood ({today_avg:.1f}) ties your highest in the "
            f"last {len(prior)} logged days!"
        ),
        type=InsightType.CELEBRATION,
        priority=AlertPriority.MEDIUM,
        confidence=min(1.0, len(prior) / (min_history_days * 2)),
        data={"todayAverage": today_avg, "previousBest": max(prior)},
    )


# ---------------------------------------------------------------------------
# Concerns
# ---------------------------------------------------------------------------


def low_mood(
    context: CheckContext,
    window_days: int = config.LOW_MOOD_WINDOW_DAYS,
    min_logged_days: int = config.LOW_MOOD_MIN_LOGGED_DAYS,
    max_rating: float = config.LOW_MOOD_MAX_RATING,
    min_days: int = config.LOW_MOOD_MIN_DAYS,
) -> InsightDraft | None:
    """Counts recent days where every logged rating was *max_rating* or lower."""
    days = context.history.trailing(window_days).logged_days()
    if len(days) < min_logged_days:
        return None
    low_days = sum(1 for d in days if all(r <= max_rating for r in d.moods.values()))
    if low_days < min_days:
        return None
    return InsightDraft(
        kind="low_mood_concern",
        discriminator=f"{window_days}d",
        title="Consider reaching out for support",
        description=(
            f"You've had {low_days} days recently with consistently low mood "
            "ratings. Remember that it's okay to ask for help."
        ),
        type=InsightType.CONCERN,
        priority=AlertPriority.CRITICAL,
        confidence=min(1.0, low_days / len(days)),
        action_steps=(
            "Reach out to someone you trust today",
            "Review what self-care strategies have helped you before",
            "Think about professional support if this continues",
            "Be extra gentle and patient with yourself",
            "Focus on small, manageable goals",
        ),
        data={"lowMoodDays": low_days, "loggedDays": len(days)},
        action_label="Find resources",
    )


def poor_sleep(
    context: CheckContext,
    window_days: int = config.POOR_SLEEP_WINDOW_DAYS,
    min_records: int = config.POOR_SLEEP_MIN_RECORDS,
    max_quality: float = config.POOR_SLEEP_MAX_QUALITY,
) -> InsightDraft | None:
    """Recent sleep quality averaging *max_quality* or lower."""
    recent = context.history.trailing(window_days)
    qualities = [
        d.correlation.sleep_quality
        for d in recent
        if d.correlation is not None and d.correlation.sleep_quality is not None
    ]
    if len(qualities) < min_records:
        return None
    average = mean(qualities)
    if average > max_quality:
        return None
    return InsightDraft(
        kind="poor_sleep_concern",
        discriminator=f"{window_days}d",
        title="Your sleep quality needs attention",
        description=(
            f"Your recent sleep quality averages {average:.1f}/10. "
            "Poor sleep can significantly impact your mood."
        ),
        type=InsightType.CONCERN,
        priority=AlertPriority.HIGH,
        confidence=min(1.0, len(qualities) / window_days),
        action_steps=(
            "Keep a consistent bedtime and wake time",
            "Avoid screens for an hour before bed",
            "Limit caffeine after midday",
        ),
        data={"averageSleep": average, "records": len(qualities)},
        action_label="Sleep tips",
    )


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


def day_specific(
    context: CheckContext,
    min_instances: int = config.DAY_SPECIFIC_MIN_INSTANCES,
    max_average: float = config.DAY_SPECIFIC_MAX_AVERAGE,
    full_confidence_instances: int = config.DAY_SPECIFIC_FULL_CONFIDENCE_INSTANCES,
) -> InsightDraft | None:
    """A game plan for today when earlier days of the same weekday ran low.

    Only logged days before today count, so today's own ratings never
    decide whether the suggestion appears.
    """
    history = context.history
    weekday = history.today.weekday()
    moods = [
        d.average_mood
        for d in history.logged_days()
        if d.date.weekday() == weekday and d.date < history.today
    ]
    if len(moods) < min_instances:
        return None
    average = mean(moods)
    if average > max_average:
        return None
    day_name = WEEKDAY_NAMES[weekday]
    return InsightDraft(
        kind="day_specific",
        discriminator=day_name.lower(),
        title=f"{day_name} strategy",
        description=(
            f"{day_name}s typically rate {average:.1f} for you. "
            f"Here's your personalized {day_name} game plan."
        ),
        type=InsightType.ACTIONABLE,
        priority=AlertPriority.MEDIUM,
        confidence=min(1.0, len(moods) / full_confidence_instances),
        action_steps=(
            "Start with your most effective mood booster",
            "Schedule easier tasks and build in extra breaks",
            "Plan one thing to genuinely look forward to",
            "Connect with supportive people",
            "Practice extra self-compassion today",
        ),
        data={"weekday": weekday + 1, "historicalAverage": average, "instances": len(moods)},
        action_label="Optimize today",
    )


ACHIEVEMENT_CHECKS: tuple[Check, ...] = (streak_milestone, mood_consistency)
CELEBRATION_CHECKS: tuple[Check, ...] = (perfect_day, personal_best)
CONCERN_CHECKS: tuple[Check, ...] = (low_mood, poor_sleep)
SUGGESTION_CHECKS: tuple[Check, ...] = (day_specific,)
