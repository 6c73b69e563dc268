"""Core domain dataclasses shared across all insight modules."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Any


class Segment(IntEnum):
    """The three fixed daily logging windows."""

    MORNING = 0
    MIDDAY = 1
    EVENING = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


class ExerciseLevel(str, Enum):
    NONE = "none"
    LIGHT = "light"
    MODERATE = "moderate"
    INTENSE = "intense"


class WeatherCondition(str, Enum):
    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    STORMY = "stormy"
    SNOWY = "snowy"
    FOGGY = "foggy"


class SocialActivity(str, Enum):
    NONE = "none"
    FRIENDS = "friends"
    FAMILY = "family"
    WORK = "work"
    PARTY = "party"
    DATE = "date"


class InsightType(str, Enum):
    """Categories of user-facing insight."""

    PATTERN = "pattern"
    ACHIEVEMENT = "achievement"
    CONCERN = "concern"
    SUGGESTION = "suggestion"
    CELEBRATION = "celebration"
    PREDICTION = "prediction"
    ACTIONABLE = "actionable"


class AlertPriority(str, Enum):
    """Insight priority.  :attr:`rank` orders critical above everything else."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    AlertPriority.LOW: 0,
    AlertPriority.MEDIUM: 1,
    AlertPriority.HIGH: 2,
    AlertPriority.CRITICAL: 3,
}


class Trend(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class PatternKind(str, Enum):
    """Every result a :class:`~moodinsights.detectors.base.PatternDetector` can emit."""

    TIME_OF_DAY = "time_pattern"
    WEEKDAY = "weekday_pattern"
    TREND_IMPROVING = "trend_improving"
    TREND_DECLINING = "trend_declining"
    SLEEP_SWEET_SPOT = "optimal_sleep"
    EXERCISE = "optimal_exercise"
    WEATHER = "weather_correlation"
    SOCIAL = "optimal_social"
    WORK_STRESS = "stress_trigger"
    EARLY_WARNING = "early_warning"
    PROGRESS_IMPROVING = "progress_improving"
    PROGRESS_DECLINING = "progress_declining"


class ForecastOutlook(str, Enum):
    OPTIMISTIC = "optimistic"
    NEUTRAL = "neutral"
    PROTECTIVE = "protective"


# ---------------------------------------------------------------------------
# Source records (read-only to the core)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MoodSample:
    """One mood rating for one ``(date, segment)`` pair.

    Attributes:
        date: Calendar day of the rating.
        segment: Which daily logging window the rating belongs to.
        rating: Mood on the 1.0-10.0 scale.
        note: Optional free text entered with the rating.
    """

    date: date
    segment: Segment
    rating: float
    note: str | None = None

    def __post_init__(self) -> None:
        if not 1.0 <= self.rating <= 10.0:
            raise ValueError(f"Rating must be between 1 and 10, got {self.rating!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "segment": int(self.segment),
            "rating": self.rating,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], day: date, segment: Segment) -> MoodSample:
        """Build a sample from its persisted JSON blob.

        The persisted blob does not repeat the key, so *day* and *segment*
        come from the storage key the blob was read from.
        """
        return cls(
            date=day,
            segment=Segment(segment),
            rating=float(data["rating"]),
            note=data.get("note") or None,
        )


@dataclass(frozen=True)
class CorrelationRecord:
    """One day's contextual factors.

    Attributes:
        date: Calendar day the factors describe.
        sleep_quality: Self-rated sleep quality (1-10) for the night
            before *date*'s evening, or ``None``.
        exercise_level: Exercise intensity, or ``None``.
        weather: Dominant weather condition, or ``None``.
        social_activities: Ordered social activity categories logged that
            day.  May be empty.
        work_stress: Self-rated work stress (1-10), or ``None``.
    """

    date: date
    sleep_quality: float | None = None
    exercise_level: ExerciseLevel | None = None
    weather: WeatherCondition | None = None
    social_activities: tuple[SocialActivity, ...] = ()
    work_stress: int | None = None

    def __post_init__(self) -> None:
        if self.sleep_quality is not None and not 1.0 <= self.sleep_quality <= 10.0:
            raise ValueError(
                f"Sleep quality must be between 1 and 10, got {self.sleep_quality!r}"
            )
        if self.work_stress is not None and not 1 <= self.work_stress <= 10:
            raise ValueError(
                f"Work stress must be between 1 and 10, got {self.work_stress!r}"
            )

    @property
    def primary_social_activity(self) -> SocialActivity | None:
        """The first non-``none`` social activity of the day.

        Falls back to the first entry when every entry is ``none`` and to
        ``None`` when nothing was logged.
        """
        if not self.social_activities:
            return None
        for activity in self.social_activities:
            if activity != SocialActivity.NONE:
                return activity
        return self.social_activities[0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "sleepQuality": self.sleep_quality,
            "exerciseLevel": self.exercise_level.value if self.exercise_level else None,
            "weather": self.weather.value if self.weather else None,
            "socialActivities": [a.value for a in self.social_activities],
            "workStress": self.work_stress,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CorrelationRecord:
        """Build a record from its persisted JSON blob.

        Accepts both the list-valued ``socialActivities`` field and the
        older single ``socialActivity`` field.
        """
        raw_social = data.get("socialActivities")
        if raw_social is None and data.get("socialActivity"):
            raw_social = [data["socialActivity"]]
        sleep = data.get("sleepQuality")
        stress = data.get("workStress")
        return cls(
            date=date.fromisoformat(str(data["date"])[:10]),
            sleep_quality=float(sleep) if sleep is not None else None,
            exercise_level=_optional_enum(ExerciseLevel, data.get("exerciseLevel")),
            weather=_optional_enum(WeatherCondition, data.get("weather")),
            social_activities=tuple(SocialActivity(a) for a in raw_social or ()),
            work_stress=int(stress) if stress is not None else None,
        )


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------


@dataclass
class DayAggregate:
    """The mood samples and correlation record joined for one calendar day.

    Attributes:
        date: The calendar day.
        moods: Segment to rating for the segments actually logged.
        correlation: The day's :class:`CorrelationRecord`, if any.
    """

    date: date
    moods: dict[Segment, float] = field(default_factory=dict)
    correlation: CorrelationRecord | None = None

    @property
    def has_mood(self) -> bool:
        return bool(self.moods)

    @property
    def average_mood(self) -> float:
        """Mean of the logged ratings; ``0.0`` when nothing was logged."""
        if not self.moods:
            return 0.0
        return sum(self.moods.values()) / len(self.moods)


@dataclass(frozen=True)
class PatternResult:
    """Output of a single detector.

    Attributes:
        kind: Which pattern was found.
        magnitude: Effect size in mood points.
        confidence: Evidence strength in [0, 1].
        sample_count: Qualifying observations the result is based on.
        data: The raw numbers that justified the magnitude.
    """

    kind: PatternKind
    magnitude: float
    confidence: float
    sample_count: int
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Forecast:
    """Predicted mood band for a single upcoming day."""

    target_date: date
    predicted_mood: float
    confidence: float
    outlook: ForecastOutlook
    sample_count: int
    message: str
    action_steps: tuple[str, ...]
    reasoning: str


# ---------------------------------------------------------------------------
# Insight
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Insight:
    """A single ranked, user-facing finding.

    Attributes:
        id: Unique identifier within the persisted store.
        title: Short headline.
        description: Fully rendered sentence with numbers interpolated.
        type: The :class:`InsightType` category.
        priority: The :class:`AlertPriority` used for ranking.
        created_at: When the insight was generated (timezone-aware).
        confidence: Evidence strength in [0, 1], if meaningful.
        action_steps: Up to five short imperative suggestions.
        data: Structured payload for programmatic consumers.
        is_read: Whether the user has seen the insight.
        action_label: Optional UI button text.
        action_route: Optional UI route hint.
    """

    id: str
    title: str
    description: str
    type: InsightType
    priority: AlertPriority
    created_at: datetime
    confidence: float | None = None
    action_steps: tuple[str, ...] = ()
    data: dict[str, Any] = field(default_factory=dict)
    is_read: bool = False
    action_label: str | None = None
    action_route: str | None = None

    def mark_as_read(self) -> Insight:
        """Return a copy of this insight flagged as read."""
        return dataclasses.replace(self, is_read=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.type.value,
            "priority": self.priority.value,
            "createdAt": self.created_at.isoformat(),
            "data": self.data,
            "isRead": self.is_read,
            "actionText": self.action_label,
            "actionRoute": self.action_route,
            "actionSteps": list(self.action_steps),
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Insight:
        confidence = data.get("confidence")
        return cls(
            id=data["id"],
            title=data["title"],
            description=data["description"],
            type=InsightType(data["type"]),
            priority=AlertPriority(data["priority"]),
            created_at=datetime.fromisoformat(data["createdAt"]),
            confidence=float(confidence) if confidence is not None else None,
            action_steps=tuple(data.get("actionSteps") or ()),
            data=dict(data.get("data") or {}),
            is_read=bool(data.get("isRead", False)),
            action_label=data.get("actionText"),
            action_route=data.get("actionRoute"),
        )


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WeeklySummary:
    """Statistics and narrative for a fixed seven-day window."""

    week_start: date
    week_end: date
    average_mood: float
    days_logged: int
    total_days: int
    best_day: float
    worst_day: float
    trend: Trend
    highlights: list[str]
    concerns: list[str]
    recommendations: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "weekStart": self.week_start.isoformat(),
            "weekEnd": self.week_end.isoformat(),
            "averageMood": self.average_mood,
            "daysLogged": self.days_logged,
            "totalDays": self.total_days,
            "bestDay": self.best_day,
            "worstDay": self.worst_day,
            "trend": self.trend.value,
            "highlights": list(self.highlights),
            "concerns": list(self.concerns),
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class MonthlySummary:
    """Statistics and narrative for one calendar month."""

    month_start: date
    month_end: date
    average_mood: float
    days_logged: int
    total_days: int
    streak_days: int
    time_of_day_averages: dict[str, float]
    best_week: str
    worst_week: str
    trend: Trend
    achievements: list[str]
    insights: list[str]
    goals_for_next_month: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "monthStart": self.month_start.isoformat(),
            "monthEnd": self.month_end.isoformat(),
            "averageMood": self.average_mood,
            "daysLogged": self.days_logged,
            "totalDays": self.total_days,
            "streakDays": self.streak_days,
            "timeOfDayAverages": dict(self.time_of_day_averages),
            "bestWeek": self.best_week,
            "worstWeek": self.worst_week,
            "trend": self.trend.value,
            "achievements": list(self.achievements),
            "insights": list(self.insights),
            "goalsForNextMonth": list(self.goals_for_next_month),
        }


def _optional_enum(enum_cls: type[Enum], value: Any) -> Any:
    return enum_cls(value) if value is not None else None
