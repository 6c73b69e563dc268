"""User-facing wording for pattern results.

Every :class:`~moodinsights.models.PatternKind` has exactly one renderer in
``_RENDERERS``; :func:`render_pattern` looks it up and returns a
:class:`Narrative` carrying the title, description, category, priority and
action steps the synthesizer turns into an
:class:`~moodinsights.models.Insight`.  Display names and action-step lists
are keyed by the closed enums in :mod:`moodinsights.models`.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from moodinsights.models import (
    AlertPriority,
    ExerciseLevel,
    ForecastOutlook,
    InsightType,
    PatternKind,
    PatternResult,
    Segment,
    SocialActivity,
    WeatherCondition,
)

MAX_ACTION_STEPS = 5


@dataclass(frozen=True)
class Narrative:
    """Rendered wording for one pattern result.

    Attributes:
        discriminator: Stable token distinguishing results of the same kind
            (e.g. the best category); becomes part of the insight id.
    """

    title: str
    description: str
    type: InsightType
    priority: AlertPriority
    action_steps: tuple[str, ...] = ()
    discriminator: str = ""
    action_label: str | None = None
    action_route: str | None = None


# ---------------------------------------------------------------------------
# Display names
# ---------------------------------------------------------------------------

EXERCISE_NAMES: dict[ExerciseLevel, str] = {
    ExerciseLevel.NONE: "Rest days",
    ExerciseLevel.LIGHT: "Light activity",
    ExerciseLevel.MODERATE: "Moderate exercise",
    ExerciseLevel.INTENSE: "Intense workouts",
}

SOCIAL_NAMES: dict[SocialActivity, str] = {
    SocialActivity.NONE: "Solo time",
    SocialActivity.FRIENDS: "Friend time",
    SocialActivity.FAMILY: "Family time",
    SocialActivity.WORK: "Work social",
    SocialActivity.PARTY: "Social events",
    SocialActivity.DATE: "Date activities",
}

WEATHER_NAMES: dict[WeatherCondition, str] = {
    WeatherCondition.SUNNY: "Sunny",
    WeatherCondition.CLOUDY: "Cloudy",
    WeatherCondition.RAINY: "Rainy",
    WeatherCondition.STORMY: "Stormy",
    WeatherCondition.SNOWY: "Snowy",
    WeatherCondition.FOGGY: "Foggy",
}

# ---------------------------------------------------------------------------
# Action-step tables
# ---------------------------------------------------------------------------

SEGMENT_PEAK_STEPS: dict[Segment, tuple[str, ...]] = {
    Segment.MORNING: (
        "Schedule your most important tasks before 11 AM",
        "Plan challenging conversations for morning hours",
        "Try 10 minutes of morning sunlight exposure",
        "Eat protein within 1 hour of waking",
    ),
    Segment.MIDDAY: (
        "Block 1-2 PM for your most demanding work",
        "Use lunch break for energizing activities",
        "Schedule important calls between 12-3 PM",
    ),
    Segment.EVENING: (
        "Save creative tasks for after 5 PM",
        "Plan social activities for evening hours",
        "Use morning for routine/administrative tasks",
    ),
}

SEGMENT_DIP_STEPS: dict[Segment, str] = {
    Segment.MORNING: "Avoid scheduling stressful activities before 10 AM",
    Segment.MIDDAY: "Build in buffer time around midday for energy dips",
    Segment.EVENING: "Wind down routine starting 2 hours before bed",
}

EXERCISE_STEPS: dict[ExerciseLevel, tuple[str, ...]] = {
    ExerciseLevel.NONE: (
        "Protect your rest days, they are working for you",
        "Try gentle movement on rest days to see how it feels",
        "Listen to your body and adjust as needed",
    ),
    ExerciseLevel.LIGHT: (
        "Take a 15-20 minute walk during lunch breaks",
        "Try gentle yoga or stretching routines",
        "Dance to your favorite music for 10 minutes",
        "Do light household activities or gardening",
    ),
    ExerciseLevel.MODERATE: (
        "Schedule 30-45 minutes of cardio 3-4 times this week",
        "Try a fitness class or follow online workout videos",
        "Go for bike rides or swimming sessions",
        "Play active sports you enjoy with friends",
    ),
    ExerciseLevel.INTENSE: (
        "Book that high-intensity fitness class you've been considering",
        "Set a new personal fitness challenge or goal",
        "Try interval training or weightlifting sessions",
        "Join a competitive sports league or activity",
    ),
}

SOCIAL_STEPS: dict[SocialActivity, tuple[str, ...]] = {
    SocialActivity.NONE: (
        "Block out regular time just for yourself",
        "Balance social plans with quiet recovery time",
        "Consider gentle social connections that feel comfortable",
    ),
    SocialActivity.FRIENDS: (
        "Schedule a coffee date or call with a close friend",
        "Plan a fun group activity for this weekend",
        "Join a hobby group or meetup",
        "Reach out to someone you haven't talked to in a while",
    ),
    SocialActivity.FAMILY: (
        "Plan quality time with family members",
        "Schedule a family meal or activity",
        "Call a family member you miss",
        "Create new family traditions or memories",
    ),
    SocialActivity.WORK: (
        "Suggest a team coffee break or lunch",
        "Join or organize workplace social events",
        "Build stronger relationships with colleagues",
        "Find opportunities for positive work interactions",
    ),
    SocialActivity.PARTY: (
        "Attend that event you've been considering",
        "Host a small gathering for friends",
        "Say yes to the next social invitation",
        "Plan a celebration for recent accomplishments",
    ),
    SocialActivity.DATE: (
        "Plan a special date with your partner",
        "Try a new activity together",
        "Schedule regular quality time together",
        "Create romantic moments in daily life",
    ),
}

WEATHER_STEPS: dict[WeatherCondition, tuple[str, ...]] = {
    WeatherCondition.SUNNY: (
        "Plan a few indoor breaks on very bright days",
        "Stay hydrated and keep a cool space to retreat to",
        "Keep your usual routine even when plans change",
    ),
    WeatherCondition.CLOUDY: (
        "Increase indoor lighting to combat gloominess",
        "Consider a vitamin D supplement",
        "Plan energizing indoor activities",
        "Practice gratitude journaling",
        "Get outside for brief moments when possible",
    ),
    WeatherCondition.RAINY: (
        "Create a cozy indoor environment with warm lighting",
        "Plan engaging indoor activities (books, puzzles, crafts)",
        "Use a light therapy lamp for 20-30 minutes",
        "Schedule video calls with friends and family",
        "Prepare comfort foods and warm beverages",
    ),
    WeatherCondition.STORMY: (
        "Create a calm, secure indoor environment",
        "Practice relaxation techniques like deep breathing",
        "Engage in soothing activities like reading or music",
        "Avoid overstimulating activities during storms",
        "Focus on grounding exercises if you feel anxious",
    ),
    WeatherCondition.SNOWY: (
        "Embrace winter activities if you enjoy them",
        "Focus on creating warmth and coziness indoors",
        "Use bright lighting to combat seasonal effects",
        "Plan warming activities like hot baths or tea",
        "Connect with others to combat isolation",
    ),
    WeatherCondition.FOGGY: (
        "Use bright indoor lighting",
        "Plan clear, focused activities",
        "Take extra care with transportation",
        "Create structure in your day",
        "Practice mindfulness to stay grounded",
    ),
}

FORECAST_STEPS: dict[ForecastOutlook, tuple[str, ...]] = {
    ForecastOutlook.OPTIMISTIC: (
        "Plan something special to make the most of your good day",
        "Tackle that challenging task you've been postponing",
        "Share your positive energy with others",
    ),
    ForecastOutlook.NEUTRAL: (
        "Add one mood-boosting activity to your day",
        "Plan something to look forward to",
        "Practice your favorite stress management technique",
    ),
    ForecastOutlook.PROTECTIVE: (
        "Plan extra self-care activities",
        "Schedule easier tasks and build in breaks",
        "Prepare your favorite comfort strategies",
        "Be extra kind to yourself",
    ),
}


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------


def render_pattern(result: PatternResult) -> Narrative:
    """Return the wording for *result*.

    Raises:
        KeyError: If no renderer is registered for ``result.kind``.
    """
    narrative = _RENDERERS[result.kind](result.data)
    return _clip_steps(narrative)


def forecast_message(day_name: str, predicted: float, outlook: ForecastOutlook) -> str:
    if outlook is ForecastOutlook.OPTIMISTIC:
        return f"{day_name} looks great! Your average for {day_name}s is {predicted:.1f}/10."
    if outlook is ForecastOutlook.PROTECTIVE:
        return (
            f"{day_name} tends to be challenging (avg {predicted:.1f}/10). "
            "Let's prepare!"
        )
    return f"{day_name} typically rates {predicted:.1f}/10 for you."


def protection_steps(
    results: Sequence[PatternResult], general: Sequence[str]
) -> tuple[str, ...]:
    """Action steps for a challenging day.

    Interventions that have lifted this user's mood (from the sleep, exercise
    and social results of the same pass) come first, then *general*.
    """
    personal: list[str] = []
    for result in results:
        if result.kind is PatternKind.SLEEP_SWEET_SPOT:
            personal.append("Prioritize getting 7-8 hours of quality sleep tonight")
        elif result.kind is PatternKind.EXERCISE:
            name = EXERCISE_NAMES[ExerciseLevel(result.data["best"])].lower()
            personal.append(f"Do {name} - it typically boosts your mood")
        elif result.kind is PatternKind.SOCIAL:
            personal.append("Connect with someone who usually lifts your spirits")
    steps: list[str] = []
    for step in personal + list(general):
        if step not in steps:
            steps.append(step)
    return tuple(steps[:MAX_ACTION_STEPS])


def _clip_steps(narrative: Narrative) -> Narrative:
    if len(narrative.action_steps) <= MAX_ACTION_STEPS:
        return narrative
    return dataclasses.replace(
        narrative, action_steps=narrative.action_steps[:MAX_ACTION_STEPS]
    )


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def _time_of_day(data: dict[str, Any]) -> Narrative:
    best = Segment(data["bestSegment"])
    worst = Segment(data["worstSegment"])
    return Narrative(
        title=f"Optimize your {best.label.lower()} power",
        description=(
            f"You consistently feel {data['magnitude']:.1f} points better in the "
            f"{best.label.lower()} ({data['bestAverage']:.1f}/10) vs "
            f"{worst.label.lower()} ({data['worstAverage']:.1f}/10)."
        ),
        type=InsightType.ACTIONABLE,
        priority=AlertPriority.HIGH,
        action_steps=SEGMENT_PEAK_STEPS[best] + (SEGMENT_DIP_STEPS[worst],),
        discriminator=best.label.lower(),
        action_label="Optimize schedule",
    )


def _weekday(data: dict[str, Any]) -> Narrative:
    best, worst = data["bestDayName"], data["worstDayName"]
    return Narrative(
        title=f"{best}s are your power days",
        description=(
            f"Your mood averages {data['bestAverage']:.1f} on {best}s vs "
            f"{data['worstAverage']:.1f} on {worst}s."
        ),
        type=InsightType.PATTERN,
        priority=AlertPriority.MEDIUM,
        action_steps=(
            f"Schedule your biggest challenges and opportunities on {best}s",
            f"Plan something to look forward to every {worst}",
            f"Use {best}s for important decisions and conversations",
            f"Build in extra self-care on {worst}s",
        ),
        discriminator=best.lower(),
        action_label="Optimize week",
    )


def _trend_improving(data: dict[str, Any]) -> Narrative:
    return Narrative(
        title="Your mood is improving!",
        description=(
            f"This week you're averaging {data['recentAverage']:.1f}, up "
            f"{data['change']:.1f} points from last week ({data['previousAverage']:.1f})."
        ),
        type=InsightType.PATTERN,
        priority=AlertPriority.MEDIUM,
        action_steps=(
            "Notice what has been different this week",
            "Keep doing what's working for you",
        ),
        discriminator="up",
        action_label="See trends",
        action_route="/trends",
    )


def _trend_declining(data: dict[str, Any]) -> Narrative:
    return Narrative(
        title="Your mood has been lower lately",
        description=(
            f"This week you're averaging {data['recentAverage']:.1f}, down "
            f"{abs(data['change']):.1f} points from last week. "
            "Consider some self-care activities."
        ),
        type=InsightType.PATTERN,
        priority=AlertPriority.MEDIUM,
        action_steps=(
            "Schedule one activity that usually lifts your mood",
            "Protect your sleep this week",
            "Check in with someone you trust",
        ),
        discriminator="down",
        action_label="View suggestions",
        action_route="/ai-analysis",
    )


def _sleep(data: dict[str, Any]) -> Narrative:
    quality = data["optimalSleepQuality"]
    return Narrative(
        title="Your sleep sweet spot",
        description=(
            f"Your mood peaks when your sleep quality is {quality:.1f}/10 "
            f"(resulting mood: {data['resultingMood']:.1f})."
        ),
        type=InsightType.ACTIONABLE,
        priority=AlertPriority.MEDIUM,
        action_steps=(
            f"Target {quality * 0.8:.1f}-{quality:.1f} sleep quality",
            f"Track what helps you achieve {quality:.1f}/10 sleep",
            "Prioritize sleep optimization this week",
            "Notice patterns in your bedtime routine on best sleep days",
        ),
        discriminator=f"{quality:.1f}".replace(".", "p"),
        action_label="Try this week",
    )


def _exercise(data: dict[str, Any]) -> Narrative:
    best = ExerciseLevel(data["best"])
    name = EXERCISE_NAMES[best]
    return Narrative(
        title=f"Your {name.lower()} superpower",
        description=(
            f"{name} boost your mood by {data['magnitude']:.1f} points "
            f"({data['bestMood']:.1f} vs {data['baselineMood']:.1f})."
        ),
        type=InsightType.ACTIONABLE,
        priority=AlertPriority.MEDIUM,
        action_steps=EXERCISE_STEPS[best],
        discriminator=best.value,
        action_label="Try this week",
    )


def _weather(data: dict[str, Any]) -> Narrative:
    best = WeatherCondition(data["best"])
    worst = WeatherCondition(data["worst"])
    return Narrative(
        title="Weather impact strategy",
        description=(
            f"{WEATHER_NAMES[worst]} weather drops your mood to "
            f"{data['worstMood']:.1f}, while {WEATHER_NAMES[best].lower()} days "
            f"boost you to {data['bestMood']:.1f}."
        ),
        type=InsightType.PATTERN,
        priority=AlertPriority.MEDIUM,
        action_steps=WEATHER_STEPS[worst],
        discriminator=worst.value,
        action_label="Weather prep kit",
    )


def _social(data: dict[str, Any]) -> Narrative:
    best = SocialActivity(data["best"])
    name = SOCIAL_NAMES[best]
    return Narrative(
        title="Social supercharger",
        description=f"{name} gives you a +{data['magnitude']:.1f} mood boost.",
        type=InsightType.ACTIONABLE,
        priority=AlertPriority.MEDIUM,
        action_steps=SOCIAL_STEPS[best],
        discriminator=best.value,
        action_label="Try this week",
    )


def _work_stress(data: dict[str, Any]) -> Narrative:
    return Narrative(
        title="Work stress alert",
        description=(
            f"High work stress (7+) drops your mood by {data['impact']:.1f} points "
            f"({data['highStressAvg']:.1f} vs {data['lowStressAvg']:.1f} on low "
            "stress days)."
        ),
        type=InsightType.CONCERN,
        priority=AlertPriority.HIGH,
        action_steps=(
            "Identify your top 3 work stressors this week",
            "Practice 5-minute breathing exercises during high stress",
            "Set boundaries around work communications",
            "Plan stress-relief activities for high-stress days",
            "Consider delegating or postponing non-urgent tasks",
        ),
        discriminator="work",
        action_label="Stress management",
    )


def _early_warning(data: dict[str, Any]) -> Narrative:
    return Narrative(
        title="Early warning: mood dip",
        description=(
            f"Your mood has declined by {data['decline']:.1f} points over the past "
            "two weeks. This might be a good time to focus on self-care."
        ),
        type=InsightType.CONCERN,
        priority=AlertPriority.HIGH,
        action_steps=(
            "Reflect on what has changed in your routine recently",
            "Prioritize sleep and stress management",
            "Reach out to supportive friends or family",
            "Consider scheduling activities that usually boost your mood",
            "Be extra kind to yourself during this time",
        ),
        discriminator="decline",
        action_label="View suggestions",
    )


def _progress_improving(data: dict[str, Any]) -> Narrative:
    return Narrative(
        title="Great progress!",
        description=(
            f"Your mood has improved by {data['change']:.1f} points over time "
            f"(from {data['earlyAverage']:.1f} to {data['recentAverage']:.1f})."
        ),
        type=InsightType.CELEBRATION,
        priority=AlertPriority.MEDIUM,
        action_steps=(
            "Celebrate this progress, you're doing great!",
            "Reflect on what changes have helped the most",
            "Keep doing what's working for you",
            "Consider sharing your success with someone supportive",
        ),
        discriminator="up",
        action_route="/trends",
    )


def _progress_declining(data: dict[str, Any]) -> Narrative:
    return Narrative(
        title="Revisit what was working",
        description=(
            f"Your mood trend has declined by {abs(data['change']):.1f} points "
            "recently. This might be a good time to revisit what was working before."
        ),
        type=InsightType.CONCERN,
        priority=AlertPriority.MEDIUM,
        action_steps=(
            "Review what was different during your better periods",
            "Consider if any life changes might be affecting your mood",
            "Focus on basic self-care: sleep, nutrition, movement",
            "Reach out for support if you need it",
        ),
        discriminator="down",
        action_route="/trends",
    )


_RENDERERS: dict[PatternKind, Callable[[dict[str, Any]], Narrative]] = {
    PatternKind.TIME_OF_DAY: _time_of_day,
    PatternKind.WEEKDAY: _weekday,
    PatternKind.TREND_IMPROVING: _trend_improving,
    PatternKind.TREND_DECLINING: _trend_declining,
    PatternKind.SLEEP_SWEET_SPOT: _sleep,
    PatternKind.EXERCISE: _exercise,
    PatternKind.WEATHER: _weather,
    PatternKind.SOCIAL: _social,
    PatternKind.WORK_STRESS: _work_stress,
    PatternKind.EARLY_WARNING: _early_warning,
    PatternKind.PROGRESS_IMPROVING: _progress_improving,
    PatternKind.PROGRESS_DECLINING: _progress_declining,
}
