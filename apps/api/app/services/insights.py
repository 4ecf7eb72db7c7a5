from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from app.schemas.stats import StatsSummary, TimePatternStats, WorkoutTypeStats

FALLBACK_INSIGHT = "Start logging entries to see your insights!"

LONG_STREAK_DAYS = 7
GOOD_MOOD_SCORE = 7.0
EXCELLENT_AVERAGE_MOOD = 8.0
WELL_AVERAGE_MOOD = 6.0


@dataclass(frozen=True)
class InsightInput:
    summary: StatsSummary
    distribution: list[WorkoutTypeStats]
    time_patterns: list[TimePatternStats]


@dataclass(frozen=True)
class InsightRule:
    name: str
    apply: Callable[[InsightInput], str | None]


def _streak_rule(data: InsightInput) -> str | None:
    days = data.summary.streak_data.current_streak
    if days >= LONG_STREAK_DAYS:
        return f"🔥 Amazing! You're on a {days}-day streak!"
    if days > 0:
        plural = "s" if days > 1 else ""
        return f"Keep it up! You've logged entries for {days} day{plural} in a row."
    return None


def _mood_trend_rule(data: InsightInput) -> str | None:
    if data.summary.mood_trend == "improving":
        return "📈 Your mood has been improving over this period!"
    if data.summary.mood_trend == "declining":
        return "💪 Consider trying different activities to boost your mood."
    return None


def _top_workout_rule(data: InsightInput) -> str | None:
    if not data.distribution:
        return None
    top = data.distribution[0]
    if top.average_mood is None or top.average_mood < GOOD_MOOD_SCORE:
        return None
    return (
        f"⭐ {top.workout_type_name} sessions are your mood booster "
        f"(avg {top.average_mood:.1f}/10)!"
    )


def best_time_of_day(time_patterns: list[TimePatternStats]) -> TimePatternStats | None:
    """Highest-average bucket; the earliest bucket wins ties, unscored ones never do."""
    best: TimePatternStats | None = None
    for pattern in time_patterns:
        if pattern.average_mood is None:
            continue
        if best is None or (best.average_mood or 0.0) < pattern.average_mood:
            best = pattern
    return best


def _best_time_rule(data: InsightInput) -> str | None:
    best = best_time_of_day(data.time_patterns)
    if best is None or best.average_mood is None or best.average_mood < GOOD_MOOD_SCORE:
        return None
    label = best.time_of_day.capitalize()
    return f"🌅 Your best mood scores come during {label} sessions."


def _overall_mood_rule(data: InsightInput) -> str | None:
    avg = data.summary.average_mood
    if avg is None:
        return None
    if avg >= EXCELLENT_AVERAGE_MOOD:
        return "✨ You're maintaining excellent mood scores!"
    if avg >= WELL_AVERAGE_MOOD:
        return "👍 You're doing well! Keep tracking to see patterns."
    return None


INSIGHT_RULES: tuple[InsightRule, ...] = (
    InsightRule("streak", _streak_rule),
    InsightRule("mood_trend", _mood_trend_rule),
    InsightRule("top_workout", _top_workout_rule),
    InsightRule("best_time", _best_time_rule),
    InsightRule("overall_mood", _overall_mood_rule),
)


def generate_insights(
    summary: StatsSummary,
    distribution: list[WorkoutTypeStats],
    time_patterns: list[TimePatternStats],
    *,
    rules: tuple[InsightRule, ...] = INSIGHT_RULES,
) -> list[str]:
    data = InsightInput(
        summary=summary, distribution=distribution, time_patterns=time_patterns
    )
    insights: list[str] = []
    for rule in rules:
        message = rule.apply(data)
        if message:
            insights.append(message)
    return insights or [FALLBACK_INSIGHT]
