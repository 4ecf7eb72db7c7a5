from __future__ import annotations

from app.schemas.stats import (
    StatsSummary,
    StreakData,
    TimePatternStats,
    WorkoutTypeStats,
)
from app.services.insights import (
    FALLBACK_INSIGHT,
    INSIGHT_RULES,
    InsightRule,
    best_time_of_day,
    generate_insights,
)


def _summary(
    *,
    current_streak: int = 0,
    mood_trend: str = "stable",
    average_mood: float | None = None,
) -> StatsSummary:
    return StatsSummary(
        period="week",
        total_entries=0,
        average_mood=average_mood,
        mood_trend=mood_trend,
        most_active_workout_type=None,
        streak_data=StreakData(
            current_streak=current_streak,
            longest_streak=max(current_streak, 0),
            total_days_with_entries=current_streak,
        ),
    )


def _time_patterns(**averages: float | None) -> list[TimePatternStats]:
    return [
        TimePatternStats(
            time_of_day=slot,
            average_mood=averages.get(slot),
            entry_count=1 if averages.get(slot) is not None else 0,
        )
        for slot in ("morning", "afternoon", "evening", "night")
    ]


def _workout(name: str, average_mood: float | None) -> WorkoutTypeStats:
    return WorkoutTypeStats(
        workout_type_id=f"wt-{name.lower()}",
        workout_type_name=name,
        entry_count=4,
        average_mood=average_mood,
        percentage=100.0,
    )


def test_all_rules_fire_in_priority_order() -> None:
    insights = generate_insights(
        _summary(current_streak=10, mood_trend="improving", average_mood=8.5),
        [_workout("Training", 9.0)],
        _time_patterns(morning=7.5, evening=6.0),
    )

    assert insights == [
        "🔥 Amazing! You're on a 10-day streak!",
        "📈 Your mood has been improving over this period!",
        "⭐ Training sessions are your mood booster (avg 9.0/10)!",
        "🌅 Your best mood scores come during Morning sessions.",
        "✨ You're maintaining excellent mood scores!",
    ]


def test_empty_input_returns_exact_fallback() -> None:
    insights = generate_insights(_summary(), [], _time_patterns())

    assert insights == ["Start logging entries to see your insights!"]
    assert insights == [FALLBACK_INSIGHT]


def test_short_streak_singular_and_plural() -> None:
    one = generate_insights(_summary(current_streak=1), [], _time_patterns())
    three = generate_insights(_summary(current_streak=3), [], _time_patterns())

    assert one == ["Keep it up! You've logged entries for 1 day in a row."]
    assert three == ["Keep it up! You've logged entries for 3 days in a row."]


def test_streak_of_exactly_seven_is_long() -> None:
    insights = generate_insights(_summary(current_streak=7), [], _time_patterns())

    assert insights == ["🔥 Amazing! You're on a 7-day streak!"]


def test_declining_trend_message() -> None:
    insights = generate_insights(
        _summary(mood_trend="declining"), [], _time_patterns()
    )

    assert insights == ["💪 Consider trying different activities to boost your mood."]


def test_top_workout_requires_average_of_seven() -> None:
    below = generate_insights(_summary(), [_workout("Yoga", 6.9)], _time_patterns())
    unscored = generate_insights(_summary(), [_workout("Yoga", None)], _time_patterns())
    at = generate_insights(_summary(), [_workout("Yoga", 7.0)], _time_patterns())

    assert below == [FALLBACK_INSIGHT]
    assert unscored == [FALLBACK_INSIGHT]
    assert at == ["⭐ Yoga sessions are your mood booster (avg 7.0/10)!"]


def test_top_workout_only_considers_first_entry() -> None:
    insights = generate_insights(
        _summary(),
        [_workout("Rowing", 5.0), _workout("Sprint", 9.5)],
        _time_patterns(),
    )

    assert insights == [FALLBACK_INSIGHT]


def test_best_time_skips_null_buckets() -> None:
    patterns = _time_patterns(afternoon=None, evening=8.2, night=7.1)

    best = best_time_of_day(patterns)

    assert best is not None
    assert best.time_of_day == "evening"
    assert generate_insights(_summary(), [], patterns) == [
        "🌅 Your best mood scores come during Evening sessions."
    ]


def test_best_time_ties_keep_earliest_bucket() -> None:
    best = best_time_of_day(_time_patterns(afternoon=8.0, night=8.0))

    assert best is not None
    assert best.time_of_day == "afternoon"


def test_best_time_all_null_skips_rule() -> None:
    assert best_time_of_day(_time_patterns()) is None


def test_best_time_below_seven_emits_nothing() -> None:
    insights = generate_insights(_summary(), [], _time_patterns(night=6.5))

    assert insights == [FALLBACK_INSIGHT]


def test_overall_mood_tiers() -> None:
    excellent = generate_insights(_summary(average_mood=8.0), [], _time_patterns())
    well = generate_insights(_summary(average_mood=6.0), [], _time_patterns())
    low = generate_insights(_summary(average_mood=5.9), [], _time_patterns())

    assert excellent == ["✨ You're maintaining excellent mood scores!"]
    assert well == ["👍 You're doing well! Keep tracking to see patterns."]
    assert low == [FALLBACK_INSIGHT]


def test_rules_table_order_and_custom_rules() -> None:
    assert [rule.name for rule in INSIGHT_RULES] == [
        "streak",
        "mood_trend",
        "top_workout",
        "best_time",
        "overall_mood",
    ]

    extra = InsightRule("always", lambda data: f"{data.summary.period} recap")
    insights = generate_insights(
        _summary(), [], _time_patterns(), rules=INSIGHT_RULES + (extra,)
    )

    assert insights == ["week recap"]
