from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from datetime import date as Date

from app.schemas.stats import (
    TIME_OF_DAY_ORDER,
    DailyMoodAverage,
    JournalEntry,
    MoodTrend,
    MoodTrendPoint,
    TimeOfDay,
    TimePatternStats,
    WorkoutTypeStats,
)

# Minimum swing between the two halves of a period before it counts as a trend.
MOOD_TREND_THRESHOLD = 0.3
UNKNOWN_WORKOUT_TYPE = "Unknown"

_HHMM_RE = re.compile(r"(\d{2}):(\d{2})")


def _mean(values: list[int] | list[float]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)


def _mood_scores(entries: Iterable[JournalEntry]) -> list[int]:
    return [e.mood_score for e in entries if e.mood_score is not None]


def average_mood(entries: Iterable[JournalEntry]) -> float | None:
    return _mean(_mood_scores(entries))


def build_mood_trends(entries: list[JournalEntry]) -> list[MoodTrendPoint]:
    """
    One point per date that has at least one mood score, oldest first.

    `entry_count` covers every entry on that date, scored or not; dates whose
    entries carry no score at all are left out.
    """
    counts: dict[Date, int] = {}
    scores: dict[Date, list[int]] = {}
    for entry in entries:
        counts[entry.entry_date] = counts.get(entry.entry_date, 0) + 1
        if entry.mood_score is not None:
            scores.setdefault(entry.entry_date, []).append(entry.mood_score)

    return [
        MoodTrendPoint(
            date=day,
            average_mood=_mean(scores[day]),
            entry_count=counts[day],
        )
        for day in sorted(scores)
    ]


def compute_mood_trend(points: list[MoodTrendPoint]) -> MoodTrend:
    # Two-bucket comparison, not a regression: mean of the later half of the
    # scored days minus mean of the earlier half.
    valid = [p.average_mood for p in points if p.average_mood is not None]
    if len(valid) < 2:
        return "stable"

    mid = len(valid) // 2
    first = _mean(valid[:mid]) or 0.0
    second = _mean(valid[mid:]) or 0.0
    diff = second - first
    if abs(diff) < MOOD_TREND_THRESHOLD:
        return "stable"
    return "improving" if diff > 0 else "declining"


def build_workout_type_distribution(
    entries: list[JournalEntry],
    workout_type_names: Mapping[str, str],
) -> list[WorkoutTypeStats]:
    total = len(entries)
    grouped: dict[str, list[JournalEntry]] = {}
    for entry in entries:
        if not entry.workout_type_id:
            continue
        grouped.setdefault(entry.workout_type_id, []).append(entry)

    stats = [
        WorkoutTypeStats(
            workout_type_id=type_id,
            workout_type_name=workout_type_names.get(type_id) or UNKNOWN_WORKOUT_TYPE,
            entry_count=len(group),
            average_mood=average_mood(group),
            percentage=(len(group) / total) * 100 if total > 0 else 0.0,
        )
        for type_id, group in grouped.items()
    ]
    # sorted() is stable, so ties keep first-seen order.
    return sorted(stats, key=lambda s: s.entry_count, reverse=True)


def classify_time_of_day(entry_time: str | None) -> TimeOfDay:
    if not entry_time:
        return "afternoon"
    match = _HHMM_RE.search(entry_time)
    if match is None:
        return "afternoon"

    hour = int(match.group(1))
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def build_time_patterns(entries: list[JournalEntry]) -> list[TimePatternStats]:
    buckets: dict[TimeOfDay, list[JournalEntry]] = {t: [] for t in TIME_OF_DAY_ORDER}
    for entry in entries:
        buckets[classify_time_of_day(entry.entry_time)].append(entry)

    return [
        TimePatternStats(
            time_of_day=time_of_day,
            average_mood=average_mood(bucket),
            entry_count=len(bucket),
        )
        for time_of_day, bucket in buckets.items()
    ]


def most_active_workout_type(distribution: list[WorkoutTypeStats]) -> str | None:
    return distribution[0].workout_type_name if distribution else None


def daily_mood_averages(entries: list[JournalEntry]) -> list[DailyMoodAverage]:
    return [
        DailyMoodAverage(date=point.date, average_mood=point.average_mood)
        for point in build_mood_trends(entries)
    ]
