from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from datetime import date as Date

from app.schemas.stats import (
    JournalEntry,
    ProfileStatsSummary,
    StatsPeriod,
    StatsReport,
    StatsSummary,
)
from app.services.aggregation import (
    average_mood,
    build_mood_trends,
    build_time_patterns,
    build_workout_type_distribution,
    compute_mood_trend,
    most_active_workout_type,
)
from app.services.date_ranges import resolve_date_range
from app.services.entry_store import EntryStore
from app.services.insights import generate_insights
from app.services.streaks import compute_streaks

logger = logging.getLogger(__name__)


def compute_stats_report(
    *,
    period: StatsPeriod,
    today: Date,
    window_entries: list[JournalEntry],
    all_entries: list[JournalEntry],
    workout_type_names: Mapping[str, str],
) -> StatsReport:
    """
    Builds the stats screen payload from already-fetched entries.

    `window_entries` drive every breakdown; `all_entries` only feed the streaks,
    which always span the athlete's whole history.
    """
    mood_trends = build_mood_trends(window_entries)
    distribution = build_workout_type_distribution(window_entries, workout_type_names)
    time_patterns = build_time_patterns(window_entries)

    summary = StatsSummary(
        period=period,
        total_entries=len(window_entries),
        average_mood=average_mood(window_entries),
        mood_trend=compute_mood_trend(mood_trends),
        most_active_workout_type=most_active_workout_type(distribution),
        streak_data=compute_streaks(all_entries, today=today),
    )

    return StatsReport(
        summary=summary,
        mood_trends=mood_trends,
        workout_type_distribution=distribution,
        time_patterns=time_patterns,
        insights=generate_insights(summary, distribution, time_patterns),
    )


def compute_profile_summary(
    *,
    today: Date,
    all_entries: list[JournalEntry],
    workout_type_names: Mapping[str, str],
) -> ProfileStatsSummary:
    streak = compute_streaks(all_entries, today=today)

    counts: dict[str, int] = {}
    for entry in all_entries:
        if entry.workout_type_id:
            counts[entry.workout_type_id] = counts.get(entry.workout_type_id, 0) + 1
    top_id = max(counts, key=counts.__getitem__) if counts else None

    return ProfileStatsSummary(
        total_entries=len(all_entries),
        current_streak=streak.current_streak,
        longest_streak=streak.longest_streak,
        average_mood=average_mood(all_entries),
        most_active_workout_type=workout_type_names.get(top_id) if top_id else None,
    )


async def get_stats_report(
    store: EntryStore, *, period: StatsPeriod, today: Date
) -> StatsReport:
    window = resolve_date_range(period, today=today)
    window_entries, all_entries, workout_type_names = await asyncio.gather(
        store.fetch_entries_in_range(window.start_date, window.end_date),
        store.fetch_all_entries(),
        store.fetch_workout_type_names(),
    )
    logger.debug(
        "stats report period=%s window=%s..%s window_entries=%s all_entries=%s",
        period,
        window.start_date,
        window.end_date,
        len(window_entries),
        len(all_entries),
    )
    return compute_stats_report(
        period=period,
        today=today,
        window_entries=window_entries,
        all_entries=all_entries,
        workout_type_names=workout_type_names,
    )


async def get_profile_summary(store: EntryStore, *, today: Date) -> ProfileStatsSummary:
    all_entries, workout_type_names = await asyncio.gather(
        store.fetch_all_entries(),
        store.fetch_workout_type_names(),
    )
    return compute_profile_summary(
        today=today,
        all_entries=all_entries,
        workout_type_names=workout_type_names,
    )
