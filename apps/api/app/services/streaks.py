from __future__ import annotations

from collections.abc import Iterable
from datetime import date as Date
from datetime import timedelta

from app.schemas.stats import JournalEntry, StreakData


def compute_streak_counts(*, entry_dates: Iterable[Date], today: Date) -> StreakData:
    date_set = set(entry_dates)
    if not date_set:
        return StreakData(current_streak=0, longest_streak=0, total_days_with_entries=0)

    current = 0
    cursor = today
    while cursor in date_set:
        current += 1
        cursor -= timedelta(days=1)

    longest = 0
    run = 0
    prev: Date | None = None
    for day in sorted(date_set, reverse=True):
        if prev is not None and prev - day == timedelta(days=1):
            run += 1
        else:
            run = 1
        prev = day
        if run > longest:
            longest = run

    return StreakData(
        current_streak=current,
        longest_streak=longest,
        total_days_with_entries=len(date_set),
    )


def compute_streaks(entries: list[JournalEntry], *, today: Date) -> StreakData:
    """Streaks over a user's full history; same-day entries count once."""
    return compute_streak_counts(
        entry_dates=(entry.entry_date for entry in entries), today=today
    )
