from __future__ import annotations

from datetime import date as Date

from fastapi import APIRouter, Query

from app.core.config import settings
from app.core.security import AuthContext, AuthDep
from app.schemas.stats import (
    DailyMoodAverage,
    ProfileStatsSummary,
    StatsPeriod,
    StatsReport,
)
from app.services.aggregation import average_mood, daily_mood_averages
from app.services.date_ranges import month_date_range
from app.services.entry_store import EntryStore
from app.services.stats import get_profile_summary, get_stats_report
from app.services.supabase_rest import SupabaseRest

router = APIRouter()


def _entry_store(auth: AuthContext) -> EntryStore:
    sb = SupabaseRest(str(settings.supabase_url), settings.supabase_anon_key)
    return EntryStore(sb, user_id=auth.user_id, access_token=auth.access_token)


@router.get("/stats", response_model=StatsReport)
async def get_stats(
    auth: AuthDep,
    period: StatsPeriod = Query("week"),
    today: Date | None = Query(None, description="YYYY-MM-DD, defaults to server date"),
) -> StatsReport:
    return await get_stats_report(
        _entry_store(auth), period=period, today=today or Date.today()
    )


@router.get("/stats/profile", response_model=ProfileStatsSummary)
async def get_profile_stats(
    auth: AuthDep,
    today: Date | None = Query(None, description="YYYY-MM-DD, defaults to server date"),
) -> ProfileStatsSummary:
    return await get_profile_summary(_entry_store(auth), today=today or Date.today())


@router.get("/stats/mood/daily", response_model=list[DailyMoodAverage])
async def get_daily_mood_averages(
    auth: AuthDep,
    year: int = Query(..., ge=1970, le=9999),
    month: int = Query(..., ge=1, le=12),
) -> list[DailyMoodAverage]:
    window = month_date_range(year, month)
    entries = await _entry_store(auth).fetch_entries_in_range(
        window.start_date, window.end_date
    )
    return daily_mood_averages(entries)


@router.get("/stats/mood/day", response_model=DailyMoodAverage)
async def get_day_mood_average(
    auth: AuthDep, date: Date = Query(..., description="YYYY-MM-DD")
) -> DailyMoodAverage:
    entries = await _entry_store(auth).fetch_entries_for_date(date)
    return DailyMoodAverage(date=date, average_mood=average_mood(entries))
