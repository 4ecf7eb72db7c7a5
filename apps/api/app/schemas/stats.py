from __future__ import annotations

from datetime import date as Date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

StatsPeriod = Literal["week", "month", "year"]
TimeOfDay = Literal["morning", "afternoon", "evening", "night"]
MoodTrend = Literal["improving", "declining", "stable"]

TIME_OF_DAY_ORDER: tuple[TimeOfDay, ...] = ("morning", "afternoon", "evening", "night")


class JournalEntry(BaseModel):
    """A journal_entries row, reduced to the columns stats need."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    workout_type_id: str | None = None
    entry_date: Date
    # Postgres `time with time zone`, e.g. "07:30:00+00".
    entry_time: str | None = None
    mood_score: int | None = Field(default=None, ge=1, le=10)


class DateRange(BaseModel):
    start_date: Date
    end_date: Date


class MoodTrendPoint(BaseModel):
    date: Date
    average_mood: float | None = None
    entry_count: int = Field(ge=0)


class StreakData(BaseModel):
    current_streak: int = Field(ge=0)
    longest_streak: int = Field(ge=0)
    total_days_with_entries: int = Field(ge=0)


class WorkoutTypeStats(BaseModel):
    workout_type_id: str
    workout_type_name: str
    entry_count: int = Field(ge=0)
    average_mood: float | None = None
    percentage: float = Field(ge=0, le=100)


class TimePatternStats(BaseModel):
    time_of_day: TimeOfDay
    average_mood: float | None = None
    entry_count: int = Field(ge=0)


class StatsSummary(BaseModel):
    period: StatsPeriod
    total_entries: int
    average_mood: float | None = None
    mood_trend: MoodTrend
    most_active_workout_type: str | None = None
    streak_data: StreakData


class StatsReport(BaseModel):
    summary: StatsSummary
    mood_trends: list[MoodTrendPoint]
    workout_type_distribution: list[WorkoutTypeStats]
    time_patterns: list[TimePatternStats]
    insights: list[str] = Field(min_length=1)


class ProfileStatsSummary(BaseModel):
    total_entries: int
    current_streak: int
    longest_streak: int
    average_mood: float | None = None
    most_active_workout_type: str | None = None


class DailyMoodAverage(BaseModel):
    date: Date
    average_mood: float | None = None
