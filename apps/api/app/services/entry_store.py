from __future__ import annotations

import logging
from datetime import date as Date
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from app.core.config import settings
from app.schemas.stats import JournalEntry
from app.services.supabase_rest import SupabaseRest, SupabaseRestError

logger = logging.getLogger(__name__)

ENTRY_COLUMNS = "id,user_id,workout_type_id,entry_date,entry_time,mood_score"
ENTRY_ORDER = "entry_date.desc,entry_time.desc"

_RETRYABLE_STATUSES = {408, 425, 429, 500, 502, 503, 504}


def _is_retryable_exception(exc: BaseException) -> bool:
    if isinstance(exc, (httpx.TimeoutException, httpx.TransportError)):
        return True
    if isinstance(exc, SupabaseRestError):
        return exc.status_code in _RETRYABLE_STATUSES
    return False


def _before_sleep_log(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    if isinstance(exc, SupabaseRestError):
        logger.warning(
            "Entry store read retrying due to status %s (attempt %s)",
            exc.status_code,
            retry_state.attempt_number,
        )
    else:
        logger.warning(
            "Entry store read retrying due to transport error (attempt %s)",
            retry_state.attempt_number,
        )


def _coerce_mood(value: Any, *, entry_id: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        logger.warning("Discarding non-numeric mood_score on entry %s", entry_id)
        return None
    if value != int(value) or not (1 <= value <= 10):
        logger.warning("Discarding out-of-range mood_score on entry %s", entry_id)
        return None
    return int(value)


def coerce_entry(row: dict[str, Any]) -> JournalEntry | None:
    """Builds a JournalEntry from a PostgREST row, or None when the row is unusable."""
    entry_id = row.get("id")
    if not isinstance(entry_id, str) or not entry_id:
        return None

    raw_date = row.get("entry_date")
    if isinstance(raw_date, Date):
        entry_date = raw_date
    elif isinstance(raw_date, str):
        try:
            entry_date = Date.fromisoformat(raw_date[:10])
        except ValueError:
            return None
    else:
        return None

    workout_type_id = row.get("workout_type_id")
    entry_time = row.get("entry_time")
    return JournalEntry(
        id=entry_id,
        user_id=str(row.get("user_id") or ""),
        workout_type_id=workout_type_id if isinstance(workout_type_id, str) and workout_type_id else None,
        entry_date=entry_date,
        entry_time=entry_time if isinstance(entry_time, str) and entry_time else None,
        mood_score=_coerce_mood(row.get("mood_score"), entry_id=entry_id),
    )


def coerce_entries(rows: list[dict[str, Any]] | None) -> list[JournalEntry]:
    if not rows:
        return []
    out: list[JournalEntry] = []
    skipped = 0
    for row in rows:
        entry = coerce_entry(row) if isinstance(row, dict) else None
        if entry is None:
            skipped += 1
            continue
        out.append(entry)
    if skipped:
        logger.warning("Skipped %s journal entry rows without a valid id/date", skipped)
    return out


class EntryStore:
    """
    Read access to one athlete's journal entries and the workout-type catalog.

    Each request builds its own store around the caller's access token so row
    level security scopes every query; nothing is shared across users.
    """

    def __init__(
        self,
        sb: SupabaseRest,
        *,
        user_id: str,
        access_token: str,
        fetch_limit: int | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self._sb = sb
        self._user_id = user_id
        self._access_token = access_token
        self._fetch_limit = fetch_limit or settings.stats_fetch_limit
        self._max_attempts = max_attempts or settings.entry_store_max_attempts

    async def _select(self, table: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential_jitter(initial=0.2, max=2.0),
            retry=retry_if_exception(_is_retryable_exception),
            reraise=True,
            before_sleep=_before_sleep_log,
        ):
            with attempt:
                rows = await self._sb.select(
                    table, bearer_token=self._access_token, params=params
                )
        return rows

    async def fetch_entries_in_range(
        self, start_date: Date, end_date: Date
    ) -> list[JournalEntry]:
        rows = await self._select(
            "journal_entries",
            {
                "select": ENTRY_COLUMNS,
                "and": (
                    f"(user_id.eq.{self._user_id},"
                    f"entry_date.gte.{start_date.isoformat()},"
                    f"entry_date.lte.{end_date.isoformat()})"
                ),
                "order": ENTRY_ORDER,
                "limit": self._fetch_limit,
            },
        )
        return coerce_entries(rows)

    async def fetch_all_entries(self) -> list[JournalEntry]:
        rows = await self._select(
            "journal_entries",
            {
                "select": ENTRY_COLUMNS,
                "user_id": f"eq.{self._user_id}",
                "order": ENTRY_ORDER,
                "limit": self._fetch_limit,
            },
        )
        if len(rows) >= self._fetch_limit:
            logger.warning(
                "Entry history truncated at %s rows; streaks may be understated",
                self._fetch_limit,
            )
        return coerce_entries(rows)

    async def fetch_entries_for_date(self, day: Date) -> list[JournalEntry]:
        rows = await self._select(
            "journal_entries",
            {
                "select": ENTRY_COLUMNS,
                "user_id": f"eq.{self._user_id}",
                "entry_date": f"eq.{day.isoformat()}",
                "order": "entry_time.desc",
                "limit": self._fetch_limit,
            },
        )
        return coerce_entries(rows)

    async def fetch_workout_type_names(self) -> dict[str, str]:
        # RLS returns system defaults plus the athlete's own custom types.
        rows = await self._select(
            "workout_types",
            {"select": "id,name", "order": "sort_order.asc,name.asc"},
        )
        names: dict[str, str] = {}
        for row in rows:
            type_id = row.get("id")
            name = row.get("name")
            if isinstance(type_id, str) and isinstance(name, str):
                names[type_id] = name
        return names
