from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


@dataclass
class WindowCounter:
    start: float
    count: int


_lock = asyncio.Lock()
_counters: dict[str, WindowCounter] = {}
_MAX_KEYS = 20_000


async def consume(*, key: str, limit: int, window_seconds: int) -> None:
    """
    In-memory fixed-window rate limiter keyed by client IP or user id.

    Single-process only; counters reset when the key table grows past
    _MAX_KEYS.
    """
    if limit <= 0:
        return

    now = time.time()
    async with _lock:
        if len(_counters) > _MAX_KEYS:
            _counters.clear()

        c = _counters.get(key)
        if c is None or (now - c.start) >= window_seconds:
            _counters[key] = WindowCounter(start=now, count=1)
            return

        if c.count >= limit:
            logger.info("rate limit hit for %s", key.split(":", 1)[0])
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail={
                    "message": "Too many requests.",
                    "hint": "Please slow down and try again.",
                    "code": "RATE_LIMITED",
                },
            )

        c.count += 1
