from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from urllib.parse import urlparse

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

from app.core.config import settings
from app.routes.stats import router as stats_router
from app.services.error_log import log_system_error
from app.services.supabase_auth import get_current_user
from app.services.supabase_rest import SupabaseRestError, close_http

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    await close_http()


app = FastAPI(title="MentalPitch Stats API", version="0.1.0", lifespan=lifespan)


def _init_sentry() -> None:
    if not settings.sentry_dsn:
        return
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        integrations=[FastApiIntegration()],
        traces_sample_rate=max(0.0, min(settings.sentry_traces_sample_rate, 1.0)),
        send_default_pii=False,
        environment=settings.app_env,
    )


_init_sentry()


def _origin(url: str) -> str:
    # CORS compares against the request's Origin (scheme+host+port).
    p = urlparse(url)
    if p.scheme and p.netloc:
        return f"{p.scheme}://{p.netloc}"
    return url.rstrip("/")


_ALLOWED_ORIGINS = sorted(
    {
        _origin(str(settings.frontend_url)),
        # Expo web dev server.
        "http://localhost:8081",
        "http://127.0.0.1:8081",
    }
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_server_error_responses(request: Request, call_next):
    response = await call_next(request)
    if response.status_code >= 500:
        await log_system_error(
            route=str(request.url.path),
            message=f"Server response status {response.status_code}",
            user_id=await _try_get_user_id_from_request(request),
            meta={
                "status_code": response.status_code,
                "method": request.method,
                "path": str(request.url.path),
            },
        )
    return response


@app.get("/health")
async def health() -> dict:
    return {"ok": True}


async def _try_get_user_id_from_request(request: Request) -> str | None:
    auth = request.headers.get("authorization") or ""
    if not auth.lower().startswith("bearer "):
        return None
    token = auth.split(" ", 1)[1].strip()
    if not token:
        return None
    try:
        user = await get_current_user(access_token=token, use_cache=True)
    except Exception:
        return None
    uid = user.get("id")
    return uid if isinstance(uid, str) and uid.strip() else None


# PostgREST / Postgres codes with a stable client-facing meaning.
_SUPABASE_CODE_STATUS: dict[str, int] = {
    "PGRST116": 404,  # no rows for .single()
    "23505": 422,  # unique violation
    "23503": 422,  # foreign key violation
    "42501": 403,  # insufficient privilege / RLS
}

_SUPABASE_CODE_MESSAGE: dict[int, str] = {
    403: "Insufficient permissions",
    404: "Resource not found",
    422: "Referenced record is invalid",
}


def supabase_error_status(exc: SupabaseRestError) -> int:
    mapped = _SUPABASE_CODE_STATUS.get(exc.code or "")
    if mapped is not None:
        return mapped
    # Propagate 4xx; normalize 5xx to 502.
    return exc.status_code if 400 <= exc.status_code < 500 else 502


@app.exception_handler(SupabaseRestError)
async def supabase_rest_error_handler(request: Request, exc: SupabaseRestError):
    status_code = supabase_error_status(exc)
    detail: dict[str, str | None] = {
        "message": _SUPABASE_CODE_MESSAGE.get(
            status_code, "Journal data request failed."
        ),
        "hint": exc.hint,
        "code": exc.code,
    }

    if status_code >= 500:
        await log_system_error(
            route=str(request.url.path),
            message="Supabase request failed",
            user_id=await _try_get_user_id_from_request(request),
            err=exc,
            meta={
                "status_code": exc.status_code,
                "code": exc.code,
                "path": str(request.url.path),
            },
        )
    else:
        logger.info(
            "Supabase %s (%s) on %s", exc.status_code, exc.code, request.url.path
        )
    return JSONResponse(status_code=status_code, content={"detail": detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    await log_system_error(
        route=str(request.url.path),
        message="Unhandled server error",
        user_id=await _try_get_user_id_from_request(request),
        err=exc,
        meta={"method": request.method},
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(stats_router, prefix="/api")
