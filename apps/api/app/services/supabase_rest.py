from __future__ import annotations

from typing import Any

import httpx

_http: httpx.AsyncClient | None = None


class SupabaseRestError(Exception):
    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        code: str | None = None,
        hint: str | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.hint = hint
        self.details = details


def get_http() -> httpx.AsyncClient:
    global _http
    if _http is None:
        _http = httpx.AsyncClient(timeout=httpx.Timeout(30.0))
    return _http


async def close_http() -> None:
    global _http
    if _http is not None:
        await _http.aclose()
        _http = None


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


class SupabaseRest:
    """Thin PostgREST client. Pass `http` to use a dedicated connection pool."""

    def __init__(
        self,
        supabase_url: str,
        api_key: str,
        *,
        http: httpx.AsyncClient | None = None,
    ):
        self._rest_base = supabase_url.rstrip("/") + "/rest/v1"
        self._api_key = api_key
        self._http = http

    def _client(self) -> httpx.AsyncClient:
        return self._http if self._http is not None else get_http()

    def _headers(
        self, bearer_token: str, *, prefer: str | None = None
    ) -> dict[str, str]:
        h = {
            "apikey": self._api_key,
            "authorization": f"Bearer {bearer_token}",
            "accept": "application/json",
        }
        if prefer:
            h["prefer"] = prefer
        return h

    def _raise_for_error(self, resp: httpx.Response) -> None:
        if resp.status_code < 400:
            return

        code: str | None = None
        message: str | None = None
        hint: str | None = None
        details: Any | None = None

        try:
            payload = resp.json()
            if isinstance(payload, dict):
                code = _str_or_none(payload.get("code"))
                message = _str_or_none(payload.get("message"))
                hint = _str_or_none(payload.get("hint"))
                details = payload.get("details")
            elif isinstance(payload, str):
                message = payload
        except ValueError:
            payload = None

        if not message:
            message = resp.text.strip() or None

        raise SupabaseRestError(
            status_code=resp.status_code,
            code=code,
            message=message or f"Supabase request failed ({resp.status_code})",
            hint=hint,
            details=details,
        )

    async def select(
        self,
        table: str,
        *,
        bearer_token: str,
        params: dict[str, Any],
    ) -> list[dict[str, Any]]:
        url = f"{self._rest_base}/{table}"
        resp = await self._client().get(
            url, headers=self._headers(bearer_token), params=params
        )
        self._raise_for_error(resp)
        data = resp.json()
        if isinstance(data, list):
            return data
        return [data]

    async def insert_one(
        self,
        table: str,
        *,
        bearer_token: str,
        row: dict[str, Any],
    ) -> dict[str, Any]:
        url = f"{self._rest_base}/{table}"
        headers = self._headers(bearer_token, prefer="return=representation")
        resp = await self._client().post(url, headers=headers, json=row)
        self._raise_for_error(resp)
        data = resp.json()
        if isinstance(data, list):
            return data[0] if data else {}
        return data
