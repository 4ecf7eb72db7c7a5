from __future__ import annotations

import re
from typing import Any


_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}\b")
_PHONE_RE = re.compile(r"(?<!\d)(?:\+?\d{1,3}[-.\s]?)?(?:\d{2,4}[-.\s]?\d{3,4}[-.\s]?\d{4})(?!\d)")
_LONG_DIGIT_RE = re.compile(r"\b\d{12,19}\b")

_BEARER_RE = re.compile(r"(?i)\bBearer\s+[A-Za-z0-9\-._~+/]+=*")
_JWT_RE = re.compile(r"\b[A-Za-z0-9\-_]{20,}\.[A-Za-z0-9\-_]{20,}\.[A-Za-z0-9\-_]{20,}\b")
_SUPABASE_KEY_RE = re.compile(r"\bsb_(?:publishable|secret)_[A-Za-z0-9\-_]{16,}\b")
_SENTRY_DSN_RE = re.compile(r"https://[0-9a-f]{32}@[A-Za-z0-9.\-]+/\d+")


def mask_pii_text(text: str) -> str:
    if not text:
        return text
    out = text
    out = _EMAIL_RE.sub("[REDACTED_EMAIL]", out)
    out = _PHONE_RE.sub("[REDACTED_PHONE]", out)
    out = _LONG_DIGIT_RE.sub("[REDACTED_NUMBER]", out)
    return out


def redact_secrets_text(text: str) -> str:
    if not text:
        return text
    out = text
    out = _BEARER_RE.sub("Bearer [REDACTED_TOKEN]", out)
    out = _JWT_RE.sub("[REDACTED_JWT]", out)
    out = _SUPABASE_KEY_RE.sub("[REDACTED_SUPABASE_KEY]", out)
    out = _SENTRY_DSN_RE.sub("[REDACTED_SENTRY_DSN]", out)
    return out


def sanitize_for_log(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return redact_secrets_text(mask_pii_text(value))[:1200]
    if isinstance(value, list):
        return [sanitize_for_log(v) for v in value]
    if isinstance(value, dict):
        return {str(k)[:128]: sanitize_for_log(v) for k, v in value.items()}
    if isinstance(value, (int, float, bool)):
        return value
    return str(value)[:1200]
