"""
Keeps credentials (the Congress.gov ``api_key`` and bearer tokens) out of logs and error messages.
"""
from __future__ import annotations

import re

_QUERY_SECRET = re.compile(r"(?i)\b(api[_-]?key|access[_-]?token|token|secret)=([^&\s\"']+)")
_BEARER = re.compile(r"(?i)\bBearer\s+[A-Za-z0-9._\-]+")
_MASK = "***"


def redact_secrets(text: str) -> str:
    if not isinstance(text, str):
        return text
    text = _QUERY_SECRET.sub(lambda match: f"{match.group(1)}={_MASK}", text)
    return _BEARER.sub(f"Bearer {_MASK}", text)


def is_configured_key(value: str) -> bool:
    """False for empty keys and template placeholders such as ``YOUR_API_KEY``."""
    stripped = (value or "").strip()
    return bool(stripped) and "your_" not in stripped.lower()
