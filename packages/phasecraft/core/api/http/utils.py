"""Small helpers for the controller HTTP client."""

from __future__ import annotations

import json


def join_url(base_url: str, path: str) -> str:
    """Append ``path`` to ``base_url`` with exactly one slash between them.

    Example:
        >>> join_url("http://localhost:8888/api", "/virtuals")
        'http://localhost:8888/api/virtuals'
    """
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def body_snippet(content: bytes, limit: int) -> str:
    """Decode at most ``limit`` bytes of a response body for error messages."""
    return content[:limit].decode("utf-8", errors="replace")


def error_reason(content: bytes) -> str | None:
    """Pull the failure reason out of a LedFx error body.

    LedFx replies ``{"status": "failed", "reason": "..."}``; some routes nest
    the same fields under ``payload``. Anything else yields None.
    """
    try:
        data = json.loads(content)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    payload = data.get("payload")
    for source in (data, payload if isinstance(payload, dict) else {}):
        reason = source.get("reason")
        if isinstance(reason, str) and reason:
            return reason
    return None
