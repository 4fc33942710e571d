from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


def log_send(method: str, url: str, attempt: int, body: Any = None) -> None:
    """Debug-log an outgoing request (body keys only, values can be large)."""
    keys = sorted(body) if isinstance(body, dict) else None
    logger.debug(
        f"-> {method} {url}",
        extra={"method": method, "url": url, "attempt": attempt, "body_keys": keys},
    )


def log_reply(method: str, url: str, attempt: int, status_code: int, elapsed_s: float) -> None:
    """Log a response: error statuses at WARNING, everything else at DEBUG."""
    elapsed_ms = int(elapsed_s * 1000)
    level = logging.WARNING if status_code >= 400 else logging.DEBUG
    logger.log(
        level,
        f"<- {method} {url} [{status_code}] ({elapsed_ms}ms)",
        extra={
            "method": method,
            "url": url,
            "attempt": attempt,
            "status_code": status_code,
            "elapsed_ms": elapsed_ms,
        },
    )
