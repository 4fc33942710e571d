"""Exceptions raised by the controller HTTP client.

Every failure leaving ApiClient is an ApiError; subclasses say what kind.
LedFx error bodies look like ``{"status": "failed", "reason": "..."}`` and
the reason is surfaced on the exception when present.
"""

from __future__ import annotations


class ApiError(Exception):
    """Base exception for controller HTTP failures.

    Attributes:
        message: Short description of what failed
        method: HTTP method of the failed request
        url: Absolute request URL
        status_code: HTTP status, if a response arrived
        reason: Controller-supplied failure reason, if any
        body: Truncated response body for debugging
        cause: Underlying exception (transport or decode failure)
    """

    def __init__(
        self,
        message: str,
        *,
        method: str,
        url: str,
        status_code: int | None = None,
        reason: str | None = None,
        body: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.message = message
        self.method = method
        self.url = url
        self.status_code = status_code
        self.reason = reason
        self.body = body
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"{self.message} ({self.method} {self.url}"
        if self.status_code is not None:
            text += f" -> {self.status_code}"
        text += ")"
        detail = self.reason or (self.body[:200] if self.body else None)
        if detail:
            text += f": {detail}"
        return text


class NetworkError(ApiError):
    """Controller unreachable (DNS, refused connection, reset)."""


class TimeoutError(ApiError):
    """Request timed out."""


class DecodeError(ApiError):
    """Response body was not the JSON we expected."""


class AuthError(ApiError):
    """HTTP 401/403."""


class ClientError(ApiError):
    """HTTP 4xx other than auth; LedFx uses 400 for rejected effects."""


class ServerError(ApiError):
    """HTTP 5xx."""


class UnexpectedStatusError(ApiError):
    """Error status outside the 4xx/5xx ranges."""


def error_for_status(status_code: int) -> type[ApiError]:
    """Pick the ApiError subclass for an error status code."""
    if status_code in (401, 403):
        return AuthError
    if 400 <= status_code < 500:
        return ClientError
    if 500 <= status_code < 600:
        return ServerError
    return UnexpectedStatusError
