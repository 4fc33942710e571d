"""HTTPX client used to talk to the lighting controller.

- ApiClient: synchronous JSON client
- HttpClientConfig / RetryPolicy: configuration
- ApiError and subclasses: every failure the client raises
"""

from phasecraft.core.api.http.client import ApiClient
from phasecraft.core.api.http.config import HttpClientConfig
from phasecraft.core.api.http.errors import (
    ApiError,
    AuthError,
    ClientError,
    DecodeError,
    NetworkError,
    ServerError,
    TimeoutError,
    UnexpectedStatusError,
    error_for_status,
)
from phasecraft.core.api.http.retry import RetryPolicy

__all__ = [
    "ApiClient",
    "HttpClientConfig",
    "RetryPolicy",
    "ApiError",
    "AuthError",
    "ClientError",
    "DecodeError",
    "NetworkError",
    "ServerError",
    "TimeoutError",
    "UnexpectedStatusError",
    "error_for_status",
]
