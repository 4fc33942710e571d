"""Synchronous HTTPX client for the controller's JSON API.

Transport failures and error statuses come back as ApiError subclasses;
successful replies are decoded with ``json``. Idempotent reads can be
retried through a RetryPolicy; writes are always sent once.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

import httpx

from phasecraft.core.api.http.config import HttpClientConfig
from phasecraft.core.api.http.errors import (
    ApiError,
    DecodeError,
    NetworkError,
    TimeoutError,
    error_for_status,
)
from phasecraft.core.api.http.logging_utils import log_reply, log_send
from phasecraft.core.api.http.retry import RetryPolicy
from phasecraft.core.api.http.utils import body_snippet, error_reason, join_url

logger = logging.getLogger(__name__)

_JSON_TYPES = ("application/json", "+json")


class ApiClient:
    """Thin wrapper over ``httpx.Client`` with structured errors.

    Args:
        config: Client configuration
        retry_policy: When to repeat failed reads (default: never)
        transport: Custom transport, e.g. ``httpx.MockTransport`` in tests

    Example:
        >>> config = HttpClientConfig(base_url="http://localhost:8888/api")
        >>> with ApiClient(config) as client:
        ...     virtuals = client.request_json("GET", "/virtuals")
    """

    def __init__(
        self,
        config: HttpClientConfig,
        *,
        retry_policy: RetryPolicy | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy()
        self._client = httpx.Client(
            headers={"User-Agent": config.user_agent, **config.headers},
            timeout=config.timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
    ) -> httpx.Response:
        """Send a request, retrying per the policy.

        Args:
            method: HTTP method
            path: Path under ``base_url``
            params: Query parameters
            json_body: JSON request body

        Returns:
            Response with a status below 400

        Raises:
            ApiError: When the final attempt fails
        """
        method = method.upper()
        url = join_url(self.config.base_url, path)
        attempt = 1
        while True:
            try:
                return self._send_once(method, url, attempt, params, json_body)
            except ApiError as e:
                if not self.retry_policy.should_retry(method, attempt, e):
                    raise
                delay = self.retry_policy.delay_for(attempt)
                logger.debug(f"Retrying {method} {url} in {delay:.2f}s after: {e}")
                time.sleep(delay)
                attempt += 1

    def _send_once(
        self,
        method: str,
        url: str,
        attempt: int,
        params: Mapping[str, Any] | None,
        json_body: Any,
    ) -> httpx.Response:
        log_send(method, url, attempt, json_body)
        start = time.perf_counter()
        try:
            resp = self._client.request(method, url, params=params, json=json_body)
        except httpx.TimeoutException as e:
            raise TimeoutError("Request timed out", method=method, url=url, cause=e) from e
        except httpx.RequestError as e:
            raise NetworkError(
                "Could not reach controller", method=method, url=url, cause=e
            ) from e
        log_reply(method, url, attempt, resp.status_code, time.perf_counter() - start)

        if resp.status_code >= 400:
            raise error_for_status(resp.status_code)(
                "Controller returned an error",
                method=method,
                url=url,
                status_code=resp.status_code,
                reason=error_reason(resp.content),
                body=body_snippet(resp.content, self.config.error_body_limit),
            )
        return resp

    def json(self, response: httpx.Response) -> Any:
        """Decode a JSON reply; an empty body (or 204) decodes to None.

        Raises:
            DecodeError: If the reply is not JSON
        """
        if response.status_code == 204 or not response.content:
            return None

        method = response.request.method
        url = str(response.request.url)
        body = body_snippet(response.content, self.config.error_body_limit)
        content_type = response.headers.get("content-type", "")
        if not any(marker in content_type for marker in _JSON_TYPES):
            raise DecodeError(
                f"Expected JSON, got '{content_type or 'no content-type'}'",
                method=method,
                url=url,
                status_code=response.status_code,
                body=body,
            )
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(
                "Malformed JSON reply",
                method=method,
                url=url,
                status_code=response.status_code,
                body=body,
                cause=e,
            ) from e

    def request_json(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """Send a request with an optional JSON body and decode the reply."""
        return self.json(self.request(method, path, params=params, json_body=body))
