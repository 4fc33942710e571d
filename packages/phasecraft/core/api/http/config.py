from __future__ import annotations

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator


class HttpClientConfig(BaseModel):
    """Settings for ApiClient.

    Args:
        base_url: Controller API root, e.g. "http://localhost:8888/api"
        timeout: HTTPX timeout
        headers: Extra headers sent with every request
        user_agent: User-Agent header value
        error_body_limit: Bytes of an error response kept on the exception
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    base_url: str
    timeout: httpx.Timeout = Field(default_factory=lambda: httpx.Timeout(10.0, connect=5.0))
    headers: dict[str, str] = Field(default_factory=dict)
    user_agent: str = "phasecraft/0.1"
    error_body_limit: int = Field(default=2048, ge=0)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an absolute http(s) URL."""
        try:
            url = httpx.URL(v)
        except httpx.InvalidURL as e:
            raise ValueError(f"Invalid base_url: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("base_url must be an absolute http:// or https:// URL")
        return v.rstrip("/")
