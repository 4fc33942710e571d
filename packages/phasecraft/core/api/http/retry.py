from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from phasecraft.core.api.http.errors import ApiError, NetworkError, TimeoutError


class RetryPolicy(BaseModel):
    """When ApiClient may repeat a failed request.

    Defaults to a single attempt so a show run fails fast and never repeats
    a write behind the caller's back. With ``max_attempts`` raised, only
    methods in ``retry_methods`` are repeated, and only after a transport
    failure or a status in ``retry_on_status``.

    Args:
        max_attempts: Total attempts, including the first
        base_delay_s: First backoff delay; doubles per attempt
        max_delay_s: Backoff ceiling
        retry_on_status: Statuses worth another try
        retry_methods: Methods safe to repeat
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=1, ge=1)
    base_delay_s: float = Field(default=0.25, ge=0.0)
    max_delay_s: float = Field(default=2.0, ge=0.0)
    retry_on_status: frozenset[int] = frozenset({500, 502, 503, 504})
    retry_methods: frozenset[str] = frozenset({"GET"})

    @model_validator(mode="after")
    def _check_delays(self) -> RetryPolicy:
        if self.max_delay_s < self.base_delay_s:
            raise ValueError("max_delay_s must be >= base_delay_s")
        return self

    def should_retry(self, method: str, attempt: int, error: ApiError) -> bool:
        """Decide whether ``error`` on 1-indexed ``attempt`` earns another try."""
        if attempt >= self.max_attempts or method.upper() not in self.retry_methods:
            return False
        if isinstance(error, (NetworkError, TimeoutError)):
            return True
        return error.status_code in self.retry_on_status

    def delay_for(self, attempt: int) -> float:
        return min(self.max_delay_s, self.base_delay_s * 2 ** (attempt - 1))
